"""Async HTTP client used to download registry manifests."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from mcp_discovery.constants import HTTP_TIMEOUT, HTTP_USER_AGENT
from mcp_discovery.errors import FetchError, StatusError

logger = logging.getLogger(__name__)


class HttpFetcher:
    """Thin wrapper around a lazily created :class:`httpx.AsyncClient`.

    Parameters
    ----------
    headers:
        Extra headers applied to every request (auth tokens, etc.).
    timeout:
        HTTP request timeout in seconds.
    transport:
        Optional httpx transport, mainly for tests
        (:class:`httpx.MockTransport`).
    """

    def __init__(
        self,
        *,
        headers: Optional[Dict[str, str]] = None,
        timeout: float = HTTP_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._headers = {"User-Agent": HTTP_USER_AGENT, **(headers or {})}
        self._timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    # ── lifecycle ───────────────────────────────────────────────────

    def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            kwargs: Dict[str, Any] = {
                "headers": self._headers,
                "timeout": self._timeout,
                "follow_redirects": True,
            }
            if self._transport is not None:
                kwargs["transport"] = self._transport
            self._client = httpx.AsyncClient(**kwargs)
        return self._client

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "HttpFetcher":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    # ── public API ──────────────────────────────────────────────────

    async def fetch(self, url: str, *, registry: Optional[str] = None) -> bytes:
        """GET *url* and return the body.

        Raises :class:`StatusError` for any status other than 200 and
        :class:`FetchError` for transport failures.
        """
        client = self._ensure_client()
        logger.debug("Fetching registry manifest: %s", url)
        try:
            resp = await client.get(url)
        except httpx.HTTPError as exc:
            raise FetchError(
                f"failed to fetch registry data: {exc}",
                url=url,
                registry=registry,
                orig_exc=exc,
            ) from exc

        if resp.status_code != httpx.codes.OK:
            raise StatusError(resp.status_code, url=url, registry=registry)
        return resp.content
