"""Manifest loading and decoding shared by the provider adapters."""

from __future__ import annotations

import logging
from typing import Optional, Type, TypeVar
from urllib.parse import urlsplit
from urllib.request import url2pathname

from pydantic import TypeAdapter, ValidationError

from mcp_discovery.errors import DecodeError, FetchError, InvalidInputError
from mcp_discovery.registry.cache import ManifestCache

logger = logging.getLogger(__name__)

M = TypeVar("M")


async def load_manifest(url: str, cache: ManifestCache, *, registry: str) -> bytes:
    """Load raw manifest bytes for *url*.

    ``http(s)://`` goes through *cache*; ``file://`` is read straight from
    disk; a URL without a scheme is treated as ``http://``.
    """
    url = url.strip()
    if not url:
        raise InvalidInputError(f"empty '{registry}' registry URL is invalid")

    scheme = urlsplit(url).scheme.lower()
    if not scheme:
        url = f"http://{url}"
        scheme = "http"

    if scheme in ("http", "https"):
        return await cache.fetch(url, registry=registry)

    if scheme == "file":
        path = url2pathname(urlsplit(url).path)
        logger.debug("Reading '%s' registry manifest from %s", registry, path)
        try:
            with open(path, "rb") as fh:
                return fh.read()
        except OSError as exc:
            raise FetchError(
                f"failed to read registry file '{path}'",
                url=url,
                registry=registry,
                orig_exc=exc,
            ) from exc

    raise InvalidInputError(f"unsupported URL scheme '{scheme}' for '{registry}' registry")


def decode_manifest(
    data: bytes,
    model: Type[M],
    *,
    registry: str,
    source: Optional[str] = None,
) -> M:
    """Validate JSON *data* against *model*, raising :class:`DecodeError`."""
    try:
        return TypeAdapter(model).validate_json(data)
    except ValidationError as exc:
        raise DecodeError(
            f"failed to decode registry JSON ({exc.error_count()} error(s)): "
            f"{exc.errors()[0]['msg']}",
            registry=registry,
            source=source,
        ) from exc
