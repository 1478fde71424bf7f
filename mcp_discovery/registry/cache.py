"""Disk-backed TTL cache for registry manifests.

Each manifest URL is stored as one file named after the SHA-256 of the
canonicalised URL.  Freshness is judged from the file's modification
time.  Concurrent fetches of the same URL within one cache instance
collapse into a single download.
"""

from __future__ import annotations

import asyncio
import functools
import hashlib
import logging
import os
import tempfile
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional
from urllib.parse import urlsplit, urlunsplit

from mcp_discovery.constants import DEFAULT_CACHE_TTL
from mcp_discovery.errors import CacheIOError
from mcp_discovery.registry.client import HttpFetcher
from mcp_discovery.registry.options import BuildOptions, default_cache_dir

logger = logging.getLogger(__name__)


def canonical_url(url: str) -> str:
    """Lower-case scheme and host, drop the fragment, trim whitespace."""
    parts = urlsplit(url.strip())
    return urlunsplit((parts.scheme.lower(), parts.netloc.lower(), parts.path, parts.query, ""))


def fingerprint(url: str) -> str:
    return hashlib.sha256(canonical_url(url).encode("utf-8")).hexdigest()


@dataclass
class _Flight:
    task: "asyncio.Task[bytes]"
    waiters: int = 0


class ManifestCache:
    """Fetch manifests through a file cache.

    Parameters
    ----------
    fetcher:
        HTTP collaborator used on cache misses.
    cache_dir:
        Directory for cache files.  Created on first write.
    ttl:
        Entry lifetime in seconds.
    enabled:
        When ``False`` every call goes to the network and nothing is written.
    refresh:
        When ``True`` cached entries are ignored and overwritten.
    """

    def __init__(
        self,
        fetcher: HttpFetcher,
        *,
        cache_dir: Optional[str] = None,
        ttl: float = DEFAULT_CACHE_TTL,
        enabled: bool = True,
        refresh: bool = False,
    ) -> None:
        if ttl <= 0:
            raise ValueError("cache TTL must be positive")
        self._fetcher = fetcher
        self._cache_dir = cache_dir or default_cache_dir()
        self._ttl = ttl
        self._enabled = enabled
        self._refresh = refresh
        self._inflight: Dict[str, _Flight] = {}

    @classmethod
    def from_options(cls, options: BuildOptions, fetcher: HttpFetcher) -> "ManifestCache":
        return cls(
            fetcher,
            cache_dir=options.resolved_cache_dir(),
            ttl=options.cache_ttl,
            enabled=options.use_cache,
            refresh=options.refresh_cache,
        )

    @property
    def cache_dir(self) -> str:
        return self._cache_dir

    @property
    def enabled(self) -> bool:
        return self._enabled

    # ── public interface ────────────────────────────────────────────

    async def fetch(self, url: str, *, registry: Optional[str] = None) -> bytes:
        """Return the manifest bytes for *url*, from disk when fresh."""
        if not self._enabled:
            logger.debug("Cache disabled, fetching %s", url)
            return await self._fetcher.fetch(url, registry=registry)

        key = fingerprint(url)
        flight = self._inflight.get(key)
        if flight is None:
            task = asyncio.ensure_future(self._load(url, key, registry))
            flight = _Flight(task)
            self._inflight[key] = flight
            task.add_done_callback(functools.partial(self._forget, key, flight))
        else:
            logger.debug("Joining in-flight fetch for %s", url)

        flight.waiters += 1
        try:
            return await asyncio.shield(flight.task)
        except asyncio.CancelledError:
            # Last interested caller gone: abandon the download.
            if flight.waiters == 1 and not flight.task.done():
                flight.task.cancel()
                self._forget(key, flight)
            raise
        finally:
            flight.waiters -= 1

    def is_fresh(self, url: str) -> bool:
        """Return ``True`` if a cached entry exists and is within the TTL."""
        return self._is_fresh_path(self.path_for(url))

    def path_for(self, url: str) -> str:
        # SHA-256 names rule out injection, length and encoding issues
        base_dir = Path(self._cache_dir).resolve()
        target_path = (base_dir / f"{fingerprint(url)}.json").resolve()
        if not target_path.is_relative_to(base_dir):
            raise ValueError("Cache path escapes cache directory")
        return str(target_path)

    def clear(self, url: Optional[str] = None) -> None:
        """Remove the entry for *url*, or every entry when *url* is ``None``."""
        if url:
            path = self.path_for(url)
            if os.path.exists(path):
                os.unlink(path)
        elif os.path.isdir(self._cache_dir):
            for fname in os.listdir(self._cache_dir):
                fp = os.path.join(self._cache_dir, fname)
                if os.path.isfile(fp) and fp.endswith(".json"):
                    os.unlink(fp)

    # ── internals ───────────────────────────────────────────────────

    def _forget(self, key: str, flight: _Flight, _task: object = None) -> None:
        if self._inflight.get(key) is flight:
            del self._inflight[key]

    async def _load(self, url: str, key: str, registry: Optional[str]) -> bytes:
        path = self.path_for(url)

        if self._refresh:
            logger.debug("Cache refresh requested for %s", url)
        elif self._is_fresh_path(path):
            try:
                data = self._read(path)
                logger.debug("Using cached manifest %s for %s", path, url)
                return data
            except CacheIOError as exc:
                logger.warning("%s; fetching from network", exc)
        else:
            logger.debug("Cache expired or missing for %s (%s)", url, path)

        data = await self._fetcher.fetch(url, registry=registry)
        try:
            self._write(path, data)
        except CacheIOError as exc:
            logger.warning("%s; continuing with fetched data", exc)
        return data

    def _is_fresh_path(self, path: str) -> bool:
        try:
            mtime = os.path.getmtime(path)
        except OSError:
            return False
        return (time.time() - mtime) < self._ttl

    def _read(self, path: str) -> bytes:
        try:
            with open(path, "rb") as fh:
                return fh.read()
        except OSError as exc:
            raise CacheIOError("failed to read cache file", path=path, orig_exc=exc) from exc

    def _write(self, path: str, data: bytes) -> None:
        """Write *data* to *path* through a temp file and an atomic rename."""
        tmp_path = None
        try:
            os.makedirs(self._cache_dir, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=self._cache_dir, prefix="tmp-", suffix=".part")
            with os.fdopen(fd, "wb") as fh:
                fh.write(data)
            os.replace(tmp_path, path)
            tmp_path = None
            logger.debug("Registry manifest cached: %s (%d bytes)", path, len(data))
        except OSError as exc:
            raise CacheIOError("failed to write cache file", path=path, orig_exc=exc) from exc
        finally:
            if tmp_path is not None and os.path.exists(tmp_path):
                os.unlink(tmp_path)
