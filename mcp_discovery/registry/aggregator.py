"""Meta-provider that fans resolve/search out to several registries."""

from __future__ import annotations

import logging
from typing import Dict, List, Mapping, Optional, Sequence

from mcp_discovery.errors import DiscoveryBaseError, InvalidInputError, NotFoundError
from mcp_discovery.packages import Server
from mcp_discovery.registry.base import PackageProvider, require_name
from mcp_discovery.registry.options import ResolveOptions, SearchOptions

logger = logging.getLogger(__name__)

AGGREGATOR_ID = "aggregator"


class Aggregator:
    """Compose child providers, consulted in registration order.

    With a ``source`` option only the named child is asked and its error
    surfaces unchanged.  Without one, ``resolve`` returns the first child
    hit and ``search`` concatenates every child's results; per-child
    failures are logged and skipped.
    """

    def __init__(self, providers: Sequence[PackageProvider]) -> None:
        self._providers: Dict[str, PackageProvider] = {}
        for provider in providers:
            pid = provider.id()
            if pid in self._providers:
                raise InvalidInputError(f"duplicate registry ID '{pid}'")
            self._providers[pid] = provider

    def id(self) -> str:
        return AGGREGATOR_ID

    def provider_ids(self) -> List[str]:
        return list(self._providers)

    def provider(self, source: str) -> PackageProvider:
        try:
            return self._providers[source]
        except KeyError:
            raise InvalidInputError(
                f"unknown registry source '{source}' "
                f"(available: {', '.join(self._providers) or 'none'})"
            ) from None

    # ── public API ──────────────────────────────────────────────────

    def resolve(self, name: str, options: Optional[ResolveOptions] = None) -> Server:
        name = require_name(name)
        opts = options or ResolveOptions()

        if opts.source:
            return self.provider(opts.source).resolve(name, opts)

        for pid, provider in self._providers.items():
            try:
                return provider.resolve(name, opts)
            except DiscoveryBaseError as exc:
                logger.warning("Registry '%s' could not resolve '%s': %s", pid, name, exc)

        raise NotFoundError(
            f"package '{name}', version '{opts.version or ''}', "
            f"runtime '{opts.runtime or ''}' not found in any registry",
            name=name,
            registry=AGGREGATOR_ID,
        )

    def search(
        self,
        name: str,
        filters: Optional[Mapping[str, str]] = None,
        options: Optional[SearchOptions] = None,
    ) -> List[Server]:
        name = require_name(name)
        opts = options or SearchOptions()

        if opts.source:
            return self.provider(opts.source).search(name, filters, opts)

        results: List[Server] = []
        for pid, provider in self._providers.items():
            try:
                results.extend(provider.search(name, filters, opts))
            except DiscoveryBaseError as exc:
                logger.warning("Registry '%s' search for '%s' failed: %s", pid, name, exc)
        return results
