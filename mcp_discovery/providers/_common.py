"""Helpers shared by the provider adapters."""

from __future__ import annotations

import logging
from typing import Dict, FrozenSet, Iterable, List, Mapping, Optional

from mcp_discovery.errors import FilterMismatchError, NotFoundError
from mcp_discovery.filters import MatchOptions
from mcp_discovery.packages import Server
from mcp_discovery.registry.base import require_name
from mcp_discovery.registry.options import (
    ResolveOptions,
    SearchOptions,
    match_server,
    prepare_filters,
    resolve_filters,
)
from mcp_discovery.runtime import Runtime


class StaticRegistry:
    """Provider over a fixed ``id -> Server`` mapping built at construction.

    Subclasses supply the registry ID, the extra match options and an
    optional filter mutator; resolve and search behave identically for
    every adapter.
    """

    registry_id: str = ""

    def __init__(
        self,
        servers: Mapping[str, Server],
        supported_runtimes: FrozenSet[Runtime],
        match_options: Optional[MatchOptions] = None,
    ) -> None:
        self._servers: Dict[str, Server] = dict(servers)
        self._supported_runtimes = supported_runtimes
        self._match_options = match_options
        self._logger = logging.getLogger(type(self).__module__)

    def id(self) -> str:
        return self.registry_id

    @property
    def supported_runtimes(self) -> FrozenSet[Runtime]:
        return self._supported_runtimes

    def __len__(self) -> int:
        return len(self._servers)

    def ids(self) -> List[str]:
        return list(self._servers)

    # ── public API ──────────────────────────────────────────────────

    def resolve(self, name: str, options: Optional[ResolveOptions] = None) -> Server:
        name = require_name(name)
        opts = options or ResolveOptions()
        fs = prepare_filters(resolve_filters(opts), name, self._mutate_filters)

        self._logger.debug(
            "Resolving package name=%s version=%s runtime=%s source=%s filters=%s",
            name,
            opts.version,
            opts.runtime,
            opts.source,
            fs,
        )

        server = self._servers.get(name)
        if server is None:
            raise NotFoundError(
                f"package '{name}' not found in '{self.id()}' registry",
                name=name,
                registry=self.id(),
            )
        if not match_server(server, fs, self._match_options):
            raise FilterMismatchError(
                f"package with name '{name}' does not match requested filters "
                f"in '{self.id()}' registry",
                name=name,
                registry=self.id(),
            )
        return server

    def search(
        self,
        name: str,
        filters: Optional[Mapping[str, str]] = None,
        options: Optional[SearchOptions] = None,
    ) -> List[Server]:
        name = require_name(name)
        opts = options or SearchOptions()
        fs = prepare_filters(filters, name, self._mutate_filters)

        self._logger.debug(
            "Searching for package name=%s filters=%s source=%s", name, fs, opts.source
        )

        results: List[Server] = []
        for server in self._servers.values():
            if not match_server(server, fs, self._match_options):
                self._logger.debug(
                    "no match id=%s name=%s display-name=%s",
                    server.id,
                    server.name,
                    server.display_name,
                )
                continue
            results.append(server)
        return results

    # ── hooks ───────────────────────────────────────────────────────

    def _mutate_filters(self, filters: Dict[str, str]) -> None:
        """Adjust prepared filters in place; default does nothing."""


def sorted_runtimes(runtimes: Iterable[Runtime]) -> List[Runtime]:
    return sorted(runtimes, key=lambda rt: rt.value)
