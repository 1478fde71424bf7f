"""Provider and builder protocols shared by every registry."""

from __future__ import annotations

from typing import Iterable, List, Mapping, Optional, Protocol, runtime_checkable

from mcp_discovery.errors import InvalidInputError
from mcp_discovery.filters import normalize_string
from mcp_discovery.packages import Server
from mcp_discovery.registry.options import BuildOptions, ResolveOptions, SearchOptions
from mcp_discovery.runtime import Runtime, join


@runtime_checkable
class PackageProvider(Protocol):
    """Anything that can resolve and search canonical servers."""

    def id(self) -> str: ...

    def resolve(self, name: str, options: Optional[ResolveOptions] = None) -> Server: ...

    def search(
        self,
        name: str,
        filters: Optional[Mapping[str, str]] = None,
        options: Optional[SearchOptions] = None,
    ) -> List[Server]: ...


class RegistryBuilder(Protocol):
    """Constructs a provider, loading its manifest through the cache."""

    async def build(self, options: Optional[BuildOptions] = None) -> PackageProvider: ...


def require_name(name: str) -> str:
    """Normalise *name*, raising :class:`InvalidInputError` when blank."""
    normalized = normalize_string(name)
    if not normalized:
        raise InvalidInputError("name must not be empty")
    return normalized


def supported_intersection(
    requested: Iterable[Runtime],
    offered: Iterable[Runtime],
    registry: str,
) -> frozenset:
    """Runtimes both requested by the caller and offered by *registry*."""
    requested_set = frozenset(requested)
    if not requested_set:
        raise InvalidInputError("must specify at least one supported runtime")
    common = requested_set & frozenset(offered)
    if not common:
        raise InvalidInputError(
            f"registry '{registry}' supports none of the requested runtimes "
            f"({join(requested_set)}); available: {join(offered)}"
        )
    return common
