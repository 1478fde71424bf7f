"""Provider adapter for the mcpm.sh server manifest."""

from __future__ import annotations

import logging
from typing import Dict, FrozenSet, Iterable, Optional

from mcp_discovery.constants import MCPM_REGISTRY_URL
from mcp_discovery.filters import MatchOptions, normalize_string
from mcp_discovery.packages import (
    Installation,
    Installations,
    JSONSchema,
    Publisher,
    Repository,
    Server,
    Tool,
    Tools,
)
from mcp_discovery.providers._common import StaticRegistry, sorted_runtimes
from mcp_discovery.providers.arguments import SchemaArgument, merge_installation_arguments
from mcp_discovery.providers.mcpm.models import MCPServer, MCPServers
from mcp_discovery.registry.base import supported_intersection
from mcp_discovery.registry.cache import ManifestCache
from mcp_discovery.registry.client import HttpFetcher
from mcp_discovery.registry.loader import decode_manifest, load_manifest
from mcp_discovery.registry.options import FILTER_KEY_VERSION, BuildOptions
from mcp_discovery.runtime import Runtime, default_supported_runtimes, spec_for

logger = logging.getLogger(__name__)

REGISTRY_ID = "mcpm"

# Runtimes the mcpm manifest uses in installation commands.
DECLARED_RUNTIMES: FrozenSet[Runtime] = frozenset(
    {Runtime.NPX, Runtime.UVX, Runtime.DOCKER, Runtime.PYTHON}
)


def _warn_unsupported(key: str, value: str) -> None:
    logger.warning("Unsupported filter/key for '%s': %s=%s", REGISTRY_ID, key, value)


class MCPMRegistry(StaticRegistry):
    """Servers from the mcpm manifest, keyed by normalised ID.

    mcpm records have no per-installation version, so a ``version``
    filter is dropped (with a warning) before matching.
    """

    registry_id = REGISTRY_ID

    def __init__(self, manifest: MCPServers, supported_runtimes: FrozenSet[Runtime]) -> None:
        servers: Dict[str, Server] = {}
        for key, record in manifest.items():
            server_id = normalize_string(key)
            server = build_server(server_id, record, supported_runtimes)
            if server is None:
                logger.debug("no supported runtime packages found for '%s'", server_id)
                continue
            servers[server_id] = server

        super().__init__(
            servers,
            supported_runtimes,
            MatchOptions.build(unsupported_keys=[FILTER_KEY_VERSION], log_func=_warn_unsupported),
        )
        logger.debug("Loaded %d of %d '%s' servers", len(servers), len(manifest), REGISTRY_ID)

    def _mutate_filters(self, filters: Dict[str, str]) -> None:
        version = filters.pop(FILTER_KEY_VERSION, None)
        if version is not None:
            logger.warning(
                "'version' not supported by '%s', returning latest known definition "
                "(name=%s, version=%s)",
                REGISTRY_ID,
                filters.get("name", ""),
                version,
            )


# ── conversion ──────────────────────────────────────────────────────────


def _installations(
    record: MCPServer, supported: FrozenSet[Runtime]
) -> Installations:
    repository = None
    if record.repository is not None and record.repository.url:
        repository = Repository(type=record.repository.type, url=record.repository.url)

    result = Installations()
    # Installation keys are inconsistent upstream (npm vs npx); the
    # command is the reliable runtime indicator.
    for inst in record.installations.values():
        rt = Runtime.parse(inst.command)
        if rt is None or rt not in supported:
            continue
        package = spec_for(rt).extract_package_name(inst.args)
        if package is None:
            logger.debug(
                "Rejecting '%s' installation of '%s': no plain package in args %s",
                rt.value,
                record.name,
                inst.args,
            )
            continue
        result[rt] = Installation(
            runtime=rt,
            package=inst.package or package,
            command=inst.command,
            args=tuple(inst.args),
            env=dict(inst.env),
            description=inst.description,
            recommended=inst.recommended,
            repository=repository,
        )
    return result


def _tools(record: MCPServer) -> Tools:
    return Tools(
        Tool(
            name=t.name,
            description=t.description,
            input_schema=JSONSchema(
                type=str(t.input_schema.get("type", "") or ""),
                properties=dict(t.input_schema.get("properties") or {}),
                required=list(t.input_schema.get("required") or t.required),
            ),
        )
        for t in record.tools
    )


def build_server(
    server_id: str, record: MCPServer, supported: FrozenSet[Runtime]
) -> Optional[Server]:
    """Map one mcpm record to a canonical :class:`Server`.

    Returns ``None`` when no installation survives runtime selection.
    """
    installations = _installations(record, supported)
    if not installations:
        return None

    # Name comes from the alphabetically first runtime's package.
    first = sorted_runtimes(installations)[0]
    name = installations[first].package

    schema = {
        key: SchemaArgument(description=a.description, required=a.required, example=a.example)
        for key, a in record.arguments.items()
    }
    arguments = merge_installation_arguments(
        ((inst.runtime, inst.args, inst.env) for inst in installations.values()),
        schema,
        supported,
    )

    meta = {}
    if record.examples:
        meta["examples"] = [e.model_dump() for e in record.examples]

    return Server(
        id=server_id,
        name=name,
        source=REGISTRY_ID,
        display_name=record.display_name,
        description=record.description,
        license=record.license,
        categories=list(record.categories),
        tags=list(record.tags),
        homepage=record.homepage,
        publisher=Publisher(name=record.author.name if record.author else ""),
        tools=_tools(record),
        installations=installations,
        arguments=arguments,
        is_official=record.is_official,
        deprecated=installations.all_deprecated(),
        meta=meta,
    )


# ── builder ─────────────────────────────────────────────────────────────


class MCPMBuilder:
    """Builds an :class:`MCPMRegistry` from a manifest URL.

    Parameters
    ----------
    url:
        Manifest location (``https://``, ``file://`` or scheme-less).
    supported_runtimes:
        Runtimes the caller can execute; defaults to npx and uvx.
    fetcher:
        HTTP collaborator; a private one is created (and closed) when omitted.
    cache:
        Shared :class:`ManifestCache`; overrides the cache build options.
    """

    def __init__(
        self,
        url: str = MCPM_REGISTRY_URL,
        *,
        supported_runtimes: Optional[Iterable[Runtime]] = None,
        fetcher: Optional[HttpFetcher] = None,
        cache: Optional[ManifestCache] = None,
    ) -> None:
        self._url = url
        self._supported = frozenset(
            default_supported_runtimes() if supported_runtimes is None else supported_runtimes
        )
        self._fetcher = fetcher
        self._cache = cache

    async def build(self, options: Optional[BuildOptions] = None) -> MCPMRegistry:
        supported = supported_intersection(self._supported, DECLARED_RUNTIMES, REGISTRY_ID)

        owned_fetcher: Optional[HttpFetcher] = None
        cache = self._cache
        if cache is None:
            fetcher = self._fetcher
            if fetcher is None:
                fetcher = owned_fetcher = HttpFetcher()
            cache = ManifestCache.from_options(options or BuildOptions(), fetcher)

        try:
            data = await load_manifest(self._url, cache, registry=REGISTRY_ID)
        finally:
            if owned_fetcher is not None:
                await owned_fetcher.close()

        manifest = decode_manifest(data, MCPServers, registry=REGISTRY_ID, source=self._url)
        return MCPMRegistry(manifest, supported)
