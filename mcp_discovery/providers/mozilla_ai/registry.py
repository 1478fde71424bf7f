"""Provider adapter for the mozilla-ai MCP server registry.

A blank URL selects the manifest embedded in this package.
"""

from __future__ import annotations

import logging
from importlib import resources
from typing import Dict, FrozenSet, Iterable, Optional, Set

from mcp_discovery.errors import DecodeError
from mcp_discovery.filters import normalize_string
from mcp_discovery.packages import (
    PLACEHOLDER_RE,
    ArgumentMetadata,
    Arguments,
    Installation,
    Installations,
    JSONSchema,
    Publisher,
    Repository,
    Server,
    Tool,
    ToolAnnotations,
    Tools,
    VariableType,
    transports_from_strings,
)
from mcp_discovery.providers._common import StaticRegistry
from mcp_discovery.providers.arguments import SchemaArgument, merge_installation_arguments
from mcp_discovery.providers.mozilla_ai import models
from mcp_discovery.registry.base import supported_intersection
from mcp_discovery.registry.cache import ManifestCache
from mcp_discovery.registry.client import HttpFetcher
from mcp_discovery.registry.loader import decode_manifest, load_manifest
from mcp_discovery.registry.options import BuildOptions
from mcp_discovery.runtime import Runtime, default_supported_runtimes, spec_for

logger = logging.getLogger(__name__)

REGISTRY_ID = "mozilla-ai"

DECLARED_RUNTIMES: FrozenSet[Runtime] = frozenset({Runtime.NPX, Runtime.UVX, Runtime.DOCKER})

_EMBEDDED_RESOURCE = "data/registry.json"
_EMBEDDED_SOURCE = "embedded:registry.json"


class MozillaAIRegistry(StaticRegistry):
    """Servers from the mozilla-ai manifest, keyed by normalised ID."""

    registry_id = REGISTRY_ID

    def __init__(self, manifest: models.MCPRegistry, supported_runtimes: FrozenSet[Runtime]) -> None:
        servers: Dict[str, Server] = {}
        for key, record in manifest.items():
            server_id = normalize_string(key)
            server = build_server(server_id, record, supported_runtimes)
            if server is None:
                logger.debug("no supported runtime packages found for '%s'", server_id)
                continue
            servers[server_id] = server
        super().__init__(servers, supported_runtimes)
        logger.debug("Loaded %d of %d '%s' servers", len(servers), len(manifest), REGISTRY_ID)


# ── conversion ──────────────────────────────────────────────────────────


def is_valid_installation(key: str, inst: models.Installation) -> bool:
    """Check that installation key, declared type and command agree."""
    key = normalize_string(key)
    kind = normalize_string(inst.type)
    rt = Runtime.parse(inst.command)
    if rt is Runtime.UVX:
        return key == "uvx" and kind == "uvx"
    if rt is Runtime.NPX:
        return key in ("npm", "npx") and kind in ("npm", "npx")
    if rt is Runtime.DOCKER:
        return key == "docker" and kind == "docker"
    return False


def _installations(
    record: models.Server,
    supported: FrozenSet[Runtime],
    server_transports,
) -> Installations:
    result = Installations()
    for key, inst in record.installations.items():
        rt = Runtime.parse(inst.command)
        if rt is None or rt not in supported:
            continue
        if not is_valid_installation(key, inst):
            logger.debug(
                "Skipping '%s' installation '%s': key/type/command mismatch (%s/%s)",
                record.id,
                key,
                inst.type,
                inst.command,
            )
            continue

        package = inst.package
        spec = spec_for(rt)
        if spec is not None:
            package = spec.extract_package_name(inst.args) or package

        repository = None
        if inst.repository is not None:
            repository = Repository(
                type=inst.repository.type,
                url=inst.repository.url,
                commit=inst.repository.commit,
            )

        result[rt] = Installation(
            runtime=rt,
            package=package,
            version=inst.version,
            command=inst.command,
            args=tuple(inst.args),
            env=dict(inst.env),
            description=inst.description,
            recommended=inst.recommended,
            deprecated=inst.deprecated,
            transports=(
                transports_from_strings(inst.transports) if inst.transports else server_transports
            ),
            repository=repository,
        )
    return result


def _convert_schema(schema: Optional[models.JSONSchema]) -> Optional[JSONSchema]:
    if schema is None:
        return None
    return JSONSchema(
        type=schema.type,
        properties=dict(schema.properties),
        required=list(schema.required),
    )


def _tools(record: models.Server) -> Tools:
    tools = []
    for t in record.tools:
        annotations = None
        if t.annotations is not None:
            annotations = ToolAnnotations(
                title=t.annotations.title,
                read_only_hint=t.annotations.read_only_hint,
                destructive_hint=t.annotations.destructive_hint,
                idempotent_hint=t.annotations.idempotent_hint,
                open_world_hint=t.annotations.open_world_hint,
            )
        tools.append(
            Tool(
                name=t.name,
                title=t.title,
                description=t.description,
                input_schema=_convert_schema(t.input_schema) or JSONSchema(),
                output_schema=_convert_schema(t.output_schema),
                annotations=annotations,
                meta=dict(t.meta),
            )
        )
    return Tools(tools)


def _referenced_placeholders(installations: Installations) -> Set[str]:
    names: Set[str] = set()
    for inst in installations.values():
        for value in (*inst.args, *inst.env.values()):
            names.update(PLACEHOLDER_RE.findall(value))
    return names


def _arguments(record: models.Server, installations: Installations, supported) -> Arguments:
    """Classified installation arguments plus directly declared ones.

    Declared arguments that carry a non-positional type and are not
    referenced through a placeholder describe a flag or variable by its
    real name; they fill keys the classifier did not produce.
    """
    schema = {
        key: SchemaArgument(description=a.description, required=a.required, example=a.example)
        for key, a in record.arguments.items()
    }
    arguments = merge_installation_arguments(
        ((inst.runtime, inst.args, inst.env) for inst in installations.values()),
        schema,
        supported,
    )

    referenced = _referenced_placeholders(installations)
    for key, a in record.arguments.items():
        vt = a.variable_type
        if vt is None or vt is VariableType.ARG_POSITIONAL:
            continue
        if key in arguments or key in referenced:
            continue
        arguments[key] = ArgumentMetadata(
            name=key,
            variable_type=vt,
            description=a.description,
            required=a.required,
            example=a.example,
        )
    return arguments


def build_server(
    server_id: str, record: models.Server, supported: FrozenSet[Runtime]
) -> Optional[Server]:
    """Map one mozilla-ai record to a canonical :class:`Server`.

    Returns ``None`` when no valid installation survives runtime selection.
    """
    transports = transports_from_strings(record.transports)
    installations = _installations(record, supported, transports)
    if not installations:
        return None

    return Server(
        id=server_id,
        name=server_id,
        source=REGISTRY_ID,
        display_name=record.display_name or record.name,
        description=record.description,
        license=record.license,
        categories=list(record.categories),
        tags=list(record.tags),
        homepage=record.homepage,
        publisher=Publisher(name=record.publisher.name, url=record.publisher.url),
        tools=_tools(record),
        installations=installations,
        arguments=_arguments(record, installations, supported),
        transports=transports,
        is_official=record.is_official,
        deprecated=record.deprecated or installations.all_deprecated(),
        meta=dict(record.meta),
    )


# ── builder ─────────────────────────────────────────────────────────────


def embedded_manifest() -> bytes:
    """Return the manifest shipped with this package."""
    try:
        return resources.files(__package__).joinpath(_EMBEDDED_RESOURCE).read_bytes()
    except OSError as exc:
        raise DecodeError(
            f"failed to read embedded registry data: {exc}",
            registry=REGISTRY_ID,
            source=_EMBEDDED_SOURCE,
        ) from exc


class MozillaAIBuilder:
    """Builds a :class:`MozillaAIRegistry`.

    Parameters
    ----------
    url:
        Manifest location; blank selects the embedded manifest.
    supported_runtimes:
        Runtimes the caller can execute; defaults to npx and uvx.
    fetcher:
        HTTP collaborator; a private one is created (and closed) when needed.
    cache:
        Shared :class:`ManifestCache`; overrides the cache build options.
    """

    def __init__(
        self,
        url: str = "",
        *,
        supported_runtimes: Optional[Iterable[Runtime]] = None,
        fetcher: Optional[HttpFetcher] = None,
        cache: Optional[ManifestCache] = None,
    ) -> None:
        self._url = url.strip()
        self._supported = frozenset(
            default_supported_runtimes() if supported_runtimes is None else supported_runtimes
        )
        self._fetcher = fetcher
        self._cache = cache

    async def build(self, options: Optional[BuildOptions] = None) -> MozillaAIRegistry:
        supported = supported_intersection(self._supported, DECLARED_RUNTIMES, REGISTRY_ID)

        if not self._url:
            logger.debug("Using embedded '%s' registry manifest", REGISTRY_ID)
            data = embedded_manifest()
            source = _EMBEDDED_SOURCE
        else:
            data = await self._load_remote(options)
            source = self._url

        manifest = decode_manifest(data, models.MCPRegistry, registry=REGISTRY_ID, source=source)
        return MozillaAIRegistry(manifest, supported)

    async def _load_remote(self, options: Optional[BuildOptions]) -> bytes:
        owned_fetcher: Optional[HttpFetcher] = None
        cache = self._cache
        if cache is None:
            fetcher = self._fetcher
            if fetcher is None:
                fetcher = owned_fetcher = HttpFetcher()
            cache = ManifestCache.from_options(options or BuildOptions(), fetcher)
        try:
            return await load_manifest(self._url, cache, registry=REGISTRY_ID)
        finally:
            if owned_fetcher is not None:
                await owned_fetcher.close()
