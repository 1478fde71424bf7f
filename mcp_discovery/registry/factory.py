"""Build the aggregated registry described by a :class:`DiscoveryConfig`."""

from __future__ import annotations

import asyncio
import logging
from typing import List, Optional

from mcp_discovery.config.schema import DiscoveryConfig, RegistryConfig
from mcp_discovery.display.logging_config import secret_redaction_filter
from mcp_discovery.errors import FetchError
from mcp_discovery.providers.mcpm import MCPMBuilder
from mcp_discovery.providers.mozilla_ai import MozillaAIBuilder
from mcp_discovery.registry.aggregator import Aggregator
from mcp_discovery.registry.base import PackageProvider, RegistryBuilder
from mcp_discovery.registry.cache import ManifestCache
from mcp_discovery.registry.client import HttpFetcher
from mcp_discovery.registry.options import BuildOptions

logger = logging.getLogger(__name__)


def _builder_for(
    reg: RegistryConfig,
    config: DiscoveryConfig,
    cache: ManifestCache,
) -> RegistryBuilder:
    runtimes = frozenset(config.supported_runtimes)
    if reg.id == "mcpm":
        return MCPMBuilder(reg.url, supported_runtimes=runtimes, cache=cache)
    return MozillaAIBuilder(reg.url, supported_runtimes=runtimes, cache=cache)


async def build_registry(
    config: Optional[DiscoveryConfig] = None,
    *,
    fetcher: Optional[HttpFetcher] = None,
    build_options: Optional[BuildOptions] = None,
) -> Aggregator:
    """Build every enabled registry and wrap them in an :class:`Aggregator`.

    All child builders share one :class:`ManifestCache`, so concurrent
    loads of the same URL are collapsed.  Registries are consulted in
    config order.  *build_options* overrides ``config.cache``.

    A registry whose manifest cannot be fetched is logged and left out;
    the fetch error is raised only when no registry could be built.
    Decode and input errors always propagate.
    """
    config = config or DiscoveryConfig()
    options = build_options or config.cache.to_build_options()

    for value in config.http.headers.values():
        secret_redaction_filter.register(value)

    owned_fetcher: Optional[HttpFetcher] = None
    if fetcher is None:
        fetcher = owned_fetcher = HttpFetcher(
            headers=config.http.headers,
            timeout=config.http.timeout,
        )
    cache = ManifestCache.from_options(options, fetcher)

    registries = config.enabled_registries
    try:
        results = await asyncio.gather(
            *(_builder_for(reg, config, cache).build(options) for reg in registries),
            return_exceptions=True,
        )
    finally:
        if owned_fetcher is not None:
            await owned_fetcher.close()

    providers: List[PackageProvider] = []
    failures: List[FetchError] = []
    for reg, result in zip(registries, results):
        if isinstance(result, FetchError):
            logger.warning("Registry '%s' unavailable, skipping: %s", reg.id, result)
            failures.append(result)
        elif isinstance(result, BaseException):
            raise result
        else:
            providers.append(result)

    if failures and not providers:
        raise failures[0]
    return Aggregator(providers)
