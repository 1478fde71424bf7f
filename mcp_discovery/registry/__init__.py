"""Registry surface: options, protocols, manifest cache and aggregator."""

from mcp_discovery.registry.aggregator import AGGREGATOR_ID, Aggregator
from mcp_discovery.registry.base import PackageProvider, RegistryBuilder
from mcp_discovery.registry.cache import ManifestCache
from mcp_discovery.registry.client import HttpFetcher
from mcp_discovery.registry.options import (
    BuildOptions,
    ResolveOptions,
    SearchOptions,
    default_cache_dir,
    prepare_filters,
    resolve_filters,
)

__all__ = [
    "AGGREGATOR_ID",
    "Aggregator",
    "BuildOptions",
    "HttpFetcher",
    "ManifestCache",
    "PackageProvider",
    "RegistryBuilder",
    "ResolveOptions",
    "SearchOptions",
    "default_cache_dir",
    "prepare_filters",
    "resolve_filters",
]
