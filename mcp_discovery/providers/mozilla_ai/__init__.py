"""Adapter for the mozilla-ai MCP server registry."""

from mcp_discovery.providers.mozilla_ai.registry import (
    DECLARED_RUNTIMES,
    REGISTRY_ID,
    MozillaAIBuilder,
    MozillaAIRegistry,
    embedded_manifest,
)

__all__ = [
    "DECLARED_RUNTIMES",
    "REGISTRY_ID",
    "MozillaAIBuilder",
    "MozillaAIRegistry",
    "embedded_manifest",
]
