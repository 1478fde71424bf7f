"""Adapter for the mcpm.sh registry."""

from mcp_discovery.providers.mcpm.registry import (
    DECLARED_RUNTIMES,
    REGISTRY_ID,
    MCPMBuilder,
    MCPMRegistry,
)

__all__ = ["DECLARED_RUNTIMES", "REGISTRY_ID", "MCPMBuilder", "MCPMRegistry"]
