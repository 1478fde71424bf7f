"""
MCP Discovery - locate and normalise MCP server packages across registries.

MCP Discovery reads upstream registry manifests (remote JSON or embedded
data), maps each registry's schema onto a single canonical ``Server`` model
and exposes a uniform ``resolve``/``search`` surface over all of them.
"""

from mcp_discovery.constants import SERVER_NAME, SERVER_VERSION

__version__ = SERVER_VERSION
__app_name__ = SERVER_NAME

__all__ = [
    "SERVER_NAME",
    "SERVER_VERSION",
    "__version__",
    "__app_name__",
]
