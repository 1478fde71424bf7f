"""Shared constants for MCP Discovery."""

SERVER_NAME = "MCP Discovery"
SERVER_VERSION = "0.1.0"

# Logging defaults
DEFAULT_LOG_LEVEL = "WARNING"

# Environment variables honoured by the config loader and CLI
ENV_CONFIG_PATH = "MCP_DISCOVERY_CONFIG"
ENV_LOG_LEVEL = "MCP_DISCOVERY_LOG_LEVEL"
ENV_LOG_PATH = "MCP_DISCOVERY_LOG_PATH"

# Manifest cache defaults
CACHE_APP_DIR = "mcp-discovery"
CACHE_SUBDIR = "registries"
DEFAULT_CACHE_TTL = 24 * 60 * 60  # seconds

# HTTP defaults
HTTP_TIMEOUT = 10.0  # seconds per manifest request
HTTP_USER_AGENT = f"mcp-discovery/{SERVER_VERSION}"

# Well-known registry endpoints
MCPM_REGISTRY_URL = "https://mcpm.sh/api/servers.json"
