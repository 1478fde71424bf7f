"""Configuration: YAML loading, env expansion and Pydantic validation."""

from mcp_discovery.config.loader import expand_env_vars, find_config_file, load_config
from mcp_discovery.config.schema import (
    CacheConfig,
    DiscoveryConfig,
    HttpConfig,
    LoggingConfig,
    RegistryConfig,
    parse_duration,
)

__all__ = [
    "CacheConfig",
    "DiscoveryConfig",
    "HttpConfig",
    "LoggingConfig",
    "RegistryConfig",
    "expand_env_vars",
    "find_config_file",
    "load_config",
    "parse_duration",
]
