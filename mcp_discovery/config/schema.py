"""Pydantic configuration models for MCP Discovery.

Every section has defaults, so an empty (or missing) config file yields
a working setup: the embedded mozilla-ai manifest plus mcpm.sh, npx and
uvx runtimes, and a 24 hour manifest cache.
"""

from __future__ import annotations

import re
from typing import Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator, model_validator

from mcp_discovery.constants import (
    DEFAULT_CACHE_TTL,
    DEFAULT_LOG_LEVEL,
    HTTP_TIMEOUT,
    MCPM_REGISTRY_URL,
)
from mcp_discovery.registry.options import BuildOptions
from mcp_discovery.runtime import Runtime

_DURATION_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*([smhd]?)\s*$")
_DURATION_UNITS = {"": 1, "s": 1, "m": 60, "h": 3600, "d": 86400}


def parse_duration(value: Union[int, float, str]) -> float:
    """Parse ``90``, ``"90s"``, ``"15m"``, ``"24h"`` or ``"7d"`` into seconds."""
    if isinstance(value, (int, float)):
        return float(value)
    m = _DURATION_RE.match(value.lower())
    if m is None:
        raise ValueError(f"invalid duration '{value}' (expected e.g. 300, '15m', '24h')")
    return float(m.group(1)) * _DURATION_UNITS[m.group(2)]


class CacheConfig(BaseModel):
    """Manifest cache settings."""

    enabled: bool = Field(default=True, description="Read and write cached manifests.")
    refresh: bool = Field(default=False, description="Always refetch, ignoring the TTL.")
    dir: Optional[str] = Field(default=None, description="Cache directory override.")
    ttl: float = Field(default=float(DEFAULT_CACHE_TTL), gt=0, description="TTL in seconds.")

    @field_validator("ttl", mode="before")
    @classmethod
    def _parse_ttl(cls, v: Union[int, float, str]) -> float:
        return parse_duration(v)

    def to_build_options(self) -> BuildOptions:
        return BuildOptions(
            use_cache=self.enabled,
            refresh_cache=self.refresh,
            cache_dir=self.dir,
            cache_ttl=self.ttl,
        )


class HttpConfig(BaseModel):
    """Outgoing HTTP settings for manifest downloads."""

    timeout: float = Field(default=HTTP_TIMEOUT, gt=0, description="Request timeout in seconds.")
    headers: Dict[str, str] = Field(
        default_factory=dict,
        description="Extra request headers (values support ${ENV_VAR}).",
    )


class RegistryConfig(BaseModel):
    """One upstream registry."""

    id: Literal["mozilla-ai", "mcpm"]
    url: str = Field(default="", description="Manifest URL; blank selects embedded data.")
    enabled: bool = True

    @model_validator(mode="after")
    def _require_url(self) -> "RegistryConfig":
        if self.id == "mcpm" and not self.url.strip():
            raise ValueError("registry 'mcpm' requires a url")
        return self


def _default_registries() -> List[RegistryConfig]:
    return [
        RegistryConfig(id="mozilla-ai"),
        RegistryConfig(id="mcpm", url=MCPM_REGISTRY_URL),
    ]


class LoggingConfig(BaseModel):
    level: str = Field(default=DEFAULT_LOG_LEVEL, description="Log level name.")
    file: Optional[str] = Field(default=None, description="Log file path (stderr if unset).")

    @field_validator("level")
    @classmethod
    def _check_level(cls, v: str) -> str:
        upper = v.upper()
        if upper not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"invalid log level '{v}'")
        return upper


class DiscoveryConfig(BaseModel):
    """Top-level configuration."""

    version: str = Field(default="1", description="Config format version.")
    supported_runtimes: List[Runtime] = Field(
        default_factory=lambda: [Runtime.NPX, Runtime.UVX],
        description="Runtimes the caller is able to execute.",
    )
    cache: CacheConfig = Field(default_factory=CacheConfig)
    http: HttpConfig = Field(default_factory=HttpConfig)
    registries: List[RegistryConfig] = Field(default_factory=_default_registries)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @field_validator("version", mode="before")
    @classmethod
    def _check_version(cls, v: object) -> str:
        v = str(v)
        if v != "1":
            raise ValueError(f"unsupported config version '{v}' (expected '1')")
        return v

    @field_validator("supported_runtimes")
    @classmethod
    def _non_empty_runtimes(cls, v: List[Runtime]) -> List[Runtime]:
        if not v:
            raise ValueError("must specify at least one supported runtime")
        return v

    @field_validator("registries")
    @classmethod
    def _unique_registries(cls, v: List[RegistryConfig]) -> List[RegistryConfig]:
        seen = set()
        for reg in v:
            if reg.id in seen:
                raise ValueError(f"duplicate registry id '{reg.id}'")
            seen.add(reg.id)
        return v

    @property
    def enabled_registries(self) -> List[RegistryConfig]:
        return [r for r in self.registries if r.enabled]
