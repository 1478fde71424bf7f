"""Configuration file loading and validation.

Loads a YAML configuration file, expands ``${ENV_VAR}`` placeholders,
and validates against the Pydantic models defined in :mod:`schema`.
"""

import logging
import os
import re
from typing import Any, Dict, List, Optional

import yaml
from pydantic import ValidationError

from mcp_discovery.config.schema import DiscoveryConfig
from mcp_discovery.constants import ENV_CONFIG_PATH
from mcp_discovery.errors import ConfigurationError

logger = logging.getLogger(__name__)

# Recognised config file extensions.
_YAML_EXTS = frozenset({".yaml", ".yml"})

# Config file search order in the working directory (first match wins)
_CONFIG_SEARCH_ORDER = ("mcp-discovery.yaml", "mcp-discovery.yml")

_ENV_VAR_RE = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)\}")


def expand_env_vars(value: Any) -> Any:
    """Recursively expand ``${VAR}`` references in string values.

    - If the env var is not set, the placeholder is left unchanged.
    - Non-string leaves are returned as-is.
    - Dicts and lists are walked recursively.
    """
    if isinstance(value, str):
        return _ENV_VAR_RE.sub(
            lambda m: os.environ.get(m.group(1), m.group(0)),
            value,
        )
    if isinstance(value, dict):
        return {k: expand_env_vars(v) for k, v in value.items()}
    if isinstance(value, list):
        return [expand_env_vars(item) for item in value]
    return value


def _read_config_file(cfg_fpath: str) -> Dict[str, Any]:
    """Read and parse a YAML config file from *cfg_fpath*.

    Raises :class:`ConfigurationError` on I/O or parse errors.  An empty
    file is treated as an empty mapping.
    """
    ext = os.path.splitext(cfg_fpath)[1].lower()
    if ext not in _YAML_EXTS:
        raise ConfigurationError(
            f"Unsupported config file extension '{ext}'. "
            "Only YAML files (.yaml, .yml) are supported."
        )

    try:
        with open(cfg_fpath, "r", encoding="utf-8") as f:
            raw_data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"Error reading configuration file: {cfg_fpath}\n  {exc}") from exc

    if raw_data is None:
        return {}
    if not isinstance(raw_data, dict):
        raise ConfigurationError(
            "Top-level configuration content must be a YAML mapping (dictionary)."
        )
    return raw_data


def _format_validation_errors(exc: ValidationError) -> str:
    """Format Pydantic validation errors into a readable multi-line string."""
    lines: List[str] = []
    for err in exc.errors():
        loc = " → ".join(str(part) for part in err["loc"])
        lines.append(f"  • {loc}: {err['msg']}")
    return "\n".join(lines)


def find_config_file(explicit: Optional[str] = None) -> Optional[str]:
    """Locate the config file.

    Order: *explicit* path, ``$MCP_DISCOVERY_CONFIG``, then
    ``mcp-discovery.yaml``/``.yml`` in the working directory.  Returns
    ``None`` when nothing applies, meaning built-in defaults.
    """
    if explicit:
        return explicit
    from_env = os.environ.get(ENV_CONFIG_PATH)
    if from_env:
        return from_env
    for name in _CONFIG_SEARCH_ORDER:
        candidate = os.path.join(os.getcwd(), name)
        if os.path.isfile(candidate):
            return candidate
    return None


# ── Public API ───────────────────────────────────────────────────────────


def validate_config(raw_data: Dict[str, Any]) -> DiscoveryConfig:
    """Expand env vars in *raw_data* and validate it (all errors at once)."""
    raw_data = expand_env_vars(raw_data)
    try:
        return DiscoveryConfig.model_validate(raw_data)
    except ValidationError as exc:
        error_summary = _format_validation_errors(exc)
        raise ConfigurationError(
            f"Configuration validation failed ({len(exc.errors())} error(s)):\n" f"{error_summary}"
        ) from exc


def load_config(cfg_fpath: Optional[str] = None) -> DiscoveryConfig:
    """Load, expand and validate the configuration.

    Steps:
        1. Locate the file (see :func:`find_config_file`)
        2. Read YAML
        3. Expand ``${VAR}`` environment variable references
        4. Validate against :class:`DiscoveryConfig` (Pydantic)

    Raises:
        ConfigurationError: On missing files, I/O errors, parse errors or
            validation failures.
    """
    path = find_config_file(cfg_fpath)
    if path is None:
        logger.debug("No configuration file found, using defaults.")
        return DiscoveryConfig()

    logger.debug("Loading configuration file: %s", path)
    if not os.path.exists(path):
        raise ConfigurationError(f"Configuration file does not exist: {path}")

    config = validate_config(_read_config_file(path))
    logger.info(
        "Configuration loaded: %d registr%s, runtimes: %s",
        len(config.enabled_registries),
        "y" if len(config.enabled_registries) == 1 else "ies",
        ", ".join(rt.value for rt in config.supported_runtimes),
    )
    return config
