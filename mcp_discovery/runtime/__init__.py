"""Runtime catalogue: supported runtimes and their parsing specs."""

from mcp_discovery.runtime.specs import (
    Runtime,
    RuntimeSpec,
    any_intersection,
    default_supported_runtimes,
    extract_plain_package,
    join,
    parse_runtimes,
    spec_for,
    specs,
)

__all__ = [
    "Runtime",
    "RuntimeSpec",
    "any_intersection",
    "default_supported_runtimes",
    "extract_plain_package",
    "join",
    "parse_runtimes",
    "spec_for",
    "specs",
]
