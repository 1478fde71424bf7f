"""Generic predicate framework used to filter servers and arguments."""

from mcp_discovery.filters.match import (
    MatchOptions,
    equals,
    equals_any,
    equals_bool,
    has_all,
    has_any,
    has_only,
    match,
    match_requested_slice,
    normalize_slice,
    normalize_string,
    parse_bool,
    partial,
    partial_all,
)

__all__ = [
    "MatchOptions",
    "equals",
    "equals_any",
    "equals_bool",
    "has_all",
    "has_any",
    "has_only",
    "match",
    "match_requested_slice",
    "normalize_slice",
    "normalize_string",
    "parse_bool",
    "partial",
    "partial_all",
]
