"""Canonical package model: servers, tools, installations and arguments."""

from mcp_discovery.packages.arguments import (
    PLACEHOLDER_RE,
    ArgumentMetadata,
    Arguments,
    OrderedArguments,
    VariableType,
)
from mcp_discovery.packages.models import (
    Installation,
    Installations,
    JSONSchema,
    Publisher,
    Repository,
    Server,
    Tool,
    ToolAnnotations,
    Tools,
    Transport,
    all_transports,
    default_transports,
    has_transport,
    transports_from_strings,
    transports_to_strings,
)
from mcp_discovery.packages.reference import PackageReference, parse_package_reference

__all__ = [
    "PLACEHOLDER_RE",
    "ArgumentMetadata",
    "Arguments",
    "Installation",
    "Installations",
    "JSONSchema",
    "OrderedArguments",
    "PackageReference",
    "Publisher",
    "Repository",
    "Server",
    "Tool",
    "ToolAnnotations",
    "Tools",
    "Transport",
    "VariableType",
    "all_transports",
    "default_transports",
    "has_transport",
    "parse_package_reference",
    "transports_from_strings",
    "transports_to_strings",
]
