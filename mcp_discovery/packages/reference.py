"""Parsing of ``runtime::name@version`` package references."""

from __future__ import annotations

from typing import NamedTuple


class PackageReference(NamedTuple):
    runtime: str
    name: str
    version: str


def parse_package_reference(reference: str) -> PackageReference:
    """Split a reference such as ``uvx::time@0.6.2`` into its parts.

    Both the ``runtime::`` prefix and the ``@version`` suffix are optional;
    missing parts come back as empty strings.  A leading ``@`` (npm scopes,
    e.g. ``@modelcontextprotocol/server-memory``) is part of the name.
    """
    runtime = ""
    rest = reference.strip()
    if "::" in rest:
        runtime, rest = rest.split("::", 1)

    name, version = rest, ""
    at = rest.rfind("@")
    if at > 0:
        name, version = rest[:at], rest[at + 1:]
    return PackageReference(runtime.strip(), name.strip(), version.strip())
