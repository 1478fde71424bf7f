"""Canonical package model shared by every registry provider.

Providers decode their own upstream schema and map it onto the frozen
records defined here (``Server``, ``Tool``, ``Installation``...).  Nothing
downstream of a provider mutates these values.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple

from mcp_discovery.packages.arguments import Arguments
from mcp_discovery.runtime import Runtime

# ── Transports ───────────────────────────────────────────────────────────


class Transport(str, Enum):
    STDIO = "stdio"
    SSE = "sse"
    STREAMABLE_HTTP = "streamable-http"


def all_transports() -> Tuple[Transport, ...]:
    return (Transport.STDIO, Transport.SSE, Transport.STREAMABLE_HTTP)


def default_transports() -> Tuple[Transport, ...]:
    return (Transport.STDIO,)


def transports_from_strings(values: Optional[Iterable[str]]) -> Tuple[Transport, ...]:
    """Keep the known transports in *values*, falling back to ``stdio``.

    Unknown strings are dropped silently; duplicates are collapsed.
    """
    result: List[Transport] = []
    for value in values or ():
        try:
            transport = Transport(value)
        except ValueError:
            continue
        if transport not in result:
            result.append(transport)
    return tuple(result) if result else default_transports()


def transports_to_strings(transports: Iterable[Transport]) -> List[str]:
    return [t.value for t in transports]


def has_transport(transports: Iterable[Transport], transport: Transport) -> bool:
    return transport in tuple(transports)


# ── Tools ────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class JSONSchema:
    """The subset of JSON Schema carried for tool inputs and outputs."""

    type: str = ""
    properties: Dict[str, Any] = field(default_factory=dict)
    required: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class ToolAnnotations:
    """Behavioural hints; each hint is ``None`` when the upstream left it unset."""

    title: Optional[str] = None
    read_only_hint: Optional[bool] = None
    destructive_hint: Optional[bool] = None
    idempotent_hint: Optional[bool] = None
    open_world_hint: Optional[bool] = None


@dataclass(frozen=True)
class Tool:
    name: str
    title: str = ""
    description: str = ""
    input_schema: JSONSchema = field(default_factory=JSONSchema)
    output_schema: Optional[JSONSchema] = None
    annotations: Optional[ToolAnnotations] = None
    meta: Dict[str, Any] = field(default_factory=dict)

    @property
    def display_name(self) -> str:
        """Best human label: ``title``, then the annotation title, then ``name``."""
        if self.title:
            return self.title
        if self.annotations is not None and self.annotations.title:
            return self.annotations.title
        return self.name


class Tools(tuple):
    """Ordered, immutable sequence of :class:`Tool`."""

    def names(self) -> List[str]:
        return [tool.name.strip() for tool in self]


# ── Installations ────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Repository:
    type: str = ""
    url: str = ""
    commit: str = ""


@dataclass(frozen=True)
class Publisher:
    name: str = ""
    url: str = ""


@dataclass(frozen=True)
class Installation:
    """One runtime-specific way of launching a server."""

    runtime: Runtime
    package: str = ""
    version: str = ""
    command: str = ""
    args: Tuple[str, ...] = ()
    env: Dict[str, str] = field(default_factory=dict)
    description: str = ""
    recommended: bool = False
    deprecated: bool = False
    transports: Tuple[Transport, ...] = field(default_factory=default_transports)
    repository: Optional[Repository] = None


class Installations(Dict[Runtime, Installation]):
    """Mapping of runtime → :class:`Installation`."""

    def any_deprecated(self) -> bool:
        return any(inst.deprecated for inst in self.values())

    def all_deprecated(self) -> bool:
        return bool(self) and all(inst.deprecated for inst in self.values())

    def runtimes(self) -> List[Runtime]:
        """Runtimes offered, sorted by name."""
        return sorted(self, key=lambda rt: rt.value)

    def versions(self) -> List[str]:
        return [inst.version for inst in self.values() if inst.version]


# ── Server ───────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Server:
    """Canonical, provider-independent description of an MCP server."""

    id: str
    name: str
    source: str
    display_name: str = ""
    description: str = ""
    license: str = ""
    categories: List[str] = field(default_factory=list)
    tags: List[str] = field(default_factory=list)
    homepage: str = ""
    publisher: Publisher = field(default_factory=Publisher)
    tools: Tools = field(default_factory=Tools)
    installations: Installations = field(default_factory=Installations)
    arguments: Arguments = field(default_factory=Arguments)
    transports: Tuple[Transport, ...] = field(default_factory=default_transports)
    is_official: bool = False
    deprecated: bool = False
    meta: Dict[str, Any] = field(default_factory=dict)

    @property
    def runtimes(self) -> List[Runtime]:
        return self.installations.runtimes()

    def to_dict(self) -> Dict[str, Any]:
        """Plain-JSON rendering used by the CLI's ``--json`` output."""
        return {
            "id": self.id,
            "name": self.name,
            "source": self.source,
            "displayName": self.display_name,
            "description": self.description,
            "license": self.license,
            "categories": list(self.categories),
            "tags": list(self.tags),
            "homepage": self.homepage,
            "publisher": {"name": self.publisher.name, "url": self.publisher.url},
            "tools": [
                {"name": t.name, "title": t.title, "description": t.description}
                for t in self.tools
            ],
            "installations": {
                rt.value: {
                    "package": inst.package,
                    "version": inst.version,
                    "command": inst.command,
                    "args": list(inst.args),
                    "env": dict(inst.env),
                    "recommended": inst.recommended,
                    "deprecated": inst.deprecated,
                    "transports": transports_to_strings(inst.transports),
                }
                for rt, inst in self.installations.items()
            },
            "arguments": {name: meta.to_dict() for name, meta in self.arguments.items()},
            "transports": transports_to_strings(self.transports),
            "isOfficial": self.is_official,
            "deprecated": self.deprecated,
        }
