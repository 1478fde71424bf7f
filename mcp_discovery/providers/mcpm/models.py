"""Pydantic models for the mcpm.sh ``servers.json`` manifest.

The manifest is a JSON object mapping server IDs to server records.
Only the fields needed to build canonical servers are modelled; unknown
keys are ignored.  ``null`` fields read as their defaults.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import Field, field_validator

from mcp_discovery.filters import normalize_string
from mcp_discovery.providers._upstream import UpstreamModel


class Argument(UpstreamModel):
    description: str = ""
    required: bool = False
    example: str = ""


class Installation(UpstreamModel):
    type: str = ""
    command: str = ""
    args: List[str] = Field(default_factory=list)
    package: str = ""
    env: Dict[str, str] = Field(default_factory=dict)
    description: str = ""
    recommended: bool = False


class Tool(UpstreamModel):
    name: str
    description: str = ""
    input_schema: Dict[str, Any] = Field(default_factory=dict, alias="inputSchema")
    required: List[str] = Field(default_factory=list)

    @field_validator("name", mode="before")
    @classmethod
    def _normalize_name(cls, v: Any) -> Any:
        return normalize_string(v) if isinstance(v, str) else v


class Repository(UpstreamModel):
    type: str = ""
    url: str = ""


class Author(UpstreamModel):
    name: str = ""


class Example(UpstreamModel):
    title: str = ""
    description: str = ""
    prompt: str = ""


class MCPServer(UpstreamModel):
    """One entry of the mcpm manifest."""

    name: str = ""
    display_name: str = ""
    description: str = ""
    license: str = ""
    arguments: Dict[str, Argument] = Field(default_factory=dict)
    installations: Dict[str, Installation] = Field(default_factory=dict)
    tools: List[Tool] = Field(default_factory=list)
    is_official: bool = False
    repository: Optional[Repository] = None
    homepage: str = ""
    author: Optional[Author] = None
    tags: List[str] = Field(default_factory=list)
    categories: List[str] = Field(default_factory=list)
    examples: List[Example] = Field(default_factory=list)

    @field_validator("name", mode="before")
    @classmethod
    def _normalize_name(cls, v: Any) -> Any:
        return normalize_string(v) if isinstance(v, str) else v


MCPServers = Dict[str, MCPServer]
