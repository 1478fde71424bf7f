"""Pydantic models for the mozilla-ai MCP server registry manifest.

The manifest is a JSON object mapping server IDs to server records
using camelCase keys.  Server ``id`` and tool names are normalised on
decode, and ``null`` fields read as their defaults.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import Field, field_validator

from mcp_discovery.filters import normalize_string
from mcp_discovery.packages import VariableType
from mcp_discovery.providers._upstream import UpstreamModel

# Upstream spellings accepted for argument types.
_ARGUMENT_TYPES: Dict[str, VariableType] = {
    "environment": VariableType.ENV,
    "argument": VariableType.ARG,
    "argument_bool": VariableType.ARG_BOOL,
    "argument_positional": VariableType.ARG_POSITIONAL,
    "positional_argument": VariableType.ARG_POSITIONAL,
}


class Repository(UpstreamModel):
    type: str = ""
    url: str = ""
    commit: str = ""


class Publisher(UpstreamModel):
    name: str = ""
    url: str = ""


class ToolAnnotations(UpstreamModel):
    title: Optional[str] = None
    read_only_hint: Optional[bool] = Field(default=None, alias="readOnlyHint")
    destructive_hint: Optional[bool] = Field(default=None, alias="destructiveHint")
    idempotent_hint: Optional[bool] = Field(default=None, alias="idempotentHint")
    open_world_hint: Optional[bool] = Field(default=None, alias="openWorldHint")


class JSONSchema(UpstreamModel):
    type: str = ""
    properties: Dict[str, Any] = Field(default_factory=dict)
    required: List[str] = Field(default_factory=list)


class Tool(UpstreamModel):
    name: str
    title: str = ""
    description: str = ""
    input_schema: JSONSchema = Field(default_factory=JSONSchema, alias="inputSchema")
    output_schema: Optional[JSONSchema] = Field(default=None, alias="outputSchema")
    annotations: Optional[ToolAnnotations] = None
    meta: Dict[str, Any] = Field(default_factory=dict, alias="_meta")

    @field_validator("name", mode="before")
    @classmethod
    def _normalize_name(cls, v: Any) -> Any:
        return normalize_string(v) if isinstance(v, str) else v


class Argument(UpstreamModel):
    name: str = ""
    description: str = ""
    required: bool = False
    type: Optional[str] = None
    example: str = ""
    position: Optional[int] = Field(default=None, gt=0)

    @property
    def variable_type(self) -> Optional[VariableType]:
        if not self.type:
            return None
        return _ARGUMENT_TYPES.get(normalize_string(self.type))


class Installation(UpstreamModel):
    type: str = ""
    command: str = ""
    args: List[str] = Field(default_factory=list)
    env: Dict[str, str] = Field(default_factory=dict)
    package: str = ""
    version: str = ""
    description: str = ""
    recommended: bool = False
    deprecated: bool = False
    transports: List[str] = Field(default_factory=list)
    repository: Optional[Repository] = None


class Server(UpstreamModel):
    """One entry of the mozilla-ai manifest."""

    id: str = ""
    name: str = ""
    display_name: str = Field(default="", alias="displayName")
    description: str = ""
    license: str = ""
    categories: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    homepage: str = ""
    publisher: Publisher = Field(default_factory=Publisher)
    tools: List[Tool] = Field(default_factory=list)
    installations: Dict[str, Installation] = Field(default_factory=dict)
    arguments: Dict[str, Argument] = Field(default_factory=dict)
    transports: List[str] = Field(default_factory=list)
    is_official: bool = Field(default=False, alias="isOfficial")
    deprecated: bool = False
    meta: Dict[str, Any] = Field(default_factory=dict, alias="_meta")

    @field_validator("id", mode="before")
    @classmethod
    def _normalize_id(cls, v: Any) -> Any:
        return normalize_string(v) if isinstance(v, str) else v


MCPRegistry = Dict[str, Server]
