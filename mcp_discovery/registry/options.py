"""Option records and ``Server`` filtering for resolve/search operations.

Options are plain pydantic records with enumerated fields.  Filters are
``{key: value}`` maps using the canonical keys below; each key has a
default matcher over :class:`~mcp_discovery.packages.Server`.
"""

from __future__ import annotations

import os
from typing import Callable, Dict, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from mcp_discovery.constants import CACHE_APP_DIR, CACHE_SUBDIR, DEFAULT_CACHE_TTL
from mcp_discovery.filters import (
    MatchOptions,
    equals,
    equals_any,
    equals_bool,
    has_all,
    has_any,
    match,
    normalize_string,
    partial,
    partial_all,
)
from mcp_discovery.packages import Server

WILDCARD = "*"

FILTER_KEY_NAME = "name"
FILTER_KEY_RUNTIME = "runtime"
FILTER_KEY_TOOLS = "tools"
FILTER_KEY_TAGS = "tags"
FILTER_KEY_CATEGORIES = "categories"
FILTER_KEY_VERSION = "version"
FILTER_KEY_LICENSE = "license"
FILTER_KEY_SOURCE = "source"
FILTER_KEY_IS_OFFICIAL = "isOfficial"

Filters = Dict[str, str]
FilterMutator = Callable[[Filters], None]


# ── Server value providers ──────────────────────────────────────────────


def _name(s: Server) -> str:
    return s.name


def _display_name(s: Server) -> str:
    return s.display_name


def _id(s: Server) -> str:
    return s.id


def _runtimes(s: Server) -> List[str]:
    return [rt.value for rt in s.installations]


def _versions(s: Server) -> List[str]:
    return s.installations.versions()


def _wildcard(predicate: Callable[[Server, str], bool]) -> Callable[[Server, str], bool]:
    def _pred(item: Server, value: str) -> bool:
        query = normalize_string(value)
        if query == WILDCARD:
            return True
        return predicate(item, query)

    return _pred


def default_matchers() -> Dict[str, Callable[[Server, str], bool]]:
    """Matchers registered for every reserved filter key."""
    return {
        FILTER_KEY_NAME: _wildcard(equals_any(_name, _display_name, _id)),
        FILTER_KEY_RUNTIME: has_any(_runtimes),
        FILTER_KEY_TOOLS: has_all(lambda s: s.tools.names()),
        FILTER_KEY_TAGS: partial_all(lambda s: s.tags),
        FILTER_KEY_CATEGORIES: partial_all(lambda s: s.categories),
        FILTER_KEY_VERSION: has_any(_versions),
        FILTER_KEY_LICENSE: partial(lambda s: s.license),
        FILTER_KEY_SOURCE: equals(lambda s: s.source),
        FILTER_KEY_IS_OFFICIAL: equals_bool(lambda s: s.is_official),
    }


def default_match_options() -> MatchOptions:
    return MatchOptions.build(matchers=default_matchers())


def match_server(
    server: Server,
    filters: Optional[Mapping[str, str]],
    extra: Optional[MatchOptions] = None,
) -> bool:
    """Apply *filters* with the default matchers, extended by *extra*."""
    opts = default_match_options()
    if extra is not None:
        opts = opts.merged(extra)
    return match(server, filters, opts)


def prepare_filters(
    filters: Optional[Mapping[str, str]],
    name: str,
    mutate: Optional[FilterMutator] = None,
) -> Filters:
    """Copy *filters*, adding ``name`` when absent, then apply *mutate*.

    The input mapping is never modified.
    """
    fs: Filters = dict(filters or {})
    if FILTER_KEY_NAME not in fs:
        fs[FILTER_KEY_NAME] = normalize_string(name)
    if mutate is not None:
        mutate(fs)
    return fs


# ── Option records ──────────────────────────────────────────────────────


def _normalize_optional(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = normalize_string(str(value))
    return value or None


class ResolveOptions(BaseModel):
    """Narrowing for a single ``resolve`` call."""

    model_config = ConfigDict(frozen=True)

    runtime: Optional[str] = Field(default=None, description="Required runtime.")
    version: Optional[str] = Field(default=None, description="Exact version token.")
    source: Optional[str] = Field(default=None, description="Provider ID to consult.")

    @field_validator("runtime", "version", "source", mode="before")
    @classmethod
    def _normalize(cls, v: Optional[str]) -> Optional[str]:
        return _normalize_optional(v)


class SearchOptions(BaseModel):
    """Narrowing for a ``search`` call."""

    model_config = ConfigDict(frozen=True)

    source: Optional[str] = Field(default=None, description="Provider ID to consult.")

    @field_validator("source", mode="before")
    @classmethod
    def _normalize(cls, v: Optional[str]) -> Optional[str]:
        return _normalize_optional(v)


def resolve_filters(opts: ResolveOptions) -> Filters:
    """Project resolve options onto the canonical filter keys."""
    fs: Filters = {}
    if opts.runtime:
        fs[FILTER_KEY_RUNTIME] = opts.runtime
    if opts.version:
        fs[FILTER_KEY_VERSION] = opts.version
    return fs


def default_cache_dir() -> str:
    """``$XDG_CACHE_HOME`` (or ``~/.cache``) joined with the app's registry dir."""
    base = os.environ.get("XDG_CACHE_HOME") or os.path.expanduser("~/.cache")
    return os.path.join(base, CACHE_APP_DIR, CACHE_SUBDIR)


class BuildOptions(BaseModel):
    """Cache behaviour for provider construction."""

    model_config = ConfigDict(frozen=True)

    use_cache: bool = Field(default=True, description="Read and write the manifest cache.")
    refresh_cache: bool = Field(
        default=False, description="Ignore the TTL and always refetch (still writes)."
    )
    cache_dir: Optional[str] = Field(
        default=None, description="Cache directory; defaults to the user cache path."
    )
    cache_ttl: float = Field(
        default=float(DEFAULT_CACHE_TTL), gt=0, description="Entry lifetime in seconds."
    )

    def resolved_cache_dir(self) -> str:
        return self.cache_dir or default_cache_dir()
