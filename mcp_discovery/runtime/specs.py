"""Execution runtimes and their command-line parsing rules.

Each :class:`Runtime` has a :class:`RuntimeSpec` that tells the argument
classifier which flags to skip and how to pick the package (or image)
identifier out of an installation's ``args``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, FrozenSet, Iterable, List, Optional, Sequence

from mcp_discovery.errors import InvalidInputError


class Runtime(str, Enum):
    NPX = "npx"
    UVX = "uvx"
    PYTHON = "python"
    DOCKER = "docker"

    @classmethod
    def parse(cls, value: str) -> Optional["Runtime"]:
        """Return the runtime named by *value*, or ``None`` if unknown."""
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


@dataclass(frozen=True)
class RuntimeSpec:
    """Parsing rules for one runtime."""

    should_ignore_flag: Callable[[str], bool]
    extract_package_name: Callable[[Sequence[str]], Optional[str]]


# ── package extraction ──────────────────────────────────────────────────


def extract_plain_package(runtime: Runtime, args: Sequence[str]) -> Optional[str]:
    """Return the first plain package identifier in *args*.

    Flags (``-y``), placeholders (``${FOO}``), ``git+`` references and
    ``.py`` scripts are skipped; for ``uvx`` raw ``http(s)://`` URLs are
    skipped as well.  Returns ``None`` when nothing usable is found.
    """
    for arg in args:
        if arg.startswith("-") or arg.startswith("${"):
            continue
        if arg.startswith("git+") or arg.endswith(".py"):
            continue
        if runtime is Runtime.UVX and arg.startswith(("https://", "http://")):
            continue
        return arg
    return None


# Docker flags that consume the following token as their value.
_DOCKER_VALUE_FLAGS: FrozenSet[str] = frozenset(
    {"-e", "--env", "-p", "-v", "--volume", "--name", "--network"}
)


def _extract_docker_image(args: Sequence[str]) -> Optional[str]:
    seen_run = False
    skip_next = False
    for arg in args:
        if not seen_run:
            seen_run = arg == "run"
            continue
        if skip_next:
            skip_next = False
            continue
        if arg.startswith("-"):
            skip_next = arg in _DOCKER_VALUE_FLAGS
            continue
        return arg
    return None


def _ignore(*flags: str) -> Callable[[str], bool]:
    ignored = frozenset(flags)
    return lambda flag: flag in ignored


_SPECS: Dict[Runtime, RuntimeSpec] = {
    Runtime.DOCKER: RuntimeSpec(
        should_ignore_flag=_ignore(
            "--rm", "--name", "--volume", "-v", "--network", "--detach", "-d", "-i"
        ),
        extract_package_name=_extract_docker_image,
    ),
    Runtime.NPX: RuntimeSpec(
        should_ignore_flag=_ignore("-y"),
        extract_package_name=lambda args: extract_plain_package(Runtime.NPX, args),
    ),
    Runtime.UVX: RuntimeSpec(
        should_ignore_flag=_ignore(),
        extract_package_name=lambda args: extract_plain_package(Runtime.UVX, args),
    ),
    Runtime.PYTHON: RuntimeSpec(
        should_ignore_flag=_ignore("-m"),
        extract_package_name=lambda args: extract_plain_package(Runtime.PYTHON, args),
    ),
}


# ── public API ──────────────────────────────────────────────────────────


def specs() -> Dict[Runtime, RuntimeSpec]:
    """Return a copy of the runtime → spec table."""
    return dict(_SPECS)


def spec_for(runtime: Runtime) -> Optional[RuntimeSpec]:
    return _SPECS.get(runtime)


def default_supported_runtimes() -> FrozenSet[Runtime]:
    """Runtimes used when the caller does not narrow the set."""
    return frozenset({Runtime.NPX, Runtime.UVX})


def parse_runtimes(values: Iterable[str]) -> FrozenSet[Runtime]:
    """Parse runtime names into a set, rejecting unknown or empty input.

    Raises :class:`InvalidInputError` when a name is unknown or when the
    resulting set is empty.
    """
    result = set()
    unknown: List[str] = []
    for value in values:
        if not value.strip():
            continue
        rt = Runtime.parse(value)
        if rt is None:
            unknown.append(value)
        else:
            result.add(rt)
    if unknown:
        raise InvalidInputError(f"unsupported runtime(s): {', '.join(unknown)}")
    if not result:
        raise InvalidInputError("must specify at least one supported runtime")
    return frozenset(result)


def any_intersection(left: Iterable[Runtime], right: Iterable[Runtime]) -> bool:
    """Return ``True`` if the two runtime collections share a member."""
    return not set(left).isdisjoint(right)


def join(runtimes: Iterable[Runtime], sep: str = ", ") -> str:
    """Join runtime names in sorted order for display and error messages."""
    return sep.join(sorted(rt.value for rt in runtimes))
