"""Generic filter algebra.

A *predicate* is a callable ``(item, filter_value) -> bool``.  The
builders in this module turn *value providers* (callables that pull a
string, a list of strings or a bool out of an item) into predicates, and
:func:`match` applies a ``{key: value}`` filter map to an item using a
table of named predicates.

All string comparisons are normalised (trimmed and lower-cased).
Multi-valued filter values are comma separated.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import (
    Callable,
    FrozenSet,
    Iterable,
    List,
    Mapping,
    Optional,
    Sequence,
    TypeVar,
)

from mcp_discovery.errors import InvalidInputError

T = TypeVar("T")

Predicate = Callable[[T, str], bool]
StringValueProvider = Callable[[T], str]
StringValuesProvider = Callable[[T], Sequence[str]]
BoolValueProvider = Callable[[T], bool]
LogFunc = Callable[[str, str], None]

_TRUE_STRINGS = frozenset({"1", "t", "true"})
_FALSE_STRINGS = frozenset({"0", "f", "false"})


def normalize_string(value: str) -> str:
    return value.strip().lower()


def normalize_slice(values: Iterable[str]) -> List[str]:
    return [normalize_string(v) for v in values]


def _split(value: str) -> List[str]:
    return normalize_slice(value.split(","))


def parse_bool(value: str) -> Optional[bool]:
    """Parse ``1/t/true`` or ``0/f/false`` (any case); ``None`` otherwise."""
    v = normalize_string(value)
    if v in _TRUE_STRINGS:
        return True
    if v in _FALSE_STRINGS:
        return False
    return None


# ── predicate builders ──────────────────────────────────────────────────


def equals(provider: StringValueProvider) -> Predicate:
    def _pred(item, value: str) -> bool:
        return normalize_string(provider(item)) == normalize_string(value)

    return _pred


def equals_bool(provider: BoolValueProvider) -> Predicate:
    """Compare a boolean field; unparseable filter values never match."""

    def _pred(item, value: str) -> bool:
        parsed = parse_bool(value)
        if parsed is None:
            return False
        return provider(item) == parsed

    return _pred


def partial(provider: StringValueProvider) -> Predicate:
    def _pred(item, value: str) -> bool:
        return normalize_string(value) in normalize_string(provider(item))

    return _pred


def partial_all(provider: StringValuesProvider) -> Predicate:
    """Every comma-split needle is a substring of at least one item value."""

    def _pred(item, value: str) -> bool:
        actual = normalize_slice(provider(item))
        return all(any(needle in a for a in actual) for needle in _split(value))

    return _pred


def equals_any(*providers: StringValueProvider) -> Predicate:
    """The filter value is a substring of at least one provided string."""

    def _pred(item, value: str) -> bool:
        query = normalize_string(value)
        return any(query in normalize_string(p(item)) for p in providers)

    return _pred


def has_any(provider: StringValuesProvider) -> Predicate:
    def _pred(item, value: str) -> bool:
        wanted = set(_split(value))
        return any(normalize_string(v) in wanted for v in provider(item))

    return _pred


def has_all(provider: StringValuesProvider) -> Predicate:
    def _pred(item, value: str) -> bool:
        actual = set(normalize_slice(provider(item)))
        return all(v in actual for v in _split(value))

    return _pred


def has_only(provider: StringValuesProvider) -> Predicate:
    def _pred(item, value: str) -> bool:
        allowed = set(_split(value))
        return all(normalize_string(v) in allowed for v in provider(item))

    return _pred


# ── matching ────────────────────────────────────────────────────────────


def _noop_log(key: str, value: str) -> None:
    pass


@dataclass(frozen=True)
class MatchOptions:
    """Named matchers plus the keys a caller refuses to honour."""

    matchers: Mapping[str, Predicate] = field(default_factory=dict)
    unsupported: FrozenSet[str] = frozenset()
    log_func: LogFunc = _noop_log

    @classmethod
    def build(
        cls,
        matchers: Optional[Mapping[str, Predicate]] = None,
        unsupported_keys: Iterable[str] = (),
        log_func: Optional[LogFunc] = None,
    ) -> "MatchOptions":
        return cls(
            matchers={normalize_string(k): v for k, v in (matchers or {}).items()},
            unsupported=frozenset(normalize_string(k) for k in unsupported_keys),
            log_func=log_func or _noop_log,
        )

    def merged(self, other: "MatchOptions") -> "MatchOptions":
        """Combine two option sets; *other*'s matchers win on key clashes."""
        matchers = dict(self.matchers)
        matchers.update(other.matchers)
        log_func = other.log_func if other.log_func is not _noop_log else self.log_func
        return MatchOptions(
            matchers=matchers,
            unsupported=self.unsupported | other.unsupported,
            log_func=log_func,
        )


def match(
    item: T,
    filters: Optional[Mapping[str, str]],
    options: Optional[MatchOptions] = None,
) -> bool:
    """Return ``True`` if *item* satisfies every filter in *filters*.

    Keys are normalised; empty keys and keys without a registered matcher
    are skipped.  An *unsupported* key calls ``options.log_func`` and
    fails the match outright.  ``None`` filters match everything.
    """
    if filters is None:
        return True
    opts = options or MatchOptions()

    for key, value in filters.items():
        k = normalize_string(key)
        if not k:
            continue
        if k in opts.unsupported:
            opts.log_func(k, value)
            return False
        matcher = opts.matchers.get(k)
        if matcher is None:
            continue
        if not matcher(item, value):
            return False
    return True


def match_requested_slice(requested: Sequence[str], available: Sequence[str]) -> List[str]:
    """Validate *requested* against *available*, returning normalised values.

    An empty request selects everything available.  Raises
    :class:`InvalidInputError` naming the missing values (sorted), or a
    distinct message when none of them exist.
    """
    available_norm = list(dict.fromkeys(normalize_slice(available)))
    if not requested:
        return available_norm

    available_set = set(available_norm)
    requested_norm: List[str] = []
    missing: List[str] = []
    for value in requested:
        n = normalize_string(value)
        if n in requested_norm:
            continue
        requested_norm.append(n)
        if n not in available_set:
            missing.append(value)

    if not missing:
        return requested_norm
    if len(missing) == len(requested_norm):
        raise InvalidInputError("none of the requested values were found")
    raise InvalidInputError(f"missing values: {', '.join(sorted(missing))}")
