"""Tests for the generic filter algebra."""

from dataclasses import dataclass, field
from typing import List
from unittest.mock import MagicMock

import pytest

from mcp_discovery.errors import InvalidInputError
from mcp_discovery.filters import (
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


@dataclass
class Item:
    name: str = ""
    title: str = ""
    flag: bool = False
    values: List[str] = field(default_factory=list)


class TestNormalisation:
    def test_normalize_string(self):
        assert normalize_string("  MiXeD ") == "mixed"

    def test_normalize_slice(self):
        assert normalize_slice([" A", "b "]) == ["a", "b"]

    @pytest.mark.parametrize("value", ["1", "t", "TRUE", " True "])
    def test_parse_bool_true(self, value):
        assert parse_bool(value) is True

    @pytest.mark.parametrize("value", ["0", "f", "False"])
    def test_parse_bool_false(self, value):
        assert parse_bool(value) is False

    @pytest.mark.parametrize("value", ["", "yes", "2"])
    def test_parse_bool_invalid(self, value):
        assert parse_bool(value) is None


class TestPredicates:
    def test_equals(self):
        pred = equals(lambda i: i.name)
        assert pred(Item(name="Time"), " time ")
        assert not pred(Item(name="time"), "tim")

    def test_equals_bool(self):
        pred = equals_bool(lambda i: i.flag)
        assert pred(Item(flag=True), "true")
        assert pred(Item(flag=False), "0")
        assert not pred(Item(flag=True), "false")
        assert not pred(Item(flag=True), "maybe")

    def test_partial(self):
        pred = partial(lambda i: i.name)
        assert pred(Item(name="Apache-2.0"), "apache")
        assert not pred(Item(name="MIT"), "apache")

    def test_partial_all(self):
        pred = partial_all(lambda i: i.values)
        item = Item(values=["Knowledge & Memory", "Dev Tools"])
        assert pred(item, "memory,dev")
        assert not pred(item, "memory,web")

    def test_equals_any(self):
        pred = equals_any(lambda i: i.name, lambda i: i.title)
        item = Item(name="mcp-server-time", title="Time Server")
        assert pred(item, "server-time")
        assert pred(item, "TIME SERVER")
        assert not pred(item, "clock")

    def test_has_any(self):
        pred = has_any(lambda i: i.values)
        assert pred(Item(values=["npx", "uvx"]), "docker,UVX")
        assert not pred(Item(values=["npx"]), "docker,uvx")

    def test_has_all(self):
        pred = has_all(lambda i: i.values)
        item = Item(values=["a", "B", "c"])
        assert pred(item, "a,b")
        assert not pred(item, "a,d")

    def test_has_only(self):
        pred = has_only(lambda i: i.values)
        assert pred(Item(values=["a", "b"]), "a,b,c")
        assert not pred(Item(values=["a", "z"]), "a,b,c")


class TestMatch:
    def _options(self, **kwargs) -> MatchOptions:
        return MatchOptions.build(matchers={"Name": equals(lambda i: i.name)}, **kwargs)

    def test_none_filters_match(self):
        assert match(Item(name="x"), None, self._options())

    def test_empty_filters_match(self):
        assert match(Item(name="x"), {}, self._options())

    def test_registered_key(self):
        opts = self._options()
        assert match(Item(name="x"), {"name": "X"}, opts)
        assert not match(Item(name="x"), {"name": "y"}, opts)

    def test_keys_are_normalised(self):
        assert match(Item(name="x"), {" NAME ": "x"}, self._options())

    def test_unregistered_key_ignored(self):
        assert match(Item(name="x"), {"colour": "red"}, self._options())

    def test_empty_key_ignored(self):
        assert match(Item(name="x"), {"  ": "anything"}, self._options())

    def test_unsupported_key_fails_and_logs(self):
        log_func = MagicMock()
        opts = self._options(unsupported_keys=["Version"], log_func=log_func)
        assert not match(Item(name="x"), {"version": "1.0"}, opts)
        log_func.assert_called_once_with("version", "1.0")

    def test_default_options(self):
        assert match(Item(name="x"), {"name": "y"})

    def test_merged_options(self):
        base = self._options()
        extra = MatchOptions.build(
            matchers={"flag": equals_bool(lambda i: i.flag)},
            unsupported_keys=["tools"],
        )
        merged = base.merged(extra)
        assert set(merged.matchers) == {"name", "flag"}
        assert merged.unsupported == frozenset({"tools"})
        assert match(Item(name="x", flag=True), {"name": "x", "flag": "true"}, merged)
        assert not match(Item(name="x", flag=True), {"tools": "a"}, merged)


class TestMatchRequestedSlice:
    def test_empty_request_returns_available(self):
        assert match_requested_slice([], ["A", "b", "a"]) == ["a", "b"]

    def test_all_found(self):
        assert match_requested_slice(["B", "a"], ["a", "b", "c"]) == ["b", "a"]

    def test_duplicates_collapsed(self):
        assert match_requested_slice(["a", "A "], ["a"]) == ["a"]

    def test_none_found(self):
        with pytest.raises(InvalidInputError, match="none of the requested values were found"):
            match_requested_slice(["x", "y"], ["a"])

    def test_some_missing_sorted(self):
        with pytest.raises(InvalidInputError, match="missing values: x, y"):
            match_requested_slice(["y", "a", "x"], ["a"])
