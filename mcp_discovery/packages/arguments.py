"""Argument metadata recovered from installation command lines."""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

# ``${IDENTIFIER}`` placeholder inside an argument or env value.
PLACEHOLDER_RE = re.compile(r"\$\{(\w+)\}")


class VariableType(str, Enum):
    ENV = "environment"
    ARG = "argument"
    ARG_BOOL = "argument_bool"
    ARG_POSITIONAL = "positional_argument"


@dataclass(frozen=True)
class ArgumentMetadata:
    name: str
    variable_type: VariableType
    description: str = ""
    required: bool = False
    example: str = ""
    # 1-based; set only for positional arguments
    position: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "name": self.name,
            "type": self.variable_type.value,
            "description": self.description,
            "required": self.required,
        }
        if self.example:
            data["example"] = self.example
        if self.position is not None:
            data["position"] = self.position
        return data


ArgumentPredicate = Callable[[str, ArgumentMetadata], bool]


class OrderedArguments(List[ArgumentMetadata]):
    def names(self) -> List[str]:
        return [arg.name for arg in self]


class Arguments(Dict[str, ArgumentMetadata]):
    """Mapping of argument name → :class:`ArgumentMetadata`."""

    def filter_by(self, *predicates: ArgumentPredicate) -> "Arguments":
        """Return the entries satisfying every predicate."""
        return Arguments(
            (name, meta)
            for name, meta in self.items()
            if all(p(name, meta) for p in predicates)
        )

    def names(self) -> List[str]:
        return list(self)

    def ordered(self) -> OrderedArguments:
        """Positional arguments by position, then the rest by name (case-insensitive)."""
        positional: List[ArgumentMetadata] = []
        others: List[ArgumentMetadata] = []
        for name, meta in self.items():
            meta = replace(meta, name=name)
            if meta.variable_type is VariableType.ARG_POSITIONAL and meta.position is not None:
                positional.append(meta)
            else:
                others.append(meta)
        positional.sort(key=lambda m: m.position)
        others.sort(key=lambda m: m.name.lower())
        return OrderedArguments(positional + others)


# ── predicates ───────────────────────────────────────────────────────────


def required(_: str, meta: ArgumentMetadata) -> bool:
    return meta.required


def env_var(_: str, meta: ArgumentMetadata) -> bool:
    return meta.variable_type is VariableType.ENV


def value_argument(_: str, meta: ArgumentMetadata) -> bool:
    return meta.variable_type is VariableType.ARG


def bool_argument(_: str, meta: ArgumentMetadata) -> bool:
    return meta.variable_type is VariableType.ARG_BOOL


def positional_argument(_: str, meta: ArgumentMetadata) -> bool:
    return meta.variable_type is VariableType.ARG_POSITIONAL


def argument(name: str, meta: ArgumentMetadata) -> bool:
    """Any command-line argument (value, bool or positional)."""
    return value_argument(name, meta) or bool_argument(name, meta) or positional_argument(name, meta)


def non_positional_argument(name: str, meta: ArgumentMetadata) -> bool:
    return not positional_argument(name, meta) and not env_var(name, meta)


def value_accepting_argument(_: str, meta: ArgumentMetadata) -> bool:
    return meta.variable_type in (VariableType.ARG, VariableType.ARG_POSITIONAL)
