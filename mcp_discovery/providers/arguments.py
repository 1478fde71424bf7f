"""Recover structured argument metadata from installation command lines.

Registries describe the arguments a server accepts in a loose schema
(``name -> description/required/example``) and reference them from an
installation's ``args`` and ``env`` through ``${NAME}`` placeholders.
:class:`ArgumentClassifier` walks one installation and works out how each
argument is actually passed: as an environment variable, a value flag, a
boolean flag or a positional argument.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Mapping, Optional, Sequence, Tuple

from mcp_discovery.packages import PLACEHOLDER_RE, ArgumentMetadata, Arguments, VariableType
from mcp_discovery.runtime import Runtime, RuntimeSpec, spec_for

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SchemaArgument:
    """Registry-declared attributes for a named argument."""

    description: str = ""
    required: bool = False
    example: str = ""


_EMPTY = SchemaArgument()

Schema = Mapping[str, SchemaArgument]


def find_placeholder(value: str) -> Optional[str]:
    """Name of the first ``${NAME}`` placeholder in *value*, if any."""
    m = PLACEHOLDER_RE.search(value)
    return m.group(1) if m else None


def bare_placeholder(value: str) -> Optional[str]:
    """Name of the placeholder when *value* is exactly ``${NAME}``."""
    m = PLACEHOLDER_RE.fullmatch(value)
    return m.group(1) if m else None


class ArgumentClassifier:
    """Classify one installation's ``args`` and ``env`` against *schema*.

    A classifier instance is single use: positional numbering restarts
    only with a new instance.
    """

    def __init__(self, schema: Schema, spec: Optional[RuntimeSpec]) -> None:
        self._schema = schema
        self._spec = spec
        self._result = Arguments()
        self._positional_count = 0

    def classify(
        self,
        args: Sequence[str],
        env: Optional[Mapping[str, str]] = None,
    ) -> Arguments:
        for env_name, env_value in (env or {}).items():
            self._classify_env(env_name, env_value)

        i = 0
        while i < len(args):
            arg = args[i]
            if arg.startswith("--"):
                if self._classify_long_flag(arg, args[i + 1] if i + 1 < len(args) else None):
                    i += 1
            elif arg.startswith("-"):
                self._classify_short_flag(arg)
            else:
                self._classify_positional(arg)
            i += 1
        return self._result

    # ── token handlers ──────────────────────────────────────────────────

    def _classify_env(self, name: str, value: str) -> None:
        meta = _EMPTY
        placeholder = find_placeholder(value)
        if placeholder is not None and placeholder in self._schema:
            meta = self._schema[placeholder]
        if name in self._schema:
            meta = self._schema[name]
        self._store(name, VariableType.ENV, meta)

    def _classify_long_flag(self, arg: str, next_arg: Optional[str]) -> bool:
        """Record a ``--flag``; return ``True`` if *next_arg* was consumed."""
        flag, sep, embedded = arg.partition("=")
        if self._ignored(flag):
            return False

        if sep and embedded:
            self._store_value_flag(flag, embedded)
            return False

        if next_arg is not None and not next_arg.startswith("-"):
            self._store_value_flag(flag, next_arg)
            return True

        self._store(flag, VariableType.ARG_BOOL, self._schema.get(flag, _EMPTY))
        return False

    def _classify_short_flag(self, arg: str) -> None:
        # No look-ahead: short flags are always switches.
        if self._spec is None or self._spec.should_ignore_flag(arg):
            return
        self._store(arg, VariableType.ARG_BOOL, self._schema.get(arg, _EMPTY))

    def _classify_positional(self, arg: str) -> None:
        placeholder = bare_placeholder(arg)
        if placeholder is None or placeholder not in self._schema:
            return
        self._positional_count += 1
        self._store(
            placeholder,
            VariableType.ARG_POSITIONAL,
            self._schema[placeholder],
            position=self._positional_count,
        )

    # ── helpers ─────────────────────────────────────────────────────────

    def _ignored(self, flag: str) -> bool:
        return self._spec is not None and self._spec.should_ignore_flag(flag)

    def _store_value_flag(self, flag: str, value: str) -> None:
        placeholder = find_placeholder(value)
        if placeholder is not None and placeholder in self._schema:
            meta = self._schema[placeholder]
        else:
            meta = self._schema.get(flag, _EMPTY)
        self._store(flag, VariableType.ARG, meta)

    def _store(
        self,
        key: str,
        variable_type: VariableType,
        meta: SchemaArgument,
        position: Optional[int] = None,
    ) -> None:
        self._result[key] = ArgumentMetadata(
            name=key,
            variable_type=variable_type,
            description=meta.description,
            required=meta.required,
            example=meta.example,
            position=position,
        )


# ── public API ──────────────────────────────────────────────────────────


def classify_arguments(
    runtime: Runtime,
    args: Sequence[str],
    env: Optional[Mapping[str, str]],
    schema: Schema,
) -> Arguments:
    """Classify a single installation run under *runtime*."""
    return ArgumentClassifier(schema, spec_for(runtime)).classify(args, env)


InstallationArgs = Tuple[Runtime, Sequence[str], Optional[Mapping[str, str]]]


def merge_installation_arguments(
    installations: Iterable[InstallationArgs],
    schema: Schema,
    supported: Iterable[Runtime],
) -> Arguments:
    """Classify several installations of one server into a single mapping.

    Installations under an unsupported runtime are skipped.  When the same
    key is found in more than one installation the first observation wins.
    """
    supported_set = frozenset(supported)
    merged = Arguments()
    for runtime, args, env in installations:
        if runtime not in supported_set:
            logger.debug("Skipping arguments for unsupported runtime '%s'", runtime.value)
            continue
        for key, meta in classify_arguments(runtime, args, env, schema).items():
            merged.setdefault(key, meta)
    return merged
