"""Tests for recovering argument metadata from installation command lines."""

from mcp_discovery.packages import VariableType
from mcp_discovery.providers.arguments import (
    ArgumentClassifier,
    SchemaArgument,
    bare_placeholder,
    classify_arguments,
    find_placeholder,
    merge_installation_arguments,
)
from mcp_discovery.runtime import Runtime


class TestPlaceholders:
    def test_find_placeholder(self):
        assert find_placeholder("--tz=${TZ}") == "TZ"
        assert find_placeholder("${A}:${B}") == "A"
        assert find_placeholder("plain") is None

    def test_bare_placeholder(self):
        assert bare_placeholder("${VAULT}") == "VAULT"
        assert bare_placeholder("${DIR}:/projects") is None
        assert bare_placeholder("$VAULT") is None


class TestCommandLineScenarios:
    def test_positional_extraction(self):
        schema = {
            "VAULT": SchemaArgument(description="Vault", required=True),
            "VAULT2": SchemaArgument(description="Second vault"),
        }
        args = ["-y", "obsidian-mcp", "${VAULT}", "${VAULT2}"]
        got = classify_arguments(Runtime.NPX, args, None, schema)

        assert set(got) == {"VAULT", "VAULT2"}
        assert got["VAULT"].variable_type is VariableType.ARG_POSITIONAL
        assert got["VAULT"].position == 1
        assert got["VAULT"].required is True
        assert got["VAULT2"].position == 2
        assert got["VAULT2"].required is False

    def test_embedded_value_flag(self):
        schema = {"TZ": SchemaArgument(description="Timezone")}
        got = classify_arguments(Runtime.UVX, ["mcp-server-time", "--local-timezone=${TZ}"], None, schema)

        assert list(got) == ["--local-timezone"]
        meta = got["--local-timezone"]
        assert meta.variable_type is VariableType.ARG
        assert meta.description == "Timezone"
        assert meta.position is None

    def test_look_ahead_value_flag(self):
        schema = {"CFG": SchemaArgument(description="Config file", required=True)}
        got = classify_arguments(Runtime.UVX, ["server", "--config", "${CFG}"], None, schema)

        assert list(got) == ["--config"]
        assert got["--config"].variable_type is VariableType.ARG
        assert got["--config"].required is True

    def test_env_and_flag_both_recorded(self):
        schema = {"DB_URL": SchemaArgument(description="Database URL", required=True)}
        got = classify_arguments(
            Runtime.UVX,
            ["server", "--db=${DB_URL}"],
            {"DB_URL": "${DB_URL}"},
            schema,
        )

        assert set(got) == {"DB_URL", "--db"}
        assert got["DB_URL"].variable_type is VariableType.ENV
        assert got["--db"].variable_type is VariableType.ARG
        assert got["DB_URL"].description == "Database URL"
        assert got["--db"].description == "Database URL"


class TestFlags:
    def test_bool_flag_at_end(self):
        got = classify_arguments(Runtime.UVX, ["srv", "--verbose"], None, {})
        assert got["--verbose"].variable_type is VariableType.ARG_BOOL

    def test_bool_flag_followed_by_flag(self):
        got = classify_arguments(Runtime.UVX, ["srv", "--verbose", "--port", "80"], None, {})
        assert got["--verbose"].variable_type is VariableType.ARG_BOOL
        assert got["--port"].variable_type is VariableType.ARG

    def test_bool_flag_takes_schema_by_name(self):
        schema = {"--ignore-robots-txt": SchemaArgument(description="Ignore robots.txt")}
        got = classify_arguments(Runtime.UVX, ["srv", "--ignore-robots-txt"], None, schema)
        assert got["--ignore-robots-txt"].description == "Ignore robots.txt"

    def test_value_flag_falls_back_to_flag_name(self):
        schema = {"--port": SchemaArgument(description="Listen port", example="8080")}
        got = classify_arguments(Runtime.UVX, ["srv", "--port", "8080"], None, schema)
        assert got["--port"].description == "Listen port"
        assert got["--port"].example == "8080"

    def test_consumed_value_not_positional(self):
        schema = {"CFG": SchemaArgument(required=True)}
        got = classify_arguments(Runtime.UVX, ["--config", "${CFG}", "${CFG}"], None, schema)
        assert got["--config"].variable_type is VariableType.ARG
        # only the trailing bare placeholder counts as positional
        assert got["CFG"].position == 1

    def test_embedded_empty_value_is_bool(self):
        got = classify_arguments(Runtime.UVX, ["srv", "--flag="], None, {})
        assert got["--flag"].variable_type is VariableType.ARG_BOOL

    def test_ignored_long_flags_skipped(self):
        schema = {"DIR": SchemaArgument(required=True)}
        args = ["run", "--rm", "--name", "x", "-v", "${DIR}:/data", "image"]
        got = classify_arguments(Runtime.DOCKER, args, None, schema)
        assert "--rm" not in got
        assert "--name" not in got

    def test_short_flag_not_ignored_by_runtime_recorded(self):
        got = classify_arguments(Runtime.NPX, ["-y", "pkg", "-q"], None, {})
        assert list(got) == ["-q"]
        assert got["-q"].variable_type is VariableType.ARG_BOOL
        assert got["-q"].description == ""

    def test_short_flag_never_takes_a_value(self):
        got = classify_arguments(Runtime.DOCKER, ["run", "-i", "-e", "TOKEN", "img"], None, {})
        assert list(got) == ["-e"]
        assert got["-e"].variable_type is VariableType.ARG_BOOL

    def test_short_flags_skipped_without_runtime(self):
        got = ArgumentClassifier({}, None).classify(["srv", "-q"])
        assert got == {}

    def test_declared_short_flag_recorded(self):
        schema = {"-q": SchemaArgument(description="Quiet")}
        got = classify_arguments(Runtime.UVX, ["srv", "-q"], None, schema)
        assert got["-q"].variable_type is VariableType.ARG_BOOL
        assert got["-q"].description == "Quiet"

    def test_runtime_ignored_short_flag_never_recorded(self):
        schema = {"-y": SchemaArgument(description="Yes")}
        got = classify_arguments(Runtime.NPX, ["-y", "pkg"], None, schema)
        assert got == {}

    def test_no_spec_ignores_nothing(self):
        got = ArgumentClassifier({}, None).classify(["srv", "--rm"])
        assert "--rm" in got

    def test_unknown_positional_placeholder_skipped(self):
        got = classify_arguments(Runtime.UVX, ["srv", "${UNKNOWN}"], None, {})
        assert got == {}


class TestEnvironment:
    def test_env_without_schema(self):
        got = classify_arguments(Runtime.NPX, [], {"API_KEY": "literal"}, {})
        assert got["API_KEY"].variable_type is VariableType.ENV
        assert got["API_KEY"].description == ""

    def test_env_value_placeholder_lookup(self):
        schema = {"TOKEN": SchemaArgument(description="Token", required=True)}
        got = classify_arguments(Runtime.NPX, [], {"GITHUB_TOKEN": "Bearer ${TOKEN}"}, schema)
        assert got["GITHUB_TOKEN"].description == "Token"
        assert got["GITHUB_TOKEN"].required is True

    def test_env_name_wins_over_placeholder(self):
        schema = {
            "TOKEN": SchemaArgument(description="From placeholder"),
            "GITHUB_TOKEN": SchemaArgument(description="From name", required=True),
        }
        got = classify_arguments(Runtime.NPX, [], {"GITHUB_TOKEN": "${TOKEN}"}, schema)
        assert got["GITHUB_TOKEN"].description == "From name"
        assert got["GITHUB_TOKEN"].required is True


class TestMerge:
    def test_first_observation_wins(self):
        schema = {"DIR": SchemaArgument(description="Directory", required=True)}
        installs = [
            (Runtime.NPX, ["-y", "pkg", "${DIR}"], None),
            (Runtime.UVX, ["pkg", "--dir", "${DIR}", "${DIR}"], None),
        ]
        got = merge_installation_arguments(installs, schema, {Runtime.NPX, Runtime.UVX})
        assert got["DIR"].variable_type is VariableType.ARG_POSITIONAL
        assert got["DIR"].position == 1
        assert got["--dir"].variable_type is VariableType.ARG

    def test_unsupported_runtime_skipped(self):
        installs = [
            (Runtime.DOCKER, ["run", "--network", "host", "img", "--debug"], {"TOKEN": "x"}),
            (Runtime.UVX, ["pkg"], None),
        ]
        got = merge_installation_arguments(installs, {}, {Runtime.UVX})
        assert got == {}

    def test_positions_restart_per_installation(self):
        schema = {"A": SchemaArgument(), "B": SchemaArgument()}
        installs = [
            (Runtime.UVX, ["pkg", "${A}"], None),
            (Runtime.NPX, ["pkg", "${B}"], None),
        ]
        got = merge_installation_arguments(installs, schema, {Runtime.NPX, Runtime.UVX})
        assert got["A"].position == 1
        assert got["B"].position == 1
