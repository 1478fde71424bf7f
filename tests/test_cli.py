"""Tests for the ``mcp-discovery`` command line."""

import json
import os
import tempfile

import pytest

import mcp_discovery
from mcp_discovery.cli import main
from mcp_discovery.constants import SERVER_VERSION

CONFIG = """
registries:
  - id: mozilla-ai
cache:
  enabled: false
"""


@pytest.fixture
def cli_env(restore_logging):
    """Config file plus log file in a scratch directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        config_path = os.path.join(tmpdir, "mcp-discovery.yaml")
        with open(config_path, "w", encoding="utf-8") as f:
            f.write(CONFIG)
        yield ["--config", config_path, "--log-file", os.path.join(tmpdir, "cli.log")]


class TestSearchCommand:
    def test_json_output(self, cli_env, capsys):
        assert main(["search", "time", "--json", *cli_env]) == 0
        data = json.loads(capsys.readouterr().out)
        assert [s["id"] for s in data] == ["time"]
        assert data[0]["installations"]["uvx"]["version"] == "0.6.2"

    def test_filters(self, cli_env, capsys):
        code = main(["search", "*", "--json", "-f", "runtime=npx", "--filter", "isOfficial=true", *cli_env])
        assert code == 0
        ids = {s["id"] for s in json.loads(capsys.readouterr().out)}
        assert ids == {"filesystem", "memory", "github", "everything"}

    def test_table_output(self, cli_env, capsys):
        assert main(["search", "fetch", *cli_env]) == 0
        out = capsys.readouterr().out
        assert "fetch" in out
        assert "1 server(s)" in out

    def test_no_results(self, cli_env, capsys):
        assert main(["search", "zzz-nothing", *cli_env]) == 0
        assert "No servers found" in capsys.readouterr().out

    def test_bad_filter_syntax(self, cli_env):
        with pytest.raises(SystemExit) as exc_info:
            main(["search", "*", "-f", "runtime", *cli_env])
        assert exc_info.value.code == 2


class TestResolveCommand:
    def test_reference_with_runtime_and_version(self, cli_env, capsys):
        assert main(["resolve", "uvx::time@0.6.2", "--json", *cli_env]) == 0
        data = json.loads(capsys.readouterr().out)
        assert data["id"] == "time"
        assert data["source"] == "mozilla-ai"

    def test_details_output(self, cli_env, capsys):
        assert main(["resolve", "filesystem", *cli_env]) == 0
        out = capsys.readouterr().out
        assert "Installations" in out
        assert "ALLOWED_DIR" in out

    def test_not_found_exit_code(self, cli_env, capsys):
        assert main(["resolve", "nope", *cli_env]) == 1
        assert "not found" in capsys.readouterr().err

    def test_version_mismatch(self, cli_env, capsys):
        assert main(["resolve", "time", "--pkg-version", "9.9.9", "--source", "mozilla-ai", *cli_env]) == 1
        assert "does not match" in capsys.readouterr().err


class TestMain:
    def test_no_command(self, capsys):
        assert main([]) == 1
        assert "usage" in capsys.readouterr().out

    def test_bad_config(self, restore_logging, capsys):
        assert main(["search", "x", "--config", "/missing/config.yaml"]) == 1
        assert "does not exist" in capsys.readouterr().err

    def test_version_flag(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])
        assert exc_info.value.code == 0
        assert capsys.readouterr().out.strip() == f"mcp-discovery {mcp_discovery.__version__}"
        assert mcp_discovery.__version__ == SERVER_VERSION
