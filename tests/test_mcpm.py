"""Tests for the mcpm.sh provider adapter."""

import json
import tempfile
from pathlib import Path
from unittest import mock

import httpx
import pytest

from mcp_discovery.errors import FilterMismatchError, InvalidInputError, NotFoundError
from mcp_discovery.packages import Transport, VariableType
from mcp_discovery.providers.mcpm import MCPMBuilder, MCPMRegistry
from mcp_discovery.providers.mcpm.models import MCPServers
from mcp_discovery.registry import BuildOptions, PackageProvider, ResolveOptions
from mcp_discovery.registry.client import HttpFetcher
from mcp_discovery.registry.loader import decode_manifest
from mcp_discovery.runtime import Runtime

DEFAULT_RUNTIMES = frozenset({Runtime.NPX, Runtime.UVX})


@pytest.fixture
def registry(mcpm_manifest) -> MCPMRegistry:
    manifest = decode_manifest(mcpm_manifest, MCPServers, registry="mcpm")
    return MCPMRegistry(manifest, DEFAULT_RUNTIMES)


class TestModels:
    def test_nulls_decode_as_empty(self, mcpm_manifest):
        manifest = decode_manifest(mcpm_manifest, MCPServers, registry="mcpm")
        nulls = manifest["nulls"]
        assert nulls.name == "nulls"
        assert nulls.description == ""
        assert nulls.tools == []
        assert nulls.arguments == {}
        assert nulls.installations["uvx"].env == {}

    def test_null_scalars_read_as_defaults(self):
        record = {
            "name": "sparse",
            "display_name": None,
            "is_official": None,
            "author": {"name": None},
            "repository": {"type": None, "url": None},
            "arguments": {"TOKEN": {"description": None, "required": None, "example": None}},
            "installations": {
                "uvx": {
                    "type": "uvx",
                    "command": "uvx",
                    "args": ["sparse-server"],
                    "description": None,
                    "recommended": None,
                },
            },
            "tools": [{"name": "ping", "description": None, "inputSchema": None}],
        }
        manifest = decode_manifest(json.dumps({"sparse": record}).encode(), MCPServers, registry="mcpm")
        server = manifest["sparse"]
        assert server.is_official is False
        assert server.author.name == ""
        assert server.repository.url == ""
        assert server.arguments["TOKEN"].required is False
        assert server.installations["uvx"].recommended is False
        assert server.tools[0].description == ""

        converted = MCPMRegistry(manifest, DEFAULT_RUNTIMES).resolve("sparse")
        assert converted.installations[Runtime.UVX].package == "sparse-server"

    def test_tool_names_normalised(self, mcpm_manifest):
        manifest = decode_manifest(mcpm_manifest, MCPServers, registry="mcpm")
        assert manifest["time"].tools[0].name == "get_current_time"


class TestConversion:
    def test_is_package_provider(self, registry):
        assert isinstance(registry, PackageProvider)
        assert registry.id() == "mcpm"

    def test_unusable_servers_dropped(self, registry):
        # git-only has no plain package; python-only needs an unsupported runtime
        assert sorted(registry.ids()) == ["multi", "nulls", "obsidian", "time"]
        assert len(registry) == 4

    def test_time_server(self, registry):
        server = registry.resolve("time")
        assert server.id == "time"
        assert server.name == "mcp-server-time"
        assert server.source == "mcpm"
        assert server.display_name == "Time"
        assert server.is_official is True
        assert server.publisher.name == "Anthropic"
        assert server.transports == (Transport.STDIO,)
        assert server.runtimes == [Runtime.UVX]
        assert server.tools.names() == ["get_current_time", "convert_time"]
        assert server.tools[0].input_schema.required == ["timezone"]
        assert server.meta["examples"][0]["prompt"] == "What time is it in Tokyo?"

        inst = server.installations[Runtime.UVX]
        assert inst.package == "mcp-server-time"
        assert inst.recommended is True
        assert inst.repository.url == "https://github.com/modelcontextprotocol/servers"

    def test_time_arguments(self, registry):
        args = registry.resolve("time").arguments
        assert list(args) == ["--local-timezone"]
        assert args["--local-timezone"].variable_type is VariableType.ARG
        assert args["--local-timezone"].description == "Local IANA timezone."
        assert args["--local-timezone"].example == "Europe/London"

    def test_installations_keyed_by_command(self, registry):
        server = registry.resolve("obsidian")
        assert server.runtimes == [Runtime.NPX]
        assert server.name == "obsidian-mcp"

    def test_positional_arguments(self, registry):
        ordered = registry.resolve("obsidian").arguments.ordered()
        assert ordered.names() == ["VAULT", "VAULT2"]
        assert [a.position for a in ordered] == [1, 2]
        assert [a.required for a in ordered] == [True, False]

    def test_name_from_first_runtime_alphabetically(self, registry):
        server = registry.resolve("multi")
        assert server.runtimes == [Runtime.NPX, Runtime.UVX]
        assert server.name == "pkg-node"
        assert server.installations[Runtime.UVX].package == "pkg-py"

    def test_docker_package_is_image(self, mcpm_manifest):
        manifest = decode_manifest(mcpm_manifest, MCPServers, registry="mcpm")
        registry = MCPMRegistry(manifest, frozenset({Runtime.DOCKER}))
        server = registry.resolve("time")
        assert server.runtimes == [Runtime.DOCKER]
        assert server.installations[Runtime.DOCKER].package == "mcp/time"
        assert server.name == "mcp/time"

    def test_extra_runtimes(self, mcpm_manifest):
        manifest = decode_manifest(mcpm_manifest, MCPServers, registry="mcpm")
        registry = MCPMRegistry(manifest, frozenset({Runtime.PYTHON, Runtime.DOCKER}))
        assert sorted(registry.ids()) == ["python-only", "time"]
        assert registry.resolve("python-only").name == "python_only_server"
        assert registry.resolve("time").name == "mcp/time"


class TestResolve:
    def test_name_normalised(self, registry):
        assert registry.resolve("  TIME ").id == "time"

    def test_not_found(self, registry):
        with pytest.raises(NotFoundError) as exc_info:
            registry.resolve("missing")
        assert not isinstance(exc_info.value, FilterMismatchError)
        assert "package 'missing' not found in 'mcpm' registry" in str(exc_info.value)

    def test_filter_mismatch(self, registry):
        with pytest.raises(FilterMismatchError, match="does not match requested filters"):
            registry.resolve("time", ResolveOptions(runtime="npx"))

    def test_runtime_filter(self, registry):
        assert registry.resolve("time", ResolveOptions(runtime="uvx")).id == "time"

    def test_version_dropped_with_warning(self, registry):
        with mock.patch("mcp_discovery.providers.mcpm.registry.logger") as logger:
            server = registry.resolve("time", ResolveOptions(version="9.9.9"))
        assert server.id == "time"
        logger.warning.assert_called_once()
        assert "9.9.9" in logger.warning.call_args.args

    def test_blank_name(self, registry):
        with pytest.raises(InvalidInputError):
            registry.resolve("  ")


class TestSearch:
    def test_wildcard(self, registry):
        assert len(registry.search("*")) == 4

    def test_partial_name(self, registry):
        assert [s.id for s in registry.search("obsid")] == ["obsidian"]

    def test_runtime_filter(self, registry):
        assert sorted(s.id for s in registry.search("*", {"runtime": "npx"})) == ["multi", "obsidian"]

    def test_tags_filter(self, registry):
        assert [s.id for s in registry.search("*", {"tags": "timezone"})] == ["time"]

    def test_version_filter_ignored(self, registry):
        with mock.patch("mcp_discovery.providers.mcpm.registry.logger"):
            assert len(registry.search("*", {"version": "1.0.0"})) == 4

    def test_no_match(self, registry):
        assert registry.search("nothing-like-this") == []


class TestBuilder:
    @pytest.mark.anyio
    async def test_build_from_file(self, read_testdata):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "servers.json"
            path.write_bytes(read_testdata("mcpm_servers.json"))
            builder = MCPMBuilder(path.as_uri())
            registry = await builder.build(BuildOptions(cache_dir=tmpdir))
        assert len(registry) == 4

    @pytest.mark.anyio
    async def test_build_over_http(self, mcpm_manifest):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(str(request.url))
            return httpx.Response(200, content=mcpm_manifest)

        with tempfile.TemporaryDirectory() as tmpdir:
            async with HttpFetcher(transport=httpx.MockTransport(handler)) as fetcher:
                builder = MCPMBuilder(
                    "https://mcpm.example.com/api/servers.json",
                    supported_runtimes=[Runtime.UVX],
                    fetcher=fetcher,
                )
                registry = await builder.build(BuildOptions(cache_dir=tmpdir))

        assert calls == ["https://mcpm.example.com/api/servers.json"]
        assert registry.supported_runtimes == frozenset({Runtime.UVX})
        assert sorted(registry.ids()) == ["multi", "nulls", "time"]

    @pytest.mark.anyio
    async def test_empty_runtimes_rejected(self):
        builder = MCPMBuilder(supported_runtimes=[])
        with pytest.raises(InvalidInputError, match="at least one supported runtime"):
            await builder.build()

    @pytest.mark.anyio
    async def test_blank_url_rejected(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            with pytest.raises(InvalidInputError, match="registry URL"):
                await MCPMBuilder("").build(BuildOptions(cache_dir=tmpdir))
