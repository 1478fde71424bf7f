"""CLI argument parsing and main entry point.

Two subcommands, both building the configured registries first:

* ``mcp-discovery search NAME``  lists every server matching the name and filters.
* ``mcp-discovery resolve REF``  resolves ``[runtime::]name[@version]`` to one server.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os
import sys
from typing import Dict, List, Optional

from rich.console import Console
from rich.markup import escape

from mcp_discovery.config import DiscoveryConfig, load_config
from mcp_discovery.constants import ENV_LOG_LEVEL, ENV_LOG_PATH, SERVER_NAME, SERVER_VERSION
from mcp_discovery.display.console import print_search, print_server, print_servers_json
from mcp_discovery.display.logging_config import setup_logging
from mcp_discovery.errors import DiscoveryBaseError
from mcp_discovery.packages import parse_package_reference
from mcp_discovery.registry import Aggregator, ResolveOptions, SearchOptions
from mcp_discovery.registry.factory import build_registry

module_logger = logging.getLogger(__name__)


def _parse_filters(parser: argparse.ArgumentParser, raw: Optional[List[str]]) -> Dict[str, str]:
    filters: Dict[str, str] = {}
    for item in raw or []:
        key, sep, value = item.partition("=")
        if not sep or not key.strip():
            parser.error(f"invalid filter '{item}' (expected KEY=VALUE)")
        filters[key.strip()] = value.strip()
    return filters


def _configure(args: argparse.Namespace) -> DiscoveryConfig:
    """Load the config, then apply logging with CLI > env > file precedence."""
    config = load_config(args.config)

    level = args.log_level or os.environ.get(ENV_LOG_LEVEL) or config.logging.level
    log_path = args.log_file or os.environ.get(ENV_LOG_PATH) or config.logging.file
    _, level = setup_logging(level, log_path, quiet=False)
    module_logger.debug("%s v%s (log level %s)", SERVER_NAME, SERVER_VERSION, level)

    if args.no_cache or args.refresh_cache:
        cache = config.cache.model_copy(
            update={
                "enabled": config.cache.enabled and not args.no_cache,
                "refresh": config.cache.refresh or args.refresh_cache,
            }
        )
        config = config.model_copy(update={"cache": cache})
    return config


async def _load_registry(args: argparse.Namespace) -> Aggregator:
    return await build_registry(_configure(args))


# ── ``mcp-discovery search`` ────────────────────────────────────────────


def _cmd_search(args: argparse.Namespace, console: Console) -> None:
    filters = _parse_filters(args.parser, args.filter)
    registry = asyncio.run(_load_registry(args))
    servers = registry.search(args.name, filters, SearchOptions(source=args.source))
    if args.json:
        print_servers_json(console, servers)
    else:
        print_search(console, servers, args.name)


# ── ``mcp-discovery resolve`` ───────────────────────────────────────────


def _cmd_resolve(args: argparse.Namespace, console: Console) -> None:
    ref = parse_package_reference(args.reference)
    options = ResolveOptions(
        runtime=args.runtime or ref.runtime,
        version=args.version or ref.version,
        source=args.source,
    )
    registry = asyncio.run(_load_registry(args))
    server = registry.resolve(ref.name, options)
    if args.json:
        console.print_json(json.dumps(server.to_dict()))
    else:
        print_server(console, server)


def _build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser with search/resolve subcommands."""
    parser = argparse.ArgumentParser(
        prog="mcp-discovery",
        description=f"{SERVER_NAME} v{SERVER_VERSION}",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {SERVER_VERSION}",
    )

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--config",
        type=str,
        default=None,
        metavar="PATH",
        help="Path to configuration file (YAML). Default: auto-detect mcp-discovery.yaml",
    )
    common.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["debug", "info", "warning", "error", "critical"],
        help="Logging level (default: from config, else warning)",
    )
    common.add_argument(
        "--log-file",
        type=str,
        default=None,
        metavar="PATH",
        help="Write logs to this file instead of stderr",
    )
    common.add_argument(
        "--no-cache",
        action="store_true",
        default=False,
        help="Do not read or write the manifest cache",
    )
    common.add_argument(
        "--refresh-cache",
        action="store_true",
        default=False,
        help="Refetch registry manifests even if the cache is fresh",
    )
    common.add_argument(
        "--source",
        type=str,
        default=None,
        help="Only consult this registry (e.g. mozilla-ai, mcpm)",
    )
    common.add_argument(
        "--json",
        action="store_true",
        default=False,
        help="Print JSON instead of tables",
    )

    subparsers = parser.add_subparsers(dest="command")

    # ── search ──────────────────────────────────────────────────
    sp_search = subparsers.add_parser(
        "search",
        parents=[common],
        help="Search every registry for servers matching a name",
    )
    sp_search.add_argument("name", help="Name to search for ('*' matches everything)")
    sp_search.add_argument(
        "-f",
        "--filter",
        action="append",
        metavar="KEY=VALUE",
        help="Extra filter, e.g. runtime=uvx or tags=time,utility (repeatable)",
    )
    sp_search.set_defaults(func=_cmd_search, parser=sp_search)

    # ── resolve ─────────────────────────────────────────────────
    sp_resolve = subparsers.add_parser(
        "resolve",
        parents=[common],
        help="Resolve a package reference to a single server",
    )
    sp_resolve.add_argument("reference", help="Package reference: [runtime::]name[@version]")
    sp_resolve.add_argument("--runtime", type=str, default=None, help="Required runtime")
    sp_resolve.add_argument(
        "--pkg-version",
        dest="version",
        type=str,
        default=None,
        help="Required package version",
    )
    sp_resolve.set_defaults(func=_cmd_resolve, parser=sp_resolve)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Program entry point: parse arguments and dispatch to subcommand."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    console = Console()
    try:
        args.func(args, console)
    except DiscoveryBaseError as exc:
        module_logger.debug("Command '%s' failed", args.command, exc_info=True)
        err_console = Console(stderr=True)
        err_console.print(
            f"[bold red]Error:[/bold red] {escape(str(exc))}", highlight=False, soft_wrap=True
        )
        return 1
    except KeyboardInterrupt:
        return 130
    return 0


if __name__ == "__main__":
    sys.exit(main())
