"""Rich console rendering of resolve/search results.

Runtime colours follow the installer palette:
- **uvx / python**: blue family.
- **npx**: warm family (dark_orange).
- **docker**: purple family (magenta).
"""

from __future__ import annotations

import json
from typing import Iterable, List, Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.text import Text

from mcp_discovery.packages import Server
from mcp_discovery.runtime import Runtime

_RUNTIME_STYLES = {
    Runtime.UVX: "bright_blue",
    Runtime.PYTHON: "cyan",
    Runtime.NPX: "dark_orange",
    Runtime.DOCKER: "magenta",
}


def _runtimes_text(server: Server) -> Text:
    text = Text()
    for i, rt in enumerate(server.runtimes):
        if i:
            text.append(", ")
        inst = server.installations[rt]
        style = _RUNTIME_STYLES.get(rt, "white")
        if inst.deprecated:
            style += " strike"
        text.append(rt.value, style=style)
    return text


def _name_text(server: Server) -> Text:
    text = Text(server.id, style="bold")
    if server.is_official:
        text.append(" ✓", style="bold bright_green")
    if server.deprecated:
        text.append(" (deprecated)", style="dim red")
    return text


def search_table(servers: Iterable[Server], title: Optional[str] = None) -> Table:
    """One row per server: id, source, name, runtimes, tool count, description."""
    table = Table(title=title, show_lines=False, header_style="bold")
    table.add_column("ID", no_wrap=True)
    table.add_column("Source", style="dim")
    table.add_column("Package")
    table.add_column("Runtimes")
    table.add_column("Tools", justify="right")
    table.add_column("Description", overflow="fold")
    for s in servers:
        table.add_row(
            _name_text(s),
            s.source,
            s.name,
            _runtimes_text(s),
            str(len(s.tools)),
            Text(s.description),
        )
    return table


def server_details(server: Server) -> List[Table]:
    """Summary, installation and argument tables for one server."""
    summary = Table.grid(padding=(0, 2))
    summary.add_column(style="bold cyan")
    summary.add_column()
    summary.add_row("ID", _name_text(server))
    summary.add_row("Source", server.source)
    summary.add_row("Name", server.display_name or server.name)
    summary.add_row("Description", Text(server.description))
    if server.license:
        summary.add_row("License", server.license)
    if server.homepage:
        summary.add_row("Homepage", server.homepage)
    if server.publisher.name:
        summary.add_row("Publisher", server.publisher.name)
    summary.add_row("Transports", ", ".join(t.value for t in server.transports))
    if server.tools:
        summary.add_row("Tools", ", ".join(server.tools.names()))

    installs = Table(title="Installations", header_style="bold")
    installs.add_column("Runtime")
    installs.add_column("Package")
    installs.add_column("Version")
    installs.add_column("Command", overflow="fold")
    for rt in server.runtimes:
        inst = server.installations[rt]
        label = Text(rt.value, style=_RUNTIME_STYLES.get(rt, "white"))
        if inst.recommended:
            label.append(" ★", style="yellow")
        installs.add_row(
            label,
            inst.package,
            inst.version or "-",
            " ".join([inst.command, *inst.args]).strip(),
        )

    tables = [summary, installs]
    if server.arguments:
        args = Table(title="Arguments", header_style="bold")
        args.add_column("Name", no_wrap=True)
        args.add_column("Type")
        args.add_column("Required", justify="center")
        args.add_column("Description", overflow="fold")
        for meta in server.arguments.ordered():
            kind = meta.variable_type.value
            if meta.position is not None:
                kind += f" #{meta.position}"
            args.add_row(meta.name, kind, "yes" if meta.required else "", Text(meta.description))
        tables.append(args)
    return tables


def print_servers_json(console: Console, servers: Iterable[Server]) -> None:
    console.print_json(json.dumps([s.to_dict() for s in servers]))


def print_search(console: Console, servers: List[Server], query: str) -> None:
    if not servers:
        console.print(f"[yellow]No servers found matching '{escape(query)}'.[/yellow]")
        return
    title = f"{len(servers)} server(s) matching '{escape(query)}'"
    console.print(search_table(servers, title=title))


def print_server(console: Console, server: Server) -> None:
    for table in server_details(server):
        console.print(table)
