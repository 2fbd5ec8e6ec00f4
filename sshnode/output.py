"""CLI output formatting."""

from __future__ import annotations

import enum
import shlex

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .config import Config, ConfigError, NodeConfig
from .remote import SpawnError
from .remote.resolution import is_private_host, resolve_hostname


class OutputFormat(str, enum.Enum):
    """Output format for CLI commands."""

    HUMAN = "human"
    JSON = "json"


def _network_text(private: bool | None) -> Text:
    match private:
        case None:
            return Text("unresolved", style="red")
        case True:
            return Text("private", style="green")
        case _:
            return Text("public", style="yellow")


def format_endpoint(node: NodeConfig) -> str:
    """Format a node as [user@]host[:port]."""
    endpoint = f"{node.user}@{node.host}" if node.user else node.host
    if node.port is not None:
        endpoint += f":{node.port}"
    return endpoint


def node_summary(node: NodeConfig) -> dict[str, object]:
    return {
        "slug": node.slug,
        "endpoint": format_endpoint(node),
        "hostname": resolve_hostname(node.host),
        "private": is_private_host(node.host),
        "identity_file": node.identity_file,
        "base_dir": node.base_dir,
    }


def print_human_nodes(
    config: Config,
    *,
    console: Console | None = None,
) -> None:
    """Print configured nodes as a table."""
    if console is None:
        console = Console()
    table = Table(title="Nodes")
    table.add_column("Node", style="bold")
    table.add_column("Endpoint")
    table.add_column("Resolves to")
    table.add_column("Network")
    table.add_column("Identity file")
    table.add_column("Base dir")
    for node in config.nodes.values():
        summary = node_summary(node)
        table.add_row(
            node.slug,
            str(summary["endpoint"]),
            str(summary["hostname"]),
            _network_text(summary["private"]),  # type: ignore[arg-type]
            node.identity_file or "",
            node.base_dir,
        )
    console.print(table)


def print_command_line(
    argv: list[str],
    *,
    console: Console | None = None,
) -> None:
    """Print a command line without rich markup interpretation."""
    if console is None:
        console = Console()
    console.print(Text(shlex.join(argv)), soft_wrap=True)


def print_spawn_error(
    e: SpawnError,
    *,
    console: Console | None = None,
) -> None:
    """Print a SpawnError as a Rich panel to stderr."""
    if console is None:
        console = Console(stderr=True)
    body = Text(str(e))
    body.append(f"\n\n{e.command_line}", style="dim")
    console.print(Panel(body, title="Remote command failed", style="red"))


def print_config_error(
    e: ConfigError,
    *,
    console: Console | None = None,
) -> None:
    """Print a ConfigError as a Rich panel to stderr."""
    if console is None:
        console = Console(stderr=True)
    console.print(Panel(Text(str(e)), title="Config error", style="red"))
