"""Typer CLI: nodes, exec and prepare commands."""

from __future__ import annotations

import json
from typing import Annotated, Optional

import typer
from rich.console import Console

from .config import Config, ConfigError, NodeConfig, load_config
from .log import setup_logging, verbosity_to_level
from .node import Node
from .output import (
    OutputFormat,
    node_summary,
    print_command_line,
    print_config_error,
    print_human_nodes,
    print_spawn_error,
)
from .remote import SpawnError

app = typer.Typer(
    name="sshnode",
    help="Run commands and prepare workspaces on SSH nodes",
    no_args_is_help=True,
)

ConfigOption = Annotated[
    Optional[str],
    typer.Option("--config", "-c", help="Path to config file"),
]
VerboseOption = Annotated[
    int,
    typer.Option(
        "--verbose",
        "-v",
        count=True,
        help="Increase log verbosity (-v, -vv)",
    ),
]


@app.command()
def nodes(
    config: ConfigOption = None,
    output: Annotated[
        OutputFormat,
        typer.Option("--output", "-o", help="Output format"),
    ] = OutputFormat.HUMAN,
    verbose: VerboseOption = 0,
) -> None:
    """List configured nodes."""
    setup_logging(verbosity_to_level(verbose))
    cfg = _load_config_or_exit(config)
    match output:
        case OutputFormat.JSON:
            data = [node_summary(n) for n in cfg.nodes.values()]
            typer.echo(json.dumps(data, indent=2))
        case OutputFormat.HUMAN:
            print_human_nodes(cfg)


@app.command("exec")
def exec_(
    node: Annotated[str, typer.Argument(help="Node slug")],
    command: Annotated[str, typer.Argument(help="Shell command to run")],
    args: Annotated[
        Optional[list[str]],
        typer.Argument(help="Positional arguments for the command"),
    ] = None,
    cwd: Annotated[
        Optional[str],
        typer.Option("--cwd", help="Remote working directory"),
    ] = None,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", "-n", help="Print the ssh command only"),
    ] = False,
    config: ConfigOption = None,
    verbose: VerboseOption = 0,
) -> None:
    """Run a command on a node."""
    setup_logging(verbosity_to_level(verbose))
    cfg = _load_config_or_exit(config)
    remote = Node.from_config(_get_node_or_exit(cfg, node)).create_command()
    if dry_run:
        print_command_line(["ssh", *remote.build(command, args or [], cwd)])
        return

    options: dict[str, object] = {
        "on_output": lambda chunk: typer.echo(chunk, nl=False),
    }
    if cwd:
        options["cwd"] = cwd
    try:
        remote.run(command, args or [], options)
    except SpawnError as e:
        print_spawn_error(e)
        raise typer.Exit(1)


@app.command()
def prepare(
    node: Annotated[str, typer.Argument(help="Node slug")],
    project: Annotated[str, typer.Argument(help="Project name")],
    config: ConfigOption = None,
    verbose: VerboseOption = 0,
) -> None:
    """Ensure a project workspace can be created on a node."""
    setup_logging(verbosity_to_level(verbose))
    cfg = _load_config_or_exit(config)
    workspace = Node.from_config(_get_node_or_exit(cfg, node)).create_workspace(
        project
    )
    console = Console()
    try:
        with console.status(f"Preparing {workspace.workspace_root}..."):
            existed = workspace.ensure_ready()
    except SpawnError as e:
        print_spawn_error(e)
        raise typer.Exit(1)

    if existed:
        console.print(
            f"[green]✓[/green] {workspace.workspace_root} already exists"
        )
    else:
        console.print(
            f"[green]✓[/green] {workspace.workspace_root} is ready to be"
            " created"
        )


def _load_config_or_exit(config_path: str | None) -> Config:
    """Load config or exit with code 2 on error."""
    try:
        return load_config(config_path)
    except ConfigError as e:
        print_config_error(e)
        raise typer.Exit(2)


def _get_node_or_exit(cfg: Config, slug: str) -> NodeConfig:
    try:
        return cfg.get_node(slug)
    except KeyError as e:
        print_config_error(ConfigError(e.args[0]))
        raise typer.Exit(2)


def main() -> None:
    """Main CLI entry point."""
    app()


if __name__ == "__main__":
    main()
