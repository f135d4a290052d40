"""Main CLI entry point using Typer."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from confluent_ops import __version__
from confluent_ops.cli.commands.api_keys import register_api_key_commands
from confluent_ops.cli.commands.base import Clients
from confluent_ops.cli.commands.clusters import register_cluster_commands
from confluent_ops.cli.commands.topics import register_topic_commands
from confluent_ops.cli.commands.whoami import register_whoami_command
from confluent_ops.logging.config import configure_logging

app = typer.Typer(
    name="confluent-ops",
    help="Inspect Confluent Cloud clusters, topics and API keys.",
    add_completion=True,
    no_args_is_help=True,
)

console = Console()

_clients: Clients | None = None


def get_clients() -> Clients:
    """Return the client bundle of the current invocation."""
    global _clients
    if _clients is None:
        _clients = Clients()
    return _clients


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"confluent-ops version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose output.",
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Enable debug mode.",
    ),
    config: Path | None = typer.Option(
        None,
        "--config",
        help="Config file (default: ~/.config/confluent-ops/config.yaml).",
        envvar="CONFLUENT_OPS_CONFIG",
    ),
) -> None:
    """Confluent Cloud CLI - inspect clusters, topics and API keys."""
    global _clients
    configure_logging(verbose=verbose, debug=debug)
    _clients = Clients(config)
    ctx.call_on_close(_clients.close)


register_whoami_command(app, get_clients)
register_cluster_commands(app, get_clients)
register_topic_commands(app, get_clients)
register_api_key_commands(app, get_clients)


if __name__ == "__main__":
    app()
