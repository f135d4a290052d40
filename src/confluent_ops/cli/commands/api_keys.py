"""CLI commands for cluster API keys."""

from __future__ import annotations

from collections.abc import Callable

import typer

from confluent_ops.cli.commands.base import (
    AccountIdOption,
    ClusterIdOption,
    Clients,
    console,
    handle_confluent_error,
)
from confluent_ops.cli.output import render_rows
from confluent_ops.integrations.confluent.exceptions import ConfluentError

API_KEY_COLUMNS = [
    ("id", "ID"),
    ("key", "Key"),
    ("description", "Description"),
    ("created", "Created"),
]


def register_api_key_commands(app: typer.Typer, get_clients: Callable[[], Clients]) -> None:
    """Register the api-keys command group."""
    api_keys_app = typer.Typer(
        name="api-keys",
        help="Inspect cluster API keys",
        no_args_is_help=True,
    )

    @api_keys_app.command("list")
    def list_api_keys(
        cluster_id: ClusterIdOption,
        account_id: AccountIdOption = None,
    ) -> None:
        """List the API keys of a cluster. Secrets are never shown."""
        clients = get_clients()
        try:
            cluster = clients.control_plane.find_cluster(account_id, cluster_id)
            keys = clients.control_plane.list_api_keys(cluster)
        except ConfluentError as e:
            handle_confluent_error(e)
            return

        if not keys:
            console.print(f"[dim]No API keys for {cluster.name}.[/dim]")
            return
        rows = [key.model_dump(exclude={"secret"}) for key in keys]
        console.print(render_rows(f"API Keys: {cluster.name}", API_KEY_COLUMNS, rows))

    app.add_typer(api_keys_app, name="api-keys")
