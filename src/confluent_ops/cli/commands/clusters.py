"""CLI commands for Kafka clusters.

- list: List the clusters of an account
- show: Show one cluster, looked up by name
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Annotated

import typer

from confluent_ops.cli.commands.base import (
    AccountIdOption,
    Clients,
    console,
    handle_confluent_error,
)
from confluent_ops.cli.output import Table, render_rows
from confluent_ops.integrations.confluent.exceptions import ConfluentError
from confluent_ops.services.confluent.lookups import ClusterLookup

CLUSTER_COLUMNS = [
    ("name", "Name"),
    ("id", "ID"),
    ("service_provider", "Provider"),
    ("region", "Region"),
    ("durability", "Durability"),
    ("status", "Status"),
]


def register_cluster_commands(app: typer.Typer, get_clients: Callable[[], Clients]) -> None:
    """Register the clusters command group."""
    clusters_app = typer.Typer(
        name="clusters",
        help="Inspect Kafka clusters",
        no_args_is_help=True,
    )

    @clusters_app.command("list")
    def list_clusters(account_id: AccountIdOption = None) -> None:
        """List the clusters of an account."""
        try:
            clusters = get_clients().control_plane.list_clusters(account_id)
        except ConfluentError as e:
            handle_confluent_error(e)
            return

        if not clusters:
            console.print("[dim]No clusters found.[/dim]")
            return
        rows = [cluster.model_dump() for cluster in clusters]
        console.print(render_rows("Kafka Clusters", CLUSTER_COLUMNS, rows))

    @clusters_app.command("show")
    def show_cluster(
        name: Annotated[str, typer.Argument(help="Cluster name")],
        account_id: AccountIdOption = None,
    ) -> None:
        """Show a cluster and its endpoints."""
        clients = get_clients()
        try:
            state = ClusterLookup(clients.session, clients.control_plane).read(
                {"name": name, "account_id": account_id}
            )
        except ConfluentError as e:
            handle_confluent_error(e)
            return

        if state is None:
            console.print(f"[red]Error:[/red] cluster '{name}' not found")
            raise typer.Exit(1)

        table = Table(title=f"Cluster: {name}", show_header=False)
        table.add_column("Field", style="cyan", no_wrap=True)
        table.add_column("Value")
        for key, value in state.items():
            table.add_row(key, "" if value is None else str(value))
        console.print(table)

    app.add_typer(clusters_app, name="clusters")
