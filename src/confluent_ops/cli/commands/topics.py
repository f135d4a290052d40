"""CLI commands for Kafka topics."""

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

TOPIC_COLUMNS = [
    ("name", "Name"),
    ("partitions", "Partitions"),
    ("internal", "Internal"),
]


def register_topic_commands(app: typer.Typer, get_clients: Callable[[], Clients]) -> None:
    """Register the topics command group."""
    topics_app = typer.Typer(
        name="topics",
        help="Inspect Kafka topics",
        no_args_is_help=True,
    )

    @topics_app.command("list")
    def list_topics(
        cluster_id: ClusterIdOption,
        account_id: AccountIdOption = None,
    ) -> None:
        """List the topics of a cluster."""
        clients = get_clients()
        try:
            cluster = clients.control_plane.find_cluster(account_id, cluster_id)
            with clients.data_plane(cluster) as data_plane:
                topics = data_plane.list_topics()
        except ConfluentError as e:
            handle_confluent_error(e)
            return

        if not topics:
            console.print(f"[dim]No topics in {cluster.name}.[/dim]")
            return
        rows = [
            {"name": topic.name, "partitions": topic.partition_count, "internal": topic.internal}
            for topic in sorted(topics, key=lambda t: t.name)
        ]
        console.print(render_rows(f"Topics: {cluster.name}", TOPIC_COLUMNS, rows))

    app.add_typer(topics_app, name="topics")
