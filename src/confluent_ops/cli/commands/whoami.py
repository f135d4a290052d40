"""whoami command: show the authenticated identity."""

from __future__ import annotations

from collections.abc import Callable

import typer

from confluent_ops.cli.commands.base import Clients, console, handle_confluent_error
from confluent_ops.cli.output import render_rows
from confluent_ops.integrations.confluent.exceptions import ConfluentError

ACCOUNT_COLUMNS = [
    ("id", "Account ID"),
    ("name", "Name"),
    ("organization_id", "Organization"),
    ("primary", "Primary"),
]


def register_whoami_command(app: typer.Typer, get_clients: Callable[[], Clients]) -> None:
    """Register the whoami command on the root app."""

    @app.command("whoami")
    def whoami() -> None:
        """Log in and show the user, organization and accounts."""
        try:
            session = get_clients().session
            session.ensure_ready()
            identity = session.identity
        except ConfluentError as e:
            handle_confluent_error(e)
            return

        if identity.user is not None:
            console.print(f"[bold]User:[/bold] {identity.user.email}")
        if identity.organization is not None:
            console.print(
                f"[bold]Organization:[/bold] {identity.organization.name} "
                f"({identity.organization.id})"
            )

        accounts = identity.accounts or [identity.account]
        rows = [
            {**account.model_dump(), "primary": "yes" if account.id == identity.account.id else ""}
            for account in accounts
        ]
        console.print(render_rows("Accounts", ACCOUNT_COLUMNS, rows))
