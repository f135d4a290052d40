"""Shared utilities for confluent-ops CLI commands.

Provides the console, the lazily-built client bundle and error handling
used by every command group.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Annotated

import typer
from rich.console import Console

from confluent_ops.integrations.confluent.config import ConfluentConfig
from confluent_ops.integrations.confluent.control_plane import ControlPlaneClient
from confluent_ops.integrations.confluent.data_plane import DataPlaneClient
from confluent_ops.integrations.confluent.exceptions import (
    AuthenticationError,
    ConfigError,
    ConfluentError,
    HttpStatusError,
    NotFoundError,
    TransportError,
)
from confluent_ops.integrations.confluent.session import SessionManager

if TYPE_CHECKING:
    from confluent_ops.integrations.confluent.models import Cluster

console = Console()


AccountIdOption = Annotated[
    str | None,
    typer.Option(
        "--account-id",
        "-a",
        help="Account ID (defaults to the account of the logged-in user)",
    ),
]

ClusterIdOption = Annotated[
    str,
    typer.Option(
        "--cluster-id",
        "-c",
        help="Cluster ID (e.g. lkc-abc123)",
    ),
]


class Clients:
    """Session and clients shared by the commands of one invocation.

    Nothing is built, and no credentials are read, until a command asks for
    a client.
    """

    def __init__(self, config_path: Path | None = None) -> None:
        self._config_path = config_path
        self._config: ConfluentConfig | None = None
        self._session: SessionManager | None = None
        self._control_plane: ControlPlaneClient | None = None

    @property
    def config(self) -> ConfluentConfig:
        if self._config is None:
            self._config = ConfluentConfig.load(self._config_path)
        return self._config

    @property
    def session(self) -> SessionManager:
        if self._session is None:
            self._session = SessionManager(self.config)
        return self._session

    @property
    def control_plane(self) -> ControlPlaneClient:
        if self._control_plane is None:
            self._control_plane = ControlPlaneClient(self.config, self.session)
        return self._control_plane

    def data_plane(self, cluster: Cluster) -> DataPlaneClient:
        """Build a data plane client for one cluster; the caller closes it."""
        return DataPlaneClient(self.config, self.session, cluster)

    def close(self) -> None:
        if self._control_plane is not None:
            self._control_plane.close()
        if self._session is not None:
            self._session.close()


def handle_confluent_error(error: ConfluentError) -> None:
    """Print a Confluent error and exit with status 1.

    Raises:
        typer.Exit: Always.
    """
    if isinstance(error, ConfigError):
        console.print("[red]Error:[/red] Configuration problem")
        console.print(f"  {error.message}")
        if error.details:
            console.print(f"  {error.details}")
        console.print(
            f"\n[dim]Hint: Set CONFLUENT_EMAIL and CONFLUENT_PASSWORD or edit "
            f"{ConfluentConfig.get_config_path()}[/dim]"
        )

    elif isinstance(error, AuthenticationError):
        console.print("[red]Error:[/red] Authentication failed")
        console.print(f"  {error.message}")
        if error.status_code:
            console.print(f"  HTTP Status: {error.status_code}")

    elif isinstance(error, TransportError):
        console.print("[red]Error:[/red] Cannot reach Confluent Cloud")
        console.print(f"  {error.message}")
        if error.original_error:
            console.print(f"  Cause: {error.original_error}")

    elif isinstance(error, NotFoundError):
        console.print(f"[red]Error:[/red] {error.resource_type or 'resource'} not found")
        console.print(f"  {error.message}")

    elif isinstance(error, HttpStatusError):
        console.print(f"[red]Error:[/red] {error.message}")
        console.print(f"  HTTP Status: {error.status_code}")
        if error.endpoint:
            console.print(f"  Endpoint: {error.endpoint}")

    else:
        console.print(f"[red]Error:[/red] {error.message}")
        if error.details:
            console.print(f"  {error.details}")

    raise typer.Exit(1)
