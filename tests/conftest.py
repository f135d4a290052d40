"""Shared pytest fixtures for confluent_ops tests."""

from __future__ import annotations

import os

import pytest
import typer
from typer.testing import CliRunner

from confluent_ops.cli.main import app


@pytest.fixture
def cli_runner() -> CliRunner:
    """Create a Typer CLI test runner."""
    return CliRunner()


@pytest.fixture
def cli_app() -> typer.Typer:
    """Return the CLI app for testing."""
    return app


@pytest.fixture(autouse=True)
def reset_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep real credentials and endpoints out of every test."""
    for key in list(os.environ.keys()):
        if key.startswith("CONFLUENT_"):
            monkeypatch.delenv(key, raising=False)
