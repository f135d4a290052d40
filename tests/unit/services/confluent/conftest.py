"""Shared fixtures for Confluent reconciler tests."""

from __future__ import annotations

from typing import Any
from unittest.mock import MagicMock

import pytest

from confluent_ops.integrations.confluent.models import Cluster

ACCOUNT_ID = "env-123"


@pytest.fixture
def mock_session() -> MagicMock:
    """Session mock whose primary account is env-123."""
    session = MagicMock()
    session.resolve_account_id.side_effect = lambda account_id=None: account_id or ACCOUNT_ID
    return session


@pytest.fixture
def mock_control_plane() -> MagicMock:
    """Create a mock ControlPlaneClient."""
    return MagicMock()


@pytest.fixture
def cluster_body() -> dict[str, Any]:
    return {
        "id": "lkc-abc123",
        "name": "orders",
        "account_id": ACCOUNT_ID,
        "organization_id": 42,
        "durability": "LOW",
        "status": "UP",
        "endpoint": "SASL_SSL://pkc-1.eu-west-1.aws.confluent.cloud:9092",
        "api_endpoint": "https://pkac-1.eu-west-1.aws.confluent.cloud",
        "region": "eu-west-1",
        "service_provider": "aws",
    }


@pytest.fixture
def cluster(cluster_body: dict[str, Any]) -> Cluster:
    return Cluster.model_validate(cluster_body)
