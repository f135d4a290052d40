"""Shared fixtures for Confluent Cloud client tests."""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from typing import Any
from unittest.mock import MagicMock

import pytest
from pydantic import SecretStr

from confluent_ops.integrations.confluent.config import ConfluentConfig
from confluent_ops.integrations.confluent.models import Cluster
from confluent_ops.integrations.confluent.retry import RetryPolicy
from confluent_ops.integrations.confluent.session import SessionManager
from confluent_ops.integrations.confluent.transport import ApiTransport

ACCOUNT_ID = "env-123"
CLUSTER_ID = "lkc-abc123"

IDENTITY_BODY: dict[str, Any] = {
    "user": {"id": 7, "email": "ops@example.com", "organization_id": 42},
    "account": {"id": ACCOUNT_ID, "name": "default", "organization_id": 42},
    "organization": {"id": 42, "name": "Example Org"},
    "accounts": [
        {"id": ACCOUNT_ID, "name": "default", "organization_id": 42},
        {"id": "env-456", "name": "staging", "organization_id": 42},
    ],
}

CLUSTER_BODY: dict[str, Any] = {
    "id": CLUSTER_ID,
    "name": "orders",
    "account_id": ACCOUNT_ID,
    "organization_id": 42,
    "network_ingress": 100,
    "network_egress": 100,
    "storage": 5000,
    "durability": "LOW",
    "status": "UP",
    "endpoint": "SASL_SSL://pkc-1.eu-west-1.aws.confluent.cloud:9092",
    "api_endpoint": "https://pkac-1.eu-west-1.aws.confluent.cloud",
    "region": "eu-west-1",
    "service_provider": "aws",
}

Route = tuple[str, str]
Router = Callable[..., Any]


@pytest.fixture
def confluent_config() -> ConfluentConfig:
    """Create a test config with a fast, bounded retry budget."""
    return ConfluentConfig(
        email="ops@example.com",
        password=SecretStr("hunter2"),
        retry_max_attempts=3,
        retry_backoff_min=0.0,
        retry_backoff_max=0.0,
        topic_create_max_attempts=5,
    )


@pytest.fixture
def no_sleep_policy() -> RetryPolicy:
    """Retry policy that never sleeps."""
    return RetryPolicy(max_attempts=3, backoff_min=0.0, backoff_max=0.0, sleep=lambda _: None)


@pytest.fixture
def cluster() -> Cluster:
    """A provisioned cluster."""
    return Cluster.model_validate(CLUSTER_BODY)


@pytest.fixture
def make_router() -> Callable[[Mapping[Route, Sequence[Any]]], Router]:
    """Build a ``request`` side effect answering per ``(method, endpoint)``.

    Each route holds a sequence of outcomes consumed in order, the last one
    repeating. An outcome that is an exception instance is raised.
    """

    def factory(routes: Mapping[Route, Sequence[Any]]) -> Router:
        cursors: dict[Route, int] = {}

        def side_effect(method: str, endpoint: str, **kwargs: Any) -> Any:
            key = (method, endpoint)
            if key not in routes:
                raise AssertionError(f"Unexpected request {method} {endpoint}")
            outcomes = routes[key]
            index = min(cursors.get(key, 0), len(outcomes) - 1)
            cursors[key] = index + 1
            outcome = outcomes[index]
            if isinstance(outcome, BaseException):
                raise outcome
            return outcome

        return side_effect

    return factory


@pytest.fixture
def session_transport() -> MagicMock:
    """Transport mock for the session bootstrap."""
    return MagicMock(spec=ApiTransport)


@pytest.fixture
def ready_session(
    confluent_config: ConfluentConfig, session_transport: MagicMock
) -> SessionManager:
    """Session manager whose bootstrap answers successfully."""

    def respond(method: str, endpoint: str, **kwargs: Any) -> Any:
        return {
            "/api/sessions": {"token": "session-token"},
            "/api/me": IDENTITY_BODY,
            "/api/access_tokens": {"token": "access-token"},
        }[endpoint]

    session_transport.request.side_effect = respond
    return SessionManager(confluent_config, transport=session_transport)


@pytest.fixture
def identity_body() -> dict[str, Any]:
    """Profile body returned by GET /api/me."""
    return dict(IDENTITY_BODY)


@pytest.fixture
def cluster_body() -> dict[str, Any]:
    """Cluster record as listed by GET /api/clusters."""
    return dict(CLUSTER_BODY)
