"""Confluent Cloud API integration - HTTP clients, session and models."""

from confluent_ops.integrations.confluent.config import ConfluentConfig
from confluent_ops.integrations.confluent.control_plane import ControlPlaneClient
from confluent_ops.integrations.confluent.data_plane import DataPlaneClient
from confluent_ops.integrations.confluent.exceptions import (
    AuthenticationError,
    ClusterNotReadyError,
    ConfigError,
    ConfluentError,
    DeadlineExceededError,
    DecodeError,
    HttpStatusError,
    InvalidAttributesError,
    NotFoundError,
    ReplacementRequiredError,
    TransportError,
)
from confluent_ops.integrations.confluent.models import (
    Account,
    ApiKey,
    Cluster,
    EndpointAddress,
    Identity,
    KafkaTopic,
    TopicConfigEntry,
    parse_endpoint,
)
from confluent_ops.integrations.confluent.retry import Deadline, RetryPolicy
from confluent_ops.integrations.confluent.session import SessionManager

__all__ = [
    "Account",
    "ApiKey",
    "AuthenticationError",
    "Cluster",
    "ClusterNotReadyError",
    "ConfigError",
    "ConfluentConfig",
    "ConfluentError",
    "ControlPlaneClient",
    "DataPlaneClient",
    "Deadline",
    "DeadlineExceededError",
    "DecodeError",
    "EndpointAddress",
    "HttpStatusError",
    "Identity",
    "InvalidAttributesError",
    "KafkaTopic",
    "NotFoundError",
    "ReplacementRequiredError",
    "RetryPolicy",
    "SessionManager",
    "TopicConfigEntry",
    "TransportError",
    "parse_endpoint",
]
