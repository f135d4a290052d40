"""Confluent Cloud API exceptions."""

from __future__ import annotations

from typing import Any


class ConfluentError(Exception):
    """Base exception for Confluent Cloud errors."""

    def __init__(self, message: str, details: str | None = None) -> None:
        """Initialize exception.

        Args:
            message: Error message.
            details: Additional details.
        """
        super().__init__(message)
        self.message = message
        self.details = details


class ConfigError(ConfluentError):
    """Raised when configuration is invalid or missing."""


class TransportError(ConfluentError):
    """Raised when a request fails before an HTTP status line is received.

    This includes connection refusals, DNS resolution failures and timeouts.
    """

    def __init__(
        self,
        message: str,
        endpoint: str | None = None,
        original_error: Exception | None = None,
    ) -> None:
        """Initialize TransportError.

        Args:
            message: Human-readable error message.
            endpoint: The endpoint that was attempted.
            original_error: The underlying httpx exception.
        """
        super().__init__(message, details=str(original_error) if original_error else None)
        self.endpoint = endpoint
        self.original_error = original_error

    @property
    def status_code(self) -> int:
        """Transport failures carry no HTTP status."""
        return 0


class DeadlineExceededError(TransportError):
    """Raised when a call's deadline expires before a request can be sent."""


class HttpStatusError(ConfluentError):
    """Raised when the API answers with an unexpected status code.

    Attributes:
        status_code: HTTP status code returned by the API.
        body: Parsed response body (or raw text under ``"raw"``).
        endpoint: The endpoint that was called.
    """

    def __init__(
        self,
        message: str,
        status_code: int,
        body: dict[str, Any] | list[Any] | None = None,
        endpoint: str | None = None,
    ) -> None:
        """Initialize HttpStatusError.

        Args:
            message: Human-readable error message.
            status_code: HTTP status code.
            body: Response body.
            endpoint: The endpoint that was called.
        """
        super().__init__(message)
        self.status_code = status_code
        self.body = body
        self.endpoint = endpoint

    def __str__(self) -> str:
        """Return string representation of the error."""
        parts = [self.message, f"(status: {self.status_code})"]
        if self.endpoint:
            parts.append(f"[endpoint: {self.endpoint}]")
        return " ".join(parts)


class NotFoundError(HttpStatusError):
    """Raised when a requested resource does not exist.

    Reconcilers turn this into an absent result rather than a failure.
    """

    def __init__(
        self,
        message: str = "Resource not found",
        resource_type: str | None = None,
        resource_id: str | None = None,
        body: dict[str, Any] | list[Any] | None = None,
        endpoint: str | None = None,
    ) -> None:
        """Initialize NotFoundError.

        Args:
            message: Human-readable error message.
            resource_type: Type of resource (e.g., "cluster", "topic").
            resource_id: ID or name of the resource.
            body: Response body.
            endpoint: The endpoint that was called.
        """
        if resource_type and resource_id:
            message = f"{resource_type} '{resource_id}' not found"
        super().__init__(message, status_code=404, body=body, endpoint=endpoint)
        self.resource_type = resource_type
        self.resource_id = resource_id


class ClusterNotReadyError(ConfluentError):
    """Raised when a cluster has no Kafka REST endpoint yet.

    A cluster that is still provisioning is listed before its
    ``api_endpoint`` is assigned.
    """

    def __init__(self, cluster_id: str) -> None:
        """Initialize ClusterNotReadyError.

        Args:
            cluster_id: ID of the cluster without an endpoint.
        """
        super().__init__(
            f"Cluster '{cluster_id}' has no API endpoint",
            details="The cluster may still be provisioning",
        )
        self.cluster_id = cluster_id


class DecodeError(ConfluentError):
    """Raised when a response body does not match the expected schema."""


class AuthenticationError(ConfluentError):
    """Raised when login or access-token minting is rejected.

    Never retried.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        details: str | None = None,
    ) -> None:
        """Initialize AuthenticationError.

        Args:
            message: Human-readable error message.
            status_code: HTTP status code, when the API answered.
            details: Additional details.
        """
        super().__init__(message, details)
        self.status_code = status_code


class ReplacementRequiredError(ConfluentError):
    """Raised when an update touches a field that can only change by recreation."""

    def __init__(self, resource_type: str, fields: list[str]) -> None:
        """Initialize ReplacementRequiredError.

        Args:
            resource_type: Resource kind being updated.
            fields: Immutable attributes whose values changed.
        """
        super().__init__(
            f"{resource_type} cannot be updated in place",
            details=f"Changed immutable attributes: {', '.join(fields)}",
        )
        self.resource_type = resource_type
        self.fields = fields


class InvalidAttributesError(ConfluentError):
    """Raised when desired-state attributes fail validation."""
