"""HTTP transport shared by the Confluent Cloud clients."""

from __future__ import annotations

from functools import lru_cache
from typing import Any

import httpx
import structlog
from pydantic import TypeAdapter, ValidationError

from confluent_ops.integrations.confluent.exceptions import (
    DeadlineExceededError,
    DecodeError,
    HttpStatusError,
    NotFoundError,
    TransportError,
)
from confluent_ops.integrations.confluent.retry import Deadline

logger = structlog.get_logger()


def cookie_auth(session_token: str) -> dict[str, str]:
    """Headers authenticating with the session cookie."""
    return {"Cookie": f"auth_token={session_token}"}


def bearer_auth(access_token: str) -> dict[str, str]:
    """Headers authenticating with the bearer access token."""
    return {"Authorization": f"Bearer {access_token}"}


@lru_cache(maxsize=None)
def _adapter(type_: Any) -> TypeAdapter[Any]:
    return TypeAdapter(type_)


def decode[T](type_: type[T], data: Any, endpoint: str) -> T:
    """Validate a response body against its expected type.

    Args:
        type_: Model class or type expression (e.g. ``list[KafkaTopic]``).
        data: Parsed JSON body.
        endpoint: Endpoint the body came from, for the error message.

    Returns:
        The validated value.

    Raises:
        DecodeError: If the body does not match the expected shape.
    """
    try:
        return _adapter(type_).validate_python(data)  # type: ignore[no-any-return]
    except ValidationError as e:
        raise DecodeError(
            f"Unexpected response shape from {endpoint}",
            details=str(e),
        ) from e


class ApiTransport:
    """Sends one HTTP exchange and maps the outcome onto the error taxonomy.

    Retries are not handled here; callers wrap ``request`` in a
    ``RetryPolicy`` when the call is allowed to be retried.

    Args:
        base_url: Base URL all endpoints are relative to.
        timeout: Default per-request timeout in seconds.
        verify_ssl: Whether to verify TLS certificates.
        name: Label bound to log events (e.g. ``control_plane``).
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        verify_ssl: bool = True,
        name: str = "confluent",
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._log = logger.bind(api=name)
        self._client = httpx.Client(
            base_url=self.base_url,
            timeout=httpx.Timeout(timeout),
            verify=verify_ssl,
            headers={
                "Accept": "application/json",
                "Content-Type": "application/json",
            },
        )

    def close(self) -> None:
        """Close the HTTP client."""
        self._client.close()

    def request(
        self,
        method: str,
        endpoint: str,
        *,
        expected_status: int = 200,
        headers: dict[str, str] | None = None,
        json: Any = None,
        params: dict[str, Any] | None = None,
        deadline: Deadline | None = None,
    ) -> Any:
        """Send a request and return the parsed body.

        Args:
            method: HTTP method.
            endpoint: Endpoint relative to the base URL.
            expected_status: The only status treated as success.
            headers: Per-request headers (authentication).
            json: JSON body.
            params: Query parameters.
            deadline: Caps the request timeout; an expired deadline fails
                before anything is sent.

        Returns:
            Parsed JSON body, or an empty dict for an empty body.

        Raises:
            TransportError: On connection failure or timeout.
            NotFoundError: On a 404 response.
            HttpStatusError: On any other unexpected status.
        """
        log = self._log.bind(method=method, endpoint=endpoint)

        kwargs: dict[str, Any] = {}
        if headers:
            kwargs["headers"] = headers
        if json is not None:
            kwargs["json"] = json
        if params:
            kwargs["params"] = params
        if deadline is not None:
            if deadline.expired:
                raise DeadlineExceededError("Deadline exceeded before request", endpoint=endpoint)
            kwargs["timeout"] = deadline.cap(self._timeout)

        try:
            log.debug("api_request")
            response = self._client.request(method, endpoint, **kwargs)
        except httpx.TimeoutException as e:
            log.error("api_timeout", error=str(e))
            raise TransportError(
                f"Request to {endpoint} timed out",
                endpoint=endpoint,
                original_error=e,
            ) from e
        except httpx.TransportError as e:
            log.error("api_connection_error", error=str(e))
            raise TransportError(
                f"Failed to reach {self.base_url}: {e}",
                endpoint=endpoint,
                original_error=e,
            ) from e

        log.debug("api_response", status=response.status_code)
        return self._handle_response(response, endpoint, expected_status)

    @staticmethod
    def _parse_body(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError:
            return {"raw": response.text} if response.text else {}

    def _handle_response(
        self,
        response: httpx.Response,
        endpoint: str,
        expected_status: int,
    ) -> Any:
        body = self._parse_body(response)
        status = response.status_code

        if status == expected_status:
            return body

        message = _error_message(body) or f"Unexpected HTTP status {status}"
        if status == 404:
            raise NotFoundError(message, body=body, endpoint=endpoint)
        raise HttpStatusError(message, status_code=status, body=body, endpoint=endpoint)


def _error_message(body: Any) -> str | None:
    """Extract a human-readable message from an error body."""
    if not isinstance(body, dict):
        return None
    error = body.get("error")
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    if isinstance(error, str) and error:
        return error
    if body.get("message"):
        return str(body["message"])
    return None
