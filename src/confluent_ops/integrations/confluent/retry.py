"""Retry policy and deadlines for Confluent Cloud calls.

Only mutating calls are retried. Reads fail fast on the first unexpected
status so that callers observe the remote state as it is.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import TYPE_CHECKING

import structlog
from tenacity import (
    RetryCallState,
    Retrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)
from tenacity.stop import stop_base

from confluent_ops.integrations.confluent.exceptions import (
    AuthenticationError,
    ClusterNotReadyError,
    HttpStatusError,
    TransportError,
)

if TYPE_CHECKING:
    from confluent_ops.integrations.confluent.config import ConfluentConfig

logger = structlog.get_logger()

RetryPredicate = Callable[[BaseException], bool]


class Deadline:
    """Absolute point in (monotonic) time after which a call gives up."""

    def __init__(self, expires_at: float) -> None:
        self.expires_at = expires_at

    @classmethod
    def after(cls, seconds: float) -> Deadline:
        """Create a deadline ``seconds`` from now."""
        return cls(time.monotonic() + seconds)

    def remaining(self) -> float:
        """Seconds left before expiry, never negative."""
        return max(0.0, self.expires_at - time.monotonic())

    @property
    def expired(self) -> bool:
        """Whether the deadline has passed."""
        return self.remaining() <= 0.0

    def cap(self, timeout: float) -> float:
        """Clamp a request timeout to the time remaining."""
        return min(timeout, self.remaining())


class stop_at_deadline(stop_base):  # noqa: N801 - follows tenacity naming
    """Stop retrying once a deadline has expired."""

    def __init__(self, deadline: Deadline | None) -> None:
        self.deadline = deadline

    def __call__(self, retry_state: RetryCallState) -> bool:
        return self.deadline is not None and self.deadline.expired


def is_transient(error: BaseException) -> bool:
    """Default classification: transport failures and 5xx responses."""
    if isinstance(error, AuthenticationError):
        return False
    if isinstance(error, TransportError):
        return True
    if isinstance(error, HttpStatusError):
        return error.status_code >= 500
    return False


def is_cluster_warming_up(error: BaseException) -> bool:
    """Topic creation override.

    A freshly provisioned cluster is listed without an API endpoint, then
    answers topic creation with 400 or drops the connection before sending a
    status line, until it is ready.
    """
    if isinstance(error, (ClusterNotReadyError, TransportError)):
        return True
    if isinstance(error, HttpStatusError):
        return error.status_code in (0, 400)
    return False


class RetryPolicy:
    """Bounded exponential backoff around a single logical call.

    Args:
        max_attempts: Total attempts including the first one.
        backoff_min: Lower bound (and multiplier) of the exponential wait.
        backoff_max: Upper bound of a single wait.
        override: Predicate consulted before the default classification.
        sleep: Sleep function, injectable for tests.
    """

    def __init__(
        self,
        max_attempts: int = 4,
        backoff_min: float = 1.0,
        backoff_max: float = 30.0,
        override: RetryPredicate | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.max_attempts = max_attempts
        self.backoff_min = backoff_min
        self.backoff_max = backoff_max
        self.override = override
        self._sleep = sleep

    @classmethod
    def from_config(cls, config: ConfluentConfig) -> RetryPolicy:
        """Build the default policy from configuration."""
        return cls(
            max_attempts=config.retry_max_attempts,
            backoff_min=config.retry_backoff_min,
            backoff_max=config.retry_backoff_max,
        )

    def with_override(
        self,
        predicate: RetryPredicate,
        max_attempts: int | None = None,
    ) -> RetryPolicy:
        """Return a copy that also retries errors matched by ``predicate``.

        Args:
            predicate: Evaluated before the default classification.
            max_attempts: Optional different attempt budget.

        Returns:
            New retry policy.
        """
        return RetryPolicy(
            max_attempts=max_attempts or self.max_attempts,
            backoff_min=self.backoff_min,
            backoff_max=self.backoff_max,
            override=predicate,
            sleep=self._sleep,
        )

    def is_retryable(self, error: BaseException) -> bool:
        """Classify an error raised by a call."""
        if self.override is not None and self.override(error):
            return True
        return is_transient(error)

    def run[T](
        self,
        operation: Callable[[], T],
        *,
        deadline: Deadline | None = None,
        description: str = "request",
    ) -> T:
        """Run ``operation`` until it succeeds, fails terminally or runs out of budget.

        Args:
            operation: Zero-argument callable performing one attempt.
            deadline: Optional deadline; no retry is scheduled after it expires.
            description: Label used in retry log events.

        Returns:
            The operation's result.

        Raises:
            The last error observed when the budget is exhausted, or the
            first terminal error.
        """
        retrying = Retrying(
            retry=retry_if_exception(self.is_retryable),
            stop=stop_after_attempt(self.max_attempts) | stop_at_deadline(deadline),
            wait=wait_exponential(
                multiplier=self.backoff_min,
                min=self.backoff_min,
                max=self.backoff_max,
            ),
            sleep=self._sleep,
            before_sleep=self._log_retry(description),
            reraise=True,
        )
        return retrying(operation)

    def _log_retry(self, description: str) -> Callable[[RetryCallState], None]:
        def before_sleep(retry_state: RetryCallState) -> None:
            error = retry_state.outcome.exception() if retry_state.outcome else None
            logger.warning(
                "retrying_call",
                call=description,
                attempt=retry_state.attempt_number,
                max_attempts=self.max_attempts,
                wait=retry_state.next_action.sleep if retry_state.next_action else None,
                error=str(error),
            )

        return before_sleep
