"""Session bootstrap for Confluent Cloud.

Authentication happens in three steps, each producing a credential artifact
that is cached for the lifetime of the manager:

1. ``POST /api/sessions`` exchanges email/password for a session token.
2. ``GET /api/me`` (session cookie) loads the identity: user, organization
   and accounts.
3. ``POST /api/access_tokens`` (session cookie) mints the bearer token used
   for mutations and for every data plane call.
"""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING

import structlog

from confluent_ops.integrations.confluent.exceptions import (
    AuthenticationError,
    ConfluentError,
    HttpStatusError,
)
from confluent_ops.integrations.confluent.models import (
    AccessTokenResponse,
    Account,
    Identity,
    LoginRequest,
    SessionResponse,
)
from confluent_ops.integrations.confluent.transport import ApiTransport, cookie_auth, decode

if TYPE_CHECKING:
    from confluent_ops.integrations.confluent.config import ConfluentConfig
    from confluent_ops.integrations.confluent.retry import Deadline

logger = structlog.get_logger()

_REJECTED_LOGIN_STATUSES = frozenset({400, 401, 403})


class SessionManager:
    """Owns the cached credential triple (session token, identity, access token).

    ``ensure_ready`` runs the bootstrap under a single lock so concurrent
    callers never log in twice. Steps that already succeeded are skipped on
    the next call, so a failure half-way only repeats the remaining steps.

    Example:
        ```python
        config = ConfluentConfig.load()
        session = SessionManager(config)
        session.ensure_ready()
        print(session.identity.account.name)
        ```
    """

    def __init__(self, config: ConfluentConfig, transport: ApiTransport | None = None) -> None:
        """Initialize the session manager.

        Args:
            config: Credentials and control plane URL.
            transport: Transport to the control plane; created from config if omitted.
        """
        self.config = config
        self._transport = transport or ApiTransport(
            config.api_url,
            timeout=config.timeout,
            verify_ssl=config.verify_ssl,
            name="session",
        )
        self._lock = threading.Lock()
        self._session_token: str | None = None
        self._identity: Identity | None = None
        self._access_token: str | None = None

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self._transport.close()

    @property
    def is_ready(self) -> bool:
        """Whether all three credential artifacts are cached."""
        return (
            self._session_token is not None
            and self._identity is not None
            and self._access_token is not None
        )

    @property
    def session_token(self) -> str:
        """Cookie-scoped session token."""
        if self._session_token is None:
            raise ConfluentError("Session not established", details="Call ensure_ready() first")
        return self._session_token

    @property
    def identity(self) -> Identity:
        """Profile of the authenticated user."""
        if self._identity is None:
            raise ConfluentError("Identity not loaded", details="Call ensure_ready() first")
        return self._identity

    @property
    def access_token(self) -> str:
        """Bearer token for mutations and data plane calls."""
        if self._access_token is None:
            raise ConfluentError("Access token not minted", details="Call ensure_ready() first")
        return self._access_token

    @property
    def primary_account_id(self) -> str:
        """ID of the account owning the authenticated user."""
        return self.identity.account.id

    def ensure_ready(self, deadline: Deadline | None = None) -> None:
        """Make sure all credential artifacts are available.

        Returns immediately, without network I/O, when everything is cached.

        Args:
            deadline: Optional deadline for the bootstrap requests.

        Raises:
            AuthenticationError: If login or token minting is rejected.
            TransportError: If the control plane cannot be reached.
            HttpStatusError: If the profile request fails.
        """
        if self.is_ready:
            return
        with self._lock:
            if self.is_ready:
                return
            logger.info("bootstrapping_session", api_url=self.config.api_url)
            if self._session_token is None:
                self._session_token = self._login(deadline)
            if self._identity is None:
                self._identity = self._fetch_identity(self._session_token, deadline)
            if self._access_token is None:
                self._access_token = self._mint_access_token(self._session_token, deadline)
            logger.info(
                "session_ready",
                account_id=self._identity.account.id,
                accounts=len(self._identity.accounts),
            )

    def invalidate(self) -> None:
        """Drop every cached artifact; the next ``ensure_ready`` logs in again."""
        with self._lock:
            self._session_token = None
            self._identity = None
            self._access_token = None
        logger.info("session_invalidated")

    def resolve_account_id(self, account_id: str | None = None) -> str:
        """Return ``account_id`` or, when omitted, the primary account ID."""
        if account_id:
            return account_id
        self.ensure_ready()
        return self.primary_account_id

    def find_account(self, name: str | None = None) -> Account | None:
        """Find an account by name, or the primary account when ``name`` is None."""
        self.ensure_ready()
        if name is None:
            return self.identity.account
        return self.identity.find_account(name)

    def _login(self, deadline: Deadline | None) -> str:
        endpoint = "/api/sessions"
        request = LoginRequest(
            email=self.config.email,
            password=self.config.password.get_secret_value(),
        )
        try:
            body = self._transport.request(
                "POST", endpoint, json=request.to_payload(), deadline=deadline
            )
        except HttpStatusError as e:
            if e.status_code in _REJECTED_LOGIN_STATUSES:
                raise AuthenticationError(
                    "Login rejected",
                    status_code=e.status_code,
                    details="Check the configured email and password",
                ) from e
            raise

        session = decode(SessionResponse, body, endpoint)
        if session.error or not session.token:
            raise AuthenticationError("Login rejected", details=str(session.error or "empty token"))
        logger.debug("session_token_obtained", email=self.config.email)
        return session.token

    def _fetch_identity(self, session_token: str, deadline: Deadline | None) -> Identity:
        endpoint = "/api/me"
        try:
            body = self._transport.request(
                "GET", endpoint, headers=cookie_auth(session_token), deadline=deadline
            )
        except HttpStatusError as e:
            if e.status_code == 401:
                self._session_token = None
            raise

        identity = decode(Identity, body, endpoint)
        logger.debug("identity_loaded", account_id=identity.account.id)
        return identity

    def _mint_access_token(self, session_token: str, deadline: Deadline | None) -> str:
        endpoint = "/api/access_tokens"
        try:
            body = self._transport.request(
                "POST",
                endpoint,
                headers=cookie_auth(session_token),
                json={},
                deadline=deadline,
            )
        except HttpStatusError as e:
            if e.status_code == 401:
                self._session_token = None
            raise AuthenticationError(
                "Access token request rejected",
                status_code=e.status_code,
                details=str(e),
            ) from e

        token = decode(AccessTokenResponse, body, endpoint)
        if token.error or not token.token:
            raise AuthenticationError(
                "Access token request rejected",
                details=str(token.error or "empty token"),
            )
        logger.debug("access_token_minted")
        return token.token
