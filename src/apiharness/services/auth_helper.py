"""Token-based authentication for API tests.

State machine:
    ANONYMOUS -> AUTHENTICATING -> AUTHENTICATED
    AUTHENTICATED -> (within refresh margin) -> REFRESHING -> AUTHENTICATED
    AUTHENTICATING / REFRESHING -> ANONYMOUS on failure
"""

import asyncio
from collections.abc import Callable, Mapping
from dataclasses import replace
from datetime import UTC, datetime, timedelta
from typing import Any

import structlog
from pydantic import SecretStr
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt

from apiharness.config.environments import Credentials, EnvironmentConfig
from apiharness.core.exceptions import (
    AuthenticationFailedError,
    ConfigIncompleteError,
    NotAuthenticatedError,
    TransportError,
)
from apiharness.services.api_helper import ApiHelper
from apiharness.services.models import ApiResponse, AuthSession, AuthState

log = structlog.get_logger(__name__)

DEFAULT_EXPIRES_IN = 3600

_TOKEN_KEYS = ("token", "accessToken", "access_token")
_EXPIRES_KEYS = ("expiresIn", "expires_in")
_REFRESH_KEYS = ("refreshToken", "refresh_token")


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _first(data: Mapping[str, Any], keys: tuple[str, ...]) -> Any:
    for key in keys:
        if key in data:
            return data[key]
    return None


class AuthHelper:
    """Login, cache and transparently refresh a bearer token.

    One instance owns one AuthSession; instances are never shared between
    tests. Login and refresh are serialized by an asyncio.Lock so concurrent
    callers of get_auth_headers() wait for an in-flight refresh instead of
    starting another.

    Attributes:
        config: Resolved environment configuration (auth paths, margin,
            login attempts, default credentials).
        api: ApiHelper used as the transport for auth calls.
    """

    def __init__(
        self,
        config: EnvironmentConfig,
        api: ApiHelper,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.config = config
        self.api = api
        self._clock = clock or _utcnow
        self._state = AuthState.ANONYMOUS
        self._session: AuthSession | None = None
        self._credentials: Credentials | None = None
        self._lock = asyncio.Lock()

    @property
    def state(self) -> AuthState:
        return self._state

    @property
    def session(self) -> AuthSession | None:
        return self._session

    @property
    def is_authenticated(self) -> bool:
        return self._session is not None and self._state is AuthState.AUTHENTICATED

    async def login(
        self, credentials: Credentials | Mapping[str, str] | None = None
    ) -> AuthSession:
        """Post credentials to the login endpoint and store the session.

        Args:
            credentials: Credentials or a {"username", "password"} mapping.
                Defaults to the environment's configured credentials.

        Returns:
            The new AuthSession.

        Raises:
            ConfigIncompleteError: If no credentials are given or configured.
            AuthenticationFailedError: If the endpoint rejects the login or
                returns a malformed body.
            TransportError: If the login request gets no response.
        """
        creds = self._coerce_credentials(credentials)

        async with self._lock:
            self._state = AuthState.AUTHENTICATING
            self._session = None
            attempts = self.config.max_login_attempts
            retrying = AsyncRetrying(
                stop=stop_after_attempt(attempts),
                retry=retry_if_exception_type((AuthenticationFailedError, TransportError)),
                before_sleep=lambda state: log.warning(
                    "auth_login_attempt_failed",
                    username=creds.username,
                    attempt=state.attempt_number,
                    max_attempts=attempts,
                    error=str(state.outcome.exception()),
                ),
                reraise=True,
            )

            try:
                async for attempt in retrying:
                    with attempt:
                        session = await self._request_token(
                            self.config.auth_login_path, creds.as_payload(), "login"
                        )
            except (AuthenticationFailedError, TransportError) as e:
                self._reset()
                log.error(
                    "auth_login_failed", username=creds.username, attempts=attempts, error=str(e)
                )
                raise

            self._credentials = creds
            self._activate(session)
            log.info("auth_login_succeeded", username=creds.username, **session.to_log_context())
            return session

    async def get_auth_headers(self) -> dict[str, str]:
        """Return the Authorization header, refreshing first when due.

        Raises:
            NotAuthenticatedError: If no session exists.
            AuthenticationFailedError: If a due refresh is rejected.
            TransportError: If a due refresh gets no response.
        """
        if self._state is AuthState.ANONYMOUS:
            raise NotAuthenticatedError("login() must succeed before auth headers are available")

        if self._session is None or self._needs_refresh(self._session):
            async with self._lock:
                # A refresh or login may have completed while waiting
                if self._session is None:
                    raise NotAuthenticatedError("No session after waiting for login/refresh")
                if self._needs_refresh(self._session):
                    await self._refresh(self._session)

        session = self._session
        if session is None:
            raise NotAuthenticatedError("Session was dropped")
        return {"Authorization": f"Bearer {session.access_token}"}

    def logout(self) -> None:
        """Drop the session."""
        if self._session is not None:
            log.info("auth_logout")
        self._reset()

    def expire_session(self) -> None:
        """Mark the current session as expired so the next use refreshes it."""
        if self._session is None:
            raise NotAuthenticatedError("No session to expire")
        self._session = replace(self._session, expires_at=self._clock())
        log.debug("auth_session_expired")

    def _coerce_credentials(
        self, credentials: Credentials | Mapping[str, str] | None
    ) -> Credentials:
        if credentials is None:
            if self.config.credentials is None:
                raise ConfigIncompleteError(self.config.name, "no credentials configured for login")
            return self.config.credentials
        if isinstance(credentials, Credentials):
            return credentials
        return Credentials(
            username=credentials["username"],
            password=SecretStr(credentials["password"]),
        )

    def _needs_refresh(self, session: AuthSession) -> bool:
        margin = timedelta(seconds=self.config.token_refresh_margin)
        return self._clock() >= session.expires_at - margin

    async def _refresh(self, session: AuthSession) -> None:
        self._state = AuthState.REFRESHING
        log.info("auth_refresh_started", seconds_remaining=session.seconds_remaining(self._clock()))

        try:
            if session.refresh_token:
                new_session = await self._request_token(
                    self.config.auth_refresh_path,
                    {"refreshToken": session.refresh_token},
                    "refresh",
                )
                if new_session.refresh_token is None:
                    new_session = replace(new_session, refresh_token=session.refresh_token)
            elif self._credentials is not None:
                new_session = await self._request_token(
                    self.config.auth_login_path, self._credentials.as_payload(), "refresh"
                )
            else:
                raise AuthenticationFailedError("Session has no refresh token or credentials")
        except (AuthenticationFailedError, TransportError) as e:
            # Never keep a stale token around after a failed refresh
            self._reset()
            log.warning("auth_refresh_failed", error=str(e))
            raise

        self._activate(new_session)
        log.info("auth_refresh_succeeded", **new_session.to_log_context())

    async def _request_token(
        self, path: str, payload: dict[str, str], operation: str
    ) -> AuthSession:
        response = await self.api.post(path, json=payload, authenticate=False)
        if not response.ok:
            raise AuthenticationFailedError(
                f"{operation} rejected by {path}",
                status_code=response.status,
                body=response.data,
            )
        return self._parse_session(response, operation)

    def _parse_session(self, response: ApiResponse[Any], operation: str) -> AuthSession:
        data = response.data

        def malformed(reason: str) -> AuthenticationFailedError:
            return AuthenticationFailedError(
                f"Malformed {operation} response: {reason}",
                status_code=response.status,
                body=data,
            )

        if not isinstance(data, dict):
            raise malformed("body is not a JSON object")

        token = _first(data, _TOKEN_KEYS)
        if not isinstance(token, str) or not token:
            raise malformed("missing access token")

        expires_in = _first(data, _EXPIRES_KEYS)
        if expires_in is None:
            expires_in = DEFAULT_EXPIRES_IN
        if isinstance(expires_in, bool) or not isinstance(expires_in, int | float) or expires_in <= 0:
            raise malformed(f"invalid expiry {expires_in!r}")

        refresh_token = _first(data, _REFRESH_KEYS)
        if refresh_token is not None and not isinstance(refresh_token, str):
            raise malformed("refresh token is not a string")

        now = self._clock()
        return AuthSession(
            access_token=token,
            expires_at=now + timedelta(seconds=expires_in),
            issued_at=now,
            refresh_token=refresh_token or None,
        )

    def _activate(self, session: AuthSession) -> None:
        self._session = session
        self._state = AuthState.AUTHENTICATED

    def _reset(self) -> None:
        self._session = None
        self._state = AuthState.ANONYMOUS
