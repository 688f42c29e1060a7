"""Value objects returned by the API and auth helpers."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Generic, TypeVar

import httpx

T = TypeVar("T")


@dataclass(frozen=True)
class ApiResponse(Generic[T]):
    """Immutable snapshot of one HTTP exchange.

    Attributes:
        status: HTTP status code.
        headers: Copy of the response headers (case-insensitive lookup).
            Taken at construction, so changes to the source headers are
            not seen here.
        data: Decoded body, typed as T when a model was requested.
        raw: Undecoded body bytes.
        elapsed_ms: Wall-clock time of the exchange in milliseconds.
        method: Request method.
        url: Absolute request URL.
    """

    status: int
    headers: httpx.Headers
    data: T
    raw: bytes
    elapsed_ms: float
    method: str
    url: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "headers", httpx.Headers(self.headers))

    @property
    def ok(self) -> bool:
        """True for 2xx responses."""
        return 200 <= self.status < 300

    @property
    def text(self) -> str:
        return self.raw.decode("utf-8", errors="replace")

    @property
    def content_type(self) -> str | None:
        return self.headers.get("content-type")


class AuthState(Enum):
    """Auth helper states."""

    ANONYMOUS = "anonymous"
    AUTHENTICATING = "authenticating"
    AUTHENTICATED = "authenticated"
    REFRESHING = "refreshing"


@dataclass(frozen=True)
class AuthSession:
    """Issued credentials for one Auth Helper.

    Attributes:
        access_token: Bearer token sent in the Authorization header.
        expires_at: Aware UTC timestamp after which the token is invalid.
        issued_at: When the token was received.
        refresh_token: Token for the refresh endpoint, if the server issued one.
    """

    access_token: str
    expires_at: datetime
    issued_at: datetime
    refresh_token: str | None = None

    def seconds_remaining(self, now: datetime) -> float:
        return (self.expires_at - now).total_seconds()

    def to_log_context(self) -> dict[str, Any]:
        """Loggable fields (never the tokens themselves)."""
        return {
            "expires_at": self.expires_at.isoformat(),
            "has_refresh_token": self.refresh_token is not None,
        }
