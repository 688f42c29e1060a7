"""apiharness exception hierarchy.

This module defines the base exception class and specialized exceptions
for configuration, transport, authentication and validation failures.
"""

from typing import Any


class ApiHarnessError(Exception):
    """Base exception for all apiharness errors.

    All custom exceptions in apiharness inherit from this class so that a
    test suite can catch every helper-layer failure in one place.
    """

    pass


class ConfigurationError(ApiHarnessError):
    """Raised when an environment configuration cannot be produced."""

    pass


class ConfigNotFoundError(ConfigurationError):
    """Raised when an environment name is not one of the recognized names.

    Attributes:
        environment: The requested environment name.
        available: Names that would have been accepted.

    Example:
        raise ConfigNotFoundError("qa", available=["local", "staging"])
    """

    def __init__(self, environment: str, available: list[str] | None = None) -> None:
        self.environment = environment
        self.available = available or []
        message = f"Unknown environment: {environment!r}"
        if self.available:
            message += f" (available: {', '.join(self.available)})"
        super().__init__(message)


class ConfigIncompleteError(ConfigurationError):
    """Raised when a recognized environment is missing a required value.

    Example:
        raise ConfigIncompleteError("staging", "missing STAGING_BASE_URL or BASE_URL")
    """

    def __init__(self, environment: str, reason: str) -> None:
        self.environment = environment
        self.reason = reason
        super().__init__(f"Incomplete configuration for {environment!r}: {reason}")


class TransportError(ApiHarnessError):
    """Raised when a request never produced an HTTP response.

    Distinct from a non-2xx response, which is returned to the caller.

    Attributes:
        kind: "timeout" or "network".
        method: HTTP method of the failed request.
        url: Target URL of the failed request.
    """

    TIMEOUT = "timeout"
    NETWORK = "network"

    def __init__(self, kind: str, method: str, url: str, message: str) -> None:
        self.kind = kind
        self.method = method
        self.url = url
        super().__init__(f"{kind} error on {method} {url}: {message}")


class AuthError(ApiHarnessError):
    """Base class for authentication flow errors."""

    pass


class AuthenticationFailedError(AuthError):
    """Raised when login or token refresh is rejected or unusable.

    Attributes:
        status_code: HTTP status of the auth response, None if no response.
        body: Decoded response body for diagnostics.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        body: Any = None,
    ) -> None:
        self.status_code = status_code
        self.body = body
        if status_code is not None:
            message = f"{message} (status {status_code})"
        super().__init__(message)


class NotAuthenticatedError(AuthError):
    """Raised when auth headers are requested before a successful login."""

    pass


class ValidationFailedError(ApiHarnessError, AssertionError):
    """Raised when a response does not match the expected contract.

    Subclasses AssertionError so pytest reports it as a failed assertion.

    Attributes:
        expected: What the check expected.
        actual: What the response contained.
        failures: Individual failure descriptions, when several were found.

    Example:
        raise ValidationFailedError("status code mismatch", expected=200, actual=404)
    """

    def __init__(
        self,
        message: str,
        expected: Any = None,
        actual: Any = None,
        failures: list[str] | None = None,
    ) -> None:
        self.expected = expected
        self.actual = actual
        self.failures = failures or []
        self.message = message
        super().__init__(self._format())

    def _format(self) -> str:
        lines = [self.message]
        if self.expected is not None or self.actual is not None:
            lines.append(f"  expected: {self.expected!r}")
            lines.append(f"  actual:   {self.actual!r}")
        lines.extend(f"  - {failure}" for failure in self.failures)
        return "\n".join(lines)


class UnknownEntityKindError(ApiHarnessError):
    """Raised when the data generator has no factory for a kind."""

    def __init__(self, kind: str, available: list[str]) -> None:
        self.kind = kind
        self.available = available
        super().__init__(
            f"No generator registered for kind {kind!r} (available: {', '.join(available)})"
        )
