"""Environment profile resolution.

This module provides:
- Credentials and EnvironmentConfig, the immutable per-environment records
- ConfigProvider, which resolves a named environment from process
  environment variables and an optional profile map

Lookup order for every value, highest precedence first:
    <NAME>_BASE_URL / <NAME>_TIMEOUT / <NAME>_USERNAME / <NAME>_PASSWORD
    BASE_URL / API_TIMEOUT / API_USERNAME / API_PASSWORD
    the profile map entry for the environment
    built-in defaults (timeout only; base URL has no default)
"""

import os
from collections.abc import Mapping
from typing import Any

import structlog
from pydantic import BaseModel, ConfigDict, Field, SecretStr

from apiharness.config.settings import HarnessSettings, get_settings
from apiharness.core.exceptions import ConfigIncompleteError, ConfigNotFoundError

log = structlog.get_logger(__name__)

BUILTIN_ENVIRONMENTS = ("local", "dev", "staging", "production")
DEFAULT_TIMEOUT = 30
DEFAULT_HEADERS = {"Accept": "application/json"}


def _whole_seconds(value: Any) -> int:
    """Parse a timeout given as an int, an integral float or a decimal string."""
    if isinstance(value, bool):
        raise TypeError("boolean timeout")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError("fractional timeout")
        return int(value)
    return int(str(value).strip())


class Credentials(BaseModel):
    """Username/password pair posted to the login endpoint."""

    model_config = ConfigDict(frozen=True)

    username: str
    password: SecretStr

    def as_payload(self) -> dict[str, str]:
        """Body for the login request."""
        return {"username": self.username, "password": self.password.get_secret_value()}


class EnvironmentConfig(BaseModel):
    """Fully-resolved settings for one environment profile."""

    model_config = ConfigDict(frozen=True)

    name: str
    base_url: str
    timeout: int = Field(gt=0)
    default_headers: dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_HEADERS))
    credentials: Credentials | None = None
    auth_login_path: str = "/auth/login"
    auth_refresh_path: str = "/auth/refresh"
    token_refresh_margin: float = Field(default=60.0, ge=0)
    max_login_attempts: int = Field(default=1, ge=1)


class ConfigProvider:
    """Resolve environment names into EnvironmentConfig records.

    Attributes:
        settings: Shared harness settings (auth paths, token policy).
        profiles: Optional map of environment name to partial values
            (base_url, timeout, headers, username, password). Names in
            this map are recognized in addition to the built-in ones.

    Example:
        provider = ConfigProvider(profiles={"qa": {"base_url": "https://qa.example.com"}})
        config = provider.resolve("qa")
    """

    def __init__(
        self,
        settings: HarnessSettings | None = None,
        profiles: Mapping[str, Mapping[str, Any]] | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.profiles = {name.lower(): dict(values) for name, values in (profiles or {}).items()}
        self._environ = environ

    def available(self) -> list[str]:
        """Return every recognized environment name."""
        names = list(BUILTIN_ENVIRONMENTS)
        names.extend(name for name in self.profiles if name not in names)
        return names

    def resolve(self, environment_name: str) -> EnvironmentConfig:
        """Resolve a named environment.

        Args:
            environment_name: One of available(), case-insensitive.

        Returns:
            A complete, immutable EnvironmentConfig.

        Raises:
            ConfigNotFoundError: If the name is not recognized.
            ConfigIncompleteError: If a required value is missing or invalid.
        """
        name = environment_name.strip().lower()
        if name not in self.available():
            raise ConfigNotFoundError(environment_name, available=self.available())

        # Read at resolution time so tests can patch the environment
        environ = self._environ if self._environ is not None else os.environ
        profile = self.profiles.get(name, {})
        prefix = name.upper()

        def lookup(key: str, global_key: str, profile_key: str) -> Any:
            for value in (
                environ.get(f"{prefix}_{key}"),
                environ.get(global_key),
                profile.get(profile_key),
            ):
                if value not in (None, ""):
                    return value
            return None

        base_url = lookup("BASE_URL", "BASE_URL", "base_url")
        if base_url is None:
            raise ConfigIncompleteError(name, f"missing {prefix}_BASE_URL or BASE_URL")
        base_url = str(base_url).rstrip("/")
        if not base_url.startswith(("http://", "https://")):
            raise ConfigIncompleteError(name, f"base URL must start with http:// or https://: {base_url}")

        raw_timeout = lookup("TIMEOUT", "API_TIMEOUT", "timeout")
        try:
            timeout = _whole_seconds(raw_timeout) if raw_timeout is not None else DEFAULT_TIMEOUT
        except (TypeError, ValueError) as e:
            raise ConfigIncompleteError(
                name, f"timeout is not a whole number of seconds: {raw_timeout!r}"
            ) from e
        if timeout <= 0:
            raise ConfigIncompleteError(name, f"timeout must be positive: {timeout}")

        username = lookup("USERNAME", "API_USERNAME", "username")
        password = lookup("PASSWORD", "API_PASSWORD", "password")
        if (username is None) != (password is None):
            raise ConfigIncompleteError(name, "username and password must be set together")
        credentials = (
            Credentials(username=username, password=SecretStr(str(password)))
            if username is not None
            else None
        )

        headers = {**DEFAULT_HEADERS, **profile.get("headers", {})}

        config = EnvironmentConfig(
            name=name,
            base_url=base_url,
            timeout=timeout,
            default_headers=headers,
            credentials=credentials,
            auth_login_path=self.settings.auth_login_path,
            auth_refresh_path=self.settings.auth_refresh_path,
            token_refresh_margin=self.settings.token_refresh_margin,
            max_login_attempts=self.settings.max_login_attempts,
        )
        log.debug(
            "environment_resolved",
            environment=name,
            base_url=base_url,
            timeout=timeout,
            has_credentials=credentials is not None,
        )
        return config
