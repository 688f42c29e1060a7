"""Harness settings using pydantic-settings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class HarnessSettings(BaseSettings):
    """Process-wide apiharness configuration from environment variables.

    Per-environment values (base URL, timeout, credentials) are resolved by
    ConfigProvider; this model only holds the knobs shared by every
    environment.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore extra env vars
    )

    # Environment selection
    api_env: str = Field(default="local", description="Environment profile to resolve")

    # Logging. Prefixed: bare DEBUG / LOG_LEVEL belong to other tools in the same process.
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        validation_alias="API_LOG_LEVEL",
        description="Log level for structlog",
    )
    debug: bool = Field(
        default=False,
        validation_alias="API_DEBUG",
        description="Pretty console logs instead of JSON",
    )

    # Auth endpoints
    auth_login_path: str = Field(default="/auth/login", description="Login endpoint path")
    auth_refresh_path: str = Field(default="/auth/refresh", description="Refresh endpoint path")

    # Token policy
    token_refresh_margin: float = Field(
        default=60.0, ge=0, description="Seconds before expiry at which a token is refreshed"
    )
    max_login_attempts: int = Field(
        default=1, ge=1, description="Login attempts before giving up"
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        """Accept lower-case level names and the common WARN / FATAL spellings."""
        if not isinstance(v, str):
            return v
        level = v.strip().upper()
        return {"WARN": "WARNING", "FATAL": "CRITICAL"}.get(level, level)

    @field_validator("auth_login_path", "auth_refresh_path")
    @classmethod
    def validate_path(cls, v: str) -> str:
        """Auth paths are relative to the base URL."""
        if not v.startswith("/"):
            raise ValueError("Auth endpoint paths must start with '/'")
        return v

    @field_validator("api_env")
    @classmethod
    def normalize_api_env(cls, v: str) -> str:
        """Environment names are case-insensitive."""
        return v.strip().lower()


@lru_cache
def get_settings() -> HarnessSettings:
    """Get cached settings instance."""
    return HarnessSettings()
