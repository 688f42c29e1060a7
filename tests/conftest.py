"""Shared pytest fixtures for apiharness tests.

This module provides fixtures for:
- A deterministic test environment (BASE_URL, credentials, API_ENV)
- Resolved environment configs for unit tests
- Stub auth endpoint payloads
- A controllable clock for token expiry tests

The apiharness plugin fixtures (api_helper, auth_helper, ...) are available
through the pytest11 entry point once the package is installed.

Usage:
    @pytest.mark.unit
    def test_something(environment_config_factory):
        config = environment_config_factory(timeout=5)
        assert config.timeout == 5
"""

import os
from collections.abc import Callable, Generator
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest
from pydantic import SecretStr

from apiharness.config.environments import Credentials, EnvironmentConfig
from apiharness.config.settings import get_settings

TEST_BASE_URL = "https://api.test.local"

# =============================================================================
# Environment Configuration
# =============================================================================


@pytest.fixture(scope="session", autouse=True)
def setup_test_environment() -> Generator[None, None, None]:
    """Point every environment lookup at the stub API.

    Values are forced rather than defaulted so a developer's shell cannot
    redirect tests to a real server.
    """
    original_env = os.environ.copy()

    for key in ("LOCAL_BASE_URL", "LOCAL_TIMEOUT", "LOCAL_USERNAME", "LOCAL_PASSWORD"):
        os.environ.pop(key, None)
    os.environ["API_ENV"] = "local"
    os.environ["BASE_URL"] = TEST_BASE_URL
    os.environ["API_TIMEOUT"] = "5"
    os.environ["API_USERNAME"] = "demo"
    os.environ["API_PASSWORD"] = "demo"
    get_settings.cache_clear()

    yield

    # Restore original environment
    os.environ.clear()
    os.environ.update(original_env)
    get_settings.cache_clear()


# =============================================================================
# Config Fixtures
# =============================================================================


@pytest.fixture
def environment_config_factory() -> Callable[..., EnvironmentConfig]:
    """Build EnvironmentConfig records without touching the process env."""

    def _build(**overrides: Any) -> EnvironmentConfig:
        values: dict[str, Any] = {
            "name": "local",
            "base_url": TEST_BASE_URL,
            "timeout": 5,
            "credentials": Credentials(username="demo", password=SecretStr("demo")),
        }
        values.update(overrides)
        return EnvironmentConfig(**values)

    return _build


@pytest.fixture
def local_config(environment_config_factory: Callable[..., EnvironmentConfig]) -> EnvironmentConfig:
    """Default stub environment with demo credentials."""
    return environment_config_factory()


# =============================================================================
# Auth Fixtures
# =============================================================================


@pytest.fixture
def token_payload() -> dict[str, Any]:
    """Stub login response."""
    return {"token": "abc", "expiresIn": 3600}


class FakeClock:
    """Callable clock that tests move forward explicitly."""

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


@pytest.fixture
def clock() -> FakeClock:
    """Provide a fixed, advanceable clock for deterministic expiry tests."""
    return FakeClock(datetime(2025, 1, 15, 12, 0, 0, tzinfo=UTC))


# =============================================================================
# Markers for Test Selection
# =============================================================================

# Usage:
# pytest -m unit          # Run only unit tests
# pytest -m integration   # Run only fixture/end-to-end tests
