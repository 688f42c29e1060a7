"""pytest plugin exposing apiharness helpers as fixtures.

Registered through the ``pytest11`` entry point, so installing the package
is enough. Fixtures:
- api_env: environment name for the test
- environment_config: resolved EnvironmentConfig
- helpers: the full HelperSet
- api_transport, api_helper, auth_helper, data_generator, response_validator
- harness_settings, config_provider (session scope, read-only)

Environment selection, first match wins:
    @pytest.mark.api_env("staging")
    pytest --api-env staging
    API_ENV=staging

Usage:
    async def test_get_user(api_helper, response_validator):
        response = await api_helper.get("/users/1")
        response_validator.validate_status_code(response, 200)
"""

from collections.abc import AsyncIterator

import httpx
import pytest
import pytest_asyncio
from pydantic import ValidationError

from apiharness.config.environments import ConfigProvider, EnvironmentConfig
from apiharness.config.logging import configure_logging
from apiharness.config.settings import HarnessSettings, get_settings
from apiharness.core.exceptions import ConfigurationError
from apiharness.data.generator import DataGenerator
from apiharness.fixtures.composer import HelperSet, compose_helpers
from apiharness.services.api_helper import ApiHelper
from apiharness.services.auth_helper import AuthHelper
from apiharness.validation.response_validator import ResponseValidator


def pytest_addoption(parser: pytest.Parser) -> None:
    group = parser.getgroup("apiharness")
    group.addoption(
        "--api-env",
        action="store",
        default=None,
        help="Environment profile for API helpers (overrides API_ENV).",
    )


def pytest_configure(config: pytest.Config) -> None:
    # Runs in every pytest session once installed: register the marker only.
    config.addinivalue_line(
        "markers", "api_env(name): resolve API helpers against the named environment"
    )


@pytest.fixture(scope="session")
def harness_settings() -> HarnessSettings:
    """Settings and logging, loaded the first time a test uses the helpers.

    Invalid settings fail setup of the tests that need them; unrelated
    tests in the same run are unaffected.
    """
    try:
        settings = get_settings()
    except ValidationError as e:
        raise ConfigurationError(f"Invalid apiharness settings: {e}") from e
    configure_logging(settings)
    return settings


@pytest.fixture(scope="session")
def config_provider(harness_settings: HarnessSettings) -> ConfigProvider:
    """Read-only provider shared by the whole run."""
    return ConfigProvider(harness_settings)


@pytest.fixture
def api_env(request: pytest.FixtureRequest, harness_settings: HarnessSettings) -> str:
    """Environment name declared by marker, CLI option or settings."""
    marker = request.node.get_closest_marker("api_env")
    if marker is not None and marker.args:
        return str(marker.args[0])
    option = request.config.getoption("--api-env")
    if option:
        return str(option)
    return harness_settings.api_env


@pytest.fixture
def environment_config(config_provider: ConfigProvider, api_env: str) -> EnvironmentConfig:
    """Resolved configuration; resolution errors abort the test at setup."""
    return config_provider.resolve(api_env)


@pytest_asyncio.fixture
async def helpers(environment_config: EnvironmentConfig) -> AsyncIterator[HelperSet]:
    """Fresh helpers for this test only."""
    async with compose_helpers(environment_config) as composed:
        yield composed


@pytest.fixture
def api_transport(helpers: HelperSet) -> httpx.AsyncClient:
    """Raw httpx client behind api_helper."""
    return helpers.transport


@pytest.fixture
def api_helper(helpers: HelperSet) -> ApiHelper:
    return helpers.api


@pytest.fixture
def auth_helper(helpers: HelperSet) -> AuthHelper:
    return helpers.auth


@pytest.fixture
def data_generator(helpers: HelperSet) -> DataGenerator:
    return helpers.data


@pytest.fixture
def response_validator(helpers: HelperSet) -> type[ResponseValidator]:
    return helpers.validator
