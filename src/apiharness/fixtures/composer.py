"""Explicit composition of one isolated helper set per test.

The pytest plugin builds its fixtures from compose_helpers(); code outside
pytest can use it directly:

    async with compose_helpers(config) as helpers:
        await helpers.auth.login()
        response = await helpers.api.get("/protected")
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass

import httpx
import structlog

from apiharness.config.environments import EnvironmentConfig
from apiharness.data.generator import DataGenerator
from apiharness.services.api_helper import ApiHelper
from apiharness.services.auth_helper import AuthHelper
from apiharness.validation.response_validator import ResponseValidator

log = structlog.get_logger(__name__)


@dataclass(frozen=True)
class HelperSet:
    """Helpers bound to one environment for one test."""

    config: EnvironmentConfig
    transport: httpx.AsyncClient
    api: ApiHelper
    auth: AuthHelper
    data: DataGenerator
    validator: type[ResponseValidator]


@asynccontextmanager
async def compose_helpers(
    config: EnvironmentConfig,
    client: httpx.AsyncClient | None = None,
) -> AsyncIterator[HelperSet]:
    """Build fresh helpers for config and tear them down on exit.

    Args:
        config: Resolved environment configuration.
        client: Optional caller-owned httpx client; when omitted a client
            is created here and closed on exit.
    """
    owns_client = client is None
    transport = client or httpx.AsyncClient(base_url=config.base_url, timeout=config.timeout)

    api = ApiHelper(config, client=transport)
    auth = AuthHelper(config, api)
    api.attach_auth(auth)

    helpers = HelperSet(
        config=config,
        transport=transport,
        api=api,
        auth=auth,
        data=DataGenerator(),
        validator=ResponseValidator,
    )
    log.debug("helpers_composed", environment=config.name, base_url=config.base_url)

    try:
        yield helpers
    finally:
        auth.logout()
        if owns_client:
            await transport.aclose()
        log.debug("helpers_released", environment=config.name)
