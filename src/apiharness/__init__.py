"""apiharness: helpers and pytest fixtures for HTTP API tests."""

from apiharness.config import ConfigProvider, EnvironmentConfig, get_settings
from apiharness.core.exceptions import (
    ApiHarnessError,
    AuthenticationFailedError,
    ConfigIncompleteError,
    ConfigNotFoundError,
    NotAuthenticatedError,
    TransportError,
    ValidationFailedError,
)
from apiharness.data import DataGenerator
from apiharness.fixtures import HelperSet, compose_helpers
from apiharness.services import ApiHelper, ApiResponse, AuthHelper, ResourceClient
from apiharness.validation import ResponseValidator

__version__ = "0.1.0"

__all__ = [
    "ApiHarnessError",
    "ApiHelper",
    "ApiResponse",
    "AuthHelper",
    "AuthenticationFailedError",
    "ConfigIncompleteError",
    "ConfigNotFoundError",
    "ConfigProvider",
    "DataGenerator",
    "EnvironmentConfig",
    "HelperSet",
    "NotAuthenticatedError",
    "ResourceClient",
    "ResponseValidator",
    "TransportError",
    "ValidationFailedError",
    "compose_helpers",
    "get_settings",
]
