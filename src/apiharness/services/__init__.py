"""API, auth and resource helpers."""

from apiharness.services.api_helper import ApiHelper
from apiharness.services.auth_helper import AuthHelper
from apiharness.services.models import ApiResponse, AuthSession, AuthState
from apiharness.services.resources import ResourceClient

__all__ = [
    "ApiHelper",
    "ApiResponse",
    "AuthHelper",
    "AuthSession",
    "AuthState",
    "ResourceClient",
]
