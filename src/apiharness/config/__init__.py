"""Configuration module for apiharness.

Usage:
    from apiharness.config import ConfigProvider, get_settings

    settings = get_settings()  # Cached singleton
    config = ConfigProvider(settings).resolve(settings.api_env)

Note:
    Environment records are resolved on demand rather than at import time
    because resolution fails fast when BASE_URL is missing.
"""

from apiharness.config.environments import ConfigProvider, Credentials, EnvironmentConfig
from apiharness.config.settings import HarnessSettings, get_settings

__all__ = [
    "ConfigProvider",
    "Credentials",
    "EnvironmentConfig",
    "HarnessSettings",
    "get_settings",
]
