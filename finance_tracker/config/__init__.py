"""Configuration package."""

from finance_tracker.config.settings import (
    ApiSettings,
    AppSettings,
    LocalStoreSettings,
    ServerSettings,
    Settings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "ApiSettings",
    "AppSettings",
    "LocalStoreSettings",
    "ServerSettings",
    "Settings",
    "get_settings",
    "validate_all_settings",
]
