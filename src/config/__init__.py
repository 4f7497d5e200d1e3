"""Configuration package."""

from src.config.settings import (
    AppSettings,
    GoogleSheetsSettings,
    RoutingSettings,
    Settings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "GoogleSheetsSettings",
    "RoutingSettings",
    "Settings",
    "get_settings",
    "validate_all_settings",
]
