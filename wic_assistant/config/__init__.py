"""Configuration package."""

from wic_assistant.config.settings import (
    AppSettings,
    GoogleSheetsSettings,
    HealthScoreSettings,
    Settings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "GoogleSheetsSettings",
    "HealthScoreSettings",
    "Settings",
    "get_settings",
    "validate_all_settings",
]
