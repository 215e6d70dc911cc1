"""Configuration package."""

from payment_tracker.config.settings import (
    GoogleSheetsSettings,
    Settings,
    TrackerSettings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "GoogleSheetsSettings",
    "Settings",
    "TrackerSettings",
    "get_settings",
    "validate_all_settings",
]
