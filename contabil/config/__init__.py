"""Configuration package."""

from contabil.config.logging import configure_logging, get_logger
from contabil.config.settings import (
    AppSettings,
    GoogleSheetsSettings,
    ReconciliationSettings,
    Settings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "GoogleSheetsSettings",
    "ReconciliationSettings",
    "Settings",
    "configure_logging",
    "get_logger",
    "get_settings",
    "validate_all_settings",
]
