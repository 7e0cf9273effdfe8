"""Configuration package."""

from expense_notes.config.settings import (
    AppSettings,
    GoogleSheetsSettings,
    ImportSettings,
    Settings,
    StorageSettings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "GoogleSheetsSettings",
    "ImportSettings",
    "Settings",
    "StorageSettings",
    "get_settings",
    "validate_all_settings",
]
