"""Configuration package."""

from tabledger.config.settings import (
    LedgerSettings,
    default_data_dir,
    get_settings,
)

__all__ = [
    "LedgerSettings",
    "default_data_dir",
    "get_settings",
]
