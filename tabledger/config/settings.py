"""
Configuration Management for tabledger

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: Settings are loaded once at startup and then passed
explicitly into the components that need them (the tab store receives
its data directory as a constructor argument). Nothing reads a global
path at import time.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def default_data_dir() -> Path:
    """Per-user dot-directory under the home directory."""
    return Path.home() / ".tabledger"


class LedgerSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from TABLEDGER_* environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="TABLEDGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Storage layout
    data_dir: Path = Field(
        default_factory=default_data_dir,
        description="Directory holding the manifest and tab files"
    )
    manifest_name: str = Field(
        default="tabs.txt",
        min_length=1,
        description="File name of the tab manifest inside data_dir"
    )
    tab_suffix: str = Field(
        default=".txt",
        description="Suffix appended to a tab name to form its file name"
    )

    # Logging
    log_file_name: str = Field(
        default="tabledger.log",
        min_length=1,
        description="Log file name inside data_dir"
    )
    log_level: str = Field(
        default="INFO",
        description="Minimum level written to the log file"
    )
    debug_mode: bool = Field(
        default=False,
        description="Show full error details in the terminal"
    )

    @field_validator('data_dir')
    @classmethod
    def expand_data_dir(cls, v: Path) -> Path:
        """Allow '~' in TABLEDGER_DATA_DIR."""
        return v.expanduser()

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if level not in allowed:
            raise ValueError(f"Unsupported log level: {v}. Allowed: {sorted(allowed)}")
        return level

    @property
    def manifest_path(self) -> Path:
        return self.data_dir / self.manifest_name

    @property
    def log_path(self) -> Path:
        return self.data_dir / self.log_file_name


@lru_cache()
def get_settings() -> LedgerSettings:
    """
    Get application settings (cached).

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return LedgerSettings()
