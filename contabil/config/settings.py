"""
Configuration Management for Contabil

Every operational knob is read from the environment (or a local .env)
through pydantic-settings, one BaseSettings class per concern.

DESIGN DECISION: Tax rates are NOT configuration. They live in
contabil.taxes.rules as illustrative constants; only thresholds,
backends and alert windows are configurable here.
"""

import warnings
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class GoogleSheetsSettings(BaseSettings):
    """Where the shared spreadsheet lives and how to reach it."""

    model_config = SettingsConfigDict(
        env_prefix="GOOGLE_SHEETS_",
        extra="ignore"
    )

    credentials_path: str = Field(
        ...,
        description="Service account JSON key used to open the spreadsheet"
    )
    spreadsheet_id: str = Field(
        ...,
        description="Key of the spreadsheet holding the office's records"
    )
    worksheet_prefix: str = Field(
        default="contabil_",
        description="Prefix for collection worksheet titles"
    )

    @field_validator('credentials_path')
    @classmethod
    def warn_missing_credentials(cls, v: str) -> str:
        """The key file may be mounted after startup, so only warn."""
        if not Path(v).exists():
            warnings.warn(f"Service account key not found at {v}")
        return v


class ReconciliationSettings(BaseSettings):
    """
    Bank reconciliation thresholds.

    Scores are integers in 0-100. A candidate below the suggestion
    threshold is dropped; between suggestion and auto-match it is only
    suggested; at or above auto-match the transaction is reconciled.
    """

    model_config = SettingsConfigDict(
        env_prefix="RECONCILIATION_",
        extra="ignore"
    )

    suggestion_threshold: int = Field(
        default=40,
        ge=0,
        le=100,
        description="Minimum confidence for a candidate to be reported"
    )
    auto_match_threshold: int = Field(
        default=60,
        ge=0,
        le=100,
        description="Minimum confidence to mark a transaction as matched"
    )
    max_confidence: int = Field(
        default=99,
        ge=1,
        le=100,
        description="Ceiling applied to every computed confidence"
    )
    exclusive_matching: bool = Field(
        default=False,
        description="Prevent one journal entry from matching several transactions in a batch"
    )

    @model_validator(mode='after')
    def validate_threshold_order(self) -> 'ReconciliationSettings':
        """Auto-match must be at least as strict as suggestion."""
        if self.auto_match_threshold < self.suggestion_threshold:
            raise ValueError(
                "auto_match_threshold cannot be lower than suggestion_threshold"
            )
        return self


class AppSettings(BaseSettings):
    """Process-wide settings: environment, logging, storage, tax calendar."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    app_environment: str = Field(
        default="development",
        description="Deployment name, attached to startup logs"
    )
    debug_mode: bool = False

    # Logging
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR)$",
        description="Minimum log level"
    )
    log_format: str = Field(
        default="json",
        pattern="^(json|console)$",
        description="structlog renderer"
    )

    # Storage
    storage_backend: str = Field(
        default="memory",
        pattern="^(memory|google_sheets)$",
        description="Which record store implementation to build"
    )

    # Tax calendar
    deadline_alert_days: int = Field(
        default=3,
        ge=0,
        le=60,
        description="How many days ahead an unpaid tax item counts as urgent"
    )


class Settings(BaseSettings):
    """
    Entry point to every settings group.

    Groups are built on access, so a missing Google Sheets key does not
    stop a memory-backed run from starting.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @property
    def google_sheets(self) -> GoogleSheetsSettings:
        return GoogleSheetsSettings()

    @property
    def reconciliation(self) -> ReconciliationSettings:
        return ReconciliationSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """Cached Settings; tests call get_settings.cache_clear()."""
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Startup check of every settings group.

    Returns {group: ok} plus "<group>_error" messages for failures.
    Google Sheets is only checked when it is the selected backend.
    """
    settings = get_settings()
    results: dict = {}

    groups = ["app", "reconciliation"]
    try:
        if settings.app.storage_backend == "google_sheets":
            groups.append("google_sheets")
    except Exception:
        # reported below under "app"
        pass

    for group in groups:
        try:
            getattr(settings, group)
            results[group] = True
        except Exception as e:
            results[group] = False
            results[f"{group}_error"] = str(e)

    return results
