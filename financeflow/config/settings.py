"""
Configuration Management for FinanceFlow

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Thresholds used by the derived views (budget warning level,
top-N ranking, trend length) live here instead of being
scattered as literals through the engine.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Record store configuration."""

    model_config = SettingsConfigDict(
        env_prefix="FINANCEFLOW_STORAGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    backend: Literal["json", "memory"] = Field(
        default="json",
        description="Which record store to use"
    )
    data_dir: Path = Field(
        default=Path("data"),
        description="Directory holding one JSON document per record kind"
    )


class LedgerSettings(BaseSettings):
    """Ledger engine thresholds and defaults."""

    model_config = SettingsConfigDict(
        env_prefix="FINANCEFLOW_LEDGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    default_currency: str = Field(
        default="KZT",
        min_length=3,
        max_length=3,
        description="Currency code used when a form leaves it empty"
    )
    budget_warning_threshold: float = Field(
        default=80.0,
        gt=0.0,
        le=100.0,
        description="Budget percentage at which a budget becomes a warning"
    )
    top_categories_limit: int = Field(
        default=5,
        ge=1,
        le=50,
        description="Number of categories in the top-categories ranking"
    )
    trend_months: int = Field(
        default=12,
        ge=1,
        le=60,
        description="Number of monthly buckets in the expense trend"
    )
    recent_operations_limit: int = Field(
        default=5,
        ge=1,
        le=100,
        description="Operations shown on the dashboard"
    )
    dashboard_window_days: int = Field(
        default=7,
        ge=1,
        le=366,
        description="Window for the dashboard income/expense totals"
    )
    seed_default_categories: bool = Field(
        default=True,
        description="Seed built-in categories into an empty store"
    )

    # Validation thresholds
    max_operation_amount: float = Field(
        default=100_000_000.0,
        gt=0,
        description="Amounts above this are flagged for review"
    )
    future_date_tolerance_days: int = Field(
        default=1,
        ge=0,
        description="How many days in the future an operation date can be"
    )

    @field_validator("default_currency")
    @classmethod
    def normalize_currency(cls, v: str) -> str:
        """Currency codes are stored upper-case."""
        return v.upper()


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        description="Root log level for the stdlib handler behind structlog"
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def ledger(self) -> LedgerSettings:
        return LedgerSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, with an
    extra {setting_name}_error entry for each failure.
    """
    results = {}

    settings = get_settings()

    for name in ("storage", "ledger", "app"):
        try:
            _ = getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
