"""
Configuration Management for the Ledger

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
The engine itself is pure; the few tunables it has (rounding tolerance,
the "settled" threshold, the auto-assigned category) live here so that
every caller agrees on them.
"""

from decimal import Decimal
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Profile storage configuration."""

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_STORAGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    path: Path = Field(
        default=Path("data/profiles.json"),
        description="JSON file holding every profile and the active profile id"
    )
    persist_retry_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="How many times a failed write is retried"
    )

    @field_validator('path')
    @classmethod
    def expand_user(cls, v: Path) -> Path:
        """Allow ~ in configured paths."""
        return v.expanduser()


class LoggingSettings(BaseSettings):
    """Structured logging configuration."""

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_LOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    level: str = Field(
        default="INFO",
        description="Minimum log level"
    )
    json_output: bool = Field(
        default=True,
        description="Render log lines as JSON (otherwise console format)"
    )

    @field_validator('level')
    @classmethod
    def normalize_level(cls, v: str) -> str:
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        level = v.strip().upper()
        if level not in allowed:
            raise ValueError(f"Unsupported log level: {v}. Allowed: {sorted(allowed)}")
        return level


class LedgerSettings(BaseSettings):
    """
    Ledger engine settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Balance checks
    balance_epsilon: Decimal = Field(
        default=Decimal("1e-9"),
        ge=0,
        description="Negative balances smaller than this are treated as zero"
    )
    settled_threshold: Decimal = Field(
        default=Decimal("0.01"),
        ge=0,
        description="A debt or loan at or below this remaining amount is settled"
    )

    # Categorization
    default_category_name: str = Field(
        default="General",
        min_length=1,
        description="Category auto-assigned to uncategorized expenses, if it exists"
    )
    savings_category_name: str = Field(
        default="Ahorro",
        min_length=1,
        description="Category assigned to savings deposits, if it exists"
    )


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
    def ledger(self) -> LedgerSettings:
        return LedgerSettings()

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def logging(self) -> LoggingSettings:
        return LoggingSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}.
    Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    for name in ("ledger", "storage", "logging"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
