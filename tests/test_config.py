"""Tests for settings loading."""

from decimal import Decimal
from pathlib import Path

import pytest
from pydantic import ValidationError

from ledger.config import LedgerSettings, LoggingSettings, StorageSettings, get_settings, validate_all_settings


class TestSettings:
    """Tests for pydantic-settings configuration."""

    def test_defaults(self):
        """Test the built-in defaults."""
        settings = LedgerSettings()
        assert settings.balance_epsilon == Decimal("1e-9")
        assert settings.settled_threshold == Decimal("0.01")
        assert settings.default_category_name == "General"
        assert StorageSettings().path == Path("data/profiles.json")

    def test_environment_override(self, monkeypatch):
        """Test that LEDGER_ variables override defaults."""
        monkeypatch.setenv("LEDGER_DEFAULT_CATEGORY_NAME", "Varios")
        monkeypatch.setenv("LEDGER_STORAGE_PERSIST_RETRY_ATTEMPTS", "5")
        assert get_settings().ledger.default_category_name == "Varios"
        assert get_settings().storage.persist_retry_attempts == 5

    def test_log_level_is_normalized(self, monkeypatch):
        """Test log level validation."""
        monkeypatch.setenv("LEDGER_LOG_LEVEL", "debug")
        assert LoggingSettings().level == "DEBUG"
        monkeypatch.setenv("LEDGER_LOG_LEVEL", "chatty")
        with pytest.raises(ValidationError):
            LoggingSettings()

    def test_validate_all_settings(self, monkeypatch):
        """Test the startup check reports broken sections."""
        assert validate_all_settings() == {"ledger": True, "storage": True, "logging": True}
        monkeypatch.setenv("LEDGER_STORAGE_PERSIST_RETRY_ATTEMPTS", "0")
        results = validate_all_settings()
        assert results["storage"] is False
        assert "storage_error" in results
