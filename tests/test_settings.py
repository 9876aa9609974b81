"""Tests for configuration and logging setup."""

from decimal import Decimal

import pytest
from pydantic import ValidationError

from ledger_guard.config import (
    AppSettings,
    LedgerSettings,
    get_settings,
    validate_all_settings,
)
from ledger_guard.log import configure_logging, get_logger


class TestLedgerSettings:
    """Tests for LedgerSettings."""

    def test_defaults(self):
        settings = LedgerSettings()
        assert settings.annual_rate == Decimal("0.10")
        assert settings.storage_key == "ledger_guard_db"
        assert settings.default_users_list == ["User 1", "User 2"]

    def test_monthly_rate(self):
        settings = LedgerSettings(annual_rate=Decimal("0.12"))
        assert settings.monthly_rate == Decimal("0.01")

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("LEDGER_ANNUAL_RATE", "0.035")
        monkeypatch.setenv("LEDGER_STORAGE_KEY", "household")
        settings = get_settings().ledger
        assert settings.annual_rate == Decimal("0.035")
        assert settings.storage_key == "household"

    def test_env_file(self, tmp_path):
        (tmp_path / ".env").write_text("LEDGER_CURRENCY_SYMBOL=$\n", encoding="utf-8")
        assert LedgerSettings().currency_symbol == "$"

    def test_rate_bounds(self):
        with pytest.raises(ValidationError):
            LedgerSettings(annual_rate=Decimal("1.5"))
        with pytest.raises(ValidationError):
            LedgerSettings(annual_rate=Decimal("-0.01"))

    def test_requires_a_default_user(self):
        with pytest.raises(ValidationError):
            LedgerSettings(default_user_names=" , ")


class TestAppSettings:
    """Tests for AppSettings."""

    def test_log_level_normalized(self):
        assert AppSettings(log_level="debug").log_level == "DEBUG"

    def test_log_level_rejected(self):
        with pytest.raises(ValidationError):
            AppSettings(log_level="LOUD")


class TestValidateAllSettings:
    """Tests for validate_all_settings."""

    def test_all_valid(self):
        assert validate_all_settings() == {"ledger": True, "app": True}

    def test_reports_invalid_ledger_settings(self, monkeypatch):
        monkeypatch.setenv("LEDGER_ANNUAL_RATE", "lots")
        results = validate_all_settings()
        assert results["ledger"] is False
        assert "ledger_error" in results
        assert results["app"] is True


class TestLogging:
    """Tests for the structlog setup."""

    def test_configure_and_log(self):
        configure_logging(level="DEBUG", debug=True)
        logger = get_logger("ledger_guard.test")
        logger.info("test_event", value=1)

    def test_get_logger_returns_bound_logger(self):
        assert get_logger("ledger_guard.test") is not None
