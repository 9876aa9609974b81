"""
Configuration Management for Ledger Guard

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
The interest rate and storage location are the only knobs that change
ledger behaviour, so they live in one place and are validated at startup.
"""

from decimal import Decimal
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LedgerSettings(BaseSettings):
    """Ledger behaviour and local persistence configuration."""

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    annual_rate: Decimal = Field(
        default=Decimal("0.10"),
        ge=0,
        le=1,
        description="Annual interest rate (0.10 = 10%)"
    )

    # Persistence
    storage_path: str = Field(
        default="ledger_guard.json",
        description="Path of the local key-value store file"
    )
    storage_key: str = Field(
        default="ledger_guard_db",
        min_length=1,
        description="Key under which the ledger state blob is stored"
    )

    # First-run state
    default_user_names: str = Field(
        default="User 1,User 2",
        description="Comma-separated names of the users created on first run"
    )

    # Display
    currency_symbol: str = Field(
        default="¥",
        max_length=3,
        description="Currency symbol shown in the UI"
    )

    @field_validator('default_user_names')
    @classmethod
    def validate_default_user_names(cls, v: str) -> str:
        """At least one default user is needed so the ledger has an active account."""
        if not [name for name in v.split(",") if name.strip()]:
            raise ValueError("default_user_names must name at least one user")
        return v

    @property
    def monthly_rate(self) -> Decimal:
        """Monthly rate applied at settlement."""
        return self.annual_rate / 12

    @property
    def default_users_list(self) -> list[str]:
        """Get default user names as a list."""
        return [name.strip() for name in self.default_user_names.split(",") if name.strip()]


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
        description="Enable debug mode (human-readable console logs)"
    )
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Minimum log level"
    )

    @field_validator('log_level', mode='before')
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        return v.strip().upper() if isinstance(v, str) else v


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
    def app(self) -> AppSettings:
        return AppSettings()


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
    Useful for the settings page of the UI.
    """
    results = {}

    settings = get_settings()

    try:
        _ = settings.ledger
        results["ledger"] = True
    except Exception as e:
        results["ledger"] = False
        results["ledger_error"] = str(e)

    try:
        _ = settings.app
        results["app"] = True
    except Exception as e:
        results["app"] = False
        results["app_error"] = str(e)

    return results
