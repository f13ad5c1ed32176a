"""
Configuration Management for the BP Diagnostic back-office client

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
The only external dependency of this client is the back-office REST API,
so most settings describe how we talk to it and where the session token lives.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ApiSettings(BaseSettings):
    """Back-office REST API configuration."""

    model_config = SettingsConfigDict(
        env_prefix="BP_API_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    base_url: str = Field(
        default="http://192.168.1.91:8000/api",
        description="Base URL of the back-office API (including the /api prefix)"
    )
    timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        le=300,
        description="Per-request timeout"
    )
    unauthorized_cooldown_seconds: float = Field(
        default=5.0,
        ge=0,
        description="Minimum time between two token clears caused by 401 responses"
    )
    retry_delay_seconds: float = Field(
        default=0.5,
        ge=0,
        description="Wait before retrying a lookup that failed with 401"
    )
    retry_attempts: int = Field(
        default=1,
        ge=0,
        le=5,
        description="How many times a lookup is retried after a 401"
    )

    @field_validator('base_url')
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize the base URL so endpoint paths join cleanly."""
        v = v.strip()
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"API base URL must be http(s): {v}")
        return v.rstrip("/")


class SessionSettings(BaseSettings):
    """Where the authentication token is persisted between runs."""

    model_config = SettingsConfigDict(
        env_prefix="BP_SESSION_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    token_path: str = Field(
        default="~/.bp_diagnostic/session.json",
        description="File that holds the persisted bearer token"
    )
    storage_key: str = Field(
        default="@bp-mobile-token",
        min_length=1,
        description="Key the token is stored under"
    )

    @property
    def resolved_token_path(self) -> Path:
        """Token path with ~ expanded."""
        return Path(self.token_path).expanduser()


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
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Root log level"
    )

    # Display
    currency_symbol: str = Field(
        default="₱",
        description="Currency symbol used when formatting amounts"
    )

    # Lists
    default_per_page: int = Field(
        default=20,
        ge=1,
        le=200,
        description="Page size used when a screen does not pick its own"
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
    def api(self) -> ApiSettings:
        return ApiSettings()

    @property
    def session(self) -> SessionSettings:
        return SessionSettings()

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

    Returns a dict of {setting_name: is_valid}, plus
    {setting_name}_error entries for the groups that failed.
    """
    results = {}
    settings = get_settings()

    for name in ("api", "session", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
