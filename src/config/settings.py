"""
Configuration Management for Budget Tracker

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
This makes it easy to see what external dependencies exist and
ensures all required configuration is validated at startup.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _split_csv(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class GoogleSheetsSettings(BaseSettings):
    """Google Sheets storage configuration."""

    model_config = SettingsConfigDict(
        env_prefix="GOOGLE_SHEETS_",
        extra="ignore"
    )

    credentials_path: str = Field(
        ...,
        description="Path to Google service account credentials JSON"
    )
    spreadsheet_id: str = Field(
        ...,
        description="ID of the Google Sheets spreadsheet to use"
    )

    # Sheet names within the spreadsheet
    transactions_sheet_name: str = Field(
        default="Transactions",
        description="Name of the sheet for transactions"
    )
    categories_sheet_name: str = Field(
        default="Categories",
        description="Name of the sheet for categories"
    )
    user_settings_sheet_name: str = Field(
        default="UserSettings",
        description="Name of the sheet for per-user settings"
    )
    audit_sheet_name: str = Field(
        default="AuditLog",
        description="Name of the sheet for audit logs"
    )

    @field_validator('credentials_path')
    @classmethod
    def validate_credentials_path(cls, v: str) -> str:
        """Warn if credentials file doesn't exist (but don't fail - might be mounted later)."""
        if not Path(v).exists():
            import warnings
            warnings.warn(
                f"Google credentials file not found at {v}. "
                "Make sure it exists before running the application."
            )
        return v


class RoutingSettings(BaseSettings):
    """
    Route guard configuration.

    Paths are compared after stripping a trailing slash.
    """

    model_config = SettingsConfigDict(
        env_prefix="ROUTING_",
        extra="ignore"
    )

    root_path: str = Field(
        default="/",
        description="Path that always redirects to the dashboard"
    )
    dashboard_path: str = Field(
        default="/dashboard",
        description="Landing page for signed-in users"
    )
    sign_in_path: str = Field(
        default="/sign-in",
        description="Where anonymous users are sent"
    )
    public_paths: str = Field(
        default="/sign-in,/sign-up",
        description="Comma-separated paths (and their sub-paths) reachable without a session"
    )
    internal_prefixes: str = Field(
        default="_stcore,static",
        description="Comma-separated first path segments served by the framework itself"
    )
    static_extensions: str = Field(
        default=(
            "html?,css,js(?!on),jpe?g,webp,png,gif,svg,ttf,woff2?,"
            "ico,csv,docx?,xlsx?,zip,webmanifest"
        ),
        description="Comma-separated extension patterns skipped by the guard"
    )
    always_matched_prefixes: str = Field(
        default="api,trpc",
        description="Comma-separated first path segments the guard always inspects"
    )

    @property
    def public_paths_list(self) -> list[str]:
        return _split_csv(self.public_paths)

    @property
    def internal_prefixes_list(self) -> list[str]:
        return _split_csv(self.internal_prefixes)

    @property
    def static_extensions_list(self) -> list[str]:
        return _split_csv(self.static_extensions)

    @property
    def always_matched_prefixes_list(self) -> list[str]:
        return _split_csv(self.always_matched_prefixes)


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
        description="Minimum level for structured logs"
    )

    # New users start with this currency until they pick one
    default_currency: str = Field(
        default="USD",
        min_length=3,
        max_length=3,
        description="Currency assigned when a user has no settings row yet"
    )

    @field_validator('default_currency')
    @classmethod
    def normalize_currency(cls, v: str) -> str:
        return v.upper()


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

    # Note: These are loaded lazily to allow partial configuration

    @property
    def google_sheets(self) -> GoogleSheetsSettings:
        return GoogleSheetsSettings()

    @property
    def routing(self) -> RoutingSettings:
        return RoutingSettings()

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
    Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    try:
        _ = settings.google_sheets
        results["google_sheets"] = True
    except Exception as e:
        results["google_sheets"] = False
        results["google_sheets_error"] = str(e)

    try:
        _ = settings.routing
        results["routing"] = True
    except Exception as e:
        results["routing"] = False
        results["routing_error"] = str(e)

    try:
        _ = settings.app
        results["app"] = True
    except Exception as e:
        results["app"] = False
        results["app_error"] = str(e)

    return results
