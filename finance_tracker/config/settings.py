"""
Configuration Management for Personal Finance Tracker

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
This makes it easy to see what the client, the local fallback store
and the REST service depend on, and everything is validated at startup.
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ApiSettings(BaseSettings):
    """Remote REST service the resource gateways talk to."""

    model_config = SettingsConfigDict(
        env_prefix="FINANCE_API_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    url: str = Field(
        default="http://localhost:5000/api",
        description="Base URL of the REST service (including the /api prefix)"
    )
    timeout_seconds: float = Field(
        default=5.0,
        gt=0,
        description="Transport timeout; a timeout counts as remote unavailable"
    )

    @field_validator('url')
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Resource paths are appended as '/<kind>', so drop a trailing slash."""
        v = v.strip()
        if not v:
            raise ValueError("API url must not be empty")
        return v.rstrip("/")


class LocalStoreSettings(BaseSettings):
    """Local fallback store configuration."""

    model_config = SettingsConfigDict(
        env_prefix="FINANCE_LOCAL_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    data_dir: str = Field(
        default=".finance_data",
        description="Directory holding one JSON file per slot"
    )
    lock_timeout_seconds: float = Field(
        default=5.0,
        gt=0,
        description="How long to wait for another process writing a slot"
    )


class ServerSettings(BaseSettings):
    """REST service (record store) configuration."""

    model_config = SettingsConfigDict(
        env_prefix="FINANCE_SERVER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    host: str = Field(
        default="127.0.0.1",
        description="Interface the REST service binds to"
    )
    port: int = Field(
        default=5000,
        ge=1,
        le=65535,
    )
    data_dir: str = Field(
        default=".finance_db",
        description="Directory holding one JSON document collection per entity kind"
    )
    cors_origins: str = Field(
        default="*",
        description="Comma-separated list of allowed CORS origins"
    )
    lock_timeout_seconds: float = Field(
        default=5.0,
        gt=0,
    )

    @property
    def cors_origins_list(self) -> list[str]:
        """Get CORS origins as a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="FINANCE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    log_level: str = Field(
        default="INFO",
        description="Log level for structured logging"
    )
    currency: str = Field(
        default="USD",
        min_length=3,
        max_length=3,
        description="Currency code used when formatting amounts"
    )

    # Budget status
    budget_on_track_tolerance: float = Field(
        default=0.005,
        ge=0.0,
        description="Max |actual - budget| still considered on-track (0 = exact match)"
    )

    # Dashboard
    recent_transactions_limit: int = Field(
        default=5,
        ge=1,
        le=50,
        description="How many transactions the dashboard lists as recent"
    )

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Only accept standard logging level names."""
        level = v.strip().upper()
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

    # Sub-settings are loaded lazily so one bad group doesn't block the others

    @property
    def api(self) -> ApiSettings:
        return ApiSettings()

    @property
    def local_store(self) -> LocalStoreSettings:
        return LocalStoreSettings()

    @property
    def server(self) -> ServerSettings:
        return ServerSettings()

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
    {setting_name}_error entries for the failing groups.
    """
    results = {}

    settings = get_settings()

    for name in ("api", "local_store", "server", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
