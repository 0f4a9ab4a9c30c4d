"""
Application configuration using Pydantic Settings.

Loads configuration from environment variables with validation,
type coercion, and sensible defaults.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseConfig(BaseSettings):
    """Relational store configuration."""

    model_config = SettingsConfigDict(env_prefix="DATABASE_")

    url: str = Field(
        default="sqlite+aiosqlite:///./game_catalog.db",
        description="SQLAlchemy async database URL",
    )
    echo: bool = Field(
        default=False,
        description="Log every SQL statement emitted by the engine",
    )
    pool_size: int = Field(
        default=10,
        ge=1,
        le=100,
        description="Connection pool size (ignored for SQLite)",
    )
    max_overflow: int = Field(
        default=20,
        ge=0,
        le=200,
        description="Connections allowed above pool_size (ignored for SQLite)",
    )
    pool_recycle: int = Field(
        default=3600,
        ge=-1,
        description="Seconds before a pooled connection is recycled",
    )

    @field_validator("url")
    @classmethod
    def validate_async_driver(cls, v: str) -> str:
        """Reject synchronous driver URLs for well-known backends."""
        if v.startswith("sqlite:") or v.startswith("postgresql:") or v.startswith("mysql:"):
            raise ValueError(f"Database URL must name an async driver: {v}")
        return v

    @property
    def is_sqlite(self) -> bool:
        """Check if the configured backend is SQLite."""
        return self.url.startswith("sqlite")


class RAWGConfig(BaseSettings):
    """RAWG video game database API configuration."""

    model_config = SettingsConfigDict(env_prefix="RAWG_")

    api_key: SecretStr = Field(
        default=SecretStr(""),
        description="RAWG API key from https://rawg.io/apidocs",
    )
    base_url: str = Field(
        default="https://api.rawg.io/api",
        description="Base URL for the RAWG API",
    )
    requests_per_minute: int = Field(
        default=60,
        ge=1,
        le=600,
        description="Rate limit for API requests per minute",
    )
    timeout_seconds: int = Field(
        default=10,
        ge=1,
        le=120,
        description="HTTP request timeout in seconds",
    )
    search_page_size: int = Field(
        default=20,
        ge=1,
        le=40,
        description="Number of results requested on a text search",
    )

    @property
    def has_api_key(self) -> bool:
        """Check if an API key is configured."""
        return bool(self.api_key.get_secret_value())


class CatalogConfig(BaseSettings):
    """Catalog behavior configuration."""

    model_config = SettingsConfigDict(env_prefix="CATALOG_")

    default_list_limit: int = Field(
        default=200,
        ge=1,
        description="Rows returned by a listing when the caller gives no limit",
    )
    default_feed_limit: int = Field(
        default=150,
        ge=1,
        description="Rows returned by the trending/random feed by default",
    )
    backfill_max_count: int = Field(
        default=10,
        ge=1,
        le=100,
        description="Maximum provider results persisted per escalated search",
    )
    escalation_timeout_seconds: float = Field(
        default=15.0,
        gt=0,
        le=120.0,
        description="Upper bound for the provider call on the search path",
    )


class RetryConfig(BaseSettings):
    """Retry behavior configuration."""

    model_config = SettingsConfigDict(env_prefix="RETRY_")

    max_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Maximum number of retry attempts",
    )
    base_delay_seconds: float = Field(
        default=0.5,
        ge=0.0,
        le=30.0,
        description="Base delay between retries (exponential backoff)",
    )
    max_delay_seconds: float = Field(
        default=10.0,
        ge=0.0,
        le=300.0,
        description="Maximum delay between retries",
    )
    exponential_base: float = Field(
        default=2.0,
        ge=1.5,
        le=4.0,
        description="Base for exponential backoff calculation",
    )


class LoggingConfig(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(env_prefix="LOG_")

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    format: Literal["json", "console"] = Field(
        default="json",
        description="Log output format",
    )
    include_timestamp: bool = Field(
        default=True,
        description="Include timestamp in log entries",
    )


class Settings(BaseSettings):
    """
    Main application settings.

    Aggregates all configuration sections and provides
    a single entry point for configuration access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Environment
    environment: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Deployment environment",
    )

    # Sub-configurations
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    rawg: RAWGConfig = Field(default_factory=RAWGConfig)
    catalog: CatalogConfig = Field(default_factory=CatalogConfig)
    retry: RetryConfig = Field(default_factory=RetryConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached application settings.

    Uses lru_cache to ensure settings are only loaded once
    and reused across the application.

    Returns:
        Settings: Application configuration instance
    """
    return Settings()
