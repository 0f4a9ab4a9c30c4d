"""Tests for configuration module."""

import os
from unittest.mock import patch

import pytest

from game_catalog.config import (
    CatalogConfig,
    DatabaseConfig,
    LoggingConfig,
    RAWGConfig,
    RetryConfig,
    Settings,
    get_settings,
)


class TestRAWGConfig:
    """Tests for RAWG API configuration."""

    def test_default_values(self) -> None:
        """Test default configuration values."""
        with patch.dict(os.environ, {}, clear=True):
            config = RAWGConfig()

        assert config.base_url == "https://api.rawg.io/api"
        assert config.requests_per_minute == 60
        assert config.timeout_seconds == 10
        assert config.search_page_size == 20
        assert not config.has_api_key

    def test_api_key_secret(self) -> None:
        """Test that API key is stored as secret."""
        with patch.dict(os.environ, {"RAWG_API_KEY": "secret_key_123"}):
            config = RAWGConfig()

        # SecretStr should not expose value in repr
        assert "secret_key_123" not in repr(config.api_key)
        assert config.api_key.get_secret_value() == "secret_key_123"
        assert config.has_api_key

    def test_page_size_bounds(self) -> None:
        """Test that RAWG's maximum page size is enforced."""
        with pytest.raises(ValueError):
            RAWGConfig(search_page_size=41)


class TestDatabaseConfig:
    """Tests for database configuration."""

    def test_default_url_is_async_sqlite(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            config = DatabaseConfig()

        assert config.url.startswith("sqlite+aiosqlite://")
        assert config.is_sqlite

    def test_env_override(self) -> None:
        with patch.dict(
            os.environ,
            {"DATABASE_URL": "postgresql+asyncpg://catalog:pw@db/catalog"},
        ):
            config = DatabaseConfig()

        assert config.url == "postgresql+asyncpg://catalog:pw@db/catalog"
        assert not config.is_sqlite

    def test_sync_driver_rejected(self) -> None:
        """Test that synchronous driver URLs are refused."""
        with pytest.raises(ValueError, match="async driver"):
            DatabaseConfig(url="sqlite:///./catalog.db")


class TestCatalogConfig:
    """Tests for catalog behavior configuration."""

    def test_defaults(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            config = CatalogConfig()

        assert config.default_list_limit == 200
        assert config.default_feed_limit == 150
        assert config.backfill_max_count == 10
        assert config.escalation_timeout_seconds > 0

    def test_env_override(self) -> None:
        with patch.dict(os.environ, {"CATALOG_BACKFILL_MAX_COUNT": "5"}):
            config = CatalogConfig()

        assert config.backfill_max_count == 5


class TestRetryConfig:
    """Tests for retry configuration."""

    def test_valid_config(self) -> None:
        config = RetryConfig(
            max_attempts=5,
            base_delay_seconds=1.0,
            max_delay_seconds=30.0,
            exponential_base=2.0,
        )

        assert config.max_attempts == 5
        assert config.base_delay_seconds == 1.0

    def test_max_attempts_bounds(self) -> None:
        with pytest.raises(ValueError):
            RetryConfig(max_attempts=0)

        with pytest.raises(ValueError):
            RetryConfig(max_attempts=11)


class TestLoggingConfig:
    """Tests for logging configuration."""

    def test_valid_levels(self) -> None:
        for level in ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]:
            config = LoggingConfig(level=level)  # type: ignore[arg-type]
            assert config.level == level

    def test_invalid_level(self) -> None:
        with pytest.raises(ValueError):
            LoggingConfig(level="INVALID")  # type: ignore[arg-type]


class TestSettings:
    """Tests for top-level settings."""

    def test_sections_loaded(self) -> None:
        with patch.dict(os.environ, {"ENVIRONMENT": "production", "RAWG_API_KEY": "k"}):
            settings = Settings()

        assert settings.is_production
        assert settings.rawg.has_api_key
        assert settings.catalog.default_list_limit == 200

    def test_get_settings_is_cached(self) -> None:
        get_settings.cache_clear()
        try:
            assert get_settings() is get_settings()
        finally:
            get_settings.cache_clear()
