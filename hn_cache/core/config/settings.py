#!/usr/bin/env python3
"""
Centralized Configuration Module using Pydantic Settings

This module provides type-safe, environment-based configuration for the
HN cache service. All configuration is centralized here to ensure
consistency across modules.

Architectural Decision: Pydantic Settings for type safety and validation
- Environment variable loading with .env support
- Type validation at startup (fail fast on misconfiguration)
- Easy testing with override mechanisms
"""

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from hn_cache.core.config.constants import ALL_CATEGORIES
from hn_cache.core.config.constants import CACHING_INTERVAL as DEFAULT_CACHING_INTERVAL
from hn_cache.core.config.constants import FLUSH_INTERVAL as DEFAULT_FLUSH_INTERVAL
from hn_cache.core.config.constants import MAX_PAGE_SIZE as DEFAULT_MAX_PAGE_SIZE
from hn_cache.core.config.constants import MAX_RETRIES as DEFAULT_MAX_RETRIES
from hn_cache.core.config.constants import RETRY_DELAY as DEFAULT_RETRY_DELAY
from hn_cache.core.config.constants import UPSTREAM_BASE_URL as DEFAULT_UPSTREAM_BASE_URL


class RedisSettings(BaseSettings):
    """
    Redis configuration for the cache store.

    The store never sets Redis TTLs; freshness is computed at read time
    from the companion "{key}:time" entry.
    """

    REDIS_HOST: str = Field(default="localhost", description="Redis server host")
    REDIS_PORT: int = Field(default=6379, description="Redis server port")
    REDIS_DB: int = Field(default=0, description="Redis database number")
    REDIS_PASSWORD: str | None = Field(default=None, description="Redis password (if required)")
    REDIS_MAX_CONNECTIONS: int = Field(default=50, description="Maximum total connections")
    REDIS_SOCKET_TIMEOUT: int = Field(default=5, description="Socket timeout in seconds")
    REDIS_SOCKET_CONNECT_TIMEOUT: int = Field(default=5, description="Connection timeout in seconds")
    REDIS_HEALTH_CHECK_INTERVAL: int = Field(default=30, description="Health check interval in seconds")
    REDIS_RECONNECT_INTERVAL: float = Field(default=5.0, ge=0, description="Minimum seconds between reconnect attempts")

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class UpstreamSettings(BaseSettings):
    """
    Upstream content API configuration.

    Retry policy is a fixed delay between attempts; every failure is
    retried the same way.
    """

    UPSTREAM_BASE_URL: str = Field(default=DEFAULT_UPSTREAM_BASE_URL, description="Upstream API base URL")
    UPSTREAM_TIMEOUT: float = Field(default=10.0, description="Per-attempt request timeout in seconds")
    UPSTREAM_MAX_RETRIES: int = Field(default=DEFAULT_MAX_RETRIES, ge=0, description="Attempts beyond the first")
    UPSTREAM_RETRY_DELAY: float = Field(default=DEFAULT_RETRY_DELAY, ge=0, description="Fixed delay between attempts")
    UPSTREAM_MAX_CONCURRENCY: int = Field(default=20, gt=0, description="Upstream requests allowed in flight at once")

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class CacheSettings(BaseSettings):
    """Freshness, flush and pagination configuration."""

    CACHING_INTERVAL: int = Field(default=DEFAULT_CACHING_INTERVAL, gt=0, description="Freshness window in seconds")
    FLUSH_INTERVAL: int = Field(default=DEFAULT_FLUSH_INTERVAL, gt=0, description="Full cache flush period in seconds")
    MAX_PAGE_SIZE: int = Field(default=DEFAULT_MAX_PAGE_SIZE, gt=0, description="Upper bound for 'first'")

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class WarmerSettings(BaseSettings):
    """Background cache warming configuration."""

    WARMER_ENABLED: bool = Field(default=True, description="Run the cache warmer in the app lifespan")
    WARM_CATEGORIES: list[str] = Field(default=ALL_CATEGORIES, description="Hot categories to refresh")
    WARM_ITEMS_PER_CATEGORY: int = Field(default=DEFAULT_MAX_PAGE_SIZE, ge=0, description="Leading items refreshed per category")
    WARM_CHILDREN: bool = Field(default=True, description="Also refresh first-level children")

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class LoggingSettings(BaseSettings):
    """
    Logging configuration for structured logging.

    Architectural Decision: structlog for production-grade logging
    """

    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_FORMAT: Literal["json", "console"] = Field(default="json", description="Log output format")

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of {valid_levels}")
        return v.upper()

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class ApplicationSettings(BaseSettings):
    """General application settings."""

    ENVIRONMENT: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Application environment"
    )
    APP_NAME: str = Field(default="HN Cache Service", description="Application name")
    APP_VERSION: str = Field(default="1.0.0", description="Application version")
    API_HOST: str = Field(default="0.0.0.0", description="API host")
    API_PORT: int = Field(default=8000, description="API port")
    API_PREFIX: str = Field(default="/api/v1", description="Route prefix")

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class Settings(BaseSettings):
    """
    Main settings class that aggregates all configuration sections.

    Usage:
        from hn_cache.core.config.settings import get_settings

        settings = get_settings()
        redis_host = settings.redis.REDIS_HOST
        interval = settings.cache.CACHING_INTERVAL

    Fields are declared flat so a single .env file drives everything;
    the grouped views are exposed as properties.
    """

    # Redis settings
    REDIS_HOST: str = Field(default="localhost", description="Redis server host")
    REDIS_PORT: int = Field(default=6379, description="Redis server port")
    REDIS_DB: int = Field(default=0, description="Redis database number")
    REDIS_PASSWORD: str | None = Field(default=None, description="Redis password (if required)")
    REDIS_MAX_CONNECTIONS: int = Field(default=50, description="Maximum total connections")
    REDIS_SOCKET_TIMEOUT: int = Field(default=5, description="Socket timeout in seconds")
    REDIS_SOCKET_CONNECT_TIMEOUT: int = Field(default=5, description="Connection timeout in seconds")
    REDIS_HEALTH_CHECK_INTERVAL: int = Field(default=30, description="Health check interval in seconds")
    REDIS_RECONNECT_INTERVAL: float = Field(default=5.0, ge=0, description="Minimum seconds between reconnect attempts")

    # Upstream settings
    UPSTREAM_BASE_URL: str = Field(default=DEFAULT_UPSTREAM_BASE_URL, description="Upstream API base URL")
    UPSTREAM_TIMEOUT: float = Field(default=10.0, description="Per-attempt request timeout in seconds")
    UPSTREAM_MAX_RETRIES: int = Field(default=DEFAULT_MAX_RETRIES, ge=0, description="Attempts beyond the first")
    UPSTREAM_RETRY_DELAY: float = Field(default=DEFAULT_RETRY_DELAY, ge=0, description="Fixed delay between attempts")
    UPSTREAM_MAX_CONCURRENCY: int = Field(default=20, gt=0, description="Upstream requests allowed in flight at once")

    # Cache settings
    CACHING_INTERVAL: int = Field(default=DEFAULT_CACHING_INTERVAL, gt=0, description="Freshness window in seconds")
    FLUSH_INTERVAL: int = Field(default=DEFAULT_FLUSH_INTERVAL, gt=0, description="Full cache flush period in seconds")
    MAX_PAGE_SIZE: int = Field(default=DEFAULT_MAX_PAGE_SIZE, gt=0, description="Upper bound for 'first'")

    # Warmer settings
    WARMER_ENABLED: bool = Field(default=True, description="Run the cache warmer in the app lifespan")
    WARM_CATEGORIES: list[str] = Field(default=ALL_CATEGORIES, description="Hot categories to refresh")
    WARM_ITEMS_PER_CATEGORY: int = Field(default=DEFAULT_MAX_PAGE_SIZE, ge=0, description="Leading items refreshed per category")
    WARM_CHILDREN: bool = Field(default=True, description="Also refresh first-level children")

    # Logging settings
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_FORMAT: Literal["json", "console"] = Field(default="json", description="Log output format")

    # Application settings
    ENVIRONMENT: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Application environment"
    )
    APP_NAME: str = Field(default="HN Cache Service", description="Application name")
    APP_VERSION: str = Field(default="1.0.0", description="Application version")
    API_HOST: str = Field(default="0.0.0.0", description="API host")
    API_PORT: int = Field(default=8000, description="API port")
    API_PREFIX: str = Field(default="/api/v1", description="Route prefix")

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of {valid_levels}")
        return v.upper()

    @field_validator("WARM_CATEGORIES")
    @classmethod
    def validate_categories(cls, v):
        """Reject categories the upstream does not publish."""
        unknown = [category for category in v if category not in ALL_CATEGORIES]
        if unknown:
            raise ValueError(f"Unknown WARM_CATEGORIES {unknown}; expected a subset of {ALL_CATEGORIES}")
        return v

    @property
    def redis(self) -> 'RedisSettings':
        """Get Redis settings."""
        return RedisSettings(
            REDIS_HOST=self.REDIS_HOST,
            REDIS_PORT=self.REDIS_PORT,
            REDIS_DB=self.REDIS_DB,
            REDIS_PASSWORD=self.REDIS_PASSWORD,
            REDIS_MAX_CONNECTIONS=self.REDIS_MAX_CONNECTIONS,
            REDIS_SOCKET_TIMEOUT=self.REDIS_SOCKET_TIMEOUT,
            REDIS_SOCKET_CONNECT_TIMEOUT=self.REDIS_SOCKET_CONNECT_TIMEOUT,
            REDIS_HEALTH_CHECK_INTERVAL=self.REDIS_HEALTH_CHECK_INTERVAL,
            REDIS_RECONNECT_INTERVAL=self.REDIS_RECONNECT_INTERVAL
        )

    @property
    def upstream(self) -> 'UpstreamSettings':
        """Get upstream API settings."""
        return UpstreamSettings(
            UPSTREAM_BASE_URL=self.UPSTREAM_BASE_URL,
            UPSTREAM_TIMEOUT=self.UPSTREAM_TIMEOUT,
            UPSTREAM_MAX_RETRIES=self.UPSTREAM_MAX_RETRIES,
            UPSTREAM_RETRY_DELAY=self.UPSTREAM_RETRY_DELAY,
            UPSTREAM_MAX_CONCURRENCY=self.UPSTREAM_MAX_CONCURRENCY,
        )

    @property
    def cache(self) -> 'CacheSettings':
        """Get cache settings."""
        return CacheSettings(
            CACHING_INTERVAL=self.CACHING_INTERVAL,
            FLUSH_INTERVAL=self.FLUSH_INTERVAL,
            MAX_PAGE_SIZE=self.MAX_PAGE_SIZE
        )

    @property
    def warmer(self) -> 'WarmerSettings':
        """Get cache warmer settings."""
        return WarmerSettings(
            WARMER_ENABLED=self.WARMER_ENABLED,
            WARM_CATEGORIES=self.WARM_CATEGORIES,
            WARM_ITEMS_PER_CATEGORY=self.WARM_ITEMS_PER_CATEGORY,
            WARM_CHILDREN=self.WARM_CHILDREN
        )

    @property
    def logging(self) -> 'LoggingSettings':
        """Get logging settings."""
        return LoggingSettings(
            LOG_LEVEL=self.LOG_LEVEL,
            LOG_FORMAT=self.LOG_FORMAT
        )

    @property
    def app(self) -> 'ApplicationSettings':
        """Get application settings."""
        return ApplicationSettings(
            ENVIRONMENT=self.ENVIRONMENT,
            APP_NAME=self.APP_NAME,
            APP_VERSION=self.APP_VERSION,
            API_HOST=self.API_HOST,
            API_PORT=self.API_PORT,
            API_PREFIX=self.API_PREFIX
        )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"  # Ignore extra environment variables
    )


# Global settings instance (singleton pattern)
_settings: Settings | None = None


def get_settings() -> Settings:
    """
    Get the global settings instance (singleton).

    Returns:
        Settings: Global settings instance
    """
    global _settings

    if _settings is None:
        _settings = Settings()

    return _settings


def reload_settings() -> Settings:
    """
    Reload settings (useful for testing).

    Returns:
        Settings: New settings instance
    """
    global _settings
    _settings = Settings()
    return _settings
