#!/usr/bin/env python3
"""
Centralized Configuration Module using Pydantic Settings

Type-safe, environment-based configuration for the store handles, the
loader defaults and logging.

Architectural Decision: Pydantic Settings for type safety and validation
- Environment variable loading with .env support
- Type validation at startup (fail fast on misconfiguration)
- Easy testing with reload_settings()
"""

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class RedisSettings(BaseSettings):
    """
    Store handle configuration.

    The primary handle takes every write; the replica handle serves the
    batched multi-get. When no replica URL is configured both handles point
    at the primary.
    """

    REDIS_PRIMARY_URL: str = Field(default="redis://localhost:6379/0", description="Primary (read-write) URL")
    REDIS_REPLICA_URL: str | None = Field(default=None, description="Replica (read-preferring) URL")
    REDIS_MAX_CONNECTIONS: int = Field(default=100, description="Maximum connections per handle")
    REDIS_SOCKET_TIMEOUT: float = Field(default=5.0, description="Socket timeout in seconds")
    REDIS_SOCKET_CONNECT_TIMEOUT: float = Field(default=5.0, description="Connection timeout in seconds")
    REDIS_HEALTH_CHECK_INTERVAL: int = Field(default=30, description="Health check interval in seconds")

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)

    @property
    def replica_url(self) -> str:
        """URL of the read-preferring handle."""
        return self.REDIS_REPLICA_URL or self.REDIS_PRIMARY_URL


class LoaderSettings(BaseSettings):
    """Defaults applied to every loader built without explicit options."""

    LOADER_DEFAULT_EXPIRE: int | None = Field(default=None, description="Store-side expiry in seconds")
    LOADER_MAX_BATCH_SIZE: int | None = Field(default=None, description="Largest batch handed to one multi-get")
    LOADER_LOCAL_CACHE: bool = Field(default=True, description="Keep resolved loads in the process")
    LOADER_INVALIDATION_CHANNEL: str | None = Field(default=None, description="Pub/sub channel for clears")

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class LoggingSettings(BaseSettings):
    """Logging configuration for structured logging."""

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


class Settings(BaseSettings):
    """
    Main settings class that aggregates all configuration sections.

    Usage:
        from redis_dataloader.core.config import get_settings

        settings = get_settings()
        primary_url = settings.redis.REDIS_PRIMARY_URL
        expire = settings.loader.LOADER_DEFAULT_EXPIRE
    """

    # Redis settings
    REDIS_PRIMARY_URL: str = Field(default="redis://localhost:6379/0", description="Primary (read-write) URL")
    REDIS_REPLICA_URL: str | None = Field(default=None, description="Replica (read-preferring) URL")
    REDIS_MAX_CONNECTIONS: int = Field(default=100, description="Maximum connections per handle")
    REDIS_SOCKET_TIMEOUT: float = Field(default=5.0, description="Socket timeout in seconds")
    REDIS_SOCKET_CONNECT_TIMEOUT: float = Field(default=5.0, description="Connection timeout in seconds")
    REDIS_HEALTH_CHECK_INTERVAL: int = Field(default=30, description="Health check interval in seconds")

    # Loader settings
    LOADER_DEFAULT_EXPIRE: int | None = Field(default=None, description="Store-side expiry in seconds")
    LOADER_MAX_BATCH_SIZE: int | None = Field(default=None, description="Largest batch handed to one multi-get")
    LOADER_LOCAL_CACHE: bool = Field(default=True, description="Keep resolved loads in the process")
    LOADER_INVALIDATION_CHANNEL: str | None = Field(default=None, description="Pub/sub channel for clears")

    # Logging settings
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

    @field_validator("LOADER_DEFAULT_EXPIRE", "LOADER_MAX_BATCH_SIZE")
    @classmethod
    def validate_positive(cls, v):
        """Expiry and batch size must be positive when set."""
        if v is not None and v <= 0:
            raise ValueError("must be a positive integer")
        return v

    # Nested configuration objects
    @property
    def redis(self) -> RedisSettings:
        """Get Redis settings."""
        return RedisSettings(
            REDIS_PRIMARY_URL=self.REDIS_PRIMARY_URL,
            REDIS_REPLICA_URL=self.REDIS_REPLICA_URL,
            REDIS_MAX_CONNECTIONS=self.REDIS_MAX_CONNECTIONS,
            REDIS_SOCKET_TIMEOUT=self.REDIS_SOCKET_TIMEOUT,
            REDIS_SOCKET_CONNECT_TIMEOUT=self.REDIS_SOCKET_CONNECT_TIMEOUT,
            REDIS_HEALTH_CHECK_INTERVAL=self.REDIS_HEALTH_CHECK_INTERVAL,
        )

    @property
    def loader(self) -> LoaderSettings:
        """Get loader default settings."""
        return LoaderSettings(
            LOADER_DEFAULT_EXPIRE=self.LOADER_DEFAULT_EXPIRE,
            LOADER_MAX_BATCH_SIZE=self.LOADER_MAX_BATCH_SIZE,
            LOADER_LOCAL_CACHE=self.LOADER_LOCAL_CACHE,
            LOADER_INVALIDATION_CHANNEL=self.LOADER_INVALIDATION_CHANNEL,
        )

    @property
    def logging(self) -> LoggingSettings:
        """Get logging settings."""
        return LoggingSettings(LOG_LEVEL=self.LOG_LEVEL, LOG_FORMAT=self.LOG_FORMAT)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
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
