"""Configuration management using Pydantic Settings.

This module provides type-safe configuration management with automatic
environment variable loading and validation using Pydantic Settings v2.

The configuration is organized into logical groups:
- MatchingConfig: Song match threshold and duration tolerances
- CacheConfig: Local cache validity, quota limits and persistence debounce
- RetryConfig: Backoff settings for outbound catalog requests
- APIConfig: Spotify Web API endpoints and per-strategy result limits
- CredentialsConfig: Spotify client credentials
- DatabaseConfig: Durable key-value storage location and capacity
- LoggingConfig: Logging levels, files, and debugging options
"""

import os
from pathlib import Path
from typing import Any, Self

from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

KIB = 1024
MIB = 1024 * 1024
DAY_MS = 24 * 60 * 60 * 1000


class MatchingConfig(BaseModel):
    """Song matching and duration comparison settings."""

    song_match_threshold: float = Field(default=0.7, ge=0.0, le=1.0)
    length_tolerance_ms: int = Field(default=1000, ge=0)
    warning_tolerance_ms: int = Field(default=5000, ge=0)

    @model_validator(mode="after")
    def check_tolerances(self) -> Self:
        if self.warning_tolerance_ms < self.length_tolerance_ms:
            raise ValueError(
                "warning_tolerance_ms must be >= length_tolerance_ms "
                f"({self.warning_tolerance_ms} < {self.length_tolerance_ms})"
            )
        return self


class CacheConfig(BaseModel):
    """Local search/track cache configuration."""

    enabled: bool = True
    max_age_ms: int = Field(default=30 * DAY_MS, gt=0)
    max_size_bytes: int = Field(default=5 * MIB, gt=0)
    cleanup_threshold_bytes: int = Field(default=int(4.5 * MIB), gt=0)
    min_remaining_bytes: int = Field(default=500 * KIB, ge=0)
    save_delay_ms: int = Field(default=500, ge=0)
    prune_ratios: tuple[float, ...] = (0.3, 0.5, 0.7, 0.9)
    search_storage_key: str = "spotifySearchCache"
    track_storage_key: str = "spotifyTrackCache"
    # Persisted enable/disable choice made through the CLI
    preference_storage_key: str = "songcheckCacheEnabled"

    @model_validator(mode="after")
    def check_limits(self) -> Self:
        if self.cleanup_threshold_bytes > self.max_size_bytes:
            raise ValueError("cleanup_threshold_bytes must not exceed max_size_bytes")
        if self.min_remaining_bytes >= self.max_size_bytes:
            raise ValueError("min_remaining_bytes must be smaller than max_size_bytes")
        if not self.prune_ratios or any(not 0 < r <= 1 for r in self.prune_ratios):
            raise ValueError("prune_ratios must be non-empty ratios in (0, 1]")
        return self

    @property
    def target_size_bytes(self) -> int:
        """Size the cache is pruned down to under quota pressure."""
        return self.max_size_bytes - self.min_remaining_bytes


class RetryConfig(BaseModel):
    """Retry/backoff settings for rate limited or failed requests."""

    max_retries: int = Field(default=3, ge=0)
    initial_delay_ms: int = Field(default=1000, ge=0)
    max_delay_ms: int = Field(default=60000, ge=0)
    jitter_ms: int = Field(default=500, ge=0)


class APIConfig(BaseModel):
    """Spotify Web API configuration."""

    base_url: str = "https://api.spotify.com/v1"
    auth_endpoint: str = "https://accounts.spotify.com/api/token"
    timeout_seconds: float = 30.0

    # Result limits per search strategy
    primary_search_limit: int = 5
    cjk_search_limit: int = 10
    loose_search_limit: int = 2


class CredentialsConfig(BaseModel):
    """API credentials and authentication settings."""

    spotify_client_id: str = ""
    spotify_client_secret: str = ""


class DatabaseConfig(BaseModel):
    """Durable key-value storage settings."""

    url: str = "sqlite+aiosqlite:///data/songcheck.db"
    echo: bool = False
    capacity_bytes: int = Field(default=10 * MIB, gt=0)


class LoggingConfig(BaseModel):
    """Logging configuration for console and file output."""

    console_level: str = "INFO"
    file_level: str = "DEBUG"
    log_file: Path = Path("songcheck.log")
    real_time_debug: bool = True


class Settings(BaseSettings):
    """Main application settings with environment variable support.

    Environment variables can be set using flat naming or nested naming:
    - Flat: SPOTIFY_CLIENT_ID, SONG_MATCH_THRESHOLD, CACHE_ENABLED
    - Nested: CREDENTIALS__SPOTIFY_CLIENT_ID, MATCHING__SONG_MATCH_THRESHOLD

    The .env file is automatically loaded for development convenience.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    matching: MatchingConfig = MatchingConfig()
    cache: CacheConfig = CacheConfig()
    retry: RetryConfig = RetryConfig()
    api: APIConfig = APIConfig()
    credentials: CredentialsConfig = CredentialsConfig()
    database: DatabaseConfig = DatabaseConfig()
    logging: LoggingConfig = LoggingConfig()

    data_dir: Path = Path("data")

    @model_validator(mode="before")
    @classmethod
    def transform_flat_env_vars(cls, data: Any) -> Any:
        """Map flat environment variables onto the nested structure.

        Handles flat env vars (SPOTIFY_CLIENT_ID) and maps them to the
        nested structure expected by the models (credentials.spotify_client_id).
        Flat names come from init kwargs, the .env file or the process environment.
        """
        if not isinstance(data, dict):
            return data

        mappings = {
            "credentials": {
                "spotify_client_id": "spotify_client_id",
                "spotify_client_secret": "spotify_client_secret",
            },
            "matching": {
                "song_match_threshold": "song_match_threshold",
                "length_tolerance_ms": "length_tolerance_ms",
                "warning_tolerance_ms": "warning_tolerance_ms",
            },
            "cache": {
                "cache_enabled": "enabled",
                "cache_max_age_ms": "max_age_ms",
                "cache_max_size_bytes": "max_size_bytes",
            },
            "database": {
                "database_url": "url",
            },
            "logging": {
                "console_log_level": "console_level",
                "file_log_level": "file_level",
                "log_file": "log_file",
            },
        }

        transformed: dict[str, dict[str, Any]] = {}
        for section, mapping in mappings.items():
            for env_key, field_key in mapping.items():
                if env_key in data:
                    transformed.setdefault(section, {})[field_key] = data.pop(env_key)
                elif env_key.upper() in os.environ:
                    transformed.setdefault(section, {})[field_key] = os.environ[env_key.upper()]

        for section, values in transformed.items():
            existing = data.get(section)
            if isinstance(existing, dict):
                data[section] = {**values, **existing}
            else:
                data[section] = values

        return data


# Singleton instance for the composition root
settings = Settings()
