"""Tests for application settings."""

from pydantic import ValidationError
import pytest

from songcheck.config import CacheConfig, MatchingConfig, Settings


class TestSettings:
    """Test defaults, validation and environment mapping."""

    def test_defaults(self):
        """Test the documented default values."""
        app_settings = Settings(_env_file=None)

        assert app_settings.matching.song_match_threshold == 0.7
        assert app_settings.matching.length_tolerance_ms == 1000
        assert app_settings.matching.warning_tolerance_ms == 5000
        assert app_settings.cache.max_size_bytes == 5 * 1024 * 1024
        assert app_settings.cache.target_size_bytes == 5 * 1024 * 1024 - 500 * 1024
        assert app_settings.retry.max_retries == 3
        assert app_settings.api.primary_search_limit == 5

    def test_warning_tolerance_below_length_tolerance(self):
        """Test tolerances must be ordered."""
        with pytest.raises(ValidationError):
            MatchingConfig(length_tolerance_ms=5000, warning_tolerance_ms=1000)

    @pytest.mark.parametrize(
        "overrides",
        [
            {"max_size_bytes": 1000, "cleanup_threshold_bytes": 2000},
            {"max_size_bytes": 1000, "cleanup_threshold_bytes": 900, "min_remaining_bytes": 1000},
            {"prune_ratios": ()},
            {"prune_ratios": (0.5, 1.5)},
        ],
    )
    def test_invalid_cache_limits(self, overrides):
        """Test inconsistent cache limits are rejected."""
        with pytest.raises(ValidationError):
            CacheConfig(**overrides)

    def test_flat_environment_variables(self, monkeypatch):
        """Test flat variable names map onto nested sections."""
        monkeypatch.setenv("SPOTIFY_CLIENT_ID", "client-id")
        monkeypatch.setenv("SONG_MATCH_THRESHOLD", "0.8")
        monkeypatch.setenv("CACHE_ENABLED", "false")

        app_settings = Settings(_env_file=None)

        assert app_settings.credentials.spotify_client_id == "client-id"
        assert app_settings.matching.song_match_threshold == 0.8
        assert app_settings.cache.enabled is False

    def test_nested_environment_variables(self, monkeypatch):
        """Test double-underscore variables reach nested fields."""
        monkeypatch.setenv("RETRY__MAX_RETRIES", "5")

        assert Settings(_env_file=None).retry.max_retries == 5
