"""Tests for configuration loading and validation."""

from __future__ import annotations

import pytest

from config import BLACKLISTED_ENDPOINTS, PRIMARY_ENDPOINTS, CacheConfig, Config


class TestCacheConfig:
    def test_defaults(self) -> None:
        settings = CacheConfig()

        assert settings.base_refresh_interval == 8 * 60 * 60
        assert settings.favorite_reset_interval == 24 * 60 * 60
        assert settings.flex_capacity == 100
        assert settings.flex_clear_amount == 60
        assert settings.promotion_threshold == 7
        assert "/movie/popular" in settings.primary_endpoints
        assert "/configuration" in settings.blacklisted_endpoints
        assert settings.single_flight is False

    def test_endpoint_lists_are_disjoint(self) -> None:
        assert not PRIMARY_ENDPOINTS & BLACKLISTED_ENDPOINTS

    def test_endpoint_sets_frozen(self) -> None:
        settings = CacheConfig(primary_endpoints=["/a", "/b"])
        assert settings.primary_endpoints == frozenset({"/a", "/b"})

    @pytest.mark.parametrize("overrides", [
        {"base_refresh_interval": 0},
        {"favorite_reset_interval": -1},
        {"flex_capacity": 0},
        {"flex_clear_amount": 0},
        {"flex_capacity": 10, "flex_clear_amount": 11},
        {"promotion_threshold": 0},
    ])
    def test_invalid_values_rejected(self, overrides) -> None:
        with pytest.raises(ValueError):
            CacheConfig(**overrides)

    def test_from_env(self, monkeypatch) -> None:
        monkeypatch.setenv("FLEX_CACHE_CAPACITY", "50")
        monkeypatch.setenv("FLEX_CACHE_CLEAR_AMOUNT", "20")
        monkeypatch.setenv("CACHE_SINGLE_FLIGHT", "true")

        settings = CacheConfig.from_env()

        assert settings.flex_capacity == 50
        assert settings.flex_clear_amount == 20
        assert settings.single_flight is True


class TestConfig:
    def test_base_url_trailing_slash_stripped(self) -> None:
        assert Config(tmdb_base_url="https://api.themoviedb.org/3/").tmdb_base_url == "https://api.themoviedb.org/3"

    def test_from_env(self, monkeypatch) -> None:
        monkeypatch.setenv("TMDB_API_KEY", "abc")
        monkeypatch.setenv("TMDB_BASE_URL", "https://example.test/3/")
        monkeypatch.setenv("CORS_ORIGINS", "https://a.test, https://b.test")

        loaded = Config.from_env()

        assert loaded.tmdb_api_key == "abc"
        assert loaded.tmdb_base_url == "https://example.test/3"
        assert loaded.cors_origins == ["https://a.test", "https://b.test"]
