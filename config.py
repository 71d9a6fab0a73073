"""
StreamKeeper - Centralized Configuration

All environment variables, cache constants, and endpoint lists in one place.
"""

import os
from dataclasses import dataclass, field
from typing import FrozenSet, List, Optional


# Hot listing endpoints served from the base tier
PRIMARY_ENDPOINTS = frozenset({
    '/movie/top_rated',
    '/movie/popular',
    '/movie/now_playing',
    '/movie/upcoming',
    '/tv/popular',
    '/tv/on_the_air',
    '/tv/airing_today',
    '/tv/top_rated',
})

# Endpoints that must never be cached
BLACKLISTED_ENDPOINTS = frozenset({
    '/configuration',
    '/validate',
    '/health',
})

DEFAULT_TMDB_BASE_URL = "https://api.themoviedb.org/3"


@dataclass(frozen=True)
class CacheConfig:
    """Tier sizes, intervals and endpoint classification for the cache."""

    base_refresh_interval: float = 8 * 60 * 60       # 8 hours
    favorite_reset_interval: float = 24 * 60 * 60    # 24 hours
    flex_capacity: int = 100
    flex_clear_amount: int = 60
    promotion_threshold: int = 7
    primary_endpoints: FrozenSet[str] = PRIMARY_ENDPOINTS
    blacklisted_endpoints: FrozenSet[str] = BLACKLISTED_ENDPOINTS
    single_flight: bool = False  # Share one upstream call between concurrent misses

    def __post_init__(self):
        if self.base_refresh_interval <= 0:
            raise ValueError("base_refresh_interval must be positive")
        if self.favorite_reset_interval <= 0:
            raise ValueError("favorite_reset_interval must be positive")
        if self.flex_capacity <= 0:
            raise ValueError("flex_capacity must be positive")
        if not 0 < self.flex_clear_amount <= self.flex_capacity:
            raise ValueError("flex_clear_amount must be between 1 and flex_capacity")
        if self.promotion_threshold < 1:
            raise ValueError("promotion_threshold must be at least 1")

        # Accept any iterable for the endpoint sets
        object.__setattr__(self, 'primary_endpoints', frozenset(self.primary_endpoints))
        object.__setattr__(self, 'blacklisted_endpoints', frozenset(self.blacklisted_endpoints))

    @classmethod
    def from_env(cls) -> "CacheConfig":
        """Load cache settings, allowing numeric overrides via env."""
        return cls(
            base_refresh_interval=float(os.environ.get('BASE_CACHE_REFRESH_SECONDS', 8 * 60 * 60)),
            favorite_reset_interval=float(os.environ.get('FAVORITE_CACHE_RESET_SECONDS', 24 * 60 * 60)),
            flex_capacity=int(os.environ.get('FLEX_CACHE_CAPACITY', 100)),
            flex_clear_amount=int(os.environ.get('FLEX_CACHE_CLEAR_AMOUNT', 60)),
            promotion_threshold=int(os.environ.get('FAVORITE_CACHE_THRESHOLD', 7)),
            single_flight=os.environ.get('CACHE_SINGLE_FLIGHT', '').lower() == 'true',
        )


@dataclass
class Config:
    """Application configuration loaded from environment."""

    # Upstream API
    tmdb_api_key: Optional[str] = None
    tmdb_base_url: str = DEFAULT_TMDB_BASE_URL
    request_timeout: float = 15.0

    # CORS for the React frontend
    cors_origins: List[str] = field(default_factory=lambda: [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ])

    cache: CacheConfig = field(default_factory=CacheConfig)

    def __post_init__(self):
        self.tmdb_base_url = self.tmdb_base_url.rstrip('/')

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables."""
        origins = os.environ.get('CORS_ORIGINS')
        kwargs = {}
        if origins:
            kwargs['cors_origins'] = [o.strip() for o in origins.split(',') if o.strip()]

        return cls(
            tmdb_api_key=os.environ.get('TMDB_API_KEY'),
            tmdb_base_url=os.environ.get('TMDB_BASE_URL') or DEFAULT_TMDB_BASE_URL,
            request_timeout=float(os.environ.get('TMDB_TIMEOUT', 15.0)),
            cache=CacheConfig.from_env(),
            **kwargs,
        )


# Global config instance
config = Config.from_env()
