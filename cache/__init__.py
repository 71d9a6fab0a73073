"""Cache module - Tiered response caching for upstream API calls."""

from .entry_store import CacheEntry, EntryStore
from .cache_manager import (
    EndpointClass,
    TieredCacheManager,
    get_cache_manager,
    make_cache_key,
    normalize_params,
)

__all__ = [
    'CacheEntry',
    'EntryStore',
    'EndpointClass',
    'TieredCacheManager',
    'get_cache_manager',
    'make_cache_key',
    'normalize_params',
]
