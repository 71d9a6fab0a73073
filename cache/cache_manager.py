"""
Tiered Cache Manager - Three Tiers

Tier 1: Base cache (refreshed every 8 hours)
  - Primary listing endpoints (popular, top rated, now playing, ...)
  - Whole tier cleared once the refresh interval has passed

Tier 2: Flex cache (bounded, 100 entries)
  - Every other cacheable endpoint
  - Oldest 60 entries dropped in one batch when full
  - Access counted per entry

Tier 3: Favorite cache (reset every 24 hours)
  - Flex entries accessed 7 times get promoted here
  - Whole tier cleared once the reset interval has passed

Blacklisted endpoints (configuration, validation, health) are never cached.
"""

import asyncio
import json
import logging
import time
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Iterable, Mapping, Optional, Tuple, Union

from config import CacheConfig, config
from .entry_store import CacheEntry, EntryStore

logger = logging.getLogger(__name__)

Params = Union[Mapping[str, Any], Iterable[Tuple[str, Any]], None]
Producer = Callable[[], Awaitable[Any]]


class EndpointClass(str, Enum):
    """How an endpoint is treated by the cache."""
    BLACKLISTED = 'blacklisted'
    PRIMARY = 'primary'
    DEFAULT = 'default'


def normalize_params(params: Params = None) -> Dict[str, Any]:
    """
    Collapse params into a dict without losing repeated keys.

    Key/value pairs that repeat a key are grouped into a list in the order
    given, e.g. [("a", 1), ("a", 2)] -> {"a": [1, 2]}.
    """
    if params is None:
        return {}
    if isinstance(params, Mapping):
        return dict(params)

    grouped: Dict[str, list] = {}
    for name, value in params:
        grouped.setdefault(name, []).append(value)
    return {name: values[0] if len(values) == 1 else values for name, values in grouped.items()}


def make_cache_key(endpoint: str, params: Params = None) -> str:
    """
    Build the cache key for an endpoint and its query parameters.

    Parameters are serialized as sorted-key JSON, so the same parameters in a
    different order produce the same key.
    """
    normalized = normalize_params(params)
    encoded = json.dumps(normalized, sort_keys=True, separators=(',', ':'), default=str)
    return f"{endpoint}_{encoded}"


class TieredCacheManager:
    """
    Three-tier response cache in front of the upstream API.

    All callers go through resolve(). Expiry is lazy: interval checks run at
    the start of each call, there are no background timers.
    """

    def __init__(self, settings: Optional[CacheConfig] = None, clock: Callable[[], float] = time.time):
        self._settings = settings or config.cache
        self._clock = clock

        self._base = EntryStore('base', clock=clock)
        self._flex = EntryStore('flex', clock=clock)
        self._favorite = EntryStore('favorite', clock=clock)

        now = clock()
        self._last_base_refresh = now
        self._last_favorite_reset = now

        self._inflight: Dict[str, "asyncio.Future[Any]"] = {}
        self._counters = self._empty_counters()

    @property
    def settings(self) -> CacheConfig:
        return self._settings

    # =========================================================================
    # Classification
    # =========================================================================

    def classify(self, endpoint: str) -> EndpointClass:
        """Blacklist wins over primary; everything else is default."""
        if endpoint in self._settings.blacklisted_endpoints:
            return EndpointClass.BLACKLISTED
        if endpoint in self._settings.primary_endpoints:
            return EndpointClass.PRIMARY
        return EndpointClass.DEFAULT

    # =========================================================================
    # Entry point
    # =========================================================================

    async def resolve(self, endpoint: str, params: Params, produce: Producer) -> Any:
        """
        Return the response for (endpoint, params), from cache when possible.

        Args:
            endpoint: Logical upstream path, e.g. "/movie/popular"
            params: Query parameters (mapping or key/value pairs)
            produce: Zero-argument coroutine function doing the upstream fetch

        Errors raised by produce propagate unchanged and nothing is cached.
        """
        kind = self.classify(endpoint)
        if kind is EndpointClass.BLACKLISTED:
            self._counters['bypasses'] += 1
            return await produce()

        key = make_cache_key(endpoint, params)
        self._reset_favorites_if_due()

        if kind is EndpointClass.PRIMARY:
            return await self._resolve_primary(key, produce)
        return await self._resolve_default(key, produce)

    # =========================================================================
    # Tier 1: Base
    # =========================================================================

    async def _resolve_primary(self, key: str, produce: Producer) -> Any:
        self._refresh_base_if_due()

        entry = self._base.peek(key)
        if entry is not None:
            self._counters['base_hits'] += 1
            logger.debug(f"Base hit: {key}")
            return entry.value

        self._counters['misses'] += 1
        logger.debug(f"Base miss: {key}")
        return await self._produce(key, produce, self._store_base)

    def _store_base(self, key: str, data: Any) -> None:
        self._base.push(key, self._new_entry(data))

    def _refresh_base_if_due(self) -> None:
        now = self._clock()
        if now - self._last_base_refresh > self._settings.base_refresh_interval:
            dropped = self._base.size()
            self._base.clear()
            self._last_base_refresh = now
            self._counters['base_refreshes'] += 1
            logger.info(f"Base cache refreshed ({dropped} entries dropped)")

    # =========================================================================
    # Tiers 2 + 3: Flex and Favorite
    # =========================================================================

    async def _resolve_default(self, key: str, produce: Producer) -> Any:
        favorite = self._favorite.peek(key)
        if favorite is not None:
            self._counters['favorite_hits'] += 1
            logger.debug(f"Favorite hit: {key}")
            return favorite.value

        previous = self._flex.pop(key)
        if previous is not None:
            self._counters['flex_hits'] += 1
            logger.debug(f"Flex hit: {key}")
            self._record_flex_access(key, previous.value, previous)
            return previous.value

        self._counters['misses'] += 1
        logger.debug(f"Flex miss: {key}")
        return await self._produce(key, produce, self._store_default)

    def _store_default(self, key: str, data: Any) -> None:
        # Another call may have stored or promoted this key while we waited
        if self._favorite.has(key):
            self._favorite.update(key, data)
            return

        self._record_flex_access(key, data, self._flex.pop(key))

    def _record_flex_access(self, key: str, value: Any, previous: Optional[CacheEntry]) -> None:
        """
        Count one access for a key that is not currently stored in flex.

        Promotes to favorite once the count reaches the threshold, otherwise
        stores the entry at the newest flex position.
        """
        now = self._clock()
        count = (previous.access_count if previous else 0) + 1

        if count >= self._settings.promotion_threshold:
            self._promote(key, value)
            return

        self._make_room_in_flex()
        created_at = previous.created_at if previous else now
        self._flex.push(key, CacheEntry(
            value=value,
            created_at=created_at,
            last_accessed=now,
            access_count=count,
        ))

    def _promote(self, key: str, value: Any) -> None:
        # Value only; the access count stays behind with the flex entry
        self._favorite.push(key, self._new_entry(value))
        self._counters['promotions'] += 1
        logger.info(f"Promoted to favorite cache: {key}")

    def _make_room_in_flex(self) -> None:
        capacity = self._settings.flex_capacity
        if self._flex.size() < capacity:
            return

        dropped = self._flex.trim_oldest(capacity - self._settings.flex_clear_amount)
        self._counters['evictions'] += dropped
        logger.info(f"Flex cache full, evicted {dropped} oldest entries")

    def _reset_favorites_if_due(self) -> None:
        now = self._clock()
        if now - self._last_favorite_reset > self._settings.favorite_reset_interval:
            dropped = self._favorite.size()
            self._favorite.clear()
            self._last_favorite_reset = now
            self._counters['favorite_resets'] += 1
            logger.info(f"Favorite cache reset ({dropped} entries dropped)")

    # =========================================================================
    # Upstream calls
    # =========================================================================

    async def _produce(self, key: str, produce: Producer, store: Callable[[str, Any], None]) -> Any:
        """
        Run the producer and hand a successful result to store().

        With single_flight enabled, concurrent misses for one key wait on the
        same upstream call. The result is stored once, from the task itself,
        so it is kept even if the caller that started the call is cancelled.
        """
        if not self._settings.single_flight:
            data = await produce()
            store(key, data)
            return data

        pending = self._inflight.get(key)
        if pending is not None:
            return await asyncio.shield(pending)

        task = asyncio.ensure_future(produce())
        self._inflight[key] = task

        def _finish(finished: "asyncio.Future[Any]") -> None:
            if self._inflight.get(key) is finished:
                del self._inflight[key]
            if not finished.cancelled() and finished.exception() is None:
                store(key, finished.result())

        # Registered before any waiter's shield, so the store runs before waiters resume
        task.add_done_callback(_finish)
        return await asyncio.shield(task)

    def _new_entry(self, value: Any) -> CacheEntry:
        now = self._clock()
        return CacheEntry(value=value, created_at=now, last_accessed=now)

    # =========================================================================
    # Introspection
    # =========================================================================

    def tier_of(self, endpoint: str, params: Params = None) -> Optional[str]:
        """Name of the tier currently holding this request, or None."""
        key = make_cache_key(endpoint, params)
        for store in (self._base, self._favorite, self._flex):
            if store.has(key):
                return store.name
        return None

    def flex_access_count(self, endpoint: str, params: Params = None) -> Optional[int]:
        """Access count of a flex entry, or None if the request is not in flex."""
        entry = self._flex.peek(make_cache_key(endpoint, params))
        return entry.access_count if entry is not None else None

    def flex_keys(self) -> list:
        """Flex keys, oldest first."""
        return self._flex.keys()

    def stats(self) -> dict:
        """Get cache statistics for all tiers."""
        now = self._clock()
        return {
            'base': {
                **self._base.stats(),
                'seconds_since_refresh': now - self._last_base_refresh,
                'refresh_interval': self._settings.base_refresh_interval,
            },
            'flex': {
                **self._flex.stats(),
                'capacity': self._settings.flex_capacity,
                'clear_amount': self._settings.flex_clear_amount,
            },
            'favorite': {
                **self._favorite.stats(),
                'seconds_since_reset': now - self._last_favorite_reset,
                'reset_interval': self._settings.favorite_reset_interval,
                'promotion_threshold': self._settings.promotion_threshold,
            },
            'counters': dict(self._counters),
        }

    def clear_all(self) -> None:
        """Clear all tiers and restart both expiry clocks."""
        self._base.clear()
        self._flex.clear()
        self._favorite.clear()
        now = self._clock()
        self._last_base_refresh = now
        self._last_favorite_reset = now
        self._counters = self._empty_counters()
        logger.info("All cache tiers cleared")

    @staticmethod
    def _empty_counters() -> Dict[str, int]:
        return {
            'base_hits': 0,
            'flex_hits': 0,
            'favorite_hits': 0,
            'misses': 0,
            'bypasses': 0,
            'promotions': 0,
            'evictions': 0,
            'base_refreshes': 0,
            'favorite_resets': 0,
        }


# Shared instance, created on first use
_shared_manager: Optional[TieredCacheManager] = None


def get_cache_manager() -> TieredCacheManager:
    """Get or create the process-wide cache manager."""
    global _shared_manager
    if _shared_manager is None:
        _shared_manager = TieredCacheManager()
    return _shared_manager
