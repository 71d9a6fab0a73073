"""Shared pytest fixtures for the cache and API tests."""

from __future__ import annotations

from typing import Any, Callable, List

import httpx
import pytest

from cache import TieredCacheManager
from config import CacheConfig

HOUR = 60 * 60


class FakeClock:
    """Manually advanced replacement for time.time."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class CountingProducer:
    """Async producer that records how many times it was awaited."""

    def __init__(self, value: Any = None, error: Exception | None = None) -> None:
        self.value = value if value is not None else {"results": [1, 2, 3]}
        self.error = error
        self.calls = 0

    async def __call__(self) -> Any:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.value


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def settings() -> CacheConfig:
    return CacheConfig()


@pytest.fixture
def manager(settings: CacheConfig, clock: FakeClock) -> TieredCacheManager:
    return TieredCacheManager(settings=settings, clock=clock)


@pytest.fixture
def make_manager(clock: FakeClock) -> Callable[..., TieredCacheManager]:
    """Build a manager with overridden cache settings."""

    def _make(**overrides: Any) -> TieredCacheManager:
        return TieredCacheManager(settings=CacheConfig(**overrides), clock=clock)

    return _make


@pytest.fixture
def producer() -> CountingProducer:
    return CountingProducer()


def distinct_endpoints(count: int) -> List[str]:
    return [f"/movie/{i}" for i in range(1, count + 1)]


class RecordingTransport:
    """Handler for httpx.MockTransport that records requests."""

    def __init__(self, status: int = 200, body: dict | None = None) -> None:
        self.status = status
        self.body = body if body is not None else {"page": 1, "results": []}
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status, json=self.body)
