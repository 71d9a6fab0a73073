"""Tests for the cached TMDB client, using httpx.MockTransport."""

from __future__ import annotations

import httpx
import pytest

from cache import TieredCacheManager
from sources import TMDBError, TMDBSource
from conftest import RecordingTransport

BASE_URL = "https://tmdb.test/3"


def make_source(manager: TieredCacheManager, handler, api_key: str | None = "secret") -> TMDBSource:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return TMDBSource(cache=manager, api_key=api_key, base_url=BASE_URL + "/", client=client)


class TestFetch:
    @pytest.mark.asyncio
    async def test_builds_url_and_adds_key(self, manager: TieredCacheManager) -> None:
        transport = RecordingTransport()
        source = make_source(manager, transport)

        data = await source.fetch("movie/550", {"language": "en-US"})

        assert data == transport.body
        request = transport.requests[0]
        assert request.url.path == "/3/movie/550"
        assert request.url.params["api_key"] == "secret"
        assert request.url.params["language"] == "en-US"

    @pytest.mark.asyncio
    async def test_repeated_param_pairs_all_sent(self, manager: TieredCacheManager) -> None:
        transport = RecordingTransport()
        source = make_source(manager, transport)

        await source.fetch("/discover/movie", [("with_genres", "28"), ("with_genres", "12")])
        await source.fetch("/discover/movie", [("with_genres", "12")])

        assert len(transport.requests) == 2
        assert transport.requests[0].url.params.get_list("with_genres") == ["28", "12"]
        assert transport.requests[1].url.params.get_list("with_genres") == ["12"]

    @pytest.mark.asyncio
    async def test_repeated_fetch_served_from_cache(self, manager: TieredCacheManager) -> None:
        transport = RecordingTransport()
        source = make_source(manager, transport)

        await source.fetch("/movie/popular", {"page": 1})
        await source.fetch("/movie/popular", {"page": 1})

        assert len(transport.requests) == 1
        assert manager.tier_of("/movie/popular", {"page": 1}) == "base"

    @pytest.mark.asyncio
    async def test_api_key_not_in_cache_key(self, manager: TieredCacheManager) -> None:
        source = make_source(manager, RecordingTransport())
        await source.fetch("/person/287")

        assert manager.tier_of("/person/287", {}) == "flex"

    @pytest.mark.asyncio
    async def test_configuration_never_cached(self, manager: TieredCacheManager) -> None:
        transport = RecordingTransport(body={"images": {}})
        source = make_source(manager, transport)

        assert await source.validate_api_key() is True
        assert await source.validate_api_key() is True
        assert len(transport.requests) == 2


class TestErrors:
    @pytest.mark.asyncio
    async def test_http_error_raises_and_is_not_cached(self, manager: TieredCacheManager) -> None:
        transport = RecordingTransport(status=404, body={"status_message": "The resource could not be found."})
        source = make_source(manager, transport)

        with pytest.raises(TMDBError) as info:
            await source.fetch("/movie/999999")

        assert info.value.status_code == 404
        assert info.value.endpoint == "/movie/999999"
        assert "could not be found" in str(info.value)
        assert str(info.value).startswith("TMDB API Error:")
        assert manager.tier_of("/movie/999999", {}) is None

    @pytest.mark.asyncio
    async def test_timeout(self, manager: TieredCacheManager) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("slow", request=request)

        source = make_source(manager, handler)
        with pytest.raises(TMDBError) as info:
            await source.fetch("/movie/550")
        assert info.value.status_code == 504

    @pytest.mark.asyncio
    async def test_connect_error(self, manager: TieredCacheManager) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        source = make_source(manager, handler)
        with pytest.raises(TMDBError) as info:
            await source.fetch("/movie/550")
        assert info.value.status_code is None

    @pytest.mark.asyncio
    async def test_missing_api_key(self, manager: TieredCacheManager) -> None:
        transport = RecordingTransport()
        source = make_source(manager, transport, api_key="")

        with pytest.raises(TMDBError) as info:
            await source.fetch("/movie/550")

        assert info.value.status_code == 401
        assert transport.requests == []
        assert source.available is False

    @pytest.mark.asyncio
    async def test_invalid_key_fails_validation(self, manager: TieredCacheManager) -> None:
        transport = RecordingTransport(status=401, body={"status_message": "Invalid API key"})
        source = make_source(manager, transport)

        assert await source.validate_api_key() is False
