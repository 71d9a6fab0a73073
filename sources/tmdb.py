"""
TMDB Data Source - The Movie Database API

Every upstream request goes through the tiered cache manager.
"""

import logging
from typing import Any, Dict, Optional

import httpx

from cache import TieredCacheManager
from cache.cache_manager import Params, normalize_params
from config import config

logger = logging.getLogger(__name__)


# Module-level connection pool for HTTP connection reuse
_async_client: Optional[httpx.AsyncClient] = None


def get_async_client() -> httpx.AsyncClient:
    """Get or create the shared async HTTP client with connection pooling."""
    global _async_client
    if _async_client is None or _async_client.is_closed:
        _async_client = httpx.AsyncClient(
            timeout=config.request_timeout,
            limits=httpx.Limits(
                max_keepalive_connections=10,
                max_connections=20,
                keepalive_expiry=30.0
            )
        )
    return _async_client


async def close_async_client() -> None:
    """Close the shared client (called on shutdown)."""
    global _async_client
    if _async_client is not None and not _async_client.is_closed:
        await _async_client.aclose()
    _async_client = None


class TMDBError(Exception):
    """Upstream request to TMDB failed."""

    def __init__(self, message: str, status_code: Optional[int] = None, endpoint: str = ''):
        super().__init__(f"TMDB API Error: {message}")
        self.status_code = status_code
        self.endpoint = endpoint


class TMDBSource:
    """Cached client for the TMDB v3 REST API."""

    def __init__(
        self,
        cache: TieredCacheManager,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self._cache = cache
        self._api_key = api_key if api_key is not None else config.tmdb_api_key
        self._base_url = (base_url or config.tmdb_base_url).rstrip('/')
        self._client = client

    @property
    def name(self) -> str:
        return "TMDB"

    @property
    def available(self) -> bool:
        return bool(self._api_key)

    @property
    def cache(self) -> TieredCacheManager:
        return self._cache

    def _url(self, endpoint: str) -> str:
        path = endpoint if endpoint.startswith('/') else f"/{endpoint}"
        return f"{self._base_url}{path}"

    async def fetch(self, endpoint: str, params: Params = None) -> Any:
        """
        Fetch an endpoint, serving from cache when possible.

        Args:
            endpoint: API path such as "/movie/popular"
            params: Query parameters, not including the API key

        Raises:
            TMDBError: The upstream call failed (never cached)
        """
        endpoint = endpoint if endpoint.startswith('/') else f"/{endpoint}"
        query = normalize_params(params)

        async def make_api_call() -> Any:
            return await self._request(endpoint, query)

        return await self._cache.resolve(endpoint, query, make_api_call)

    async def _request(self, endpoint: str, params: Dict[str, Any]) -> Any:
        """Single GET against TMDB. The API key is added here so it never enters cache keys."""
        if not self._api_key:
            raise TMDBError("API key not configured", status_code=401, endpoint=endpoint)

        client = self._client or get_async_client()
        full_params = {'api_key': self._api_key, **params}

        try:
            response = await client.get(self._url(endpoint), params=full_params)
        except httpx.TimeoutException as e:
            logger.warning(f"Timeout fetching {endpoint} from TMDB")
            raise TMDBError(f"Timeout fetching {endpoint}", status_code=504, endpoint=endpoint) from e
        except httpx.HTTPError as e:
            logger.warning(f"Transport error fetching {endpoint}: {e}")
            raise TMDBError(str(e), endpoint=endpoint) from e

        if response.status_code >= 400:
            message = _status_message(response)
            logger.warning(f"TMDB returned {response.status_code} for {endpoint}: {message}")
            raise TMDBError(message, status_code=response.status_code, endpoint=endpoint)

        try:
            return response.json()
        except ValueError as e:
            raise TMDBError(f"Invalid JSON from {endpoint}", status_code=502, endpoint=endpoint) from e

    async def validate_api_key(self) -> bool:
        """Check the key against /configuration (blacklisted, never cached)."""
        try:
            await self.fetch('/configuration')
            return True
        except TMDBError as e:
            logger.warning(f"API key validation failed: {e}")
            return False


def _status_message(response: httpx.Response) -> str:
    """TMDB error bodies carry a status_message field."""
    try:
        body = response.json()
    except ValueError:
        return f"HTTP {response.status_code}"
    if isinstance(body, dict) and body.get('status_message'):
        return body['status_message']
    return f"HTTP {response.status_code}"
