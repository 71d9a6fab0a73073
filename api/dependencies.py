"""
Request-scoped access to the shared cache manager and TMDB client.

Both live on app.state, set up once by the composition root in main.py.
"""

from fastapi import Request

from cache import TieredCacheManager
from sources import TMDBSource


def get_source(request: Request) -> TMDBSource:
    return request.app.state.tmdb


def get_cache(request: Request) -> TieredCacheManager:
    return request.app.state.cache_manager
