"""Data sources module - Upstream metadata API client."""

from .tmdb import TMDBSource, TMDBError, get_async_client, close_async_client

__all__ = [
    'TMDBSource',
    'TMDBError',
    'get_async_client',
    'close_async_client',
]
