"""API module - FastAPI routers and endpoints."""

from .tmdb import tmdb_router
from .movies import movies_router
from .tv import tv_router
from .person import person_router
from .health import health_router

__all__ = ['tmdb_router', 'movies_router', 'tv_router', 'person_router', 'health_router']
