"""
StreamKeeper API - Cached TMDB Proxy

Thin JSON API in front of The Movie Database, used by the React frontend.

- Movies, TV shows, people, trending, search and discover pass-through
- Three-tier response cache (base / flex / favorite) shields TMDB from
  repeated queries
- Cache stats and admin endpoints
"""

import logging
import traceback
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import config
from cache import TieredCacheManager, get_cache_manager
from sources import TMDBSource, TMDBError, close_async_client
from api import tmdb_router, movies_router, tv_router, person_router, health_router

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s [%(name)s] %(message)s")


# =============================================================================
# APP INITIALIZATION
# =============================================================================

def create_app(
    cache_manager: Optional[TieredCacheManager] = None,
    source: Optional[TMDBSource] = None,
) -> FastAPI:
    """
    Build the application.

    The cache manager and TMDB client are created here once and shared by
    every request through app.state.
    """
    app = FastAPI(
        title="StreamKeeper",
        description="Cached movie and TV metadata API",
        version="1.0.0"
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    cache_manager = cache_manager or get_cache_manager()
    app.state.cache_manager = cache_manager
    app.state.tmdb = source or TMDBSource(cache=cache_manager)

    app.include_router(health_router)
    app.include_router(tmdb_router)
    app.include_router(movies_router)
    app.include_router(tv_router)
    app.include_router(person_router)

    @app.exception_handler(TMDBError)
    async def tmdb_exception_handler(request: Request, exc: TMDBError):
        # Client errors (bad ID, bad key) keep their status, the rest is a gateway error
        status = exc.status_code if exc.status_code and 400 <= exc.status_code < 500 else 502
        return JSONResponse(
            status_code=status,
            content={"detail": str(exc), "endpoint": exc.endpoint}
        )

    @app.exception_handler(Exception)
    async def debug_exception_handler(request: Request, exc: Exception):
        print("=" * 60)
        print("UNHANDLED EXCEPTION:")
        print("=" * 60)
        traceback.print_exception(type(exc), exc, exc.__traceback__)
        print("=" * 60)
        return JSONResponse(
            status_code=500,
            content={"detail": str(exc), "type": type(exc).__name__}
        )

    @app.on_event("startup")
    async def startup():
        """Log configuration and check the API key."""
        settings = app.state.cache_manager.settings

        print("=" * 60)
        print("StreamKeeper API Starting Up")
        print("=" * 60)
        print(f"  TMDB API key: {'SET' if app.state.tmdb.available else 'NOT SET'}")
        print(f"  TMDB base URL: {config.tmdb_base_url}")

        print("-" * 60)
        print("Cache:")
        print(f"  Base refresh: every {settings.base_refresh_interval / 3600:g}h "
              f"({len(settings.primary_endpoints)} primary endpoints)")
        print(f"  Flex: {settings.flex_capacity} entries, evicts {settings.flex_clear_amount} at a time")
        print(f"  Favorite: promote after {settings.promotion_threshold} hits, "
              f"reset every {settings.favorite_reset_interval / 3600:g}h")
        print(f"  Single-flight: {'ON' if settings.single_flight else 'OFF'}")

        print("-" * 60)
        if await app.state.tmdb.validate_api_key():
            print("TMDB API key is valid")
        else:
            print("WARNING: TMDB API key is invalid or TMDB is unreachable")

        print("=" * 60)
        print("Ready to serve requests")
        print("=" * 60)

    @app.on_event("shutdown")
    async def shutdown():
        await close_async_client()

    return app


app = create_app()


# =============================================================================
# RUN
# =============================================================================

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=True
    )
