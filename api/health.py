"""
Health Check and Cache Admin Endpoints
"""

from pydantic import BaseModel

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse, PlainTextResponse

from cache import TieredCacheManager
from sources import TMDBSource
from .dependencies import get_cache, get_source

health_router = APIRouter()

VERSION = "1.0.0"


class HealthResponse(BaseModel):
    status: str
    version: str


@health_router.get("/health", response_model=HealthResponse)
async def health_check():
    """Simple health check endpoint."""
    return HealthResponse(status="healthy", version=VERSION)


@health_router.get("/validate", response_class=PlainTextResponse)
async def validate(source: TMDBSource = Depends(get_source)):
    """Check the TMDB API key against the upstream service."""
    if await source.validate_api_key():
        return PlainTextResponse("API key is valid.", status_code=200)
    return PlainTextResponse(
        "API key is invalid or TMDB service is unavailable.",
        status_code=500,
    )


@health_router.get("/api/cache/stats")
async def cache_stats(cache: TieredCacheManager = Depends(get_cache)):
    """Per-tier sizes, expiry clocks and hit counters."""
    return JSONResponse(cache.stats())


@health_router.get("/api/cache/clear")
async def clear_cache(cache: TieredCacheManager = Depends(get_cache)):
    """Clear all caches (admin endpoint)."""
    cache.clear_all()
    return JSONResponse({
        "status": "success",
        "message": "All caches cleared"
    })
