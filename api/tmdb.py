"""
General TMDB Endpoints

Trending, multi search, genres, discover and configuration pass-through.
"""

from enum import Enum
from typing import Optional

from fastapi import APIRouter, Depends, Query

from sources import TMDBSource
from .dependencies import get_source

tmdb_router = APIRouter(prefix="/api")


class MediaType(str, Enum):
    movie = "movie"
    tv = "tv"


class TrendingType(str, Enum):
    all = "all"
    movie = "movie"
    tv = "tv"
    person = "person"


class TimeWindow(str, Enum):
    day = "day"
    week = "week"


@tmdb_router.get("/trending/{media_type}/{time_window}")
async def trending(
    media_type: TrendingType,
    time_window: TimeWindow,
    page: int = Query(1, ge=1, le=500),
    source: TMDBSource = Depends(get_source),
):
    """Trending titles or people for the day or week."""
    return await source.fetch(
        f"/trending/{media_type.value}/{time_window.value}",
        {'page': page},
    )


@tmdb_router.get("/search")
async def search(
    query: str = Query(..., min_length=1, max_length=200),
    page: int = Query(1, ge=1, le=500),
    source: TMDBSource = Depends(get_source),
):
    """Multi search across movies, TV shows and people."""
    return await source.fetch("/search/multi", {
        'query': query.strip(),
        'page': page,
        'include_adult': 'false',
    })


@tmdb_router.get("/genres/{media_type}")
async def genres(media_type: MediaType, source: TMDBSource = Depends(get_source)):
    return await source.fetch(f"/genre/{media_type.value}/list")


@tmdb_router.get("/discover/{media_type}")
async def discover(
    media_type: MediaType,
    page: int = Query(1, ge=1, le=500),
    sort_by: str = Query("popularity.desc"),
    with_genres: Optional[str] = None,
    source: TMDBSource = Depends(get_source),
):
    """Discover titles, optionally filtered by genre IDs."""
    params = {'page': page, 'sort_by': sort_by}
    if with_genres:
        params['with_genres'] = with_genres
    return await source.fetch(f"/discover/{media_type.value}", params)


@tmdb_router.get("/configuration")
async def configuration(source: TMDBSource = Depends(get_source)):
    """Image base URLs and sizes (never cached)."""
    return await source.fetch("/configuration")
