"""
Movie Endpoints

Listing endpoints hit the base cache tier; detail endpoints go through flex.
"""

from fastapi import APIRouter, Depends, Path, Query

from sources import TMDBSource
from .dependencies import get_source

movies_router = APIRouter(prefix="/api/movies")

MOVIE_LISTS = ('popular', 'now_playing', 'top_rated', 'upcoming')


def _register_list(list_name: str) -> None:
    async def movie_list(
        page: int = Query(1, ge=1, le=500),
        source: TMDBSource = Depends(get_source),
    ):
        return await source.fetch(f"/movie/{list_name}", {'page': page})

    movie_list.__name__ = f"movies_{list_name}"
    movies_router.add_api_route(f"/{list_name}", movie_list, methods=["GET"])


for _name in MOVIE_LISTS:
    _register_list(_name)


@movies_router.get("/{movie_id}")
async def movie_details(movie_id: int = Path(..., ge=1), source: TMDBSource = Depends(get_source)):
    return await source.fetch(f"/movie/{movie_id}")


@movies_router.get("/{movie_id}/credits")
async def movie_credits(movie_id: int = Path(..., ge=1), source: TMDBSource = Depends(get_source)):
    return await source.fetch(f"/movie/{movie_id}/credits")


@movies_router.get("/{movie_id}/recommendations")
async def movie_recommendations(
    movie_id: int = Path(..., ge=1),
    page: int = Query(1, ge=1, le=500),
    source: TMDBSource = Depends(get_source),
):
    return await source.fetch(f"/movie/{movie_id}/recommendations", {'page': page})


@movies_router.get("/{movie_id}/similar")
async def similar_movies(
    movie_id: int = Path(..., ge=1),
    page: int = Query(1, ge=1, le=500),
    source: TMDBSource = Depends(get_source),
):
    return await source.fetch(f"/movie/{movie_id}/similar", {'page': page})


@movies_router.get("/{movie_id}/videos")
async def movie_videos(movie_id: int = Path(..., ge=1), source: TMDBSource = Depends(get_source)):
    return await source.fetch(f"/movie/{movie_id}/videos")


@movies_router.get("/{movie_id}/watch/providers")
async def movie_watch_providers(movie_id: int = Path(..., ge=1), source: TMDBSource = Depends(get_source)):
    """Streaming, rent and buy providers by region."""
    return await source.fetch(f"/movie/{movie_id}/watch/providers")
