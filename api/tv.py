"""
TV Show Endpoints
"""

from fastapi import APIRouter, Depends, Path, Query

from sources import TMDBSource
from .dependencies import get_source

tv_router = APIRouter(prefix="/api/tv")

TV_LISTS = ('popular', 'on_the_air', 'airing_today', 'top_rated')


def _register_list(list_name: str) -> None:
    async def tv_list(
        page: int = Query(1, ge=1, le=500),
        source: TMDBSource = Depends(get_source),
    ):
        return await source.fetch(f"/tv/{list_name}", {'page': page})

    tv_list.__name__ = f"tv_{list_name}"
    tv_router.add_api_route(f"/{list_name}", tv_list, methods=["GET"])


for _name in TV_LISTS:
    _register_list(_name)


@tv_router.get("/{tv_id}")
async def tv_details(tv_id: int = Path(..., ge=1), source: TMDBSource = Depends(get_source)):
    return await source.fetch(f"/tv/{tv_id}")


@tv_router.get("/{tv_id}/credits")
async def tv_credits(tv_id: int = Path(..., ge=1), source: TMDBSource = Depends(get_source)):
    return await source.fetch(f"/tv/{tv_id}/credits")


@tv_router.get("/{tv_id}/recommendations")
async def tv_recommendations(
    tv_id: int = Path(..., ge=1),
    page: int = Query(1, ge=1, le=500),
    source: TMDBSource = Depends(get_source),
):
    return await source.fetch(f"/tv/{tv_id}/recommendations", {'page': page})


@tv_router.get("/{tv_id}/similar")
async def similar_tv(
    tv_id: int = Path(..., ge=1),
    page: int = Query(1, ge=1, le=500),
    source: TMDBSource = Depends(get_source),
):
    return await source.fetch(f"/tv/{tv_id}/similar", {'page': page})


@tv_router.get("/{tv_id}/watch/providers")
async def tv_watch_providers(tv_id: int = Path(..., ge=1), source: TMDBSource = Depends(get_source)):
    return await source.fetch(f"/tv/{tv_id}/watch/providers")
