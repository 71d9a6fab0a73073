"""
Person Endpoints
"""

from fastapi import APIRouter, Depends, Path

from sources import TMDBSource
from .dependencies import get_source

person_router = APIRouter(prefix="/api/person")


@person_router.get("/{person_id}")
async def person_details(person_id: int = Path(..., ge=1), source: TMDBSource = Depends(get_source)):
    return await source.fetch(f"/person/{person_id}")


@person_router.get("/{person_id}/combined_credits")
async def person_credits(person_id: int = Path(..., ge=1), source: TMDBSource = Depends(get_source)):
    """Movie and TV credits in one list."""
    return await source.fetch(f"/person/{person_id}/combined_credits")


@person_router.get("/{person_id}/images")
async def person_images(person_id: int = Path(..., ge=1), source: TMDBSource = Depends(get_source)):
    return await source.fetch(f"/person/{person_id}/images")
