# jumboboxd/routes/reviews.py
from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from jumboboxd.db.crud import ratings as crud
from jumboboxd.db.crud.pagination import MAX_LIMIT
from jumboboxd.db.models import User
from jumboboxd.db.session import get_async_session
from jumboboxd.integrations.catalog import CatalogClient, get_catalog_client
from jumboboxd.schemas import ReviewIn
from jumboboxd.security import require_user

router = APIRouter(prefix="/movies/reviews", tags=["reviews"])


@router.get("", summary="List reviews by movie and/or user (default: caller's own)")
async def list_reviews(
    movie_id: Optional[str] = Query(None, alias="movieId"),
    user_id: Optional[str] = Query(None, alias="userId"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=MAX_LIMIT),
    user: User = Depends(require_user),
    db: AsyncSession = Depends(get_async_session),
) -> Dict[str, Any]:
    return await crud.list_ratings(
        db, user, movie_ref=movie_id, user_ref=user_id, page=page, limit=limit
    )


@router.post("", summary="Create or replace the caller's review of a movie")
async def submit_review(
    payload: ReviewIn,
    user: User = Depends(require_user),
    db: AsyncSession = Depends(get_async_session),
    catalog: CatalogClient = Depends(get_catalog_client),
) -> Dict[str, Any]:
    return await crud.submit_rating(db, catalog, user, payload.movie_id, payload.score, payload.review)


@router.delete("", summary="Delete one of the caller's reviews")
async def delete_review(
    review_id: int = Query(..., alias="reviewId", ge=1),
    user: User = Depends(require_user),
    db: AsyncSession = Depends(get_async_session),
) -> Dict[str, Any]:
    await crud.delete_rating(db, user, review_id)
    return {"success": True}
