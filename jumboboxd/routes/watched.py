# jumboboxd/routes/watched.py
from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from jumboboxd.db.crud import watched as crud
from jumboboxd.db.crud.pagination import MAX_LIMIT
from jumboboxd.db.models import User
from jumboboxd.db.session import get_async_session
from jumboboxd.integrations.catalog import CatalogClient, get_catalog_client
from jumboboxd.schemas import MarkWatchedIn
from jumboboxd.security import require_user

router = APIRouter(prefix="/movies", tags=["watched"])


@router.get("/check-watched", summary="Has the caller watched this movie?")
async def check_watched(
    id: int = Query(..., ge=0, le=249),
    user: User = Depends(require_user),
    db: AsyncSession = Depends(get_async_session),
) -> Dict[str, Any]:
    return await crud.is_watched(db, user, id)


@router.get("/watched", summary="Caller's watched movies, most recent first")
async def list_watched(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=MAX_LIMIT),
    user: User = Depends(require_user),
    db: AsyncSession = Depends(get_async_session),
) -> Dict[str, Any]:
    return await crud.list_watched(db, user, page, limit)


@router.post("/watched", summary="Mark watched (re-marking refreshes watchedAt)")
async def mark_watched(
    payload: MarkWatchedIn,
    user: User = Depends(require_user),
    db: AsyncSession = Depends(get_async_session),
    catalog: CatalogClient = Depends(get_catalog_client),
) -> Dict[str, Any]:
    watched = await crud.mark_watched(db, catalog, user, payload.id, payload.fallback())
    return {"message": "Movie marked as watched", "watchedMovie": watched}


@router.delete("/watched", summary="Unmark watched (404 if not watched)")
async def unmark_watched(
    id: int = Query(..., ge=0, le=249),
    user: User = Depends(require_user),
    db: AsyncSession = Depends(get_async_session),
) -> Dict[str, Any]:
    await crud.unmark_watched(db, user, id)
    return {"message": "Movie removed from watched list"}
