# jumboboxd/routes/watchlist.py
from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from jumboboxd.db.crud import watchlist as crud
from jumboboxd.db.crud.pagination import MAX_LIMIT
from jumboboxd.db.models import User
from jumboboxd.db.session import get_async_session
from jumboboxd.integrations.catalog import CatalogClient, get_catalog_client
from jumboboxd.schemas import WatchlistIn
from jumboboxd.security import require_user

router = APIRouter(prefix="/movies/watchlist", tags=["watchlist"])


@router.get("", summary="Caller's watchlist, most recently added first")
async def list_watchlist(
    page: int = Query(1, ge=1),
    limit: int = Query(12, ge=1, le=MAX_LIMIT),
    user: User = Depends(require_user),
    db: AsyncSession = Depends(get_async_session),
) -> Dict[str, Any]:
    return await crud.list_watchlist(db, user, page, limit)


@router.get("/check", summary="Is this movie on the caller's watchlist?")
async def check_watchlist(
    movie_id: int = Query(..., alias="movieId", ge=0, le=249),
    user: User = Depends(require_user),
    db: AsyncSession = Depends(get_async_session),
) -> Dict[str, Any]:
    return {"inWatchlist": await crud.in_watchlist(db, user, movie_id)}


@router.post("", summary="Add to watchlist (idempotent)")
async def add_to_watchlist(
    payload: WatchlistIn,
    user: User = Depends(require_user),
    db: AsyncSession = Depends(get_async_session),
    catalog: CatalogClient = Depends(get_catalog_client),
) -> Dict[str, Any]:
    movie = await crud.add_to_watchlist(db, catalog, user, payload.movie_id, payload.fallback())
    return {"success": True, "movie": movie}


@router.delete("", summary="Remove from watchlist")
async def remove_from_watchlist(
    movie_id: int = Query(..., alias="movieId", ge=0, le=249),
    user: User = Depends(require_user),
    db: AsyncSession = Depends(get_async_session),
) -> Dict[str, Any]:
    await crud.remove_from_watchlist(db, user, movie_id)
    return {"success": True}
