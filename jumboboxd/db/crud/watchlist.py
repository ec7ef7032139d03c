# jumboboxd/db/crud/watchlist.py
from __future__ import annotations

from typing import Any, Dict, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from jumboboxd.core.errors import NotFoundError
from jumboboxd.db.crud.movies import get_movie, get_or_create_movie, serialize_movie
from jumboboxd.db.crud.pagination import check_page_args, offset, pagination
from jumboboxd.db.models import User, WatchlistEntry, utcnow
from jumboboxd.db.upsert import upsert
from jumboboxd.integrations.catalog import CatalogClient


async def add_to_watchlist(
    db: AsyncSession,
    catalog: CatalogClient,
    user: User,
    catalog_id: Any,
    fallback: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    # Idempotent: re-adding keeps the original membership row
    uid = user.id
    movie = await get_or_create_movie(db, catalog, catalog_id, fallback)
    await upsert(
        db,
        WatchlistEntry,
        values={"user_id": uid, "movie_id": movie.id, "created_at": utcnow()},
        conflict=["user_id", "movie_id"],
    )
    await db.commit()
    return serialize_movie(movie)


async def remove_from_watchlist(db: AsyncSession, user: User, catalog_id: Any) -> None:
    """Unknown movie -> NotFoundError; known but not listed -> no-op."""
    uid = user.id
    movie = await get_movie(db, catalog_id)
    if movie is None:
        raise NotFoundError("Movie not found")
    await db.execute(
        delete(WatchlistEntry).where(
            (WatchlistEntry.user_id == uid) & (WatchlistEntry.movie_id == movie.id)
        )
    )
    await db.commit()


async def in_watchlist(db: AsyncSession, user: User, catalog_id: Any) -> bool:
    uid = user.id
    movie = await get_movie(db, catalog_id)
    if movie is None:
        return False
    res = await db.execute(
        select(WatchlistEntry.movie_id).where(
            (WatchlistEntry.user_id == uid) & (WatchlistEntry.movie_id == movie.id)
        )
    )
    return res.first() is not None


async def list_watchlist(db: AsyncSession, user: User, page: int = 1, limit: int = 12) -> Dict[str, Any]:
    """Most recently added first."""
    check_page_args(page, limit)
    uid = user.id
    total = (
        await db.execute(
            select(func.count()).select_from(WatchlistEntry).where(WatchlistEntry.user_id == uid)
        )
    ).scalar_one()
    rows = (
        await db.execute(
            select(WatchlistEntry)
            .where(WatchlistEntry.user_id == uid)
            .order_by(WatchlistEntry.created_at.desc(), WatchlistEntry.movie_id.desc())
            .offset(offset(page, limit))
            .limit(limit)
        )
    ).scalars().all()
    return {
        "movies": [serialize_movie(e.movie) for e in rows],
        "pagination": pagination(page, limit, int(total)),
    }
