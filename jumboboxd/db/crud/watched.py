# jumboboxd/db/crud/watched.py
from __future__ import annotations

from typing import Any, Dict, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from jumboboxd.core.errors import NotFoundError
from jumboboxd.db.crud.movies import get_movie, get_or_create_movie, serialize_movie
from jumboboxd.db.crud.pagination import check_page_args, offset, pagination
from jumboboxd.db.models import User, WatchedMovie, as_utc, utcnow
from jumboboxd.db.upsert import upsert
from jumboboxd.integrations.catalog import CatalogClient


def _serialize(w: WatchedMovie) -> Dict[str, Any]:
    return {
        "id": w.id,
        "watchedAt": as_utc(w.watched_at),
        "movie": serialize_movie(w.movie),
    }


async def _find(db: AsyncSession, user_id: int, movie_id: int) -> Optional[WatchedMovie]:
    res = await db.execute(
        select(WatchedMovie)
        .where((WatchedMovie.user_id == user_id) & (WatchedMovie.movie_id == movie_id))
        .execution_options(populate_existing=True)
    )
    return res.scalar_one_or_none()


async def mark_watched(
    db: AsyncSession,
    catalog: CatalogClient,
    user: User,
    catalog_id: Any,
    fallback: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """
    Upsert by (user_id, movie_id). Re-marking refreshes watched_at.
    Does not touch the user's watchlist.
    """
    uid = user.id
    movie = await get_or_create_movie(db, catalog, catalog_id, fallback)

    now = utcnow()
    await upsert(
        db,
        WatchedMovie,
        values={"user_id": uid, "movie_id": movie.id, "watched_at": now},
        conflict=["user_id", "movie_id"],
        update={"watched_at": now},
    )
    await db.commit()

    row = await _find(db, uid, movie.id)
    if row is None:  # pragma: no cover
        raise RuntimeError("watched row missing after upsert")
    return _serialize(row)


async def unmark_watched(db: AsyncSession, user: User, catalog_id: Any) -> None:
    """Unknown movie or not-watched pair -> NotFoundError (never a silent no-op)."""
    uid = user.id
    movie = await get_movie(db, catalog_id)
    if movie is None:
        raise NotFoundError("Movie not found")

    res = await db.execute(
        delete(WatchedMovie).where(
            (WatchedMovie.user_id == uid) & (WatchedMovie.movie_id == movie.id)
        )
    )
    if not res.rowcount:
        raise NotFoundError("Movie is not in your watched list")
    await db.commit()


async def is_watched(db: AsyncSession, user: User, catalog_id: Any) -> Dict[str, Any]:
    uid = user.id
    movie = await get_movie(db, catalog_id)
    if movie is None:
        return {"isWatched": False, "watchedAt": None}
    row = await _find(db, uid, movie.id)
    return {
        "isWatched": row is not None,
        "watchedAt": as_utc(row.watched_at) if row else None,
    }


async def list_watched(db: AsyncSession, user: User, page: int = 1, limit: int = 20) -> Dict[str, Any]:
    check_page_args(page, limit)
    uid = user.id
    total = (
        await db.execute(select(func.count()).select_from(WatchedMovie).where(WatchedMovie.user_id == uid))
    ).scalar_one()
    rows = (
        await db.execute(
            select(WatchedMovie)
            .where(WatchedMovie.user_id == uid)
            .order_by(WatchedMovie.watched_at.desc(), WatchedMovie.id.desc())
            .offset(offset(page, limit))
            .limit(limit)
        )
    ).scalars().all()
    return {
        "watchedMovies": [_serialize(w) for w in rows],
        "pagination": pagination(page, limit, int(total)),
    }
