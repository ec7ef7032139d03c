# jumboboxd/db/crud/movies.py
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from jumboboxd.db.models import Movie, utcnow
from jumboboxd.db.upsert import upsert
from jumboboxd.integrations.catalog import CatalogClient, check_catalog_id

log = logging.getLogger(__name__)


def _year(release_date: Optional[str]) -> Optional[int]:
    if not release_date:
        return None
    s = str(release_date)
    if len(s) >= 4 and s[:4].isdigit():
        return int(s[:4])
    return None


def serialize_movie(m: Movie) -> Dict[str, Any]:
    """Catalog-shaped movie dict so cached rows render like upstream ones."""
    return {
        "id": int(m.catalog_id),
        "title": m.title,
        "description": m.overview,
        "poster": m.poster_path,
        "releaseDate": m.release_date,
        "year": _year(m.release_date),
    }


def _fields_from_catalog(data: Dict[str, Any]) -> Dict[str, Any]:
    year = data.get("year")
    release = data.get("releaseDate") or data.get("release_date")
    return {
        "title": str(data.get("title")),
        "overview": data.get("description") or data.get("overview") or None,
        "poster_path": data.get("poster") or data.get("posterPath") or None,
        "release_date": str(release) if release else (str(year) if year else None),
    }


def _fields_from_fallback(fallback: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "title": fallback["title"],
        "overview": fallback.get("overview") or None,
        "poster_path": fallback.get("poster_path") or None,
        "release_date": str(fallback["release_date"]) if fallback.get("release_date") else None,
    }


async def get_movie(db: AsyncSession, catalog_id: Any) -> Optional[Movie]:
    key = str(check_catalog_id(catalog_id))
    res = await db.execute(select(Movie).where(Movie.catalog_id == key))
    return res.scalar_one_or_none()


async def get_or_create_movie(
    db: AsyncSession,
    catalog: CatalogClient,
    catalog_id: Any,
    fallback: Optional[Dict[str, Any]] = None,
) -> Movie:
    """
    Return the cached Movie for catalog_id, creating it on first reference.

    fallback: caller-supplied display fields (title, overview, poster_path,
    release_date). Used when it carries a title; otherwise the catalog is asked.
    The row is written only once the data is in hand, so a catalog failure
    (UpstreamError) leaves nothing behind. Concurrent first references insert
    once; the loser reads the winner's row.

    Does not commit: the caller's membership write commits both rows in one
    transaction.
    """
    mid = check_catalog_id(catalog_id)
    existing = await get_movie(db, mid)
    if existing:
        return existing

    if fallback and fallback.get("title"):
        fields = _fields_from_fallback(fallback)
    else:
        fields = _fields_from_catalog(await catalog.get_movie(mid))

    await upsert(
        db,
        Movie,
        values={"catalog_id": str(mid), "created_at": utcnow(), **fields},
        conflict=["catalog_id"],
    )

    movie = await get_movie(db, mid)
    if movie is None:  # pragma: no cover
        raise RuntimeError(f"movie {mid} missing after insert")
    log.info("Cached movie %s (%s)", mid, movie.title)
    return movie
