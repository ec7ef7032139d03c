# jumboboxd/db/crud/ratings.py
from __future__ import annotations

from typing import Any, Dict, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from jumboboxd.core.errors import ForbiddenError, NotFoundError, ValidationError
from jumboboxd.db.crud.movies import get_movie, get_or_create_movie
from jumboboxd.db.crud.pagination import check_page_args, offset, pagination
from jumboboxd.db.crud.users import get_user_by_external_id
from jumboboxd.db.models import Rating, User, as_utc, utcnow
from jumboboxd.db.upsert import upsert
from jumboboxd.integrations.catalog import CatalogClient

MIN_SCORE = 1.0
MAX_SCORE = 5.0


def _serialize(r: Rating) -> Dict[str, Any]:
    return {
        "id": r.id,
        "score": float(r.score),
        "review": r.review,
        "createdAt": as_utc(r.created_at),
        "updatedAt": as_utc(r.updated_at),
        "user": {
            "id": r.user.external_id,
            "username": r.user.username,
            "email": r.user.email,
        },
        "movie": {
            "id": int(r.movie.catalog_id),
            "title": r.movie.title,
            "poster": r.movie.poster_path,
        },
    }


def check_score(score: Any) -> float:
    if isinstance(score, bool):
        raise ValidationError("Score must be a number")
    try:
        value = float(score)
    except (TypeError, ValueError):
        raise ValidationError("Score must be a number")
    if not MIN_SCORE <= value <= MAX_SCORE:
        raise ValidationError("Score must be between 1 and 5")
    return value


async def submit_rating(
    db: AsyncSession,
    catalog: CatalogClient,
    user: User,
    catalog_id: Any,
    score: Any,
    review: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Upsert by (user_id, movie_id): score and review are replaced wholesale,
    updated_at refreshed. No review history is kept.
    """
    value = check_score(score)
    uid = user.id
    movie = await get_or_create_movie(db, catalog, catalog_id)

    now = utcnow()
    text = review or None
    await upsert(
        db,
        Rating,
        values={
            "user_id": uid,
            "movie_id": movie.id,
            "score": value,
            "review": text,
            "created_at": now,
            "updated_at": now,
        },
        conflict=["user_id", "movie_id"],
        update={"score": value, "review": text, "updated_at": now},
    )
    await db.commit()

    row = (
        await db.execute(
            select(Rating)
            .where((Rating.user_id == uid) & (Rating.movie_id == movie.id))
            .execution_options(populate_existing=True)
        )
    ).scalar_one()
    return _serialize(row)


async def delete_rating(db: AsyncSession, user: User, rating_id: int) -> None:
    uid = user.id
    row = (await db.execute(select(Rating).where(Rating.id == rating_id))).scalar_one_or_none()
    if row is None:
        raise NotFoundError("Review not found")
    if row.user_id != uid:
        raise ForbiddenError("Unauthorized to delete this review")
    await db.execute(delete(Rating).where(Rating.id == rating_id))
    await db.commit()


def _empty(page: int, limit: int) -> Dict[str, Any]:
    return {"reviews": [], "pagination": pagination(page, limit, 0)}


async def list_ratings(
    db: AsyncSession,
    caller: User,
    *,
    movie_ref: Optional[Any] = None,
    user_ref: Optional[str] = None,
    page: int = 1,
    limit: int = 10,
) -> Dict[str, Any]:
    """
    movie_ref: catalog id; unknown movie -> empty page.
    user_ref: external user id; unknown user -> empty page.
    Neither given -> the caller's own ratings. Most recently updated first.
    """
    check_page_args(page, limit)
    conditions = []

    if movie_ref is not None and str(movie_ref) != "":
        try:
            movie = await get_movie(db, movie_ref)
        except ValidationError:
            # an id outside the catalog can never have been rated
            movie = None
        if movie is None:
            return _empty(page, limit)
        conditions.append(Rating.movie_id == movie.id)

    if user_ref:
        target = await get_user_by_external_id(db, user_ref)
        if target is None:
            return _empty(page, limit)
        conditions.append(Rating.user_id == target.id)
    elif not conditions:
        conditions.append(Rating.user_id == caller.id)

    total = (
        await db.execute(select(func.count()).select_from(Rating).where(*conditions))
    ).scalar_one()
    rows = (
        await db.execute(
            select(Rating)
            .where(*conditions)
            .order_by(Rating.updated_at.desc(), Rating.id.desc())
            .offset(offset(page, limit))
            .limit(limit)
        )
    ).scalars().all()
    return {
        "reviews": [_serialize(r) for r in rows],
        "pagination": pagination(page, limit, int(total)),
    }
