# jumboboxd/db/crud/users.py
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from jumboboxd.core.errors import NotFoundError, ValidationError
from jumboboxd.db.models import Rating, User, WatchedMovie, WatchlistEntry, as_utc, utcnow
from jumboboxd.db.upsert import upsert
from jumboboxd.integrations.identity import IdentityGateway

log = logging.getLogger(__name__)


def serialize_user(u: User) -> Dict[str, Any]:
    return {
        "id": u.id,
        "externalId": u.external_id,
        "email": u.email,
        "username": u.username,
        "createdAt": as_utc(u.created_at),
        "updatedAt": as_utc(u.updated_at),
    }


async def get_user_by_external_id(db: AsyncSession, external_id: str) -> Optional[User]:
    res = await db.execute(select(User).where(User.external_id == external_id))
    return res.scalar_one_or_none()


async def sync_user(db: AsyncSession, identity: IdentityGateway, external_id: str) -> Dict[str, Any]:
    """
    Create the local user on first sight; refresh email/username afterwards.
    The provider may omit email (some OAuth sources) -> stored as "".
    """
    external_id = (external_id or "").strip()
    if not external_id:
        raise ValidationError("userId is required")

    profile = await identity.get_user(external_id)
    if profile is None:
        raise NotFoundError("User not found in identity provider")

    now = utcnow()
    email = profile.email or ""
    await upsert(
        db,
        User,
        values={
            "external_id": external_id,
            "email": email,
            "username": profile.username,
            "created_at": now,
            "updated_at": now,
        },
        conflict=["external_id"],
        update={"email": email, "username": profile.username, "updated_at": now},
    )
    await db.commit()

    res = await db.execute(
        select(User).where(User.external_id == external_id).execution_options(populate_existing=True)
    )
    user = res.scalar_one()
    log.info("Synced user %s (id=%s)", external_id, user.id)
    return serialize_user(user)


async def user_stats(db: AsyncSession, user: User) -> Dict[str, int]:
    uid = user.id

    async def _count(model: Any) -> int:
        res = await db.execute(select(func.count()).select_from(model).where(model.user_id == uid))
        return int(res.scalar_one())

    return {
        "totalWatched": await _count(WatchedMovie),
        "totalWatchlist": await _count(WatchlistEntry),
        "totalReviews": await _count(Rating),
    }
