# jumboboxd/routes/users.py
from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from jumboboxd.db.crud import users as crud
from jumboboxd.db.models import User
from jumboboxd.db.session import get_async_session
from jumboboxd.integrations.identity import IdentityGateway, get_identity_gateway
from jumboboxd.schemas import SyncUserIn
from jumboboxd.security import require_user

router = APIRouter(prefix="/users", tags=["users"])


@router.post("", summary="Create or refresh the local user from the identity provider")
async def sync_user(
    payload: SyncUserIn,
    db: AsyncSession = Depends(get_async_session),
    identity: IdentityGateway = Depends(get_identity_gateway),
) -> Dict[str, Any]:
    return await crud.sync_user(db, identity, payload.user_id)


@router.get("/me", summary="Me")
async def me(user: User = Depends(require_user)) -> Dict[str, Any]:
    return crud.serialize_user(user)


@router.get("/me/stats", summary="Profile counters")
async def my_stats(
    user: User = Depends(require_user),
    db: AsyncSession = Depends(get_async_session),
) -> Dict[str, Any]:
    return await crud.user_stats(db, user)
