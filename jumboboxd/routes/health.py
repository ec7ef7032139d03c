# jumboboxd/routes/health.py
from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from jumboboxd.db.session import get_async_session

router = APIRouter(tags=["health"])
log = logging.getLogger(__name__)


async def ping_db(db: AsyncSession) -> bool:
    try:
        res = await db.execute(text("SELECT 1"))
        return res.scalar() == 1
    except SQLAlchemyError as e:
        log.warning("health: database ping failed: %s", e)
        return False


@router.get("/health", summary="Liveness + DB ping")
async def health(db: AsyncSession = Depends(get_async_session)) -> Dict[str, Any]:
    db_ok = await ping_db(db)
    return {"ok": db_ok, "db": db_ok}
