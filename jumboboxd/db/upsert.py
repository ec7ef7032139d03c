# jumboboxd/db/upsert.py
"""
Dialect-aware INSERT ... ON CONFLICT helpers.

Postgres (production) and SQLite (local dev, tests) both support ON CONFLICT,
so every membership write is a single atomic statement keyed by its unique
constraint.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

_INSERTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


def _insert_for(db: AsyncSession):
    dialect = db.get_bind().dialect.name
    try:
        return _INSERTS[dialect]
    except KeyError:
        raise RuntimeError(f"Unsupported database dialect for upserts: {dialect}")


async def upsert(
    db: AsyncSession,
    model: Any,
    *,
    values: Dict[str, Any],
    conflict: List[str],
    update: Optional[Dict[str, Any]] = None,
) -> None:
    """
    Insert `values`; on a conflict over `conflict` columns either update the
    `update` columns (last writer wins) or, when `update` is empty, do nothing.
    Does not commit.
    """
    stmt = _insert_for(db)(model).values(**values)
    if update:
        stmt = stmt.on_conflict_do_update(index_elements=conflict, set_=update)
    else:
        stmt = stmt.on_conflict_do_nothing(index_elements=conflict)
    await db.execute(stmt)
