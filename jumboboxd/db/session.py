# jumboboxd/db/session.py
from typing import AsyncGenerator, Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from jumboboxd.core.settings import settings


def _normalise_url(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    return value.strip().strip('"').strip("'")


def to_async_driver(url: str) -> str:
    """
    Ensure the SQLAlchemy URL uses an async driver.
    - postgres://            -> postgresql+asyncpg://
    - postgresql+psycopg://  -> postgresql+asyncpg://
    - postgresql://          -> postgresql+asyncpg://
    - sqlite:///             -> sqlite+aiosqlite:///
    - anything async         -> (as is)
    """
    if url.startswith("postgresql+asyncpg://") or url.startswith("sqlite+aiosqlite://"):
        return url
    if url.startswith("postgres://"):
        return "postgresql+asyncpg://" + url.split("postgres://", 1)[1]
    if url.startswith("postgresql+psycopg://"):
        return "postgresql+asyncpg://" + url.split("postgresql+psycopg://", 1)[1]
    if url.startswith("postgresql://"):
        return "postgresql+asyncpg://" + url.split("postgresql://", 1)[1]
    if url.startswith("sqlite://"):
        return "sqlite+aiosqlite://" + url.split("sqlite://", 1)[1]
    return url


ASYNC_DATABASE_URL = to_async_driver(_normalise_url(settings.database_url) or "")

if not ASYNC_DATABASE_URL:
    raise RuntimeError(
        "DATABASE_URL is empty. Set it like 'postgresql+asyncpg://user:pass@db:5432/jumboboxd' "
        "or 'sqlite+aiosqlite:///./jumboboxd.db'."
    )

engine = create_async_engine(
    ASYNC_DATABASE_URL,
    pool_pre_ping=True,
)

AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    expire_on_commit=False,
    autoflush=False,
    class_=AsyncSession,
)


async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency that yields an AsyncSession."""
    async with AsyncSessionLocal() as session:
        yield session
