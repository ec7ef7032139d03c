# jumboboxd/tests/conftest.py
import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

from datetime import datetime, timedelta, timezone  # noqa: E402
from typing import Any, Dict, List, Optional  # noqa: E402

import httpx  # noqa: E402
import pytest  # noqa: E402
import respx  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from jose import jwt  # noqa: E402
from sqlalchemy import func, select  # noqa: E402
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from jumboboxd.db.models import Base, User  # noqa: E402
from jumboboxd.db.session import get_async_session  # noqa: E402
from jumboboxd.integrations.catalog import CatalogClient, get_catalog_client  # noqa: E402
from jumboboxd.integrations.identity import IdentityGateway, get_identity_gateway  # noqa: E402
from jumboboxd.main import app as fastapi_app  # noqa: E402

CATALOG_HOST = "catalog.test"
CATALOG_BASE = f"https://{CATALOG_HOST}/api"
IDENTITY_HOST = "identity.test"
IDENTITY_BASE = f"https://{IDENTITY_HOST}/v1"
JWT_SECRET = "test-signing-secret"


def make_token(external_id: str, *, secret: str = JWT_SECRET, expires_in: int = 3600) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "sub": external_id,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(seconds=expires_in)).timestamp()),
    }
    return jwt.encode(payload, secret, algorithm="HS256")


def auth(external_id: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {make_token(external_id)}"}


def catalog_movie_payload(movie_id: int, title: str = "Some Movie") -> Dict[str, Any]:
    return {
        "id": movie_id,
        "title": title,
        "description": f"{title} overview",
        "poster": f"https://img.test/{movie_id}.jpg",
        "year": 2010,
    }


@pytest.fixture
async def engine():
    eng = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    try:
        yield eng
    finally:
        await eng.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(bind=engine, expire_on_commit=False, autoflush=False)


@pytest.fixture
def catalog() -> CatalogClient:
    return CatalogClient(base_url=CATALOG_BASE, timeout=5)


@pytest.fixture
def identity() -> IdentityGateway:
    return IdentityGateway(
        api_base=IDENTITY_BASE,
        secret_key="sk_test_123",
        jwt_key=JWT_SECRET,
        algorithms=["HS256"],
    )


@pytest.fixture
def app(session_factory, catalog, identity):
    async def _session():
        async with session_factory() as session:
            yield session

    fastapi_app.dependency_overrides[get_async_session] = _session
    fastapi_app.dependency_overrides[get_catalog_client] = lambda: catalog
    fastapi_app.dependency_overrides[get_identity_gateway] = lambda: identity
    try:
        yield fastapi_app
    finally:
        fastapi_app.dependency_overrides.clear()


@pytest.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as ac:
        yield ac


@pytest.fixture
def mock_api():
    """respx router for the catalog and identity provider; unmatched calls fail."""
    with respx.mock(assert_all_called=False) as router:
        yield router


@pytest.fixture
def catalog_movie(mock_api):
    def _register(movie_id: int, title: str = "Some Movie", status: int = 200, json: Optional[Any] = None):
        body = json if json is not None else catalog_movie_payload(movie_id, title)
        return mock_api.get(
            host=CATALOG_HOST, path="/api/movie", params={"id": str(movie_id)}
        ).mock(return_value=httpx.Response(status, json=body))

    return _register


@pytest.fixture
def catalog_page(mock_api):
    def _register(page: int, movies: List[Dict[str, Any]], status: int = 200):
        return mock_api.get(
            host=CATALOG_HOST, path="/api/list", params={"page": str(page)}
        ).mock(return_value=httpx.Response(status, json=movies))

    return _register


@pytest.fixture
def identity_user(mock_api):
    def _register(external_id: str, json: Optional[Dict[str, Any]] = None, status: int = 200):
        return mock_api.get(host=IDENTITY_HOST, path=f"/v1/users/{external_id}").mock(
            return_value=httpx.Response(status, json=json or {})
        )

    return _register


@pytest.fixture
def make_user(session_factory):
    async def _make(external_id: str, email: str = "", username: Optional[str] = None) -> User:
        async with session_factory() as s:
            user = User(external_id=external_id, email=email or f"{external_id}@example.com", username=username)
            s.add(user)
            await s.commit()
            return user

    return _make


@pytest.fixture
def count_rows(session_factory):
    async def _count(model) -> int:
        async with session_factory() as s:
            return int((await s.execute(select(func.count()).select_from(model))).scalar_one())

    return _count
