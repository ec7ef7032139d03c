from datetime import datetime, timedelta, timezone

import pytest
from httpx import AsyncClient

from jumboboxd.db.crud import watchlist as watchlist_crud
from jumboboxd.db.models import Movie, WatchlistEntry

from .conftest import auth


@pytest.fixture
async def alice(make_user):
    return await make_user("user_alice", username="alice")


async def _add(client: AsyncClient, movie_id: int, **extra):
    body = {"movieId": movie_id, "title": f"Movie {movie_id}", **extra}
    return await client.post("/api/movies/watchlist", json=body, headers=auth("user_alice"))


@pytest.mark.asyncio
async def test_add_is_idempotent(client: AsyncClient, alice, count_rows):
    r1 = await _add(client, 5)
    r2 = await _add(client, 5)
    assert r1.status_code == r2.status_code == 200
    assert r1.json()["success"] is True
    assert r1.json()["movie"]["id"] == 5
    assert await count_rows(WatchlistEntry) == 1
    assert await count_rows(Movie) == 1


@pytest.mark.asyncio
async def test_year_fallback_is_kept(client: AsyncClient, alice):
    r = await _add(client, 8, year=1999, posterPath="/p.jpg", overview="Red pill")
    movie = r.json()["movie"]
    assert movie["year"] == 1999
    assert movie["poster"] == "/p.jpg"
    assert movie["description"] == "Red pill"


@pytest.mark.asyncio
async def test_add_without_title_uses_catalog(client: AsyncClient, alice, catalog_movie):
    route = catalog_movie(11, "Heat")
    r = await client.post("/api/movies/watchlist", json={"movieId": 11}, headers=auth("user_alice"))
    assert r.status_code == 200
    assert r.json()["movie"]["title"] == "Heat"
    assert route.call_count == 1


@pytest.mark.asyncio
async def test_list_is_most_recently_added_first(client: AsyncClient, alice, monkeypatch):
    base = datetime(2026, 5, 1, tzinfo=timezone.utc)
    ticks = iter(base + timedelta(minutes=i) for i in range(10))
    monkeypatch.setattr(watchlist_crud, "utcnow", lambda: next(ticks))
    for movie_id in (3, 1, 2):
        await _add(client, movie_id)

    r = await client.get("/api/movies/watchlist", params={"limit": 2}, headers=auth("user_alice"))
    assert r.status_code == 200
    data = r.json()
    assert [m["id"] for m in data["movies"]] == [2, 1]
    assert data["pagination"] == {"page": 1, "limit": 2, "total": 3, "totalPages": 2}

    r = await client.get("/api/movies/watchlist", params={"limit": 2, "page": 2}, headers=auth("user_alice"))
    assert [m["id"] for m in r.json()["movies"]] == [3]


@pytest.mark.asyncio
async def test_default_page_size(client: AsyncClient, alice):
    r = await client.get("/api/movies/watchlist", headers=auth("user_alice"))
    assert r.json() == {"movies": [], "pagination": {"page": 1, "limit": 12, "total": 0, "totalPages": 0}}


@pytest.mark.asyncio
async def test_check_and_remove(client: AsyncClient, alice):
    h = auth("user_alice")
    await _add(client, 5)

    r = await client.get("/api/movies/watchlist/check", params={"movieId": 5}, headers=h)
    assert r.json() == {"inWatchlist": True}

    r = await client.delete("/api/movies/watchlist", params={"movieId": 5}, headers=h)
    assert r.status_code == 200
    assert r.json() == {"success": True}

    r = await client.get("/api/movies/watchlist/check", params={"movieId": 5}, headers=h)
    assert r.json() == {"inWatchlist": False}


@pytest.mark.asyncio
async def test_check_unknown_movie_is_false(client: AsyncClient, alice):
    r = await client.get("/api/movies/watchlist/check", params={"movieId": 77}, headers=auth("user_alice"))
    assert r.status_code == 200
    assert r.json() == {"inWatchlist": False}


@pytest.mark.asyncio
async def test_remove_unknown_movie_is_404(client: AsyncClient, alice):
    r = await client.delete("/api/movies/watchlist", params={"movieId": 77}, headers=auth("user_alice"))
    assert r.status_code == 404
    assert r.json()["error"] == "Movie not found"


@pytest.mark.asyncio
async def test_remove_unlisted_movie_is_a_no_op(client: AsyncClient, alice, make_user, count_rows):
    await make_user("user_bob")
    await client.post("/api/movies/watchlist", json={"movieId": 5, "title": "Movie 5"}, headers=auth("user_bob"))

    r = await client.delete("/api/movies/watchlist", params={"movieId": 5}, headers=auth("user_alice"))
    assert r.status_code == 200
    # bob's entry is untouched
    assert await count_rows(WatchlistEntry) == 1


@pytest.mark.asyncio
async def test_lists_are_per_user(client: AsyncClient, alice, make_user):
    await make_user("user_bob")
    await _add(client, 5)

    r = await client.get("/api/movies/watchlist", headers=auth("user_bob"))
    assert r.json()["movies"] == []


@pytest.mark.asyncio
async def test_add_rejects_out_of_range_id(client: AsyncClient, alice):
    r = await _add(client, 250)
    assert r.status_code == 400
    assert r.json()["code"] == "validation_error"


@pytest.mark.asyncio
async def test_watchlist_requires_auth(client: AsyncClient, alice):
    r = await client.get("/api/movies/watchlist")
    assert r.status_code == 401
    r = await client.post("/api/movies/watchlist", json={"movieId": 5, "title": "Movie 5"})
    assert r.status_code == 401
