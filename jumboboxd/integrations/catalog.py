# jumboboxd/integrations/catalog.py
from __future__ import annotations

import logging
from typing import Any, Dict, List

import httpx

from jumboboxd.core.errors import UpstreamError, ValidationError
from jumboboxd.core.settings import settings

log = logging.getLogger(__name__)

MIN_CATALOG_ID = 0
MAX_CATALOG_ID = 249
MIN_PAGE = 1
MAX_PAGE = 10
PAGE_SIZE = 25


def check_catalog_id(value: Any) -> int:
    """Coerce a catalog id (int or numeric string) and enforce 0..249."""
    try:
        movie_id = int(str(value).strip())
    except (TypeError, ValueError):
        raise ValidationError("Movie ID must be an integer")
    if movie_id < MIN_CATALOG_ID or movie_id > MAX_CATALOG_ID:
        raise ValidationError(f"Movie ID must be between {MIN_CATALOG_ID} and {MAX_CATALOG_ID}")
    return movie_id


def check_page(page: int) -> int:
    if page < MIN_PAGE or page > MAX_PAGE:
        raise ValidationError(f"Page must be between {MIN_PAGE} and {MAX_PAGE}")
    return page


class CatalogClient:
    """Read-only client for the external movie API (250 titles, 10 pages of 25)."""

    def __init__(self, base_url: str, timeout: float = 15.0):
        self.base = base_url.rstrip("/")
        self.timeout = timeout

    async def _get(self, path: str, params: Dict[str, Any]) -> Any:
        url = f"{self.base}/{path}"
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                r = await client.get(url, params=params)
                r.raise_for_status()
                return r.json()
        except httpx.HTTPStatusError as e:
            log.warning("catalog %s returned %s", url, e.response.status_code)
            raise UpstreamError("Failed to fetch from movie API") from e
        except httpx.HTTPError as e:
            log.warning("catalog %s request failed: %r", url, e)
            raise UpstreamError("Failed to fetch from movie API") from e
        except ValueError as e:
            log.warning("catalog %s returned a non-JSON body", url)
            raise UpstreamError("Failed to fetch from movie API") from e

    async def get_movie(self, movie_id: Any) -> Dict[str, Any]:
        mid = check_catalog_id(movie_id)
        data = await self._get("movie", {"id": mid})
        if not isinstance(data, dict) or not data.get("title"):
            log.warning("catalog movie %s has no usable payload", mid)
            raise UpstreamError("Failed to fetch movie details")
        return data

    async def list_movies(self, page: int = 1) -> List[Dict[str, Any]]:
        data = await self._get("list", {"page": check_page(page)})
        if not isinstance(data, list):
            log.warning("catalog list page %s is not a list", page)
            raise UpstreamError("Failed to fetch movies")
        return data

    async def search(self, query: str, max_pages: int = MAX_PAGE) -> List[Dict[str, Any]]:
        """
        Case-insensitive title substring match across catalog pages.
        The catalog has no search endpoint, so this pages through the list.
        """
        needle = (query or "").strip().lower()
        if not needle:
            return []
        out: List[Dict[str, Any]] = []
        for page in range(MIN_PAGE, min(max_pages, MAX_PAGE) + 1):
            for movie in await self.list_movies(page):
                title = str(movie.get("title") or "")
                if needle in title.lower():
                    out.append(movie)
        return out


def get_catalog_client() -> CatalogClient:
    """FastAPI dependency; override in tests via app.dependency_overrides."""
    return CatalogClient(base_url=settings.catalog_base_url, timeout=settings.catalog_timeout)
