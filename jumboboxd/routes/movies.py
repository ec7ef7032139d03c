# jumboboxd/routes/movies.py
from __future__ import annotations

from typing import Any, Dict, List

from fastapi import APIRouter, Depends, Query

from jumboboxd.integrations.catalog import (
    MAX_CATALOG_ID,
    MAX_PAGE,
    MIN_CATALOG_ID,
    MIN_PAGE,
    CatalogClient,
    get_catalog_client,
)

router = APIRouter(prefix="/movies", tags=["movies"])


@router.get("/detail", summary="Movie detail (proxied from the catalog)")
async def movie_detail(
    id: int = Query(..., ge=MIN_CATALOG_ID, le=MAX_CATALOG_ID),
    catalog: CatalogClient = Depends(get_catalog_client),
) -> Dict[str, Any]:
    return await catalog.get_movie(id)


@router.get("/list", summary="One page of the catalog (fixed page size)")
async def list_movies(
    page: int = Query(1, ge=MIN_PAGE, le=MAX_PAGE),
    catalog: CatalogClient = Depends(get_catalog_client),
) -> List[Dict[str, Any]]:
    return await catalog.list_movies(page)


@router.get("/search", summary="Title search across the catalog")
async def search_movies(
    q: str = Query(..., min_length=1, max_length=200),
    catalog: CatalogClient = Depends(get_catalog_client),
) -> Dict[str, Any]:
    results = await catalog.search(q)
    return {"query": q, "results": results, "total": len(results)}
