# jumboboxd/main.py: app factory, router mounting, CORS, error handlers

from __future__ import annotations

import logging

from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from jumboboxd.core.errors import register_error_handlers
from jumboboxd.core.settings import settings
from jumboboxd.routes import health, movies, reviews, users, watched, watchlist

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
log = logging.getLogger("startup")

ROUTERS = [
    ("health", health.router),
    ("movies", movies.router),
    ("watched", watched.router),
    ("watchlist", watchlist.router),
    ("reviews", reviews.router),
    ("users", users.router),
]


def create_app() -> FastAPI:
    app = FastAPI(
        title="JumboBoxd API",
        version="1.0.0",
        openapi_url="/api/openapi.json",
        docs_url="/api/docs",
        redoc_url=None,
    )

    # ───────────────── CORS ─────────────────
    # Credentials allowed for the session-cookie fallback
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)

    # Single API namespace prefix
    api = APIRouter(prefix="/api")
    for name, router in ROUTERS:
        api.include_router(router)
        log.info("Mounted router: %s (prefix=%s)", name, router.prefix)

    app.include_router(api)
    return app


app = create_app()
