from __future__ import annotations

from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictInt


# ── Users ────────────────────────────────────────────────────────────────────

class SyncUserIn(BaseModel):
    user_id: str = Field(alias="userId", min_length=1, max_length=191, pattern=r"^[A-Za-z0-9_-]+$")

    model_config = ConfigDict(populate_by_name=True)


# ── Watched ──────────────────────────────────────────────────────────────────

class MarkWatchedIn(BaseModel):
    """Catalog id plus optional display fields used if the movie is not cached yet."""
    id: int = Field(ge=0, le=249, description="External catalog id")
    title: Optional[str] = None
    overview: Optional[str] = None
    poster_path: Optional[str] = Field(default=None, alias="posterPath")
    release_date: Optional[Union[str, int]] = Field(default=None, alias="releaseDate")

    model_config = ConfigDict(populate_by_name=True)

    def fallback(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "overview": self.overview,
            "poster_path": self.poster_path,
            "release_date": self.release_date,
        }


# ── Watchlist ────────────────────────────────────────────────────────────────

class WatchlistIn(BaseModel):
    movie_id: int = Field(alias="movieId", ge=0, le=249)
    title: Optional[str] = None
    overview: Optional[str] = None
    poster_path: Optional[str] = Field(default=None, alias="posterPath")
    year: Optional[int] = None

    model_config = ConfigDict(populate_by_name=True)

    def fallback(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "overview": self.overview,
            "poster_path": self.poster_path,
            "release_date": str(self.year) if self.year else None,
        }


# ── Ratings / reviews ────────────────────────────────────────────────────────

class ReviewIn(BaseModel):
    movie_id: int = Field(alias="movieId", ge=0, le=249)
    # 1..5 is checked by jumboboxd.db.crud.ratings.check_score
    score: Union[StrictInt, StrictFloat]
    review: Optional[str] = Field(default=None, max_length=5000)

    model_config = ConfigDict(populate_by_name=True)
