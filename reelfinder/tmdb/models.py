"""Pydantic v2 models mirroring the TMDb v3 payloads this project reads.

All models use model_config extra="ignore" so undocumented fields are
tolerated. Empty date strings (TMDb sends ``""`` for unreleased titles) are
coerced to None.

Hierarchy:
  MediaType             -- "movie" | "tv" enum
  TmdbGenre             -- {id, name}
  TmdbMedia             -- search / discover / similar / recommendations item
  TmdbPerson            -- search/person item with known_for credits
  TmdbDetails           -- movie/{id} and tv/{id}
  TmdbPage              -- paginated envelope {page, results, total_*}
"""

from __future__ import annotations

from enum import Enum
from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator


class MediaType(str, Enum):
    """Catalog media types the search engine returns."""

    movie = "movie"
    tv = "tv"


MEDIA_TYPES: tuple[str, ...] = tuple(m.value for m in MediaType)


def _blank_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


def _year_of(date_str: Optional[str]) -> Optional[int]:
    if not date_str or len(date_str) < 4 or not date_str[:4].isdigit():
        return None
    return int(date_str[:4])


class TmdbGenre(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int
    name: str


class TmdbMedia(BaseModel):
    """One movie or TV item as returned by list endpoints.

    ``media_type`` is only sent by ``search/multi`` and ``known_for``; the
    client fills it in for typed endpoints.
    """

    model_config = ConfigDict(extra="ignore")

    id: int
    media_type: Optional[str] = None
    title: Optional[str] = None
    name: Optional[str] = None
    original_title: Optional[str] = None
    original_name: Optional[str] = None
    overview: Optional[str] = None
    vote_average: Optional[float] = None
    vote_count: Optional[int] = None
    popularity: Optional[float] = None
    release_date: Optional[str] = None
    first_air_date: Optional[str] = None
    poster_path: Optional[str] = None
    genre_ids: List[int] = Field(default_factory=list)
    original_language: Optional[str] = None

    @field_validator("release_date", "first_air_date", "overview", "poster_path", mode="before")
    @classmethod
    def _empty_strings(cls, v):
        return _blank_to_none(v)

    @property
    def display_name(self) -> str:
        return self.title or self.name or self.original_title or self.original_name or ""

    @property
    def year(self) -> Optional[int]:
        return _year_of(self.release_date or self.first_air_date)

    @property
    def rating(self) -> Optional[float]:
        """Average vote, or None when nobody has voted (TMDb reports 0.0)."""
        if self.vote_average is None:
            return None
        if self.vote_average == 0 and not self.vote_count:
            return None
        return self.vote_average

    def with_media_type(self, media_type: str) -> "TmdbMedia":
        if self.media_type == media_type:
            return self
        return self.model_copy(update={"media_type": media_type})


class TmdbPerson(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int
    name: str
    known_for_department: Optional[str] = None
    popularity: Optional[float] = None
    known_for: List[TmdbMedia] = Field(default_factory=list)


class TmdbDetails(BaseModel):
    """Detail record for ``movie/{id}`` or ``tv/{id}``."""

    model_config = ConfigDict(extra="ignore")

    id: int
    title: Optional[str] = None
    name: Optional[str] = None
    overview: Optional[str] = None
    tagline: Optional[str] = None
    status: Optional[str] = None
    type: Optional[str] = None
    vote_average: Optional[float] = None
    vote_count: Optional[int] = None
    release_date: Optional[str] = None
    first_air_date: Optional[str] = None
    poster_path: Optional[str] = None
    genres: List[TmdbGenre] = Field(default_factory=list)
    runtime: Optional[int] = None
    episode_run_time: List[int] = Field(default_factory=list)
    number_of_seasons: Optional[int] = None
    number_of_episodes: Optional[int] = None

    @field_validator("release_date", "first_air_date", "tagline", mode="before")
    @classmethod
    def _empty_strings(cls, v):
        return _blank_to_none(v)

    @property
    def runtime_minutes(self) -> Optional[int]:
        """Movie runtime, or the first listed episode length for TV."""
        if self.runtime:
            return self.runtime
        if self.episode_run_time:
            return self.episode_run_time[0]
        return None

    @property
    def genre_names(self) -> list[str]:
        return [g.name.lower() for g in self.genres]


ItemT = TypeVar("ItemT")


class TmdbPage(BaseModel, Generic[ItemT]):
    model_config = ConfigDict(extra="ignore")

    page: int = 1
    results: List[ItemT] = Field(default_factory=list)
    total_pages: int = 0
    total_results: int = 0
