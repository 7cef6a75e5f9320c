"""Shared fixtures: an in-memory catalog and item factories.

``FakeCatalog`` implements the full CatalogAdapter interface from canned
data and records every call, so tests can assert exactly which catalog
operations a search issued.
"""
from __future__ import annotations

from typing import Any, Callable, Optional

import pytest

from analysis.models import SearchHit
from reelfinder.catalog import CatalogAdapter
from reelfinder.tmdb.discover import DiscoverQuery
from reelfinder.tmdb.models import TmdbDetails, TmdbMedia, TmdbPerson

MOVIE_GENRES = {
    "action": 28,
    "comedy": 35,
    "crime": 80,
    "drama": 18,
    "horror": 27,
    "romance": 10749,
    "science fiction": 878,
    "thriller": 53,
    "music": 10402,
}

TV_GENRES = {
    "action & adventure": 10759,
    "comedy": 35,
    "crime": 80,
    "drama": 18,
    "mystery": 9648,
    "sci-fi & fantasy": 10765,
}


def make_media(
    catalog_id: int,
    name: str,
    media_type: Optional[str] = "movie",
    *,
    rating: Optional[float] = 7.0,
    year: Optional[int] = 2015,
    genre_ids: tuple[int, ...] = (),
    overview: str = "",
    popularity: float = 10.0,
    vote_count: int = 1000,
) -> TmdbMedia:
    date = f"{year}-06-01" if year else None
    payload: dict[str, Any] = {
        "id": catalog_id,
        "media_type": media_type,
        "overview": overview,
        "vote_average": rating,
        "vote_count": vote_count if rating is not None else 0,
        "popularity": popularity,
        "genre_ids": list(genre_ids),
        "poster_path": f"/poster{catalog_id}.jpg",
    }
    if media_type == "tv":
        payload["name"] = name
        payload["first_air_date"] = date
    else:
        payload["title"] = name
        payload["release_date"] = date
    return TmdbMedia.model_validate(payload)


class FakeCatalog(CatalogAdapter):
    """Canned catalog.  Lookup keys are case-folded query text."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, tuple]] = []
        self.multi: dict[str, list[TmdbMedia]] = {}
        self.movies: dict[str, list[TmdbMedia]] = {}
        self.shows: dict[str, list[TmdbMedia]] = {}
        self.persons: dict[str, list[TmdbPerson]] = {}
        self.genre_maps: dict[str, dict[str, int]] = {"movie": dict(MOVIE_GENRES), "tv": dict(TV_GENRES)}
        self.discover_results: dict[tuple[str, tuple[int, ...], bool], list[TmdbMedia]] = {}
        self.discover_fn: Optional[Callable[[DiscoverQuery], list[TmdbMedia]]] = None
        self.similar: dict[tuple[str, int], list[TmdbMedia]] = {}
        self.recommendations: dict[tuple[str, int], list[TmdbMedia]] = {}
        self.details: dict[tuple[str, int], TmdbDetails] = {}
        self.failing: set[str] = set()

    def _record(self, operation: str, *args: Any) -> None:
        self.calls.append((operation, args))
        if operation in self.failing:
            raise RuntimeError(f"{operation} exploded")

    def operations(self) -> list[str]:
        return [op for op, _ in self.calls]

    async def search_multi(self, text: str) -> list[TmdbMedia]:
        self._record("search_multi", text)
        return list(self.multi.get(text.casefold(), []))

    async def search_movie(self, text: str, year: Optional[int] = None) -> list[TmdbMedia]:
        self._record("search_movie", text, year)
        return list(self.movies.get(text.casefold(), []))

    async def search_tv(self, text: str) -> list[TmdbMedia]:
        self._record("search_tv", text)
        return list(self.shows.get(text.casefold(), []))

    async def search_person(self, text: str) -> list[TmdbPerson]:
        self._record("search_person", text)
        return list(self.persons.get(text.casefold(), []))

    async def find_exact_title(self, text: str) -> Optional[TmdbMedia]:
        self._record("find_exact_title", text)
        needle = text.casefold()
        for item in self.multi.get(needle, []):
            if item.media_type in ("movie", "tv") and needle in {
                n.casefold() for n in (item.title, item.name) if n
            }:
                return item
        return None

    async def discover(self, query: DiscoverQuery) -> list[TmdbMedia]:
        self._record("discover", query)
        if self.discover_fn is not None:
            return self.discover_fn(query)
        key = (query.media_type, query.genre_ids, query.match_any_genre)
        return list(self.discover_results.get(key, []))

    async def get_similar(self, media_type: str, catalog_id: int) -> list[TmdbMedia]:
        self._record("get_similar", media_type, catalog_id)
        return list(self.similar.get((media_type, catalog_id), []))

    async def get_recommendations(self, media_type: str, catalog_id: int) -> list[TmdbMedia]:
        self._record("get_recommendations", media_type, catalog_id)
        return list(self.recommendations.get((media_type, catalog_id), []))

    async def get_genre_map(self, media_type: str) -> dict[str, int]:
        self._record("get_genre_map", media_type)
        return dict(self.genre_maps.get(media_type, {}))

    async def get_details(self, media_type: str, catalog_id: int) -> Optional[TmdbDetails]:
        self._record("get_details", media_type, catalog_id)
        return self.details.get((media_type, catalog_id))


@pytest.fixture
def fake_catalog() -> FakeCatalog:
    return FakeCatalog()


@pytest.fixture
def media() -> Callable[..., TmdbMedia]:
    """Factory for TmdbMedia items: ``media(1, "Heat", rating=8.3)``."""
    return make_media


@pytest.fixture
def person() -> Callable[..., TmdbPerson]:
    def _person(person_id: int, name: str, known_for: list[TmdbMedia] | None = None) -> TmdbPerson:
        return TmdbPerson(id=person_id, name=name, known_for=known_for or [])

    return _person


@pytest.fixture
def hit() -> Callable[..., SearchHit]:
    """Factory for SearchHits with sensible defaults."""

    def _hit(
        catalog_id: int,
        source: str = "discovery",
        *,
        media_type: str = "movie",
        name: Optional[str] = None,
        rating: Optional[float] = 7.0,
        year: Optional[int] = 2015,
        overview: Optional[str] = None,
        **signals: Any,
    ) -> SearchHit:
        return SearchHit(
            catalog_id=catalog_id,
            media_type=media_type,
            name=name or f"Title {catalog_id}",
            overview=overview,
            rating=rating,
            year=year,
            signals={"source": source, **signals},
        )

    return _hit
