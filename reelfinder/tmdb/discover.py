"""DiscoverQuery — parameter bag for TMDb's ``discover/{movie,tv}`` endpoint.

TMDb uses different date parameter names per media type
(``primary_release_date`` for movies, ``first_air_date`` for TV) and joins
multi-valued filters with ``,`` (AND) or ``|`` (OR).  This module hides those
details behind a frozen dataclass and :func:`build_discover_params`.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class DiscoverQuery:
    """Filters for one discovery call.

    ``match_any_genre`` switches the genre join from AND to OR and is used by
    the genre-intersection union fallback.
    """

    media_type: str
    genre_ids: tuple[int, ...] = ()
    match_any_genre: bool = False
    person_ids: tuple[int, ...] = ()
    cast_ids: tuple[int, ...] = ()
    crew_ids: tuple[int, ...] = ()
    keyword_ids: tuple[int, ...] = ()
    year_from: Optional[int] = None
    year_to: Optional[int] = None
    runtime_gte: Optional[int] = None
    runtime_lte: Optional[int] = None
    original_language: Optional[str] = None
    vote_count_gte: Optional[int] = None
    sort_by: str = "popularity.desc"
    page: int = 1

    def describe(self) -> str:
        """Short human-readable summary used in query plans and logs."""
        parts = [f"discover/{self.media_type}"]
        if self.genre_ids:
            joiner = " OR " if self.match_any_genre else " AND "
            parts.append("genres " + joiner.join(str(g) for g in self.genre_ids))
        if self.person_ids:
            parts.append("people " + ",".join(str(p) for p in self.person_ids))
        if self.year_from or self.year_to:
            parts.append(f"years {self.year_from or '*'}-{self.year_to or '*'}")
        if self.runtime_lte:
            parts.append(f"runtime <= {self.runtime_lte}")
        return ", ".join(parts)


def _join(ids: tuple[int, ...], sep: str = ",") -> str:
    return sep.join(str(i) for i in ids)


def build_discover_params(query: DiscoverQuery) -> dict[str, str]:
    """Translate a :class:`DiscoverQuery` into TMDb query-string parameters.

    Runtime filters are only sent for movies; TV episode lengths are too
    uneven for TMDb's ``with_runtime`` to be meaningful.
    """
    params: dict[str, str] = {"sort_by": query.sort_by, "page": str(query.page)}

    if query.genre_ids:
        params["with_genres"] = _join(query.genre_ids, "|" if query.match_any_genre else ",")
    if query.person_ids:
        params["with_people"] = _join(query.person_ids)
    if query.cast_ids:
        params["with_cast"] = _join(query.cast_ids)
    if query.crew_ids:
        params["with_crew"] = _join(query.crew_ids)
    if query.keyword_ids:
        params["with_keywords"] = _join(query.keyword_ids)

    date_key = "primary_release_date" if query.media_type == "movie" else "first_air_date"
    if query.year_from is not None:
        params[f"{date_key}.gte"] = f"{query.year_from}-01-01"
    if query.year_to is not None:
        params[f"{date_key}.lte"] = f"{query.year_to}-12-31"

    if query.media_type == "movie":
        if query.runtime_lte is not None:
            params["with_runtime.lte"] = str(query.runtime_lte)
        if query.runtime_gte is not None:
            params["with_runtime.gte"] = str(query.runtime_gte)

    if query.original_language:
        params["with_original_language"] = query.original_language
    if query.vote_count_gte is not None:
        params["vote_count.gte"] = str(query.vote_count_gte)
    return params
