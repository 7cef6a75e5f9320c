"""Canonical intent schema for natural-language movie/TV search.

A pure domain model describing what a user asked for, with zero coupling to
the catalog API.  It is the shared language between the intent extractor,
the search orchestrator and the ranking engine.

``Intent`` is frozen: it is built once per query and never changed.  Input
from language models is messy, so every field has a ``before`` validator
that normalises rather than rejects: unknown array fields become empty,
numbers that do not parse become null, and the requested count is clamped
to 1..100 (anything outside means "no count").
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from reelfinder.tmdb.models import MEDIA_TYPES

MIN_REQUESTED_COUNT = 1
MAX_REQUESTED_COUNT = 100
_MIN_YEAR = 1870
_MAX_YEAR = 2100

_MEDIA_TYPE_SYNONYMS: dict[str, str] = {
    "movie": "movie",
    "movies": "movie",
    "film": "movie",
    "films": "movie",
    "tv": "tv",
    "tv show": "tv",
    "tv shows": "tv",
    "tv series": "tv",
    "show": "tv",
    "shows": "tv",
    "series": "tv",
}


# ---------------------------------------------------------------------------
# Coercion helpers
# ---------------------------------------------------------------------------


def _as_list(value: Any) -> list:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, (list, tuple, set, frozenset)):
        return list(value)
    return []


def _clean_strings(value: Any, *, lower: bool) -> tuple[str, ...]:
    """Strip, drop blanks and de-duplicate case-insensitively (first spelling wins)."""
    seen: set[str] = set()
    out: list[str] = []
    for item in _as_list(value):
        if not isinstance(item, (str, int, float)) or isinstance(item, bool):
            continue
        text = " ".join(str(item).split())
        if not text:
            continue
        key = text.casefold()
        if key in seen:
            continue
        seen.add(key)
        out.append(text.lower() if lower else text)
    return tuple(out)


def _optional_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
    elif not isinstance(value, (int, float)):
        return None
    try:
        return int(float(value))
    except (ValueError, OverflowError):
        return None


def _optional_year(value: Any) -> Optional[int]:
    year = _optional_int(value)
    if year is None or not _MIN_YEAR <= year <= _MAX_YEAR:
        return None
    return year


# ---------------------------------------------------------------------------
# Intent
# ---------------------------------------------------------------------------


class Intent(BaseModel):
    """Structured interpretation of one free-text query."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    titles: tuple[str, ...] = Field(
        default=(),
        description='Movie/show titles the user named, e.g. ["La La Land"].',
    )
    people: tuple[str, ...] = Field(
        default=(),
        description='Actors or directors the user named, e.g. ["Tom Hanks"].',
    )
    genres: tuple[str, ...] = Field(
        default=(),
        description='Lower-case genres, e.g. ["horror", "sci-fi"].',
    )
    moods: tuple[str, ...] = Field(
        default=(),
        description='Lower-case tone words, e.g. ["feel-good", "gritty"].',
    )
    year_from: Optional[int] = Field(default=None, description="Earliest release year.")
    year_to: Optional[int] = Field(default=None, description="Latest release year.")
    runtime_max_minutes: Optional[int] = Field(
        default=None,
        description='Runtime ceiling in minutes ("under 2h" = 120).',
    )
    media_types: tuple[str, ...] = Field(
        default=MEDIA_TYPES,
        description='Subset of ["movie", "tv"]; empty means both.',
    )
    requested_count: Optional[int] = Field(
        default=None,
        description="How many results the user asked for (1..100).",
    )
    wants_similar: bool = Field(
        default=False,
        validation_alias=AliasChoices("wantsSimilar", "isRequestingSuggestions", "wants_similar"),
        description='True for "like X", "similar to X", "recommend".',
    )
    raw_query: str = Field(default="", description="The query exactly as typed.")

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------

    @model_validator(mode="before")
    @classmethod
    def _year_bounds(cls, data: Any) -> Any:
        """Expand a single ``year`` into both bounds and order the bounds."""
        if not isinstance(data, dict):
            return data
        data = dict(data)
        from_key = "yearFrom" if "yearFrom" in data else "year_from"
        to_key = "yearTo" if "yearTo" in data else "year_to"
        single = _optional_year(data.pop("year", None))
        year_from = _optional_year(data.get(from_key))
        year_to = _optional_year(data.get(to_key))
        if single is not None and year_from is None and year_to is None:
            year_from = year_to = single
        if year_from is not None and year_to is not None and year_from > year_to:
            year_from, year_to = year_to, year_from
        data[from_key] = year_from
        data[to_key] = year_to
        return data

    @field_validator("titles", "people", mode="before")
    @classmethod
    def _names(cls, v: Any) -> tuple[str, ...]:
        return _clean_strings(v, lower=False)

    @field_validator("genres", "moods", mode="before")
    @classmethod
    def _lowered(cls, v: Any) -> tuple[str, ...]:
        return _clean_strings(v, lower=True)

    @field_validator("media_types", mode="before")
    @classmethod
    def _media_types(cls, v: Any) -> tuple[str, ...]:
        found: list[str] = []
        for token in _clean_strings(v, lower=True):
            media_type = _MEDIA_TYPE_SYNONYMS.get(token)
            if media_type and media_type not in found:
                found.append(media_type)
        if not found:
            return MEDIA_TYPES
        return tuple(m for m in MEDIA_TYPES if m in found)

    @field_validator("runtime_max_minutes", mode="before")
    @classmethod
    def _runtime(cls, v: Any) -> Optional[int]:
        minutes = _optional_int(v)
        if minutes is None or minutes <= 0:
            return None
        return minutes

    @field_validator("requested_count", mode="before")
    @classmethod
    def _count(cls, v: Any) -> Optional[int]:
        count = _optional_int(v)
        if count is None or not MIN_REQUESTED_COUNT <= count <= MAX_REQUESTED_COUNT:
            return None
        return count

    @field_validator("wants_similar", mode="before")
    @classmethod
    def _flag(cls, v: Any) -> bool:
        if isinstance(v, str):
            return v.strip().lower() in {"true", "yes", "1"}
        return bool(v)

    @field_validator("raw_query", mode="before")
    @classmethod
    def _raw(cls, v: Any) -> str:
        return v if isinstance(v, str) else ""

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------

    @classmethod
    def empty(cls, raw_query: str = "") -> "Intent":
        return cls(raw_query=raw_query)

    @classmethod
    def from_llm_data(cls, query: str, data: dict[str, Any]) -> "Intent":
        """Build an Intent from a language capability's JSON output."""
        payload = {k: v for k, v in data.items() if k not in {"rawQuery", "raw_query"}}
        payload["raw_query"] = query
        return cls.model_validate(payload)

    # ------------------------------------------------------------------
    # Convenience
    # ------------------------------------------------------------------

    @property
    def has_signal(self) -> bool:
        """True when the intent carries anything the orchestrator can search on."""
        return bool(
            self.titles
            or self.people
            or self.genres
            or self.moods
            or self.year_from is not None
            or self.year_to is not None
        )

    @property
    def single_media_type(self) -> Optional[str]:
        return self.media_types[0] if len(self.media_types) == 1 else None

    def allows(self, media_type: Optional[str]) -> bool:
        return media_type in self.media_types

    def to_dict(self) -> dict[str, Any]:
        """JSON-friendly camelCase dump."""
        return self.model_dump(mode="json", by_alias=True)

    def to_summary(self) -> str:
        """One-line human-readable summary, used in logs and query plans."""
        parts: list[str] = []
        if self.titles:
            prefix = "like " if self.wants_similar else ""
            parts.append(prefix + ", ".join(self.titles))
        if self.genres:
            parts.append("genres: " + ", ".join(self.genres))
        if self.moods:
            parts.append("moods: " + ", ".join(self.moods))
        if self.people:
            parts.append("people: " + ", ".join(self.people))
        if self.year_from is not None or self.year_to is not None:
            if self.year_from == self.year_to:
                parts.append(f"year {self.year_from}")
            else:
                parts.append(f"years {self.year_from or '*'}-{self.year_to or '*'}")
        if self.runtime_max_minutes:
            parts.append(f"under {self.runtime_max_minutes} min")
        parts.append("/".join(self.media_types))
        if self.requested_count:
            parts.append(f"top {self.requested_count}")
        return "; ".join(parts)
