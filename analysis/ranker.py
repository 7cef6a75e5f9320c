"""Hybrid ranker — scores, deduplicates and orders raw search hits.

``Ranker.rank_and_merge`` is a pure function of its inputs: the same hits and
intent always give the same list.  The reference year for the recency factor
is fixed when the ranker is built.

Score = source weight + six bounded factors:

=================== ====================================================
Factor              Contribution
=================== ====================================================
Source weight       SOURCE_WEIGHTS[source] (0.5 for unknown sources)
Genre / mood        +0.2 per matched genre, +0.15 per matched mood,
                    +0.15 when catalog genre ids overlap; cap 0.6
People              +0.25 per named person in the text, +0.45 when the
                    hit came from a person-filtered query; cap 0.6
Year                0.3 in range, 0.15 within 2 years, 0.075 within 5;
                    with no year asked: 0.1 if ≤3 years old, 0.03 if ≤10
Runtime             0.1 when a ceiling is set and the hit fits (or its
                    runtime is unknown)
Rating              0.4 × clamp(rating, 0, 10) / 10
Title match         0.3 × the fuzzy title similarity the orchestrator
                    recorded (0 when absent)
=================== ====================================================

The factor caps add up to ``MAX_FACTOR_BONUS`` (2.3), which is smaller than
the gap between ``exact_match`` and every other source, so an exact title
match always ranks first.

Usage::

    ranker = Ranker(DEFAULT_LEXICON, current_year=2025)
    ranked = ranker.rank_and_merge(hits, intent)
    ranked[0].reasoning   # "Because it is an exact title match and has a high rating (8.4/10)"
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import date
from types import MappingProxyType
from typing import Iterable, Mapping, Optional

from intent_parser.schema import Intent
from reelfinder.lexicon import DEFAULT_LEXICON, Lexicon, text_mentions

from .models import RankedItem, SearchHit

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Module-level constants
# ---------------------------------------------------------------------------

#: Retrieval path → base score.  Strictly ordered.
SOURCE_WEIGHTS: Mapping[str, float] = MappingProxyType(
    {
        "exact_match": 5.0,
        "direct_title": 2.4,
        "similar": 1.6,
        "recommendations": 1.5,
        "direct_person": 1.4,
        "discovery": 1.2,
        "discovery_union": 1.0,
        "text_search": 0.8,
    }
)

#: Base score for hits whose source is missing or unrecognised.
UNKNOWN_SOURCE_WEIGHT: float = 0.5

GENRE_MATCH_BONUS: float = 0.2
MOOD_MATCH_BONUS: float = 0.15
GENRE_ID_BONUS: float = 0.15
GENRE_MOOD_CAP: float = 0.6

PERSON_TEXT_BONUS: float = 0.25
PERSON_SOURCE_BONUS: float = 0.45
PEOPLE_CAP: float = 0.6

YEAR_IN_RANGE: float = 0.3
YEAR_NEAR: float = 0.15
YEAR_CLOSE: float = 0.075
RECENT_RELEASE: float = 0.1
FAIRLY_RECENT_RELEASE: float = 0.03

RUNTIME_FIT: float = 0.1
RATING_WEIGHT: float = 0.4
TITLE_MATCH_WEIGHT: float = 0.3
CLOSE_TITLE_THRESHOLD: float = 0.9

#: Largest total the non-source factors can add.
MAX_FACTOR_BONUS: float = (
    GENRE_MOOD_CAP + PEOPLE_CAP + YEAR_IN_RANGE + RUNTIME_FIT + RATING_WEIGHT + TITLE_MATCH_WEIGHT
)

DEFAULT_MAX_RESULTS: int = 50
_REASONS_SHOWN: int = 3

__all__ = ["Ranker", "SOURCE_WEIGHTS", "MAX_FACTOR_BONUS", "UNKNOWN_SOURCE_WEIGHT"]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class _Factor:
    contribution: float
    reason: Optional[str] = None


_NONE = _Factor(0.0)


def _number(signals: Mapping[str, object], key: str) -> float:
    value = signals.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0.0
    return float(value) if math.isfinite(value) else 0.0


def _join_words(words: list[str]) -> str:
    if len(words) <= 1:
        return "".join(words)
    if len(words) == 2:
        return f"{words[0]} and {words[1]}"
    return ", ".join(words[:-1]) + f", and {words[-1]}"


def _render_reasoning(factors: Iterable[_Factor]) -> str:
    explained = [f for f in factors if f.reason]
    explained.sort(key=lambda f: f.contribution, reverse=True)
    fragments = [f.reason for f in explained[:_REASONS_SHOWN]]
    if not fragments:
        return "Because it came up in your search"
    return "Because it " + _join_words(fragments)


def _sort_key(item: RankedItem) -> tuple:
    hit = item.hit
    return (
        -item.score,
        -(hit.rating if hit.rating is not None else 0.0),
        -_number(hit.signals, "voteCount"),
        -_number(hit.signals, "popularity"),
        -(hit.year or 0),
        hit.media_type,
        hit.catalog_id,
    )


# ---------------------------------------------------------------------------
# Ranker
# ---------------------------------------------------------------------------


class Ranker:
    """Scores hits against an intent; see the module docstring for weights."""

    def __init__(
        self,
        lexicon: Lexicon = DEFAULT_LEXICON,
        *,
        current_year: Optional[int] = None,
        max_results: int = DEFAULT_MAX_RESULTS,
    ) -> None:
        self._lexicon = lexicon
        self._current_year = current_year if current_year is not None else date.today().year
        self._max_results = max_results

    def rank_and_merge(self, hits: Iterable[SearchHit], intent: Intent) -> list[RankedItem]:
        """Score every hit, keep the best score per identity, sort and truncate."""
        best: dict[tuple[str, int], RankedItem] = {}
        total = 0
        for hit in hits:
            total += 1
            item = self.score(hit, intent)
            current = best.get(hit.key)
            if current is None or item.score > current.score:
                best[hit.key] = item

        ranked = sorted(best.values(), key=_sort_key)[: self._max_results]
        logger.debug("Ranked %d hits into %d unique items (kept %d)", total, len(best), len(ranked))
        return ranked

    def score(self, hit: SearchHit, intent: Intent) -> RankedItem:
        factors = [
            self._source_factor(hit),
            self._genre_mood_factor(hit, intent),
            self._people_factor(hit, intent),
            self._year_factor(hit, intent),
            self._runtime_factor(hit, intent),
            self._rating_factor(hit),
            self._title_factor(hit),
        ]
        total = sum(f.contribution for f in factors)
        return RankedItem(hit=hit, score=total, reasoning=_render_reasoning(factors))

    # ------------------------------------------------------------------
    # Factors
    # ------------------------------------------------------------------

    @staticmethod
    def _source_factor(hit: SearchHit) -> _Factor:
        source = hit.source
        weight = SOURCE_WEIGHTS.get(source, UNKNOWN_SOURCE_WEIGHT)
        seed = hit.signals.get("seedTitle")
        person = hit.signals.get("personName")

        if source == "exact_match":
            reason = "is an exact title match"
        elif source == "direct_title":
            reason = "closely matches the title you searched"
        elif source == "similar":
            reason = f"is similar to {seed}" if seed else "is similar to the title you named"
        elif source == "recommendations":
            reason = f"is recommended for fans of {seed}" if seed else "is recommended for fans of the title you named"
        elif source == "direct_person":
            reason = f"features {person}" if person else "features the people you named"
        elif source == "discovery":
            if hit.signals.get("requestedGenreIds"):
                reason = "matches all of your requested genres"
            else:
                reason = "is a popular pick for your filters"
        elif source == "discovery_union":
            reason = "matches some of your requested genres (nothing matched all of them)"
        elif source == "text_search":
            reason = "came up in a search for your query"
        else:
            reason = "came up in your search"
        return _Factor(weight, reason)

    def _genre_mood_factor(self, hit: SearchHit, intent: Intent) -> _Factor:
        if not intent.genres and not intent.moods:
            return _NONE
        genre_names = hit.signals.get("genreNames") or ()
        text = " ".join([hit.name, hit.overview or "", *genre_names])

        matched_genres = [
            g for g in intent.genres
            if any(text_mentions(text, kw) for kw in self._lexicon.keywords_for_genre(g))
        ]
        matched_moods = [
            m for m in intent.moods
            if any(text_mentions(text, kw) for kw in self._lexicon.keywords_for_mood(m))
        ]
        hit_ids = set(hit.signals.get("genreIds") or ())
        requested_ids = set(hit.signals.get("requestedGenreIds") or ())
        ids_overlap = bool(hit_ids & requested_ids)

        contribution = (
            GENRE_MATCH_BONUS * len(matched_genres)
            + MOOD_MATCH_BONUS * len(matched_moods)
            + (GENRE_ID_BONUS if ids_overlap else 0.0)
        )
        contribution = min(contribution, GENRE_MOOD_CAP)
        if contribution == 0:
            return _NONE

        parts: list[str] = []
        if matched_genres:
            noun = "genre" if len(matched_genres) == 1 else "genres"
            parts.append(f"matches {_join_words(matched_genres)} {noun}")
        if matched_moods:
            parts.append(f"has a {_join_words(matched_moods)} feel")
        if not parts:
            parts.append("is catalogued under your requested genres")
        return _Factor(contribution, " and ".join(parts))

    @staticmethod
    def _people_factor(hit: SearchHit, intent: Intent) -> _Factor:
        if not intent.people:
            return _NONE
        text = f"{hit.name} {hit.overview or ''}"
        retrieved_for = str(hit.signals.get("personName") or "").casefold()

        contribution = 0.0
        named: list[str] = []
        for person in intent.people:
            hit_person = False
            if text_mentions(text, person):
                contribution += PERSON_TEXT_BONUS
                hit_person = True
            if retrieved_for and retrieved_for == person.casefold():
                contribution += PERSON_SOURCE_BONUS
                hit_person = True
            if hit_person:
                named.append(person)
        if not named:
            return _NONE
        return _Factor(min(contribution, PEOPLE_CAP), f"involves {_join_words(named)}")

    def _year_factor(self, hit: SearchHit, intent: Intent) -> _Factor:
        year = hit.year
        if year is None:
            return _NONE

        if intent.year_from is None and intent.year_to is None:
            age = self._current_year - year
            if 0 <= age <= 3:
                return _Factor(RECENT_RELEASE, "is a recent release")
            if 0 <= age <= 10:
                return _Factor(FAIRLY_RECENT_RELEASE)
            return _NONE

        low = intent.year_from if intent.year_from is not None else year
        high = intent.year_to if intent.year_to is not None else year
        if low <= year <= high:
            return _Factor(YEAR_IN_RANGE, f"was released in {year}")
        distance = low - year if year < low else year - high
        if distance <= 2:
            return _Factor(YEAR_NEAR, f"was released close to your dates ({year})")
        if distance <= 5:
            return _Factor(YEAR_CLOSE)
        return _NONE

    @staticmethod
    def _runtime_factor(hit: SearchHit, intent: Intent) -> _Factor:
        ceiling = intent.runtime_max_minutes
        if not ceiling:
            return _NONE
        runtime = hit.signals.get("runtime")
        if not isinstance(runtime, (int, float)) or isinstance(runtime, bool) or runtime <= 0:
            return _Factor(RUNTIME_FIT)
        if runtime <= ceiling:
            return _Factor(RUNTIME_FIT, f"fits your {ceiling}-minute limit ({int(runtime)} min)")
        return _NONE

    @staticmethod
    def _rating_factor(hit: SearchHit) -> _Factor:
        if hit.rating is None:
            return _NONE
        rating = min(max(hit.rating, 0.0), 10.0)
        contribution = RATING_WEIGHT * rating / 10.0
        if rating >= 8.0:
            return _Factor(contribution, f"has a high rating ({rating:.1f}/10)")
        if rating >= 7.0:
            return _Factor(contribution, f"is well rated ({rating:.1f}/10)")
        return _Factor(contribution)

    @staticmethod
    def _title_factor(hit: SearchHit) -> _Factor:
        similarity = min(max(_number(hit.signals, "titleSimilarity"), 0.0), 1.0)
        if similarity == 0:
            return _NONE
        contribution = TITLE_MATCH_WEIGHT * similarity
        # exact and direct title sources already say so
        if similarity > CLOSE_TITLE_THRESHOLD and hit.source not in ("exact_match", "direct_title"):
            return _Factor(contribution, "has a title very close to your search")
        return _Factor(contribution)
