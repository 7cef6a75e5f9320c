"""Deterministic keyword capability — no API key needed.

Picks apart a query with regexes and the shared :class:`Lexicon`:

* "like X" / "similar to X"            → titles=[X], wantsSimilar
* "recommend" / "suggest"             → wantsSimilar
* "movies", "films" / "tv", "series"  → mediaTypes
* "1990-1999", "before 2000", "90s"   → yearFrom / yearTo
* "under 2h", "less than 90 minutes"  → runtimeMaxMinutes
* lexicon genre and mood words        → genres / moods
* "starring Tom Hanks", "by X Y"      → people
* "top 5", "give me 3"                → requestedCount

Without a "like X" phrase the query is only read as filters when every
content word is a filter term and a firm cue (a genre, person, count, year,
runtime or plural media word) is present.  Otherwise the cleaned query
becomes a single title, so "Star Wars" and "Scary Movie" stay titles.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Optional

from reelfinder.lexicon import DEFAULT_LEXICON, Lexicon

from .base import IntentCapability
from .fallback import COUNT_PATTERNS, extract_requested_count

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Patterns
# ---------------------------------------------------------------------------

_LIKE_RE = re.compile(
    r"(?:^|\b(?:movies?|films?|shows?|series|something|anything|stuff|more|titles?)\s+)"
    r"(?:like|similar\s+to|in\s+the\s+vein\s+of)\s+(?P<title>.+)$"
    r"|\bsimilar\s+to\s+(?P<title2>.+)$",
    re.IGNORECASE,
)
_SUGGEST_RE = re.compile(r"\b(?:recommend|suggest)", re.IGNORECASE)
_TITLE_TAIL_RE = re.compile(
    r"\s+(?:from\s+the|from|under|before|after|starring|but|released)\s+.*$"
    r"|[\s,.;!?]+$"
)

_MOVIE_RE = re.compile(r"\b(?:movies?|films?|cinema)\b", re.IGNORECASE)
_TV_RE = re.compile(r"\b(?:tv|shows?|series|sitcoms?|miniseries)\b", re.IGNORECASE)
_PLURAL_MEDIA_RE = re.compile(r"\b(?:movies|films|tv|shows|series|sitcoms)\b", re.IGNORECASE)

_RUNTIME_RE = re.compile(
    r"\b(?:under|less\s+than|shorter\s+than|below|at\s+most|max(?:imum)?|within)\s+"
    r"(?P<value>\d+(?:\.\d+)?)\s*(?P<unit>h|hrs?|hours?|m|mins?|minutes?)\b",
    re.IGNORECASE,
)
_WORD_HOURS_RE = re.compile(
    r"\b(?:under|less\s+than|shorter\s+than)\s+(?:an?\s+)?(?P<word>one|two|three|hour)(?:\s+hours?)?\b",
    re.IGNORECASE,
)
_WORD_HOURS = {"one": 1, "hour": 1, "two": 2, "three": 3}

_RANGE_RE = re.compile(
    r"\b(?:between\s+)?(19\d{2}|20\d{2})\s*(?:-|–|to|and|until)\s*(19\d{2}|20\d{2})\b", re.IGNORECASE
)
_BEFORE_RE = re.compile(r"\b(?:before|pre|older\s+than)\s+(19\d{2}|20\d{2})\b", re.IGNORECASE)
_AFTER_RE = re.compile(r"\b(?:after|since|post|newer\s+than)\s+(19\d{2}|20\d{2})\b", re.IGNORECASE)
_DECADE_RE = re.compile(
    r"\b(?:(?P<prefix>early|mid|late)[\s-]+)?(?P<decade>\d{4}|\d{2})'?s\b", re.IGNORECASE
)
_YEAR_RE = re.compile(r"\b(19\d{2}|20\d{2})\b")

_PERSON_RE = re.compile(
    r"\b(?:starring|featuring|with|by|directed\s+by)\s+"
    r"(?P<name>[A-Z][\w'.-]+(?:\s+[A-Z][\w'.-]+)+)"
)

# Lower-case only: a capitalised media word is part of a title ("Scary Movie").
_FILLER_RE = re.compile(r"\b(?:the\s+)?(?:movies?|films?|tv\s+shows?|tv|shows?|series)\b")

_WORD_RE = re.compile(r"[a-z][a-z0-9'-]*")

#: Words that may sit between filter terms without making the query a title.
_FILTER_FILLER = frozenset(
    """
    a an the and or of from in on at with without for to about by some any all
    me i we us my our you give show find want need looking watch see
    recommend recommendations suggest suggestions please list picks
    good great best top new old classic classics popular recent latest
    really very more most something anything stuff that which are is
    kind kinds type types genre genres released made directed
    kids children adults teens friends night tonight weekend date
    """.split()
)


# ---------------------------------------------------------------------------
# Extraction helpers
# ---------------------------------------------------------------------------


def _similar_title(query: str) -> tuple[Optional[str], str]:
    """Return (title, remainder) for "like X" queries; title is None otherwise."""
    m = _LIKE_RE.search(query)
    if not m:
        return None, query
    group = "title" if m.group("title") else "title2"
    raw = m.group(group)
    cleaned = _TITLE_TAIL_RE.sub("", raw)
    tail = raw[len(cleaned):]
    remainder = (query[: m.start(group)] + " " + tail).strip()
    title = cleaned.strip(" \"'")
    return (title or None), remainder


def _media_types(text: str) -> list[str]:
    found: list[str] = []
    if _MOVIE_RE.search(text):
        found.append("movie")
    if _TV_RE.search(text):
        found.append("tv")
    return found


def _runtime_minutes(text: str) -> Optional[int]:
    m = _RUNTIME_RE.search(text)
    if m:
        value = float(m.group("value"))
        unit = m.group("unit").lower()
        return int(round(value * 60)) if unit.startswith("h") else int(round(value))
    m = _WORD_HOURS_RE.search(text)
    if m:
        return _WORD_HOURS[m.group("word").lower()] * 60
    return None


def _decade_range(decade: str, prefix: str) -> Optional[tuple[int, int]]:
    value = int(decade)
    if len(decade) == 2:
        start = 2000 + value if value < 30 else 1900 + value
    else:
        start = value
    if start % 10:
        return None
    if prefix == "early":
        return start, start + 3
    if prefix == "mid":
        return start + 4, start + 6
    if prefix == "late":
        return start + 7, start + 9
    return start, start + 9


def _year_bounds(text: str) -> tuple[Optional[int], Optional[int]]:
    m = _RANGE_RE.search(text)
    if m:
        start, end = sorted((int(m.group(1)), int(m.group(2))))
        return start, end
    m = _BEFORE_RE.search(text)
    if m:
        return None, int(m.group(1)) - 1
    m = _AFTER_RE.search(text)
    if m:
        return int(m.group(1)) + 1, None
    for m in _DECADE_RE.finditer(text):
        bounds = _decade_range(m.group("decade"), (m.group("prefix") or "").lower())
        if bounds:
            return bounds
    m = _YEAR_RE.search(text)
    if m:
        year = int(m.group(1))
        return year, year
    return None, None


def _people(text: str) -> list[str]:
    return [m.group("name").strip() for m in _PERSON_RE.finditer(text)]


def _strip_counts(text: str) -> str:
    for pattern in COUNT_PATTERNS:
        text = pattern.sub(" ", text)
    return text


def _plain_title(query: str) -> Optional[str]:
    text = _FILLER_RE.sub(" ", _strip_counts(query))
    text = " ".join(text.split()).strip(" ,.;!?\"'")
    return text or None


_FILTER_PHRASES: tuple[re.Pattern[str], ...] = (
    _PERSON_RE,
    _RANGE_RE,
    _BEFORE_RE,
    _AFTER_RE,
    _DECADE_RE,
    _YEAR_RE,
    _RUNTIME_RE,
    _WORD_HOURS_RE,
    *COUNT_PATTERNS,
    _MOVIE_RE,
    _TV_RE,
)


def _content_words(text: str, lexicon: Lexicon) -> list[str]:
    """Words of *text* that are not part of any filter phrase or filler."""
    for pattern in _FILTER_PHRASES:
        text = pattern.sub(" ", text)
    text = lexicon.strip_terms(text)
    return [w for w in _WORD_RE.findall(text.lower()) if w not in _FILTER_FILLER]


# ---------------------------------------------------------------------------
# Capability
# ---------------------------------------------------------------------------


class KeywordIntentCapability(IntentCapability):
    """Rule-based interpreter used when no language model is configured."""

    def __init__(self, lexicon: Lexicon = DEFAULT_LEXICON) -> None:
        self._lexicon = lexicon

    def name(self) -> str:
        return "keyword"

    def _reads_as_filters(self, text: str, firm_cue: bool) -> bool:
        return firm_cue and not _content_words(text, self._lexicon)

    def parse(self, query: str) -> dict[str, Any]:
        """Synchronous core of :meth:`complete`."""
        text = " ".join(query.split())
        title, remainder = _similar_title(text)
        wants_similar = title is not None or bool(_SUGGEST_RE.search(text))

        genres = self._lexicon.find_genres(remainder)
        moods = self._lexicon.find_moods(remainder)
        people = _people(remainder)
        year_from, year_to = _year_bounds(remainder)
        runtime = _runtime_minutes(remainder)
        count = extract_requested_count(text)

        titles: list[str] = [title] if title else []
        if not titles and not self._reads_as_filters(
            remainder,
            bool(genres or people or runtime or count)
            or year_from is not None
            or year_to is not None
            or _PLURAL_MEDIA_RE.search(remainder) is not None,
        ):
            plain = _plain_title(text)
            if plain:
                titles.append(plain)
            genres, moods, people = [], [], []
            year_from = year_to = runtime = None

        data: dict[str, Any] = {
            "titles": titles,
            "people": people,
            "genres": genres,
            "moods": moods,
            "yearFrom": year_from,
            "yearTo": year_to,
            "runtimeMaxMinutes": runtime,
            "mediaTypes": _media_types(remainder),
            "requestedCount": count,
            "wantsSimilar": wants_similar,
        }
        logger.debug("Keyword parse of %r: %s", query, data)
        return data

    async def complete(self, query: str) -> dict[str, Any]:
        return self.parse(query)
