"""Deterministic fallback intent used whenever extraction fails.

The fallback treats the whole query as one title, searches both media types
and picks up an explicit result count ("top 5", "give me 3") if present.
"""

from __future__ import annotations

import re
from typing import Optional

from .schema import MAX_REQUESTED_COUNT, MIN_REQUESTED_COUNT, Intent

#: Tried in order.  Only the first match of each pattern is considered; the
#: first one that yields a count in 1..100 wins.
COUNT_PATTERNS: tuple[re.Pattern[str], ...] = tuple(
    re.compile(p, re.IGNORECASE)
    for p in (
        r"\btop\s+(\d+)",
        r"\bbest\s+(\d+)",
        r"\bgive\s+me\s+(\d+)",
        r"\bshow\s+me\s+(\d+)",
        r"\bfind\s+(\d+)",
        r"\b(\d+)\s+movies?\b",
        r"\b(\d+)\s+shows?\b",
    )
)


def extract_requested_count(query: str) -> Optional[int]:
    """Return the first explicit result count in *query*, or None."""
    for pattern in COUNT_PATTERNS:
        match = pattern.search(query)
        if match is None:
            continue
        count = int(match.group(1))
        if MIN_REQUESTED_COUNT <= count <= MAX_REQUESTED_COUNT:
            return count
    return None


def fallback_intent(query: str) -> Intent:
    """Build the fallback Intent for *query*."""
    text = " ".join(query.split())
    if not text:
        return Intent.empty(query)
    return Intent(
        titles=(text,),
        requested_count=extract_requested_count(text),
        raw_query=query,
    )
