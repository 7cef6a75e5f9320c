"""Retrieval and ranking models.

These sit between the catalog layer and the response assembler:

  SearchHit     -- one raw candidate produced by the search orchestrator
  RankedItem    -- a SearchHit plus relevance score and reasoning

Both are frozen.  ``SearchHit.signals`` is a read-only mapping consumed only
by the ranker; recognised keys:

=================== ==================================================
Key                 Meaning
=================== ==================================================
source              retrieval path, e.g. "exact_match", "discovery"
genreIds            catalog genre ids on the item
requestedGenreIds   genre ids the discovery call asked for
titleSimilarity     0..1 similarity between query title and item name
seedTitle           title a similar/recommendation hit was seeded from
personName          person a person-filtered hit was retrieved for
popularity          catalog popularity
voteCount           number of votes behind ``rating``
runtime             runtime in minutes, when known
genreNames          lower-case genre names, when known
=================== ==================================================
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Optional


@dataclass(frozen=True)
class SearchHit:
    catalog_id: int
    media_type: str
    name: str
    overview: Optional[str] = None
    rating: Optional[float] = None
    year: Optional[int] = None
    thumbnail: Optional[str] = None
    signals: Mapping[str, Any] = field(default_factory=dict, compare=False, hash=False)

    def __post_init__(self) -> None:
        if not isinstance(self.signals, MappingProxyType):
            object.__setattr__(self, "signals", MappingProxyType(dict(self.signals)))

    @property
    def key(self) -> tuple[str, int]:
        """Identity used for deduplication: (media_type, catalog_id)."""
        return (self.media_type, self.catalog_id)

    @property
    def source(self) -> str:
        return str(self.signals.get("source", "unknown"))


@dataclass(frozen=True)
class RankedItem:
    hit: SearchHit
    score: float
    reasoning: str
