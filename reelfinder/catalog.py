"""Abstract catalog interface used by the search orchestrator.

The orchestrator only ever talks to a :class:`CatalogAdapter`.  The
production implementation is :class:`reelfinder.tmdb.client.TmdbClient`; tests
substitute an in-memory fake.

Contract for every implementation:

1. Methods are coroutines and are safe to call concurrently.
2. Provider failures (network, HTTP status, malformed payloads) degrade to an
   empty result (``[]``, ``{}`` or ``None``); they are logged, never raised.
3. ``asyncio.CancelledError`` is never swallowed.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from reelfinder.tmdb.discover import DiscoverQuery
from reelfinder.tmdb.models import TmdbDetails, TmdbMedia, TmdbPerson


class CatalogAdapter(ABC):
    """Read-only access to a movie/TV catalog."""

    @abstractmethod
    async def search_multi(self, text: str) -> list[TmdbMedia]:
        """Free-text search across movies, TV and people."""
        ...

    @abstractmethod
    async def search_movie(self, text: str, year: Optional[int] = None) -> list[TmdbMedia]:
        ...

    @abstractmethod
    async def search_tv(self, text: str) -> list[TmdbMedia]:
        ...

    @abstractmethod
    async def search_person(self, text: str) -> list[TmdbPerson]:
        ...

    @abstractmethod
    async def find_exact_title(self, text: str) -> Optional[TmdbMedia]:
        """Return the first movie/TV item whose name equals *text* case-insensitively."""
        ...

    @abstractmethod
    async def discover(self, query: DiscoverQuery) -> list[TmdbMedia]:
        ...

    @abstractmethod
    async def get_similar(self, media_type: str, catalog_id: int) -> list[TmdbMedia]:
        ...

    @abstractmethod
    async def get_recommendations(self, media_type: str, catalog_id: int) -> list[TmdbMedia]:
        ...

    @abstractmethod
    async def get_genre_map(self, media_type: str) -> dict[str, int]:
        """Lower-cased genre name → catalog genre id for *media_type*."""
        ...

    @abstractmethod
    async def get_details(self, media_type: str, catalog_id: int) -> Optional[TmdbDetails]:
        ...
