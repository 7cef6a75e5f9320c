"""TmdbClient — async TMDb v3 client implementing :class:`CatalogAdapter`.

Assembles auth, semaphore concurrency, a single throttle retry and payload
validation into the catalog operations the search orchestrator needs.

Usage::

    from reelfinder.config import get_settings
    from reelfinder.tmdb.client import TmdbClient

    async with TmdbClient(get_settings()) as client:
        hits = await client.search_multi("Inception")

Failure strategy
----------------
- HTTP 429 raises TmdbRateLimitError carrying the Retry-After delay; tenacity
  waits that long and retries exactly once (two attempts in total).
- Any other failure (network error, 4xx/5xx, bad JSON, schema mismatch, or a
  second 429) is logged and turned into an empty result.  Catalog methods
  never raise into the orchestrator.
- asyncio.CancelledError is not caught anywhere in this module.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional

import httpx
from tenacity import RetryCallState, retry, retry_if_exception_type, stop_after_attempt

from reelfinder.catalog import CatalogAdapter
from reelfinder.config import Settings
from reelfinder.tmdb.discover import DiscoverQuery, build_discover_params
from reelfinder.tmdb.models import MEDIA_TYPES, TmdbDetails, TmdbMedia, TmdbPage, TmdbPerson

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class TmdbError(Exception):
    """Base class for TMDb transport errors."""


class TmdbRateLimitError(TmdbError):
    """Raised on HTTP 429 — carries the number of seconds to back off."""

    def __init__(self, retry_after: float) -> None:
        super().__init__(f"TMDb rate limit hit, retry after {retry_after:g}s")
        self.retry_after = retry_after


def _wait_retry_after(retry_state: RetryCallState) -> float:
    """tenacity wait strategy: honour the delay carried by the 429 error."""
    exc = retry_state.outcome.exception() if retry_state.outcome else None
    if isinstance(exc, TmdbRateLimitError):
        return exc.retry_after
    return 0.0


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------


class TmdbClient(CatalogAdapter):
    """Async HTTP client for TMDb.

    Each instance owns its own ``asyncio.Semaphore`` so concurrent requests
    from one client are bounded by ``settings.tmdb_max_concurrency`` (TMDb's
    documented limit is roughly 40 requests per 10 seconds).

    Intended to be used as an async context manager so that the underlying
    httpx.AsyncClient is always properly closed::

        async with TmdbClient(settings) as client:
            movies = await client.discover(DiscoverQuery("movie", genre_ids=(27,)))
    """

    def __init__(self, settings: Settings) -> None:
        headers = {"Accept": "application/json"}
        if settings.tmdb_access_token:
            headers["Authorization"] = f"Bearer {settings.tmdb_access_token}"
        self._api_key = settings.tmdb_api_key
        self._retry_after_default = settings.tmdb_retry_after_default
        self._retry_after_max = settings.tmdb_retry_after_max
        self._client = httpx.AsyncClient(
            base_url=settings.tmdb_base_url,
            headers=headers,
            timeout=httpx.Timeout(settings.tmdb_timeout_seconds),
        )
        self._semaphore = asyncio.Semaphore(settings.tmdb_max_concurrency)

    async def __aenter__(self) -> "TmdbClient":
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    # -----------------------------------------------------------------------
    # Internal transport layer
    # -----------------------------------------------------------------------

    def _retry_after(self, response: httpx.Response) -> float:
        header = response.headers.get("Retry-After")
        try:
            delay = float(header) if header is not None else self._retry_after_default
        except ValueError:
            delay = self._retry_after_default
        return max(0.0, min(delay, self._retry_after_max))

    @retry(
        stop=stop_after_attempt(2),
        wait=_wait_retry_after,
        retry=retry_if_exception_type(TmdbRateLimitError),
        reraise=True,
    )
    async def _get(self, path: str, params: Optional[dict[str, str]] = None) -> Any:
        """GET *path* and return the decoded JSON body.

        - 429 → TmdbRateLimitError (retried once by tenacity)
        - other non-2xx → httpx.HTTPStatusError via raise_for_status()

        The semaphore is held only for the request itself, never while
        backing off.
        """
        query = dict(params or {})
        if self._api_key:
            query["api_key"] = self._api_key

        async with self._semaphore:
            response = await self._client.get(path, params=query)

        if response.status_code == 429:
            raise TmdbRateLimitError(self._retry_after(response))
        response.raise_for_status()
        return response.json()

    async def _media_list(
        self,
        path: str,
        params: Optional[dict[str, str]] = None,
        *,
        media_type: Optional[str] = None,
    ) -> list[TmdbMedia]:
        """Fetch one results page and validate it; failures become ``[]``."""
        try:
            payload = await self._get(path, params)
            page = TmdbPage[TmdbMedia].model_validate(payload)
        except (httpx.HTTPError, TmdbError, ValueError) as exc:
            logger.warning("TMDb %s failed: %s", path, exc)
            return []
        if media_type is None:
            return page.results
        return [item.with_media_type(media_type) for item in page.results]

    @staticmethod
    def _check_media_type(media_type: str) -> bool:
        if media_type in MEDIA_TYPES:
            return True
        logger.warning("Unsupported media type %r", media_type)
        return False

    # -----------------------------------------------------------------------
    # Search
    # -----------------------------------------------------------------------

    async def search_multi(self, text: str) -> list[TmdbMedia]:
        if not text or not text.strip():
            return []
        return await self._media_list(
            "/search/multi", {"query": text.strip(), "include_adult": "false"}
        )

    async def search_movie(self, text: str, year: Optional[int] = None) -> list[TmdbMedia]:
        if not text or not text.strip():
            return []
        params = {"query": text.strip(), "include_adult": "false"}
        if year is not None:
            params["year"] = str(year)
        return await self._media_list("/search/movie", params, media_type="movie")

    async def search_tv(self, text: str) -> list[TmdbMedia]:
        if not text or not text.strip():
            return []
        return await self._media_list(
            "/search/tv", {"query": text.strip(), "include_adult": "false"}, media_type="tv"
        )

    async def search_person(self, text: str) -> list[TmdbPerson]:
        if not text or not text.strip():
            return []
        try:
            payload = await self._get("/search/person", {"query": text.strip()})
            page = TmdbPage[TmdbPerson].model_validate(payload)
        except (httpx.HTTPError, TmdbError, ValueError) as exc:
            logger.warning("TMDb person search for %r failed: %s", text, exc)
            return []
        return page.results

    async def find_exact_title(self, text: str) -> Optional[TmdbMedia]:
        needle = (text or "").strip().casefold()
        if not needle:
            return None
        for item in await self.search_multi(text):
            if item.media_type not in MEDIA_TYPES:
                continue
            names = {n.casefold() for n in (item.title, item.name) if n}
            if needle in names:
                return item
        return None

    # -----------------------------------------------------------------------
    # Discovery and related titles
    # -----------------------------------------------------------------------

    async def discover(self, query: DiscoverQuery) -> list[TmdbMedia]:
        if not self._check_media_type(query.media_type):
            return []
        return await self._media_list(
            f"/discover/{query.media_type}",
            build_discover_params(query),
            media_type=query.media_type,
        )

    async def get_similar(self, media_type: str, catalog_id: int) -> list[TmdbMedia]:
        if not self._check_media_type(media_type):
            return []
        return await self._media_list(f"/{media_type}/{catalog_id}/similar", media_type=media_type)

    async def get_recommendations(self, media_type: str, catalog_id: int) -> list[TmdbMedia]:
        if not self._check_media_type(media_type):
            return []
        return await self._media_list(
            f"/{media_type}/{catalog_id}/recommendations", media_type=media_type
        )

    # -----------------------------------------------------------------------
    # Lookups
    # -----------------------------------------------------------------------

    async def get_genre_map(self, media_type: str) -> dict[str, int]:
        if not self._check_media_type(media_type):
            return {}
        try:
            payload = await self._get(f"/genre/{media_type}/list")
            genres = payload.get("genres", []) if isinstance(payload, dict) else []
            return {str(g["name"]).lower(): int(g["id"]) for g in genres}
        except (httpx.HTTPError, TmdbError, ValueError, KeyError, TypeError) as exc:
            logger.warning("TMDb %s genre list failed: %s", media_type, exc)
            return {}

    async def get_details(self, media_type: str, catalog_id: int) -> Optional[TmdbDetails]:
        if not self._check_media_type(media_type):
            return None
        try:
            payload = await self._get(f"/{media_type}/{catalog_id}")
            return TmdbDetails.model_validate(payload)
        except (httpx.HTTPError, TmdbError, ValueError) as exc:
            logger.warning("TMDb %s/%s details failed: %s", media_type, catalog_id, exc)
            return None
