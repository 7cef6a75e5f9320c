"""Search orchestrator — turns an Intent into raw SearchHits.

The orchestrator picks exactly one retrieval mode per intent and fans the
mode's catalog calls out concurrently.  It never ranks; ordering is the
ranker's job.

Mode table (first matching row wins):

=============== ===================================================== ======================
Mode            Trigger                                               Catalog calls
=============== ===================================================== ======================
exact_title     one title, no genres/moods/people, not "like"         exact lookup, details
similar         titles + wants_similar                                seed search, similar,
                                                                      recommendations
genre_mood      no titles, genres or moods                            genre list, discover
                                                                      per genre id, union
people          people, no titles                                     person search, discover
fallback        anything else                                         free-text search
=============== ===================================================== ======================

Branches run under ``asyncio.gather(..., return_exceptions=True)``; a branch
that raises is logged and contributes nothing, its siblings are unaffected.
Sub-calls inside a branch (details enrichment, person discovery) are guarded
the same way, so a failed extra call only drops what it would have added.
Cancelling the calling task cancels every in-flight branch.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import replace
from enum import Enum
from typing import Any, Awaitable, Optional, Sequence, TypeVar

from rapidfuzz import fuzz, utils

from analysis.models import SearchHit
from intent_parser.schema import Intent
from reelfinder.catalog import CatalogAdapter
from reelfinder.lexicon import DEFAULT_LEXICON, Lexicon
from reelfinder.tmdb.discover import DiscoverQuery
from reelfinder.tmdb.models import MEDIA_TYPES, TmdbMedia

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SearchMode(str, Enum):
    exact_title = "exact_title"
    similar = "similar"
    genre_mood = "genre_mood"
    people = "people"
    fallback = "fallback"


def select_mode(intent: Intent) -> SearchMode:
    """Deterministic mode selection; see the module docstring."""
    if (
        len(intent.titles) == 1
        and not intent.genres
        and not intent.moods
        and not intent.people
        and not intent.wants_similar
    ):
        return SearchMode.exact_title
    if intent.titles and intent.wants_similar:
        return SearchMode.similar
    if not intent.titles and (intent.genres or intent.moods):
        return SearchMode.genre_mood
    if intent.people and not intent.titles:
        return SearchMode.people
    return SearchMode.fallback


# ---------------------------------------------------------------------------
# Hit helpers
# ---------------------------------------------------------------------------


def title_similarity(text: str, media: TmdbMedia) -> float:
    """Best 0..1 fuzzy similarity between *text* and any of the item's names."""
    names = [n for n in (media.title, media.name, media.original_title, media.original_name) if n]
    best = max(
        (fuzz.ratio(text, n, processor=utils.default_process) for n in names),
        default=0.0,
    )
    return round(best / 100.0, 4)


def is_exact_title(text: str, media: TmdbMedia) -> bool:
    needle = text.strip().casefold()
    return any(n.casefold() == needle for n in (media.title, media.name) if n)


def to_hit(media: TmdbMedia, source: str, **signals: Any) -> SearchHit:
    """Convert a catalog item into a SearchHit tagged with *source*."""
    merged: dict[str, Any] = {
        "source": source,
        "genreIds": tuple(media.genre_ids),
        "popularity": media.popularity,
        "voteCount": media.vote_count,
    }
    merged.update(signals)
    return SearchHit(
        catalog_id=media.id,
        media_type=media.media_type or "movie",
        name=media.display_name,
        overview=media.overview,
        rating=media.rating,
        year=media.year,
        thumbnail=media.poster_path,
        signals={k: v for k, v in merged.items() if v is not None},
    )


# ---------------------------------------------------------------------------
# Orchestrator
# ---------------------------------------------------------------------------


class SearchOrchestrator:
    """Mode-selecting retrieval over a :class:`CatalogAdapter`."""

    def __init__(
        self,
        catalog: CatalogAdapter,
        lexicon: Lexicon = DEFAULT_LEXICON,
        *,
        similar_min_rating: float = 6.0,
        min_vote_count: Optional[int] = 100,
    ) -> None:
        self._catalog = catalog
        self._lexicon = lexicon
        self._similar_min_rating = similar_min_rating
        self._min_vote_count = min_vote_count

    # ------------------------------------------------------------------
    # Full retrieval
    # ------------------------------------------------------------------

    async def retrieve(self, intent: Intent) -> list[SearchHit]:
        """Run the selected mode and return its raw, unranked hits."""
        mode = select_mode(intent)
        handlers = {
            SearchMode.exact_title: self._exact_title,
            SearchMode.similar: self._similar,
            SearchMode.genre_mood: self._genre_mood,
            SearchMode.people: self._people,
            SearchMode.fallback: self._fallback,
        }
        t0 = time.monotonic()
        hits = await handlers[mode](intent)
        elapsed_ms = round((time.monotonic() - t0) * 1000)
        logger.info("Mode %s returned %d hits in %d ms", mode.value, len(hits), elapsed_ms)
        return hits

    async def _settle(self, labelled: Sequence[tuple[str, Awaitable[T]]], default: T) -> list[T]:
        """Gather branches concurrently; failed branches become *default*."""
        settled = await asyncio.gather(*(aw for _, aw in labelled), return_exceptions=True)
        results: list[T] = []
        for (label, _), outcome in zip(labelled, settled):
            if isinstance(outcome, BaseException):
                logger.warning("Branch %s failed: %s: %s", label, type(outcome).__name__, outcome)
                results.append(default)
            else:
                results.append(outcome)
        return results

    async def _attempt(self, label: str, awaitable: Awaitable[T], default: T) -> T:
        """Await one sub-call; a failure is logged and becomes *default*."""
        (outcome,) = await self._settle([(label, awaitable)], default)
        return outcome

    async def _title_candidates(self, text: str, intent: Intent) -> list[TmdbMedia]:
        """Typed search when one media type was asked for, multi search otherwise."""
        single = intent.single_media_type
        if single == "movie":
            year = intent.year_from if intent.year_from == intent.year_to else None
            results = await self._catalog.search_movie(text, year=year)
        elif single == "tv":
            results = await self._catalog.search_tv(text)
        else:
            results = await self._catalog.search_multi(text)
        return [m for m in results if m.media_type in MEDIA_TYPES and intent.allows(m.media_type)]

    @staticmethod
    def _best_candidate(text: str, candidates: list[TmdbMedia]) -> Optional[TmdbMedia]:
        if not candidates:
            return None
        return max(
            candidates,
            key=lambda m: (title_similarity(text, m), m.media_type == "movie", m.popularity or 0.0),
        )

    # ------------------------------------------------------------------
    # Exact title
    # ------------------------------------------------------------------

    async def _exact_title(self, intent: Intent) -> list[SearchHit]:
        title = intent.titles[0]
        match = await self._catalog.find_exact_title(title)
        if match is None or not intent.allows(match.media_type):
            match = self._best_candidate(title, await self._title_candidates(title, intent))
        if match is None:
            logger.info("No catalog match for title %r", title)
            return []

        source = "exact_match" if is_exact_title(title, match) else "direct_title"
        signals: dict[str, Any] = {"titleSimilarity": title_similarity(title, match)}
        details = await self._attempt(
            f"details:{match.media_type}/{match.id}",
            self._catalog.get_details(match.media_type, match.id),
            None,
        )
        if details is not None:
            signals["runtime"] = details.runtime_minutes
            signals["genreNames"] = tuple(details.genre_names)
        return [to_hit(match, source, **signals)]

    # ------------------------------------------------------------------
    # Similar
    # ------------------------------------------------------------------

    async def _resolve_seed(self, title: str, intent: Intent) -> Optional[TmdbMedia]:
        candidates = await self._title_candidates(title, intent)
        if not candidates and intent.single_media_type:
            candidates = [
                m for m in await self._catalog.search_multi(title) if m.media_type in MEDIA_TYPES
            ]
        return self._best_candidate(title, candidates)

    async def _similar_branch(
        self, title: str, intent: Intent
    ) -> tuple[Optional[tuple[str, int]], list[SearchHit]]:
        seed = await self._resolve_seed(title, intent)
        if seed is None:
            logger.info("No seed title found for %r", title)
            return None, []

        seed_type = seed.media_type or "movie"
        similar, recommended = await self._settle(
            [
                (f"similar:{seed_type}/{seed.id}", self._catalog.get_similar(seed_type, seed.id)),
                (
                    f"recommendations:{seed_type}/{seed.id}",
                    self._catalog.get_recommendations(seed_type, seed.id),
                ),
            ],
            default=[],
        )
        seed_name = seed.display_name or title
        hits = [to_hit(m.with_media_type(seed_type), "similar", seedTitle=seed_name) for m in similar]
        hits += [
            to_hit(m.with_media_type(seed_type), "recommendations", seedTitle=seed_name)
            for m in recommended
        ]
        return (seed_type, seed.id), hits

    async def _similar(self, intent: Intent) -> list[SearchHit]:
        outcomes = await self._settle(
            [(f"seed:{t}", self._similar_branch(t, intent)) for t in intent.titles],
            default=(None, []),
        )
        seeds = {seed for seed, _ in outcomes if seed is not None}
        hits: list[SearchHit] = []
        for _, branch_hits in outcomes:
            for hit in branch_hits:
                if hit.key in seeds or not intent.allows(hit.media_type):
                    continue
                if hit.rating is None or hit.rating < self._similar_min_rating:
                    continue
                hits.append(hit)
        return hits

    # ------------------------------------------------------------------
    # Genre / mood
    # ------------------------------------------------------------------

    def _genre_names(self, intent: Intent) -> list[str]:
        """Explicit genres, or the mood-derived genres when none were named."""
        if intent.genres:
            return list(intent.genres)
        names: list[str] = []
        for mood in intent.moods:
            for genre in self._lexicon.genres_for_mood(mood):
                if genre not in names:
                    names.append(genre)
        return names

    def _discover_base(self, media_type: str, intent: Intent) -> DiscoverQuery:
        return DiscoverQuery(
            media_type=media_type,
            year_from=intent.year_from,
            year_to=intent.year_to,
            runtime_lte=intent.runtime_max_minutes if media_type == "movie" else None,
            vote_count_gte=self._min_vote_count,
        )

    async def _genre_branch(self, media_type: str, intent: Intent) -> list[SearchHit]:
        names = self._genre_names(intent)
        genre_map = await self._catalog.get_genre_map(media_type)
        ids = self._lexicon.genre_ids(names, genre_map, media_type)
        base = self._discover_base(media_type, intent)

        if not ids:
            if names:
                logger.info("No %s genre ids for %s, discovering without a genre filter", media_type, names)
            return [to_hit(m, "discovery") for m in await self._catalog.discover(base)]

        requested = tuple(ids)
        if len(ids) == 1:
            items = await self._catalog.discover(replace(base, genre_ids=requested))
            return [to_hit(m, "discovery", requestedGenreIds=requested) for m in items]

        per_genre = await self._settle(
            [
                (f"discover:{media_type}:{gid}", self._catalog.discover(replace(base, genre_ids=(gid,))))
                for gid in ids
            ],
            default=[],
        )
        common = set.intersection(*({m.id for m in items} for items in per_genre))
        if common:
            hits: list[SearchHit] = []
            seen: set[int] = set()
            for items in per_genre:
                for m in items:
                    if m.id in common and m.id not in seen:
                        seen.add(m.id)
                        hits.append(to_hit(m, "discovery", requestedGenreIds=requested))
            return hits

        logger.info("No %s title matches all genres %s, using union", media_type, list(requested))
        items = await self._catalog.discover(replace(base, genre_ids=requested, match_any_genre=True))
        return [to_hit(m, "discovery_union", requestedGenreIds=requested) for m in items]

    async def _genre_mood(self, intent: Intent) -> list[SearchHit]:
        per_type = await self._settle(
            [(f"genre:{mt}", self._genre_branch(mt, intent)) for mt in intent.media_types],
            default=[],
        )
        return [hit for hits in per_type for hit in hits]

    # ------------------------------------------------------------------
    # People
    # ------------------------------------------------------------------

    async def _person_branch(self, name: str, intent: Intent) -> list[SearchHit]:
        people = await self._catalog.search_person(name)
        if not people:
            logger.info("No person found for %r", name)
            return []
        person = people[0]

        hits: list[SearchHit] = []
        if intent.allows("movie"):
            query = replace(self._discover_base("movie", intent), person_ids=(person.id,), vote_count_gte=None)
            movies = await self._attempt(f"discover:person/{person.id}", self._catalog.discover(query), [])
            hits += [to_hit(m, "direct_person", personName=name) for m in movies]
        if intent.allows("tv"):
            hits += [to_hit(m, "direct_person", personName=name) for m in person.known_for if m.media_type == "tv"]
        return hits

    async def _people(self, intent: Intent) -> list[SearchHit]:
        per_person = await self._settle(
            [(f"person:{p}", self._person_branch(p, intent)) for p in intent.people],
            default=[],
        )
        return [hit for hits in per_person for hit in hits]

    # ------------------------------------------------------------------
    # Fallback
    # ------------------------------------------------------------------

    async def _fallback(self, intent: Intent) -> list[SearchHit]:
        text = intent.raw_query.strip() or " ".join(intent.titles)
        if not text:
            return []
        candidates = await self._title_candidates(text, intent)
        return [to_hit(m, "text_search", titleSimilarity=title_similarity(text, m)) for m in candidates]

    # ------------------------------------------------------------------
    # Dry-run query plan
    # ------------------------------------------------------------------

    def get_query_plan(self, intent: Intent) -> dict[str, Any]:
        """Show the mode and catalog calls a search *would* make, without making them."""
        mode = select_mode(intent)
        steps: list[dict[str, str]] = []

        def step(operation: str, description: str) -> None:
            steps.append({"operation": operation, "description": description})

        if mode is SearchMode.exact_title:
            title = intent.titles[0]
            step("find_exact_title", f"exact lookup for {title!r}")
            step("search", f"best fuzzy match for {title!r} if no exact match")
            step("get_details", "runtime and genres of the matched title")
        elif mode is SearchMode.similar:
            for title in intent.titles:
                step("search", f"resolve seed title {title!r}")
                step("get_similar", f"titles similar to {title!r}")
                step("get_recommendations", f"recommendations for {title!r}")
            step("filter", f"drop ratings below {self._similar_min_rating:g}")
        elif mode is SearchMode.genre_mood:
            names = self._genre_names(intent)
            for media_type in intent.media_types:
                base = self._discover_base(media_type, intent)
                step("get_genre_map", f"{media_type} genre ids for {', '.join(names)}")
                step("discover", f"{base.describe()}, one call per genre id, intersected")
                step("discover", f"{base.describe()}, genre union if the intersection is empty")
        elif mode is SearchMode.people:
            for person in intent.people:
                step("search_person", f"resolve {person!r}")
                if intent.allows("movie"):
                    step("discover", f"movies with {person!r}")
                if intent.allows("tv"):
                    step("known_for", f"TV credits of {person!r}")
        else:
            step("search", f"free-text search for {(intent.raw_query or ' '.join(intent.titles))!r}")

        return {
            "mode": mode.value,
            "intent_summary": intent.to_summary(),
            "steps": steps,
        }
