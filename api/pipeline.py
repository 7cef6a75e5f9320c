"""End-to-end search pipeline: extract → retrieve → rank → assemble.

``SearchPipeline.search`` is the engine's single entry point.  It never
raises for a well-formed query string: a blank query short-circuits to an
empty response without touching any collaborator, and any unexpected error
is logged and answered with empty results.
"""

from __future__ import annotations

import logging
import time
from typing import Optional
from uuid import uuid4

from analysis.ranker import Ranker
from intent_parser.llm_parser import IntentExtractor
from intent_parser.schema import Intent

from .orchestrator import SearchOrchestrator
from .responses import DEFAULT_IMAGE_BASE_URL, SearchResponse, assemble_results

logger = logging.getLogger(__name__)


class SearchPipeline:
    """Wires the intent extractor, orchestrator, ranker and assembler together."""

    def __init__(
        self,
        extractor: IntentExtractor,
        orchestrator: SearchOrchestrator,
        ranker: Ranker,
        *,
        image_base_url: str = DEFAULT_IMAGE_BASE_URL,
    ) -> None:
        self.extractor = extractor
        self.orchestrator = orchestrator
        self.ranker = ranker
        self._image_base_url = image_base_url

    async def parse(self, query: str) -> Intent:
        return await self.extractor.extract_intent(query)

    async def search(self, query: str, trace_id: Optional[str] = None) -> SearchResponse:
        """Answer *query* with a ranked, explained result list."""
        trace_id = trace_id or uuid4().hex
        if not query or not query.strip():
            return SearchResponse(results=[], trace_id=trace_id)

        t0 = time.monotonic()
        try:
            intent = await self.extractor.extract_intent(query)
            hits = await self.orchestrator.retrieve(intent)
            ranked = self.ranker.rank_and_merge(hits, intent)
            results = assemble_results(
                ranked, intent.requested_count, image_base_url=self._image_base_url
            )
        except Exception:
            logger.exception("[%s] Search failed for %r", trace_id, query)
            return SearchResponse(results=[], trace_id=trace_id)

        elapsed_ms = round((time.monotonic() - t0) * 1000)
        logger.info(
            "[%s] %r → %d results (%s) in %d ms",
            trace_id,
            query,
            len(results),
            intent.to_summary(),
            elapsed_ms,
        )
        return SearchResponse(results=results, trace_id=trace_id)
