"""Pipeline fixtures wired to the in-memory catalog and keyword rules."""
from __future__ import annotations

import pytest

from analysis.ranker import Ranker
from api.orchestrator import SearchOrchestrator
from api.pipeline import SearchPipeline
from intent_parser.keyword_parser import KeywordIntentCapability
from intent_parser.llm_parser import IntentExtractor

IMAGE_BASE_URL = "https://img.test/w500"


class SpyCapability(KeywordIntentCapability):
    """Keyword rules that remember every query they were asked to parse."""

    def __init__(self) -> None:
        super().__init__()
        self.queries: list[str] = []

    async def complete(self, query):
        self.queries.append(query)
        return await super().complete(query)


@pytest.fixture
def capability() -> SpyCapability:
    return SpyCapability()


@pytest.fixture
def pipeline(fake_catalog, capability) -> SearchPipeline:
    return SearchPipeline(
        IntentExtractor(capability),
        SearchOrchestrator(fake_catalog),
        Ranker(current_year=2025),
        image_base_url=IMAGE_BASE_URL,
    )
