"""Wire models and the response assembler.

Field names on the wire are camelCase (``catalogId``, ``relevanceScore``);
Python code uses snake_case and pydantic handles the aliasing.
"""

from __future__ import annotations

from typing import Iterable, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from analysis.models import RankedItem

DEFAULT_IMAGE_BASE_URL = "https://image.tmdb.org/t/p/w500"


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SearchResultItem(_CamelModel):
    """One entry of the ranked result list."""

    catalog_id: int
    name: str
    media_type: str
    thumbnail_url: Optional[str] = None
    rating: Optional[float] = None
    overview: Optional[str] = None
    year: Optional[int] = None
    relevance_score: float
    reasoning: str


class SearchResponse(_CamelModel):
    results: list[SearchResultItem] = Field(default_factory=list)
    trace_id: Optional[str] = None


def thumbnail_url(reference: Optional[str], image_base_url: str = DEFAULT_IMAGE_BASE_URL) -> Optional[str]:
    """Expand a catalog poster path into a full image URL."""
    if not reference:
        return None
    if reference.startswith(("http://", "https://")):
        return reference
    return f"{image_base_url.rstrip('/')}/{reference.lstrip('/')}"


def assemble_results(
    items: Iterable[RankedItem],
    requested_count: Optional[int] = None,
    *,
    image_base_url: str = DEFAULT_IMAGE_BASE_URL,
) -> list[SearchResultItem]:
    """Map ranked items to wire results, truncated to *requested_count* when set."""
    results = [
        SearchResultItem(
            catalog_id=item.hit.catalog_id,
            name=item.hit.name,
            media_type=item.hit.media_type,
            thumbnail_url=thumbnail_url(item.hit.thumbnail, image_base_url),
            rating=item.hit.rating,
            overview=item.hit.overview,
            year=item.hit.year,
            relevance_score=round(item.score, 3),
            reasoning=item.reasoning,
        )
        for item in items
    ]
    if requested_count is not None and requested_count > 0:
        results = results[:requested_count]
    return results
