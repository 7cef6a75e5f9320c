"""Tests for the response assembler and wire models."""
from __future__ import annotations

import pytest

from analysis.models import RankedItem
from api.responses import SearchResponse, assemble_results, thumbnail_url


@pytest.mark.parametrize(
    "reference, expected",
    [
        ("/abc.jpg", "https://image.tmdb.org/t/p/w500/abc.jpg"),
        ("abc.jpg", "https://image.tmdb.org/t/p/w500/abc.jpg"),
        ("https://cdn.example/x.jpg", "https://cdn.example/x.jpg"),
        (None, None),
        ("", None),
    ],
)
def test_thumbnail_url(reference, expected):
    assert thumbnail_url(reference) == expected


def test_thumbnail_url_custom_base():
    assert thumbnail_url("/p.jpg", "https://img.test/w185/") == "https://img.test/w185/p.jpg"


@pytest.fixture
def ranked(hit):
    return [
        RankedItem(hit=hit(i, rating=None if i == 2 else 7.5, year=None if i == 3 else 2001), score=3.0 - i / 7, reasoning=f"r{i}")
        for i in range(1, 6)
    ]


def test_assemble_maps_fields_and_rounds(ranked):
    results = assemble_results(ranked)

    assert len(results) == 5
    first = results[0]
    assert first.catalog_id == 1
    assert first.name == "Title 1"
    assert first.media_type == "movie"
    assert first.relevance_score == round(3.0 - 1 / 7, 3)
    assert first.reasoning == "r1"
    assert results[1].rating is None
    assert results[2].year is None


@pytest.mark.parametrize("count, expected", [(3, 3), (10, 5), (None, 5), (0, 5)])
def test_assemble_truncates_to_requested_count(ranked, count, expected):
    assert len(assemble_results(ranked, count)) == expected


def test_assemble_keeps_order(ranked):
    assert [r.catalog_id for r in assemble_results(reversed(ranked))] == [5, 4, 3, 2, 1]


def test_response_serialises_camel_case(ranked):
    response = SearchResponse(results=assemble_results(ranked[:1]), trace_id="abc")
    data = response.model_dump(by_alias=True)

    assert data["traceId"] == "abc"
    item = data["results"][0]
    assert set(item) == {
        "catalogId",
        "name",
        "mediaType",
        "thumbnailUrl",
        "rating",
        "overview",
        "year",
        "relevanceScore",
        "reasoning",
    }
