"""Tests for the sample-query runner in scripts/try_queries.py."""
from __future__ import annotations

import pytest

from scripts.try_queries import SAMPLE_QUERIES, describe


@pytest.mark.asyncio
async def test_search_report_lists_ranked_results(pipeline, fake_catalog, media):
    fake_catalog.multi["inception"] = [media(27205, "Inception", rating=8.4, year=2010)]

    lines = await describe(pipeline, "Inception")

    assert lines[0] == "Query: 'Inception'"
    assert lines[1] == "  intent: Inception; movie/tv"
    assert lines[2] == "  requested count: none"
    assert any(line.startswith("    Inception (2010, movie)  score ") for line in lines)
    assert any("exact title match" in line for line in lines)


@pytest.mark.asyncio
async def test_search_report_checks_the_requested_count(pipeline, fake_catalog, media):
    fake_catalog.discover_results[("movie", (27,), False)] = [
        media(i, f"Horror {i}", genre_ids=(27,)) for i in range(1, 9)
    ]

    lines = await describe(pipeline, "top 5 horror movies", top=2)

    assert "  requested count: 5" in lines
    assert "  5 results" in lines[3]
    assert sum(1 for line in lines if line.startswith("    Horror ")) == 2
    assert lines[-1] == "  count respected: True"


@pytest.mark.asyncio
async def test_plan_report_makes_no_catalog_calls(pipeline, fake_catalog):
    lines = await describe(pipeline, "gritty crime dramas", mode="plan")

    assert "  mode: genre_mood" in lines
    assert any(line.startswith("    discover: ") for line in lines)
    assert fake_catalog.calls == []


@pytest.mark.asyncio
async def test_parse_report_stops_after_the_intent(pipeline, fake_catalog):
    lines = await describe(pipeline, SAMPLE_QUERIES[1], mode="parse")

    assert lines == [
        "Query: 'top 3 action movies'",
        "  intent: genres: action; movie; top 3",
        "  requested count: 3",
    ]
    assert fake_catalog.calls == []
