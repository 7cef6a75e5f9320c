"""End-to-end pipeline tests: keyword intent rules against the in-memory catalog."""
from __future__ import annotations

import pytest

from reelfinder.lexicon import DEFAULT_LEXICON, text_mentions


def _satisfies(text: str, genre: str) -> bool:
    return any(text_mentions(text, kw) for kw in DEFAULT_LEXICON.keywords_for_genre(genre))


# ---------------------------------------------------------------------------
# Scenario 1: a bare title is an exact lookup
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_bare_title_gives_one_exact_result(pipeline, fake_catalog, media):
    fake_catalog.multi["inception"] = [
        media(27205, "Inception", rating=8.4, year=2010),
        media(64837, "Inception: The Cobol Job", media_type="tv"),
    ]

    response = await pipeline.search("Inception")

    assert len(response.results) == 1
    result = response.results[0]
    assert result.catalog_id == 27205
    assert result.media_type == "movie"
    assert "exact title match" in result.reasoning
    assert result.thumbnail_url == "https://img.test/w500/poster27205.jpg"
    assert response.trace_id


@pytest.mark.asyncio
async def test_title_with_genre_word_is_still_an_exact_lookup(pipeline, fake_catalog, media):
    fake_catalog.multi["star wars"] = [media(11, "Star Wars", rating=8.2, year=1977)]

    response = await pipeline.search("Star Wars")

    assert [r.catalog_id for r in response.results] == [11]
    assert "exact title match" in response.results[0].reasoning
    assert "discover" not in fake_catalog.operations()


# ---------------------------------------------------------------------------
# Scenario 2: "like X" stays within the media type and the rating gate
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_movies_like_title(pipeline, fake_catalog, media):
    fake_catalog.movies["la la land"] = [media(313369, "La La Land", rating=7.9)]
    fake_catalog.similar[("movie", 313369)] = [
        media(1, "Whiplash", rating=8.4),
        media(2, "Rock of Ages", rating=5.9),
        media(3, "Unreleased Musical", rating=None),
    ]
    fake_catalog.recommendations[("movie", 313369)] = [
        media(4, "Begin Again", rating=7.4),
        media(5, "Sing Street", rating=7.9, media_type="tv"),
    ]

    response = await pipeline.search("movies like La La Land")

    assert {r.catalog_id for r in response.results} == {1, 4, 5}
    assert all(r.media_type == "movie" for r in response.results)
    assert all(r.rating is not None and r.rating >= 6.0 for r in response.results)
    assert "search_multi" not in fake_catalog.operations()


# ---------------------------------------------------------------------------
# Scenario 3: requested count truncates a sorted genre list
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_top_five_horror_movies(pipeline, fake_catalog, media):
    fake_catalog.discover_results[("movie", (27,), False)] = [
        media(i, f"Horror {i}", rating=5.0 + i * 0.4, genre_ids=(27,), overview="a scary night")
        for i in range(1, 9)
    ]

    response = await pipeline.search("top 5 horror movies")

    assert len(response.results) == 5
    scores = [r.relevance_score for r in response.results]
    assert scores == sorted(scores, reverse=True)
    assert response.results[0].catalog_id == 8
    assert all(r.media_type == "movie" for r in response.results)


# ---------------------------------------------------------------------------
# Scenario 4: blank input touches nothing
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("query", ["", "   "])
@pytest.mark.asyncio
async def test_blank_query_issues_no_calls(pipeline, fake_catalog, capability, query):
    response = await pipeline.search(query, trace_id="t-1")

    assert response.results == []
    assert response.trace_id == "t-1"
    assert fake_catalog.calls == []
    assert capability.queries == []


# ---------------------------------------------------------------------------
# Scenario 5: mood + genres
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_gritty_crime_dramas_intersect(pipeline, fake_catalog, media):
    godfather = media(238, "The Godfather", overview="A crime family drama", genre_ids=(80, 18), rating=8.7)
    heat = media(949, "Heat", overview="A detective and a thief in an emotional duel", genre_ids=(80, 18))
    fake_catalog.discover_results[("movie", (80,), False)] = [godfather, heat, media(1, "Crime Only")]
    fake_catalog.discover_results[("movie", (18,), False)] = [heat, godfather, media(2, "Drama Only")]

    response = await pipeline.search("gritty crime dramas")

    assert [r.catalog_id for r in response.results] == [238, 949]
    for r in response.results:
        text = f"{r.name} {r.overview}"
        assert _satisfies(text, "crime") and _satisfies(text, "drama")


@pytest.mark.asyncio
async def test_disjoint_genres_explain_the_union(pipeline, fake_catalog, media):
    fake_catalog.discover_results[("movie", (27,), False)] = [media(1, "Scream")]
    fake_catalog.discover_results[("movie", (10749,), False)] = [media(2, "Notting Hill")]
    fake_catalog.discover_results[("movie", (27, 10749), True)] = [
        media(1, "Scream"),
        media(2, "Notting Hill"),
    ]

    response = await pipeline.search("horror romance movies")

    assert {r.catalog_id for r in response.results} == {1, 2}
    assert all("nothing matched all of them" in r.reasoning for r in response.results)


# ---------------------------------------------------------------------------
# Failure handling
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_catalog_outage_gives_empty_results(pipeline, fake_catalog):
    fake_catalog.failing.update({"find_exact_title", "search_multi"})

    response = await pipeline.search("Inception")

    assert response.results == []


@pytest.mark.asyncio
async def test_unexpected_error_is_contained(pipeline, monkeypatch, media, fake_catalog):
    fake_catalog.multi["inception"] = [media(27205, "Inception")]

    def boom(hits, intent):
        raise ValueError("ranker bug")

    monkeypatch.setattr(pipeline.ranker, "rank_and_merge", boom)

    response = await pipeline.search("Inception", trace_id="t-2")

    assert response.results == []
    assert response.trace_id == "t-2"


@pytest.mark.asyncio
async def test_parse_returns_intent(pipeline):
    intent = await pipeline.parse("top 5 horror movies")
    assert intent.genres == ("horror",)
    assert intent.requested_count == 5
