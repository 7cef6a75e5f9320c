"""Tests for Intent normalisation."""
from __future__ import annotations

import pytest
from pydantic import ValidationError

from intent_parser.schema import Intent


def test_arrays_are_deduplicated_and_lower_cased():
    intent = Intent.from_llm_data(
        "q",
        {
            "titles": ["Heat", "heat", " Heat "],
            "genres": ["Horror", "horror", "SCI-FI"],
            "moods": ["Dark", "dark"],
            "people": ["Tom Hanks", "tom hanks"],
        },
    )
    assert intent.titles == ("Heat",)
    assert intent.genres == ("horror", "sci-fi")
    assert intent.moods == ("dark",)
    assert intent.people == ("Tom Hanks",)


def test_missing_and_malformed_arrays_become_empty():
    intent = Intent.from_llm_data("q", {"genres": None, "moods": 7, "people": {"a": 1}})
    assert intent.genres == ()
    assert intent.moods == ()
    assert intent.people == ()
    assert intent.titles == ()


def test_single_string_becomes_one_element_list():
    assert Intent.from_llm_data("q", {"titles": "Inception"}).titles == ("Inception",)


@pytest.mark.parametrize(
    "raw, expected",
    [
        (["movie"], ("movie",)),
        (["TV", "tv"], ("tv",)),
        (["films", "series"], ("movie", "tv")),
        (["podcast"], ("movie", "tv")),
        ([], ("movie", "tv")),
        (None, ("movie", "tv")),
    ],
)
def test_media_types_normalised(raw, expected):
    assert Intent.from_llm_data("q", {"mediaTypes": raw}).media_types == expected


@pytest.mark.parametrize(
    "raw, expected",
    [(5, 5), ("12", 12), (0, None), (101, None), (-3, None), ("many", None), (100, 100), (1, 1)],
)
def test_requested_count_clamped(raw, expected):
    assert Intent.from_llm_data("q", {"requestedCount": raw}).requested_count == expected


def test_single_year_sets_both_bounds():
    intent = Intent.from_llm_data("q", {"year": 1999})
    assert (intent.year_from, intent.year_to) == (1999, 1999)


def test_explicit_bounds_win_over_single_year():
    intent = Intent.from_llm_data("q", {"year": 1999, "yearFrom": 2001})
    assert (intent.year_from, intent.year_to) == (2001, None)


def test_reversed_bounds_are_swapped_and_junk_dropped():
    intent = Intent.from_llm_data("q", {"yearFrom": 2010, "yearTo": "2000"})
    assert (intent.year_from, intent.year_to) == (2000, 2010)
    assert Intent.from_llm_data("q", {"yearFrom": "soon", "yearTo": 99999}).year_from is None


def test_runtime_must_be_positive():
    assert Intent.from_llm_data("q", {"runtimeMaxMinutes": "120"}).runtime_max_minutes == 120
    assert Intent.from_llm_data("q", {"runtimeMaxMinutes": 0}).runtime_max_minutes is None


def test_suggestion_flag_aliases():
    assert Intent.from_llm_data("q", {"isRequestingSuggestions": True}).wants_similar is True
    assert Intent.from_llm_data("q", {"wantsSimilar": "true"}).wants_similar is True
    assert Intent.from_llm_data("q", {"wantsSimilar": None}).wants_similar is False


def test_raw_query_comes_from_caller():
    intent = Intent.from_llm_data("the real query", {"rawQuery": "forged", "titles": ["X"]})
    assert intent.raw_query == "the real query"


def test_intent_is_frozen():
    intent = Intent(titles=("Heat",))
    with pytest.raises(ValidationError):
        intent.titles = ("Ronin",)


def test_to_dict_uses_camel_case():
    data = Intent(genres=("horror",), requested_count=5, wants_similar=True).to_dict()
    assert data["requestedCount"] == 5
    assert data["wantsSimilar"] is True
    assert data["mediaTypes"] == ["movie", "tv"]


def test_has_signal_and_single_media_type():
    assert not Intent.empty("top 5").has_signal
    assert Intent(year_from=1990).has_signal
    assert Intent(media_types=("movie",)).single_media_type == "movie"
    assert Intent().single_media_type is None


def test_summary_reads_naturally():
    summary = Intent(
        genres=("horror",), year_from=1990, year_to=1999, media_types=("movie",), requested_count=5
    ).to_summary()
    assert summary == "genres: horror; years 1990-1999; movie; top 5"
