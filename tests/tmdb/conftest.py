"""Shared test fixtures for TMDb connector tests."""
import pytest
import respx


BASE_URL = "https://api.themoviedb.org/3"

TEST_API_KEY = "test-tmdb-key"


@pytest.fixture
def mock_tmdb():
    """respx mock transport at transport level for TmdbClient."""
    with respx.mock(base_url=BASE_URL, assert_all_called=False) as mock:
        yield mock


@pytest.fixture
def multi_search_payload():
    """search/multi page with a movie, a TV show and a person."""
    return {
        "page": 1,
        "results": [
            {
                "id": 27205,
                "media_type": "movie",
                "title": "Inception",
                "original_title": "Inception",
                "overview": "Cobb, a skilled thief who steals secrets from dreams...",
                "vote_average": 8.4,
                "vote_count": 36000,
                "popularity": 90.5,
                "release_date": "2010-07-15",
                "poster_path": "/inception.jpg",
                "genre_ids": [28, 878, 12],
            },
            {
                "id": 64837,
                "media_type": "tv",
                "name": "Inception: The Cobol Job",
                "overview": "",
                "vote_average": 0,
                "vote_count": 0,
                "first_air_date": "",
                "genre_ids": [],
            },
            {
                "id": 525,
                "media_type": "person",
                "name": "Inception Fan",
                "known_for_department": "Acting",
            },
        ],
        "total_pages": 1,
        "total_results": 3,
    }


@pytest.fixture
def movie_genre_payload():
    return {
        "genres": [
            {"id": 28, "name": "Action"},
            {"id": 27, "name": "Horror"},
            {"id": 878, "name": "Science Fiction"},
        ]
    }


@pytest.fixture
def tv_details_payload():
    return {
        "id": 1396,
        "name": "Breaking Bad",
        "status": "Ended",
        "type": "Scripted",
        "tagline": "",
        "first_air_date": "2008-01-20",
        "episode_run_time": [45, 47],
        "number_of_seasons": 5,
        "number_of_episodes": 62,
        "genres": [{"id": 18, "name": "Drama"}, {"id": 80, "name": "Crime"}],
        "vote_average": 8.9,
        "vote_count": 14000,
    }
