"""HTTP tests for the FastAPI app.

The TestClient is used without a context manager so the lifespan (which
opens a real TMDb client) never runs; the pipeline is placed on app.state
directly, backed by the in-memory catalog.
"""
from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from api.main import create_app
from reelfinder import __version__
from reelfinder.config import Settings

TEST_SETTINGS = Settings(
    tmdb_api_key="test-tmdb-key",
    llm_provider="keyword",
    google_api_key=None,
    openai_api_key=None,
    groq_api_key=None,
    max_query_length=40,
)


@pytest.fixture
def app():
    return create_app(TEST_SETTINGS)


@pytest.fixture
def client(app, pipeline):
    app.state.pipeline = pipeline
    return TestClient(app)


# ---------------------------------------------------------------------------
# Test 1: search
# ---------------------------------------------------------------------------


def test_search_returns_camel_case_results(client, fake_catalog, media):
    fake_catalog.multi["inception"] = [media(27205, "Inception", rating=8.4, year=2010)]

    response = client.post("/api/search", json={"query": "Inception"})

    assert response.status_code == 200
    body = response.json()
    assert body["traceId"]
    assert len(body["results"]) == 1
    result = body["results"][0]
    assert result["catalogId"] == 27205
    assert result["mediaType"] == "movie"
    assert result["thumbnailUrl"].endswith("/poster27205.jpg")
    assert "exact title match" in result["reasoning"]


@pytest.mark.parametrize("payload", [{"query": ""}, {"query": "   "}, {}])
def test_blank_search_is_empty_not_an_error(client, fake_catalog, payload):
    response = client.post("/api/search", json=payload)

    assert response.status_code == 200
    assert response.json()["results"] == []
    assert fake_catalog.calls == []


def test_overlong_query_is_rejected(client, fake_catalog):
    response = client.post("/api/search", json={"query": "x" * 41})

    assert response.status_code == 400
    assert fake_catalog.calls == []


# ---------------------------------------------------------------------------
# Test 2: parse and plan
# ---------------------------------------------------------------------------


def test_parse_endpoint(client):
    response = client.post("/api/parse", json={"query": "top 5 horror movies"})

    assert response.status_code == 200
    body = response.json()
    assert body["intent"]["genres"] == ["horror"]
    assert body["intent"]["requestedCount"] == 5
    assert body["capability"] == "keyword"
    assert "horror" in body["summary"]


def test_plan_endpoint_makes_no_catalog_calls(client, fake_catalog):
    response = client.post("/api/plan", json={"query": "gritty crime dramas"})

    assert response.status_code == 200
    plan = response.json()["plan"]
    assert plan["mode"] == "genre_mood"
    assert plan["steps"]
    assert fake_catalog.calls == []


# ---------------------------------------------------------------------------
# Test 3: health and readiness
# ---------------------------------------------------------------------------


def test_health_when_ready(client):
    body = client.get("/api/health").json()
    assert body == {"status": "ok", "version": __version__, "intent_capability": "keyword"}


def test_not_ready_without_pipeline(app):
    client = TestClient(app)

    assert client.get("/api/health").json()["status"] == "starting"
    assert client.post("/api/search", json={"query": "Inception"}).status_code == 503
