"""FastAPI application for natural-language movie/TV search.

Endpoints:
    POST /api/search   — Full pipeline: parse → retrieve → rank → results
    POST /api/parse    — Parse a query into a structured Intent
    POST /api/plan     — Parse + show which catalog calls would be made (dry run)
    GET  /api/health   — Health check

Run with:
    uvicorn api.main:app --reload
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, Optional

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from analysis.ranker import Ranker
from intent_parser.llm_parser import IntentExtractor, build_capability
from reelfinder import __version__
from reelfinder.config import Settings, get_settings
from reelfinder.lexicon import DEFAULT_LEXICON
from reelfinder.tmdb.client import TmdbClient

from .orchestrator import SearchOrchestrator
from .pipeline import SearchPipeline
from .responses import SearchResponse

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s  %(levelname)-8s  %(name)s  %(message)s"


# ---------------------------------------------------------------------------
# Wiring
# ---------------------------------------------------------------------------


def build_pipeline(settings: Settings, catalog: TmdbClient) -> SearchPipeline:
    """Assemble the search pipeline around an open catalog client."""
    extractor = IntentExtractor(build_capability(settings, DEFAULT_LEXICON))
    orchestrator = SearchOrchestrator(
        catalog,
        DEFAULT_LEXICON,
        similar_min_rating=settings.similar_min_rating,
        min_vote_count=settings.discover_min_vote_count,
    )
    ranker = Ranker(DEFAULT_LEXICON, max_results=settings.max_ranked_results)
    return SearchPipeline(
        extractor,
        orchestrator,
        ranker,
        image_base_url=settings.tmdb_image_base_url,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the TMDb client and build the pipeline for the app's lifetime."""
    settings: Settings = app.state.settings
    logging.basicConfig(level=settings.log_level.upper(), format=LOG_FORMAT, datefmt="%H:%M:%S")
    if not settings.tmdb_api_key and not settings.tmdb_access_token:
        logger.warning("No TMDb credentials configured; catalog calls will fail and return nothing")

    async with TmdbClient(settings) as catalog:
        pipeline = build_pipeline(settings, catalog)
        app.state.pipeline = pipeline
        logger.info("Search pipeline ready (intent capability: %s)", pipeline.extractor.capability_name)
        try:
            yield
        finally:
            await pipeline.extractor.aclose()
            app.state.pipeline = None


# ---------------------------------------------------------------------------
# Request models and dependencies
# ---------------------------------------------------------------------------


class QueryRequest(BaseModel):
    query: str = ""


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_pipeline(request: Request) -> SearchPipeline:
    pipeline: Optional[SearchPipeline] = getattr(request.app.state, "pipeline", None)
    if pipeline is None:
        raise HTTPException(status_code=503, detail="Search pipeline is not initialised")
    return pipeline


def _check_length(query: str, settings: Settings) -> None:
    if len(query) > settings.max_query_length:
        raise HTTPException(
            status_code=400,
            detail=f"Query must be at most {settings.max_query_length} characters",
        )


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

router = APIRouter(prefix="/api", tags=["search"])


@router.post("/search", response_model=SearchResponse)
async def search_endpoint(
    body: QueryRequest,
    pipeline: SearchPipeline = Depends(get_pipeline),
    settings: Settings = Depends(get_app_settings),
) -> SearchResponse:
    """Full pipeline: a blank query gives an empty result list, never an error."""
    _check_length(body.query, settings)
    return await pipeline.search(body.query)


@router.post("/parse")
async def parse_endpoint(
    body: QueryRequest,
    pipeline: SearchPipeline = Depends(get_pipeline),
    settings: Settings = Depends(get_app_settings),
) -> dict[str, Any]:
    """Parse a natural language query into a structured Intent."""
    _check_length(body.query, settings)
    intent = await pipeline.parse(body.query)
    return {
        "intent": intent.to_dict(),
        "summary": intent.to_summary(),
        "capability": pipeline.extractor.capability_name,
    }


@router.post("/plan")
async def plan_endpoint(
    body: QueryRequest,
    pipeline: SearchPipeline = Depends(get_pipeline),
    settings: Settings = Depends(get_app_settings),
) -> dict[str, Any]:
    """Parse intent + show which catalog calls *would* be made.  No catalog calls happen."""
    _check_length(body.query, settings)
    intent = await pipeline.parse(body.query)
    return {
        "intent": intent.to_dict(),
        "plan": pipeline.orchestrator.get_query_plan(intent),
    }


@router.get("/health")
async def health(request: Request) -> dict[str, Any]:
    pipeline: Optional[SearchPipeline] = getattr(request.app.state, "pipeline", None)
    return {
        "status": "ok" if pipeline is not None else "starting",
        "version": __version__,
        "intent_capability": pipeline.extractor.capability_name if pipeline else None,
    }


# ---------------------------------------------------------------------------
# App
# ---------------------------------------------------------------------------


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    app = FastAPI(title="reelfinder", version=__version__, lifespan=lifespan)
    app.state.settings = settings or get_settings()
    app.state.pipeline = None
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(router)
    return app


app = create_app()
