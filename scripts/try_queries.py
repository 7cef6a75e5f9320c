"""
Run sample queries through the search pipeline against live TMDb.

Usage:
    python scripts/try_queries.py
    python scripts/try_queries.py "movies like La La Land" "top 5 horror movies"
    python scripts/try_queries.py --parse-only
    python scripts/try_queries.py --plan "gritty crime dramas"
    python scripts/try_queries.py --top 3

Credentials (TMDB_API_KEY, GROQ_API_KEY, ...) come from the environment or
.env, exactly as for the API.
"""
from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

# Make sure the repository root is on the path
sys.path.insert(0, str(Path(__file__).parent.parent))

from api.main import LOG_FORMAT, build_pipeline
from api.pipeline import SearchPipeline
from reelfinder.config import Settings, get_settings
from reelfinder.tmdb.client import TmdbClient

SAMPLE_QUERIES = (
    "best 10 movies with psychological thriller",
    "top 3 action movies",
    "best 5 comedies from 2020",
    "give me 7 sci-fi shows",
    "psychological thrillers",
    "movies like La La Land",
    "Inception",
)


async def describe(pipeline: SearchPipeline, query: str, *, mode: str = "search", top: int = 5) -> list[str]:
    """Printable report for one query: the intent, then the plan or the results."""
    intent = await pipeline.parse(query)
    lines = [
        f"Query: {query!r}",
        f"  intent: {intent.to_summary()}",
        f"  requested count: {intent.requested_count if intent.requested_count is not None else 'none'}",
    ]
    if mode == "parse":
        return lines

    if mode == "plan":
        plan = pipeline.orchestrator.get_query_plan(intent)
        lines.append(f"  mode: {plan['mode']}")
        lines.extend(f"    {s['operation']}: {s['description']}" for s in plan["steps"])
        return lines

    response = await pipeline.search(query)
    lines.append(f"  {len(response.results)} results (trace {response.trace_id})")
    for result in response.results[:top]:
        year = result.year if result.year is not None else "?"
        lines.append(f"    {result.name} ({year}, {result.media_type})  score {result.relevance_score:.2f}")
        lines.append(f"      {result.reasoning}")
    if intent.requested_count is not None:
        lines.append(f"  count respected: {len(response.results) <= intent.requested_count}")
    return lines


async def run(settings: Settings, queries: list[str], mode: str, top: int) -> None:
    async with TmdbClient(settings) as catalog:
        pipeline = build_pipeline(settings, catalog)
        try:
            print(f"Intent capability: {pipeline.extractor.capability_name}")
            for query in queries:
                print()
                print("\n".join(await describe(pipeline, query, mode=mode, top=top)))
        finally:
            await pipeline.extractor.aclose()


def main() -> None:
    parser = argparse.ArgumentParser(description="Run queries through the movie/TV search pipeline.")
    parser.add_argument("queries", nargs="*",
                        help="Queries to run (default: a built-in sample set)")
    group = parser.add_mutually_exclusive_group()
    group.add_argument("--parse-only", action="store_true",
                       help="Only extract intents; no catalog calls")
    group.add_argument("--plan", action="store_true",
                       help="Show the catalog calls each query would make, without making them")
    parser.add_argument("--top", type=int, default=5,
                        help="Results to print per query (default: 5)")
    args = parser.parse_args()

    settings = get_settings()
    logging.basicConfig(level=settings.log_level.upper(), format=LOG_FORMAT, datefmt="%H:%M:%S")
    if not settings.tmdb_api_key and not settings.tmdb_access_token and not (args.parse_only or args.plan):
        print("  ⚠️  No TMDb credentials configured; searches will return nothing")

    mode = "parse" if args.parse_only else "plan" if args.plan else "search"
    asyncio.run(run(settings, args.queries or list(SAMPLE_QUERIES), mode, args.top))


if __name__ == "__main__":
    main()
