"""Application settings loaded from environment.

Reads from a .env file at the project root and exposes a typed Settings
object shared by the catalog client, the intent extractor and the API.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application-wide settings loaded from environment variables or .env file.

    Attributes:
        tmdb_api_key: TMDb v3 API key, sent as the ``api_key`` query param.
        tmdb_access_token: Optional TMDb v4 read token, sent as a bearer header.
        tmdb_max_concurrency: Outbound request bound per client instance.
        tmdb_retry_after_default: Seconds to wait on a 429 without Retry-After.
        discover_min_vote_count: Quality floor applied to discovery calls.
        similar_min_rating: Rating gate for similar/recommendation results.
        llm_provider: ``gemini``, ``openai``, ``groq`` or ``keyword``.
    """

    # TMDb
    tmdb_api_key: str = Field("", validation_alias="TMDB_API_KEY")
    tmdb_access_token: Optional[str] = Field(None, validation_alias="TMDB_ACCESS_TOKEN")
    tmdb_base_url: str = "https://api.themoviedb.org/3"
    tmdb_image_base_url: str = "https://image.tmdb.org/t/p/w500"
    tmdb_max_concurrency: int = 40
    tmdb_timeout_seconds: float = 10.0
    tmdb_retry_after_default: float = 10.0
    tmdb_retry_after_max: float = 30.0

    # Search behaviour
    discover_min_vote_count: int = 100
    similar_min_rating: float = 6.0
    max_ranked_results: int = 50
    max_query_length: int = 500

    # Language capability
    llm_provider: str = "gemini"
    google_api_key: Optional[str] = Field(None, validation_alias="GOOGLE_API_KEY")
    gemini_model: str = "gemini-2.0-flash"
    openai_api_key: Optional[str] = Field(None, validation_alias="OPENAI_API_KEY")
    openai_base_url: str = "https://api.openai.com/v1"
    openai_model: str = "gpt-4o-mini"
    groq_api_key: Optional[str] = Field(None, validation_alias="GROQ_API_KEY")
    groq_base_url: str = "https://api.groq.com/openai/v1"
    groq_model: str = "llama-3.1-70b-versatile"
    llm_timeout_seconds: float = 15.0

    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings instance.

    Uses ``lru_cache`` so the .env file is read at most once per process.
    """
    return Settings()
