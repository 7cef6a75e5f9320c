"""LLM-based intent extraction for movie/TV queries.

Takes a raw natural language query and returns an :class:`Intent`.  The
language model sits behind an :class:`IntentCapability`; two hosted
providers are supported:

* Google Gemini via ``google-genai``
* any OpenAI-compatible ``/chat/completions`` endpoint (Groq, OpenAI) via ``httpx``

:class:`IntentExtractor` is the public entry point.  It never raises: any
capability failure, malformed JSON or empty interpretation falls back to
:func:`intent_parser.fallback.fallback_intent`.
"""

from __future__ import annotations

import json
import logging
import re
from abc import abstractmethod
from typing import Any, Optional

import httpx

from reelfinder.config import Settings
from reelfinder.lexicon import DEFAULT_LEXICON, Lexicon

from .base import IntentCapability, IntentParseError
from .fallback import fallback_intent
from .keyword_parser import KeywordIntentCapability
from .schema import Intent

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# System prompt
# ---------------------------------------------------------------------------

SYSTEM_PROMPT = """\
You are a movie & TV intent extraction assistant. Read the user's request \
and extract what they are looking for.

## Output Schema

You MUST output ONLY valid JSON with exactly these keys (no markdown fences, \
no commentary):

{"titles": [string], "people": [string], "genres": [string], \
"moods": [string], "yearFrom": int|null, "yearTo": int|null, \
"runtimeMaxMinutes": int|null, "mediaTypes": ["movie"|"tv"], \
"requestedCount": int|null, "wantsSimilar": bool}

## Rules

- titles: specific movies or shows the user names. Keep original casing.
- people: actors or directors the user names. Keep original casing.
- genres: lower-case genre words, e.g. "horror", "sci-fi", "crime", "drama".
- moods: lower-case tone words, e.g. "feel-good", "dark", "gritty", \
"cozy", "mind-bending".
- "under 2h" or "less than two hours" means runtimeMaxMinutes = 120.
- "movies" or "films" means mediaTypes = ["movie"]; "TV shows" or "series" \
means ["tv"]; otherwise ["movie", "tv"].
- A single year ("from 1999") sets both yearFrom and yearTo to that year. \
A decade ("90s") sets 1990 and 1999.
- "top 5", "best 10", "give me 3" set requestedCount.
- "like X", "similar to X", "recommend", "suggest" set wantsSimilar = true.
- Arrays must not contain duplicates. Use [] or null when something is not \
mentioned.

## Examples

INPUT: "feel-good sci-fi movies under 2h"
OUTPUT:
{"titles":[],"people":[],"genres":["sci-fi"],"moods":["feel-good"],"yearFrom":null,"yearTo":null,"runtimeMaxMinutes":120,"mediaTypes":["movie"],"requestedCount":null,"wantsSimilar":false}

INPUT: "give me 3 shows like Breaking Bad"
OUTPUT:
{"titles":["Breaking Bad"],"people":[],"genres":[],"moods":[],"yearFrom":null,"yearTo":null,"runtimeMaxMinutes":null,"mediaTypes":["tv"],"requestedCount":3,"wantsSimilar":true}

INPUT: "Tom Hanks movies from the 90s"
OUTPUT:
{"titles":[],"people":["Tom Hanks"],"genres":[],"moods":[],"yearFrom":1990,"yearTo":1999,"runtimeMaxMinutes":null,"mediaTypes":["movie"],"requestedCount":null,"wantsSimilar":false}
"""

_RETRY_NUDGE = (
    "Your previous response was not valid JSON. Extract the intent from this "
    "query and respond with ONLY the JSON object, no markdown fences:\n\n{query}"
)


# ---------------------------------------------------------------------------
# JSON extraction helpers
# ---------------------------------------------------------------------------

_JSON_FENCE_RE = re.compile(r"```(?:json)?\s*\n?(.*?)\n?\s*```", re.DOTALL)


def _extract_json(text: str) -> dict[str, Any]:
    """Parse a JSON object from model output, tolerating fences and chatter."""
    text = (text or "").strip()
    candidates = [text]
    m = _JSON_FENCE_RE.search(text)
    if m:
        candidates.append(m.group(1).strip())
    start, end = text.find("{"), text.rfind("}")
    if 0 <= start < end:
        candidates.append(text[start : end + 1])

    for candidate in candidates:
        try:
            data = json.loads(candidate)
        except json.JSONDecodeError:
            continue
        if isinstance(data, dict):
            return data
    raise IntentParseError(f"Could not parse a JSON object from model response:\n{text[:500]}")


# ---------------------------------------------------------------------------
# Hosted capabilities
# ---------------------------------------------------------------------------


class _PromptedCapability(IntentCapability):
    """Shared prompt → JSON flow with one stricter retry on unparseable output."""

    @abstractmethod
    async def _generate(self, contents: str) -> str:
        """Send *contents* with the system prompt and return the raw text."""
        ...

    async def complete(self, query: str) -> dict[str, Any]:
        raw_text = await self._generate(query)
        try:
            return _extract_json(raw_text)
        except IntentParseError:
            logger.info("%s returned non-JSON output, retrying once", self.name())
        retry_text = await self._generate(_RETRY_NUDGE.format(query=query))
        try:
            return _extract_json(retry_text)
        except IntentParseError as exc:
            raise IntentParseError(
                f"Failed to parse JSON after retry. Original response:\n{raw_text[:500]}"
            ) from exc


class GeminiIntentCapability(_PromptedCapability):
    """Google Gemini through the ``google-genai`` async client."""

    def __init__(
        self,
        api_key: str,
        *,
        model: str = "gemini-2.0-flash",
        system_prompt: str = SYSTEM_PROMPT,
    ) -> None:
        self._api_key = api_key
        self._model = model
        self._system_prompt = system_prompt
        self._client = None

    def name(self) -> str:
        return "gemini"

    def _genai(self):
        try:
            from google import genai
            from google.genai import types
        except ImportError as exc:
            raise IntentParseError(
                "google-genai package is required: pip install google-genai"
            ) from exc
        if self._client is None:
            self._client = genai.Client(api_key=self._api_key)
        return self._client, types

    async def _generate(self, contents: str) -> str:
        client, types = self._genai()
        try:
            response = await client.aio.models.generate_content(
                model=self._model,
                contents=contents,
                config=types.GenerateContentConfig(
                    system_instruction=self._system_prompt,
                    temperature=0,
                    max_output_tokens=500,
                ),
            )
        except Exception as exc:
            raise IntentParseError(f"Gemini API call failed: {exc}") from exc
        return response.text or ""


class ChatCompletionsIntentCapability(_PromptedCapability):
    """OpenAI-compatible chat completions (Groq, OpenAI) over ``httpx``."""

    def __init__(
        self,
        provider: str,
        *,
        base_url: str,
        api_key: str,
        model: str,
        timeout: float = 15.0,
        system_prompt: str = SYSTEM_PROMPT,
    ) -> None:
        self._provider = provider
        self._model = model
        self._system_prompt = system_prompt
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers={"Authorization": f"Bearer {api_key}"},
            timeout=httpx.Timeout(timeout),
        )

    def name(self) -> str:
        return self._provider

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _generate(self, contents: str) -> str:
        payload = {
            "model": self._model,
            "messages": [
                {"role": "system", "content": self._system_prompt},
                {"role": "user", "content": contents},
            ],
            "temperature": 0.1,
            "max_tokens": 500,
        }
        try:
            response = await self._client.post("/chat/completions", json=payload)
            response.raise_for_status()
            return response.json()["choices"][0]["message"]["content"] or ""
        except (httpx.HTTPError, ValueError, KeyError, IndexError, TypeError) as exc:
            raise IntentParseError(f"{self._provider} chat completion failed: {exc}") from exc


def build_capability(settings: Settings, lexicon: Lexicon = DEFAULT_LEXICON) -> IntentCapability:
    """Pick the language capability named by ``settings.llm_provider``.

    Falls back to :class:`KeywordIntentCapability` when the provider is
    ``keyword``, unknown, or missing its API key.
    """
    provider = settings.llm_provider.strip().lower()

    if provider == "gemini" and settings.google_api_key:
        return GeminiIntentCapability(settings.google_api_key, model=settings.gemini_model)
    if provider == "groq" and settings.groq_api_key:
        return ChatCompletionsIntentCapability(
            "groq",
            base_url=settings.groq_base_url,
            api_key=settings.groq_api_key,
            model=settings.groq_model,
            timeout=settings.llm_timeout_seconds,
        )
    if provider == "openai" and settings.openai_api_key:
        return ChatCompletionsIntentCapability(
            "openai",
            base_url=settings.openai_base_url,
            api_key=settings.openai_api_key,
            model=settings.openai_model,
            timeout=settings.llm_timeout_seconds,
        )

    if provider not in {"gemini", "groq", "openai", "keyword"}:
        logger.warning("Unknown LLM provider %r, using keyword rules", provider)
    elif provider != "keyword":
        logger.warning("No API key configured for %s, using keyword rules", provider)
    return KeywordIntentCapability(lexicon)


# ---------------------------------------------------------------------------
# Extractor
# ---------------------------------------------------------------------------


class IntentExtractor:
    """Turns query text into an :class:`Intent`; never raises."""

    def __init__(self, capability: Optional[IntentCapability] = None) -> None:
        self._capability = capability

    @property
    def capability_name(self) -> str:
        return self._capability.name() if self._capability else "fallback"

    async def extract_intent(self, query: str) -> Intent:
        """Parse *query* into an Intent.

        Blank input returns an empty Intent without calling the capability.
        Any failure (capability error, malformed output, or an interpretation
        with nothing searchable in it) yields the deterministic fallback.
        """
        if not query or not query.strip():
            return Intent.empty(query or "")
        if self._capability is None:
            return fallback_intent(query)

        try:
            data = await self._capability.complete(query)
            intent = Intent.from_llm_data(query, data)
        except IntentParseError as exc:
            logger.warning("Intent extraction via %s failed, using fallback: %s", self.capability_name, exc)
            return fallback_intent(query)
        except Exception as exc:
            logger.warning(
                "Unexpected %s from %s, using fallback: %s",
                type(exc).__name__,
                self.capability_name,
                exc,
            )
            return fallback_intent(query)

        if not intent.has_signal:
            logger.info("No usable intent in %r from %s, using fallback", query, self.capability_name)
            return fallback_intent(query)
        logger.debug("Extracted intent: %s", intent.to_summary())
        return intent

    async def aclose(self) -> None:
        if self._capability is not None:
            await self._capability.aclose()
