"""Movie/TV search — intent parser package."""

from .base import IntentCapability, IntentParseError
from .fallback import extract_requested_count, fallback_intent
from .keyword_parser import KeywordIntentCapability
from .llm_parser import (
    ChatCompletionsIntentCapability,
    GeminiIntentCapability,
    IntentExtractor,
    build_capability,
)
from .schema import Intent

__all__ = [
    "ChatCompletionsIntentCapability",
    "GeminiIntentCapability",
    "Intent",
    "IntentCapability",
    "IntentExtractor",
    "IntentParseError",
    "KeywordIntentCapability",
    "build_capability",
    "extract_requested_count",
    "fallback_intent",
]
