"""Abstract language-capability interface for intent extraction.

A capability turns raw query text into the loose JSON-shaped dict that
:meth:`Intent.from_llm_data` understands.  Implementations either call a
hosted language model or apply deterministic keyword rules.  They signal any
failure by raising :class:`IntentParseError`; the extractor decides what to
do about it.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class IntentParseError(Exception):
    """Raised when a capability call or its response parsing fails."""


class IntentCapability(ABC):
    """Base class for everything that can interpret a query."""

    @abstractmethod
    def name(self) -> str:
        """Short identifier, e.g. ``"gemini"`` or ``"keyword"``."""
        ...

    @abstractmethod
    async def complete(self, query: str) -> dict[str, Any]:
        """Return structured intent data for *query*.

        Keys follow the camelCase intent schema (``titles``, ``genres``,
        ``yearFrom``, ``mediaTypes``, ``requestedCount``, ``wantsSimilar``...).

        Raises:
            IntentParseError: the call failed or the output was unusable.
        """
        ...

    async def aclose(self) -> None:
        """Release any network resources.  No-op by default."""
        return None
