"""Read-only keyword tables shared by the intent parser, orchestrator and ranker.

A :class:`Lexicon` is built once (``DEFAULT_LEXICON``) and handed to the
components that need it.  All tables are exposed as ``MappingProxyType`` of
tuples so nothing downstream can mutate them.

Vocabulary:
    * **canonical genre** — lower-case TMDb movie genre name ("science fiction").
    * **alias** — a user-facing spelling that maps to a canonical genre
      ("sci-fi", "rom-com", "dramas").
    * **mood** — a tone word ("gritty", "feel-good") that maps to one or more
      canonical genres for discovery and to keyword lists for ranking.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Sequence

__all__ = ["Lexicon", "DEFAULT_LEXICON", "text_mentions"]


# ---------------------------------------------------------------------------
# Raw tables
# ---------------------------------------------------------------------------

_GENRE_ALIASES: dict[str, str] = {
    "action": "action",
    "adventure": "adventure",
    "animation": "animation",
    "animated": "animation",
    "anime": "animation",
    "cartoon": "animation",
    "comedy": "comedy",
    "comedies": "comedy",
    "rom-com": "romance",
    "romcom": "romance",
    "crime": "crime",
    "heist": "crime",
    "documentary": "documentary",
    "documentaries": "documentary",
    "docuseries": "documentary",
    "drama": "drama",
    "family": "family",
    "fantasy": "fantasy",
    "history": "history",
    "historical": "history",
    "period piece": "history",
    "horror": "horror",
    "music": "music",
    "musical": "music",
    "mystery": "mystery",
    "mysteries": "mystery",
    "whodunit": "mystery",
    "romance": "romance",
    "science fiction": "science fiction",
    "sci-fi": "science fiction",
    "scifi": "science fiction",
    "sci fi": "science fiction",
    "thriller": "thriller",
    "war": "war",
    "western": "western",
}

#: TV genre names differ from the movie list; canonical genre → TV spellings.
_TV_GENRE_EQUIVALENTS: dict[str, tuple[str, ...]] = {
    "action": ("action & adventure",),
    "adventure": ("action & adventure",),
    "science fiction": ("sci-fi & fantasy",),
    "fantasy": ("sci-fi & fantasy",),
    "war": ("war & politics",),
    "history": ("war & politics",),
    "thriller": ("mystery", "crime"),
    "horror": ("mystery",),
}

_GENRE_KEYWORDS: dict[str, tuple[str, ...]] = {
    "action": ("action", "fight", "battle", "combat", "explosive", "chase"),
    "adventure": ("adventure", "journey", "quest", "expedition", "exploration"),
    "animation": ("animated", "animation", "cartoon", "anime"),
    "comedy": ("comedy", "funny", "humor", "hilarious", "comic", "laugh"),
    "crime": ("crime", "criminal", "detective", "police", "investigation", "murder", "gangster"),
    "documentary": ("documentary", "true story", "real-life", "footage"),
    "drama": ("drama", "dramatic", "emotional", "character", "relationship"),
    "family": ("family", "kids", "children", "parent"),
    "fantasy": ("fantasy", "magic", "magical", "wizard", "dragon", "mythical"),
    "history": ("history", "historical", "century", "empire", "war-torn"),
    "horror": ("horror", "scary", "frightening", "terror", "haunted", "supernatural"),
    "music": ("music", "musical", "singer", "band", "song"),
    "mystery": ("mystery", "puzzle", "investigation", "detective", "clue", "secret"),
    "romance": ("romance", "romantic", "love", "relationship", "passion", "dating"),
    "science fiction": ("sci-fi", "science fiction", "space", "alien", "future", "technology"),
    "thriller": ("thriller", "suspense", "tension", "intense", "psychological"),
    "war": ("war", "soldier", "army", "battlefield"),
    "western": ("western", "cowboy", "frontier", "gunfighter", "outlaw"),
}

_MOOD_ALIASES: dict[str, str] = {
    "feel-good": "feel-good",
    "feel good": "feel-good",
    "feelgood": "feel-good",
    "uplifting": "feel-good",
    "heartwarming": "feel-good",
    "dark": "dark",
    "bleak": "dark",
    "mind-bending": "mind-bending",
    "mind bending": "mind-bending",
    "trippy": "mind-bending",
    "cozy": "cozy",
    "cosy": "cozy",
    "gritty": "gritty",
    "emotional": "emotional",
    "sad": "emotional",
    "tearjerker": "emotional",
    "action-packed": "action-packed",
    "action packed": "action-packed",
    "funny": "funny",
    "hilarious": "funny",
    "scary": "scary",
    "creepy": "scary",
    "terrifying": "scary",
    "romantic": "romantic",
    "inspiring": "inspiring",
    "inspirational": "inspiring",
    "suspenseful": "suspenseful",
}

_MOOD_GENRES: dict[str, tuple[str, ...]] = {
    "feel-good": ("comedy", "family"),
    "dark": ("thriller", "crime"),
    "mind-bending": ("science fiction", "mystery"),
    "cozy": ("family", "comedy"),
    "gritty": ("crime", "drama"),
    "emotional": ("drama",),
    "action-packed": ("action",),
    "funny": ("comedy",),
    "scary": ("horror",),
    "romantic": ("romance",),
    "inspiring": ("drama",),
    "suspenseful": ("thriller",),
}

_MOOD_KEYWORDS: dict[str, tuple[str, ...]] = {
    "feel-good": ("feel-good", "uplifting", "heartwarming", "positive", "inspiring"),
    "dark": ("dark", "gritty", "noir", "bleak", "sinister", "disturbing"),
    "mind-bending": ("mind-bending", "complex", "psychological", "twist", "surreal", "dream"),
    "cozy": ("cozy", "comfortable", "warm", "intimate", "charming", "peaceful"),
    "gritty": ("gritty", "raw", "realistic", "harsh", "brutal", "uncompromising"),
    "emotional": ("emotional", "touching", "moving", "tearjerker", "heart-wrenching"),
    "action-packed": ("action-packed", "explosive", "thrilling", "adrenaline", "fast-paced"),
    "funny": ("funny", "hilarious", "comedy", "humorous", "witty", "amusing"),
    "scary": ("scary", "frightening", "terrifying", "chilling", "spine-tingling"),
    "romantic": ("romantic", "love", "passion", "intimate", "tender"),
    "inspiring": ("inspiring", "motivational", "uplifting", "empowering", "triumphant"),
    "suspenseful": ("suspense", "tense", "gripping", "nail-biting"),
}


def _freeze(table: Mapping) -> Mapping:
    return MappingProxyType(dict(table))


def text_mentions(text: str, keyword: str) -> bool:
    """Return True when *keyword* starts a word in *text* (case-insensitive)."""
    return re.search(r"\b" + re.escape(keyword.lower()), text.lower()) is not None


# ---------------------------------------------------------------------------
# Lexicon
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Lexicon:
    """Immutable bundle of the genre and mood tables."""

    genre_aliases: Mapping[str, str] = field(default_factory=lambda: _freeze(_GENRE_ALIASES))
    tv_genre_equivalents: Mapping[str, tuple[str, ...]] = field(
        default_factory=lambda: _freeze(_TV_GENRE_EQUIVALENTS)
    )
    genre_keywords: Mapping[str, tuple[str, ...]] = field(
        default_factory=lambda: _freeze(_GENRE_KEYWORDS)
    )
    mood_aliases: Mapping[str, str] = field(default_factory=lambda: _freeze(_MOOD_ALIASES))
    mood_genres: Mapping[str, tuple[str, ...]] = field(default_factory=lambda: _freeze(_MOOD_GENRES))
    mood_keywords: Mapping[str, tuple[str, ...]] = field(
        default_factory=lambda: _freeze(_MOOD_KEYWORDS)
    )

    # -- normalisation -----------------------------------------------------

    def canonical_genre(self, term: str) -> str:
        """Map a user spelling to its canonical genre (unknown terms pass through)."""
        key = term.strip().lower()
        if key in self.genre_aliases:
            return self.genre_aliases[key]
        if key.endswith("s") and key[:-1] in self.genre_aliases:
            return self.genre_aliases[key[:-1]]
        return key

    def canonical_mood(self, term: str) -> str:
        key = term.strip().lower()
        return self.mood_aliases.get(key, key)

    def genres_for_mood(self, mood: str) -> tuple[str, ...]:
        return self.mood_genres.get(self.canonical_mood(mood), ())

    def keywords_for_genre(self, genre: str) -> tuple[str, ...]:
        canonical = self.canonical_genre(genre)
        return self.genre_keywords.get(canonical, (canonical,))

    def keywords_for_mood(self, mood: str) -> tuple[str, ...]:
        canonical = self.canonical_mood(mood)
        return self.mood_keywords.get(canonical, (canonical,))

    # -- detection in free text -------------------------------------------

    def find_genres(self, text: str) -> list[str]:
        """Canonical genres whose aliases (or plurals) appear in *text*, in table order."""
        found: list[str] = []
        lowered = text.lower()
        for alias, canonical in self.genre_aliases.items():
            if canonical in found:
                continue
            if re.search(r"\b" + re.escape(alias) + r"s?\b", lowered):
                found.append(canonical)
        return found

    def find_moods(self, text: str) -> list[str]:
        found: list[str] = []
        lowered = text.lower()
        for alias, canonical in self.mood_aliases.items():
            if canonical in found:
                continue
            if re.search(r"\b" + re.escape(alias) + r"\b", lowered):
                found.append(canonical)
        return found

    def strip_terms(self, text: str) -> str:
        """Blank out every genre and mood alias in *text*, longest alias first."""
        patterns = [(alias, r"s?") for alias in self.genre_aliases]
        patterns += [(alias, "") for alias in self.mood_aliases]
        patterns.sort(key=lambda p: len(p[0]), reverse=True)
        for alias, suffix in patterns:
            text = re.sub(r"\b" + re.escape(alias) + suffix + r"\b", " ", text, flags=re.IGNORECASE)
        return text

    # -- catalog mapping ---------------------------------------------------

    def genre_ids(
        self,
        names: Sequence[str],
        genre_map: Mapping[str, int],
        media_type: str,
    ) -> list[int]:
        """Resolve genre names to catalog ids for *media_type*.

        *genre_map* is the catalog's lower-cased name → id table.  TV lookups
        also try the TV spellings ("sci-fi & fantasy") and any catalog genre
        whose name contains the canonical genre.  Ids are deduplicated and
        keep the order of *names*.
        """
        ids: list[int] = []
        for name in names:
            canonical = self.canonical_genre(name)
            candidates = [canonical]
            if media_type == "tv":
                candidates.extend(self.tv_genre_equivalents.get(canonical, ()))
            genre_id = None
            for candidate in candidates:
                if candidate in genre_map:
                    genre_id = genre_map[candidate]
                    break
            if genre_id is None:
                for catalog_name, catalog_id in genre_map.items():
                    if re.search(r"\b" + re.escape(canonical) + r"\b", catalog_name):
                        genre_id = catalog_id
                        break
            if genre_id is not None and genre_id not in ids:
                ids.append(genre_id)
        return ids


DEFAULT_LEXICON = Lexicon()
