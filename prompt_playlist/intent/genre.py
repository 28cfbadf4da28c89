"""
Genre keyword detection (trap / rock / pop).
"""
from typing import Dict, Optional, Tuple

from ..string_utils import contains_phrase, normalize_text, tokenize

# Checked in this order; within a genre, most specific phrases first.
GENRE_KEYWORDS: Dict[str, Tuple[str, ...]] = {
    "trap": ("trap latino", "trap", "rap", "hip hop", "hip-hop", "urban", "reggaeton"),
    "rock": ("rock argentino", "rock nacional", "indie rock", "alternativo", "alternative", "rock"),
    "pop": ("pop latino", "pop urbano", "musica pop", "balada", "ballad", "pop"),
}

SUPPORTED_GENRES = tuple(GENRE_KEYWORDS)

# Single words of the genre vocabulary, normalized
GENRE_WORDS = frozenset(
    word for keywords in GENRE_KEYWORDS.values() for k in keywords for word in tokenize(k)
)


def detect_genre(prompt: str) -> Optional[str]:
    """Return the first genre whose keywords appear in the prompt, or None."""
    text = normalize_text(prompt)
    if not text:
        return None
    for genre, keywords in GENRE_KEYWORDS.items():
        if any(contains_phrase(text, normalize_text(k)) for k in keywords):
            return genre
    return None
