"""
Detect known catalog artists mentioned in a prompt.
"""
from typing import Iterable, List

from ..string_utils import MIN_SUBSTRING_LEN, contains_phrase, normalize_text, tokenize


def detect_artists(prompt: str, known_artists: Iterable[str]) -> List[str]:
    """
    Return every known artist named in the prompt, in ``known_artists`` order.

    An artist matches as an exact token, as a word-bounded phrase, or (for
    names of three or more characters) as a plain substring of the prompt.
    Returned names are the catalog spellings, without duplicates.
    """
    text = normalize_text(prompt)
    if not text:
        return []
    tokens = set(tokenize(text))

    found: List[str] = []
    seen = set()
    for artist in known_artists or ():
        name = normalize_text(artist)
        if not name or name in seen:
            continue
        if name in tokens or contains_phrase(text, name) or (
            len(name) >= MIN_SUBSTRING_LEN and name in text
        ):
            seen.add(name)
            found.append(artist)
    return found
