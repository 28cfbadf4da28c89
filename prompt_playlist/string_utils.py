"""
Shared string normalization and matching utilities.

Genre, artist and track-name comparisons across the extractor, the catalog
filter and the reconciler all go through these helpers so that "the same"
rule never drifts between call sites.
"""
import re
import unicodedata
from enum import Enum
from typing import Iterable, List, Optional

_WORD_RE = re.compile(r"\w+", flags=re.UNICODE)

# Typography normalization (curly quotes, dashes) applied before folding
_TYPOGRAPHY_TRANSLATION = {
    ord("\u2018"): "'",  # left single quotation mark
    ord("\u2019"): "'",  # right single quotation mark
    ord("\u201C"): '"',  # left double quotation mark
    ord("\u201D"): '"',  # right double quotation mark
    ord("\u2010"): "-",  # hyphen
    ord("\u2011"): "-",  # non-breaking hyphen
    ord("\u2013"): "-",  # en dash
    ord("\u2014"): "-",  # em dash
}

# Prefix/suffix word matches need at least this many characters in the
# shorter word ("t" must not match "trap").
MIN_AFFIX_LEN = 3

# Substring containment is only meaningful for strings at least this long.
MIN_SUBSTRING_LEN = 3


class MatchStrictness(Enum):
    """How tolerant a term comparison is."""
    EXACT = "exact"          # normalized equality only
    WORD = "word"            # + shared whole word (prefix/suffix tolerant)
    SUBSTRING = "substring"  # + containment in either direction


def normalize_text(text: Optional[str]) -> str:
    """
    Normalize text for accent- and case-insensitive comparisons.

    Case folds, strips combining marks (diacritics) and collapses whitespace.
    Idempotent: ``normalize_text(normalize_text(s)) == normalize_text(s)``.

    Args:
        text: Text to normalize (None is treated as empty)

    Returns:
        Normalized text string
    """
    if not text:
        return ""

    text = str(text).translate(_TYPOGRAPHY_TRANSLATION)
    text = unicodedata.normalize("NFD", text.casefold())
    text = "".join(ch for ch in text if not unicodedata.combining(ch))
    text = unicodedata.normalize("NFC", text).casefold()

    return " ".join(text.split())


def tokenize(text: Optional[str], min_length: int = 1) -> List[str]:
    """Split normalized text into word tokens of at least ``min_length`` chars."""
    return [w for w in _WORD_RE.findall(normalize_text(text)) if len(w) >= min_length]


def contains_phrase(text: str, phrase: str) -> bool:
    """
    True if ``phrase`` occurs in ``text`` delimited by non-word characters.

    Both arguments are expected to be normalized already.
    """
    if not phrase:
        return False
    pattern = r"(?<!\w)" + re.escape(phrase) + r"(?!\w)"
    return re.search(pattern, text) is not None


def _words_overlap(left: Iterable[str], right: Iterable[str]) -> bool:
    right = list(right)
    for word in left:
        for other in right:
            if word == other:
                return True
            shorter = min(len(word), len(other))
            if shorter < MIN_AFFIX_LEN:
                continue
            if (other.startswith(word) or other.endswith(word)
                    or word.startswith(other) or word.endswith(other)):
                return True
    return False


def terms_match(
    query: Optional[str],
    candidate: Optional[str],
    strictness: MatchStrictness = MatchStrictness.SUBSTRING,
) -> bool:
    """
    Compare two free-text terms using tiered matching.

    Tiers (each includes the previous ones):
      EXACT      normalized equality
      WORD       any whole-word pair shares a prefix/suffix ("rock" ~ "argentine rock")
      SUBSTRING  containment in either direction when the query is >= 3 chars
    """
    q = normalize_text(query)
    c = normalize_text(candidate)
    if not q or not c:
        return False

    if q == c:
        return True
    if strictness is MatchStrictness.EXACT:
        return False

    if _words_overlap(q.split(), c.split()):
        return True
    if strictness is MatchStrictness.WORD:
        return False

    if len(q) >= MIN_SUBSTRING_LEN and (q in c or c in q):
        return True

    return False


def names_overlap(left: Optional[str], right: Optional[str]) -> bool:
    """Equality or containment in either direction of two normalized names."""
    a = normalize_text(left)
    b = normalize_text(right)
    if not a or not b:
        return False
    return a == b or a in b or b in a


def genre_matches(
    track_genres: Iterable[str],
    genre: Optional[str],
    strictness: MatchStrictness = MatchStrictness.SUBSTRING,
) -> bool:
    """True if any of the track's genre tags matches the requested genre."""
    if not genre:
        return False
    return any(terms_match(genre, g, strictness) for g in track_genres or ())


def artist_matches(track_artists: Iterable[str], artists: Iterable[str]) -> bool:
    """True if any listed track artist overlaps any of the wanted artists."""
    wanted = [a for a in artists or () if normalize_text(a)]
    if not wanted:
        return False
    return any(names_overlap(t, a) for t in track_artists or () for a in wanted)
