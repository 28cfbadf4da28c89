"""
Activity / intensity detection and activity -> BPM resolution.

The reference table is loaded once into an immutable ActivityTable and passed
to whoever needs it; nothing here caches module-level state.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any, FrozenSet, List, Mapping, Optional, Tuple

import yaml

from ..models import BPMRange
from ..string_utils import contains_phrase, normalize_text, tokenize
from .genre import GENRE_WORDS

logger = logging.getLogger(__name__)

DEFAULT_TABLE_PATH = Path(__file__).resolve().parents[1] / "data" / "activities.yaml"

# Prompt keywords shorter than this are ignored for activity detection
MIN_KEYWORD_LEN = 3


@dataclass(frozen=True)
class ActivityEntry:
    name: str
    intensity: str
    bpm: BPMRange
    aliases: Tuple[str, ...] = ()

    @property
    def terms(self) -> Tuple[str, ...]:
        """Normalized name followed by normalized aliases."""
        return tuple(t for t in (normalize_text(x) for x in (self.name,) + self.aliases) if t)


@dataclass(frozen=True)
class ActivityTable:
    """
    Static activity x intensity x BPM table plus its keyword vocabularies.

    Attributes:
        entries: Activities in table order (order matters for tie-breaks)
        intensity_keywords: Normalized prompt phrase -> canonical intensity
        intensity_targets: Canonical intensity -> accepted entry intensity labels
        stop_words: Normalized words ignored for activity detection
    """
    entries: Tuple[ActivityEntry, ...]
    intensity_keywords: Mapping[str, str]
    intensity_targets: Mapping[str, FrozenSet[str]]
    stop_words: FrozenSet[str]

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ActivityTable":
        entries = []
        for i, raw in enumerate(data.get("activities") or []):
            try:
                low, high = raw["bpm"]
                entries.append(ActivityEntry(
                    name=str(raw["name"]).strip(),
                    intensity=normalize_text(raw["intensity"]),
                    bpm=BPMRange(float(low), float(high)),
                    aliases=tuple(str(a) for a in raw.get("aliases") or ()),
                ))
            except (KeyError, TypeError, ValueError) as e:
                raise ValueError(f"Invalid activity entry #{i}: {raw!r}") from e

        keywords = {
            normalize_text(k): normalize_text(v)
            for k, v in (data.get("intensity_keywords") or {}).items()
        }
        targets = {
            normalize_text(k): frozenset(normalize_text(x) for x in (v or ()))
            for k, v in (data.get("intensity_targets") or {}).items()
        }
        stop_words = frozenset(normalize_text(w) for w in data.get("stop_words") or ())

        return cls(
            entries=tuple(entries),
            intensity_keywords=MappingProxyType(keywords),
            intensity_targets=MappingProxyType(targets),
            stop_words=stop_words,
        )

    @classmethod
    def from_yaml(cls, path) -> "ActivityTable":
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Activity table not found: {path}")
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        table = cls.from_dict(data)
        logger.debug(f"Loaded {len(table.entries)} activity entries from {path}")
        return table

    @classmethod
    def load_default(cls) -> "ActivityTable":
        """Load the table packaged with prompt_playlist."""
        return cls.from_yaml(DEFAULT_TABLE_PATH)

    def targets_for(self, intensity: Optional[str]) -> FrozenSet[str]:
        """Entry intensity labels accepted for a canonical intensity phrase."""
        if not intensity:
            return frozenset()
        key = normalize_text(intensity)
        return self.intensity_targets.get(key, frozenset({key}))


def detect_intensity(prompt: str, table: ActivityTable) -> Optional[str]:
    """
    Return the canonical intensity named in the prompt, or None.

    Longer phrases are tried first so "very high" wins over "high".
    """
    text = normalize_text(prompt)
    if not text:
        return None
    for phrase in sorted(table.intensity_keywords, key=len, reverse=True):
        if contains_phrase(text, phrase):
            return table.intensity_keywords[phrase]
    return None


def prompt_keywords(prompt: str, table: ActivityTable) -> List[str]:
    """
    Words of at least three characters that are neither stop words nor genre
    words, so "rap" or "pop" never select an activity by themselves.
    """
    return [
        w for w in tokenize(prompt, MIN_KEYWORD_LEN)
        if w not in table.stop_words and w not in GENRE_WORDS
    ]


def _entry_matches(entry: ActivityEntry, text: str, keywords: List[str]) -> bool:
    for term in entry.terms:
        # (a) full activity name appears in the prompt
        if term in text:
            return True
        # (b) a prompt keyword appears inside the activity name
        if any(k in term for k in keywords):
            return True
        # (c) any word of the activity name appears in the prompt
        if any(len(w) >= MIN_KEYWORD_LEN and w in text for w in term.split()):
            return True
    return False


def find_matching_activities(prompt: str, table: ActivityTable) -> List[ActivityEntry]:
    """All table entries the prompt refers to, in table order."""
    text = normalize_text(prompt)
    if not text:
        return []
    keywords = prompt_keywords(text, table)
    return [e for e in table.entries if _entry_matches(e, text, keywords)]


def pick_activity(
    matches: List[ActivityEntry],
    intensity: Optional[str],
    table: ActivityTable,
) -> Optional[ActivityEntry]:
    """Prefer the first match whose intensity fits; otherwise the first match."""
    if not matches:
        return None
    targets = table.targets_for(intensity)
    if targets:
        for entry in matches:
            if entry.intensity in targets:
                return entry
    return matches[0]


def resolve_bpm(activity: Optional[str], intensity: Optional[str], table: ActivityTable) -> Optional[BPMRange]:
    """
    Look up the BPM range for an activity label.

    Entries whose name overlaps the activity in either direction are
    candidates. With several candidates and an intensity, keep the ones whose
    intensity label is in that intensity's target set. Returns None when
    nothing matches or the intensity filter leaves no candidates.
    """
    wanted = normalize_text(activity)
    if not wanted:
        return None

    candidates = [
        e for e in table.entries
        if any(wanted in term or term in wanted for term in e.terms)
    ]
    if not candidates:
        return None

    if len(candidates) > 1 and intensity:
        targets = table.targets_for(intensity)
        candidates = [e for e in candidates if e.intensity in targets]
        if not candidates:
            logger.debug(f"No '{activity}' entry with intensity '{intensity}'")
            return None

    return candidates[0].bpm
