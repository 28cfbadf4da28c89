"""
Duration parsing and duration -> track count conversion.
"""
import math
import re
from typing import Optional

from ..config import TrackCountPolicy

_HOUR_UNITS = r"(?:hours?|hrs?|horas?|h)"
_MINUTE_UNITS = r"(?:minutes?|minutos?|mins?)"
_APPROX = r"(?:approx(?:imately)?|aprox(?:imadamente)?)"

# Ordered: first pattern that matches wins.
_HOURS_AND_MINUTES_RE = re.compile(
    rf"(\d+)\s*{_HOUR_UNITS}(?![a-z])\s*(?:and|y|,)?\s*(\d+)\s*{_MINUTE_UNITS}\b"
)
_HOURS_RE = re.compile(
    rf"(\d+)\s*{_HOUR_UNITS}(?![a-z])(?!\s*(?:and|y|,)?\s*\d+\s*{_MINUTE_UNITS}\b)"
)
_APPROX_MINUTES_RE = re.compile(rf"{_APPROX}\.?\s*(\d+)\s*{_MINUTE_UNITS}\b")
_MINUTES_RE = re.compile(rf"(\d+)\s*{_MINUTE_UNITS}\b")

# How far back to look for an "approx" marker before a bare minutes match
_APPROX_LOOKBEHIND_CHARS = 20
_APPROX_MARKER_RE = re.compile(r"aprox|approx")


def parse_duration_minutes(prompt: str) -> Optional[int]:
    """
    Extract a playlist duration in minutes from free text.

    Understands "1 hour 30 minutes", "2 horas y 15 minutos", "1h", "approx 45
    min" and "30 minutes". Returns None when no duration (or a zero duration)
    is present.
    """
    text = (prompt or "").lower()
    if not text:
        return None

    match = _HOURS_AND_MINUTES_RE.search(text)
    if match:
        return int(match.group(1)) * 60 + int(match.group(2)) or None

    match = _HOURS_RE.search(text)
    if match:
        return int(match.group(1)) * 60 or None

    match = _APPROX_MINUTES_RE.search(text)
    if match:
        return int(match.group(1)) or None

    for match in _MINUTES_RE.finditer(text):
        preceding = text[max(0, match.start() - _APPROX_LOOKBEHIND_CHARS):match.start()]
        if _APPROX_MARKER_RE.search(preceding):
            continue
        return int(match.group(1)) or None

    return None


def has_duration(prompt: str) -> bool:
    return parse_duration_minutes(prompt) is not None


def track_count_for_duration(minutes: float, policy: Optional[TrackCountPolicy] = None) -> int:
    """ceil(minutes / average track length), clamped to [min_tracks, max_tracks]."""
    policy = policy or TrackCountPolicy()
    if minutes <= 0:
        return policy.min_tracks
    raw = math.ceil(minutes / policy.average_track_minutes)
    return max(policy.min_tracks, min(policy.max_tracks, raw))


def clamp_track_count(count: int, low: int, high: int) -> int:
    return max(low, min(high, int(count)))
