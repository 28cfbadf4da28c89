from .activity import (
    ActivityEntry,
    ActivityTable,
    detect_intensity,
    find_matching_activities,
    resolve_bpm,
)
from .artists import detect_artists
from .duration import parse_duration_minutes, track_count_for_duration
from .extractor import IntentExtractor
from .genre import SUPPORTED_GENRES, detect_genre
from .validator import validate_prompt

__all__ = [
    "ActivityEntry",
    "ActivityTable",
    "detect_intensity",
    "find_matching_activities",
    "resolve_bpm",
    "detect_artists",
    "parse_duration_minutes",
    "track_count_for_duration",
    "IntentExtractor",
    "SUPPORTED_GENRES",
    "detect_genre",
    "validate_prompt",
]
