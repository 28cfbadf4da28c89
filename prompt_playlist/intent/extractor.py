"""
Intent extraction: free-text prompt -> PlaylistRequest.

Pure and deterministic given the activity table; never raises on odd input.
"""
import logging
from typing import Iterable, Optional

from ..config import TrackCountPolicy
from ..models import PlaylistRequest
from .activity import ActivityTable, detect_intensity, find_matching_activities, pick_activity
from .artists import detect_artists
from .duration import parse_duration_minutes, track_count_for_duration
from .genre import detect_genre

logger = logging.getLogger(__name__)


class IntentExtractor:
    """
    Turns prompts into structured requests.

    Args:
        table: Activity/intensity reference table
        policy: Duration -> track count settings
    """

    def __init__(self, table: ActivityTable, policy: Optional[TrackCountPolicy] = None):
        self.table = table
        self.policy = policy or TrackCountPolicy()

    def extract(self, prompt: str, known_artists: Optional[Iterable[str]] = None) -> PlaylistRequest:
        prompt = prompt or ""

        minutes = parse_duration_minutes(prompt)
        if minutes is None:
            minutes = self.policy.default_duration_minutes
        track_count = track_count_for_duration(minutes, self.policy)

        intensity = detect_intensity(prompt, self.table)
        entry = pick_activity(find_matching_activities(prompt, self.table), intensity, self.table)
        activity = entry.name if entry else None
        bpm_range = entry.bpm if entry else None

        # Genre is detected independently of activity; both may be set.
        genre = detect_genre(prompt)
        artists = tuple(detect_artists(prompt, known_artists or ()))

        request = PlaylistRequest(
            raw_prompt=prompt,
            duration_minutes=minutes,
            track_count=track_count,
            activity=activity,
            intensity=intensity,
            genre=genre,
            preferred_artists=artists,
            bpm_range=bpm_range,
        )
        logger.debug(
            f"Extracted request: minutes={minutes} tracks={track_count} activity={activity} "
            f"intensity={intensity} genre={genre} artists={list(artists)}"
        )
        return request
