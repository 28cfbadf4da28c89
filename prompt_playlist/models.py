"""
Data model for prompt-to-playlist generation.

CatalogTrack rows are owned by the catalog store and never mutated here.
Everything else is created per request and discarded afterwards.
"""
from __future__ import annotations

import dataclasses
import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from .errors import MalformedResponseError, ProviderUnavailableError

UNKNOWN_ARTIST = "Unknown Artist"
UNKNOWN_ALBUM = "Unknown Album"
DEFAULT_COVER = "/playlist.png"


def _as_str_tuple(value: Any) -> Tuple[str, ...]:
    """Coerce a list-ish column (list, JSON text, comma string, None) to a tuple of strings."""
    if value is None:
        return ()
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return ()
        if text.startswith("["):
            try:
                value = json.loads(text)
            except ValueError:
                value = text.strip("[]").split(",")
        else:
            value = text.split(",")
    return tuple(str(v).strip() for v in value if v is not None and str(v).strip())


@dataclass(frozen=True)
class CatalogTrack:
    """Immutable track record sourced from the catalog store."""
    external_id: str
    name: str
    primary_artist: str
    all_artists: Tuple[str, ...] = ()
    genres: Tuple[str, ...] = ()
    album: Optional[str] = None
    release_date: Optional[str] = None
    duration_ms: Optional[int] = None
    preview_url: Optional[str] = None
    cover_url: Optional[str] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "CatalogTrack":
        """
        Build a track from a catalog row.

        Accepts the label database column names (spotify_id, artist_main,
        artists, ...) as well as this model's own field names.
        """
        external_id = row.get("spotify_id") or row.get("external_id") or row.get("id")
        if not external_id:
            raise ValueError(f"Catalog row has no track id: {dict(row)!r}")

        all_artists = _as_str_tuple(row.get("artists", row.get("all_artists")))
        primary = (row.get("artist_main") or row.get("primary_artist") or "").strip()
        if not primary:
            primary = all_artists[0] if all_artists else UNKNOWN_ARTIST
        if primary not in all_artists and primary != UNKNOWN_ARTIST:
            all_artists = (primary,) + all_artists

        duration = row.get("duration_ms")
        return cls(
            external_id=str(external_id),
            name=str(row.get("name") or "").strip(),
            primary_artist=primary,
            all_artists=all_artists,
            genres=_as_str_tuple(row.get("genres")),
            album=row.get("album") or None,
            release_date=row.get("release_date") or None,
            duration_ms=int(duration) if duration is not None else None,
            preview_url=row.get("preview_url") or None,
            cover_url=row.get("cover_url") or None,
        )

    @property
    def artists(self) -> Tuple[str, ...]:
        """Primary artist followed by every other credited artist."""
        if self.primary_artist in self.all_artists:
            return self.all_artists
        return (self.primary_artist,) + self.all_artists

    @property
    def uri(self) -> str:
        return f"spotify:track:{self.external_id}"

    def to_dict(self) -> Dict[str, Any]:
        """Shape handed to the playlist publishing step."""
        return {
            "id": self.external_id,
            "name": self.name,
            "artist": self.primary_artist,
            "album": self.album or UNKNOWN_ALBUM,
            "image": self.cover_url or DEFAULT_COVER,
            "duration_ms": self.duration_ms or 0,
            "preview_url": self.preview_url,
            "uri": self.uri,
        }


# Reconciled tracks are catalog tracks; reconciliation adds no state of its own.
ReconciledTrack = CatalogTrack


@dataclass(frozen=True)
class BPMRange:
    min: float
    max: float

    def as_list(self) -> List[float]:
        return [self.min, self.max]


@dataclass(frozen=True)
class PlaylistRequest:
    """
    Structured form of a free-text playlist prompt.

    Attributes:
        raw_prompt: Original user text, kept for the LLM context
        duration_minutes: Parsed or defaulted duration
        track_count: Tracks to request from the LLM
        activity: Canonical activity label or None
        intensity: Canonical intensity phrase or None
        genre: One of trap/rock/pop or None
        preferred_artists: Catalog artist names mentioned in the prompt
        bpm_range: Advisory tempo range for the activity
    """
    raw_prompt: str
    duration_minutes: int
    track_count: int
    activity: Optional[str] = None
    intensity: Optional[str] = None
    genre: Optional[str] = None
    preferred_artists: Tuple[str, ...] = ()
    bpm_range: Optional[BPMRange] = None

    @property
    def has_filters(self) -> bool:
        return bool(self.genre or self.preferred_artists)

    def with_track_count(self, track_count: int) -> "PlaylistRequest":
        return dataclasses.replace(self, track_count=track_count)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rawPrompt": self.raw_prompt,
            "durationMinutes": self.duration_minutes,
            "trackCount": self.track_count,
            "activity": self.activity,
            "intensity": self.intensity,
            "genre": self.genre,
            "preferredArtists": list(self.preferred_artists),
            "bpmRange": self.bpm_range.as_list() if self.bpm_range else None,
        }


@dataclass(frozen=True)
class ScoredCandidate:
    track: CatalogTrack
    score: float


@dataclass(frozen=True)
class SelectionPick:
    """One (name, artist) pick as written by the LLM; not yet validated."""
    track_name: str
    artist_name: str
    reason: Optional[str] = None

    @property
    def is_valid(self) -> bool:
        return bool(self.track_name.strip()) and bool(self.artist_name.strip())


@dataclass(frozen=True)
class SelectionResult:
    playlist_name: str
    description: str
    picks: Tuple[SelectionPick, ...] = ()


@dataclass(frozen=True)
class SelectionOk:
    result: SelectionResult
    ok = True

    def unwrap(self) -> SelectionResult:
        return self.result


@dataclass(frozen=True)
class SchemaError:
    """The provider answered but the answer is unusable."""
    details: str
    ok = False

    def unwrap(self) -> SelectionResult:
        raise MalformedResponseError(self.details)


@dataclass(frozen=True)
class TransportError:
    """The provider could not be reached or returned an error status."""
    details: str
    ok = False

    def unwrap(self) -> SelectionResult:
        raise ProviderUnavailableError(self.details)


SelectionOutcome = Union[SelectionOk, SchemaError, TransportError]


class MatchOutcome(Enum):
    EXACT = "exact"
    PARTIAL = "partial"
    NOT_FOUND = "not_found"
    DUPLICATE = "duplicate"
    INVALID = "invalid"


@dataclass(frozen=True)
class PickOutcome:
    pick: SelectionPick
    outcome: MatchOutcome
    track_id: Optional[str] = None


@dataclass(frozen=True)
class ReconcileResult:
    tracks: Tuple[ReconciledTrack, ...]
    outcomes: Tuple[PickOutcome, ...] = ()

    def count(self, outcome: MatchOutcome) -> int:
        return sum(1 for o in self.outcomes if o.outcome is outcome)


@dataclass(frozen=True)
class ValidationResult:
    is_valid: bool
    errors: Tuple[str, ...] = ()
    warnings: Tuple[str, ...] = ()


@dataclass(frozen=True)
class PlaylistResult:
    """Final output of one generation request."""
    playlist_name: str
    description: str
    tracks: Tuple[ReconciledTrack, ...]
    detected_genre: Optional[str]
    request: PlaylistRequest
    outcomes: Tuple[PickOutcome, ...] = ()
    relaxed: bool = False
    stats: Dict[str, Any] = field(default_factory=dict)

    @property
    def shortfall(self) -> int:
        """How many tracks fewer than requested were delivered."""
        return max(self.request.track_count - len(self.tracks), 0)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "playlistName": self.playlist_name,
            "description": self.description,
            "tracks": [t.to_dict() for t in self.tracks],
            "detectedGenre": self.detected_genre,
        }
