"""
Pydantic models for the structured answer of the selection tool call.

Top-level fields are strict (missing playlistName / tracks is a schema
error); individual track entries are lenient so one bad pick does not sink
the whole answer. Bad picks surface later as invalid reconcile outcomes.
"""
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..models import SelectionPick, SelectionResult
from .prompts import MAX_DESCRIPTION_CHARS, MAX_PLAYLIST_NAME_CHARS


class ToolTrackPick(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    track_name: Optional[str] = Field(default=None, alias="trackName")
    artist_name: Optional[str] = Field(default=None, alias="artistName")
    reason: Optional[str] = None

    @field_validator("track_name", "artist_name", "reason", mode="before")
    @classmethod
    def _non_string_to_none(cls, v: Any) -> Optional[str]:
        return v if isinstance(v, str) else None


class ToolSelection(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    playlist_name: str = Field(alias="playlistName", min_length=1)
    description: Optional[str] = None
    tracks: List[Optional[ToolTrackPick]] = Field(alias="tracks")

    @field_validator("playlist_name")
    @classmethod
    def _strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("playlistName is blank")
        return v

    @field_validator("description", mode="before")
    @classmethod
    def _description_text(cls, v: Any) -> Optional[str]:
        return v if isinstance(v, str) else None

    @field_validator("tracks", mode="before")
    @classmethod
    def _drop_non_objects(cls, v: Any) -> Any:
        if not isinstance(v, list):
            return v
        return [item if isinstance(item, dict) else None for item in v]

    def to_result(self, track_count: int) -> SelectionResult:
        """
        Convert to a SelectionResult, keeping at most ``track_count`` picks.

        Missing descriptions default to "Playlist: <name>".
        """
        # Non-object entries become blank picks so reconciliation reports them
        picks = tuple(
            SelectionPick(
                track_name=(p.track_name or "").strip() if p else "",
                artist_name=(p.artist_name or "").strip() if p else "",
                reason=p.reason if p else None,
            )
            for p in self.tracks
        )
        name = self.playlist_name[:MAX_PLAYLIST_NAME_CHARS]
        description = (self.description or "").strip() or f"Playlist: {name}"
        return SelectionResult(
            playlist_name=name,
            description=description[:MAX_DESCRIPTION_CHARS],
            picks=picks[:track_count],
        )
