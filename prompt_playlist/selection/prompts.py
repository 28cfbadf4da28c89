"""
Prompt construction for LLM track selection.

The candidate pool is serialized one line per track to keep the payload
small: ``N. name|artist|genre1,genre2``.
"""
from typing import Any, Dict, Sequence

from ..models import CatalogTrack, PlaylistRequest

TOOL_NAME = "select_playlist_tracks"
MAX_PLAYLIST_NAME_CHARS = 50
MAX_DESCRIPTION_CHARS = 200
NO_GENRE = "-"

SYSTEM_INSTRUCTION = """You are a music curator for a record label building playlists from the label's own catalog.

Rules:
- Only pick tracks that appear EXACTLY in the supplied catalog.
- Copy every track name and artist name verbatim from the catalog line; never translate, shorten or correct them.
- Never invent tracks, artists or versions that are not in the catalog.
- Spread exposure across the label's artists: no more than 2-3 tracks per artist.
- Give the playlist a shape: an opening, a development and a close.
- When a genre is requested, prioritise it while keeping some variety.
- Always answer by calling the select_playlist_tracks function."""


def format_catalog_line(index: int, track: CatalogTrack) -> str:
    genres = ",".join(track.genres) if track.genres else NO_GENRE
    return f"{index}. {track.name}|{track.primary_artist}|{genres}"


def format_catalog(tracks: Sequence[CatalogTrack]) -> str:
    """Compact one-line-per-track catalog listing (1-based numbering)."""
    return "\n".join(format_catalog_line(i, t) for i, t in enumerate(tracks, 1))


def build_user_payload(request: PlaylistRequest, tracks: Sequence[CatalogTrack]) -> str:
    """
    User message for one selection call.

    Activity, intensity and BPM are advisory context for the model; they are
    not enforced against the catalog.
    """
    lines = [f'Listener request: "{request.raw_prompt}"', ""]

    context = [f"- Duration: about {request.duration_minutes} minutes"]
    if request.activity:
        context.append(f"- Activity: {request.activity}")
    if request.intensity:
        context.append(f"- Intensity: {request.intensity}")
    if request.bpm_range:
        context.append(
            f"- Suggested tempo: {request.bpm_range.min:.0f}-{request.bpm_range.max:.0f} BPM"
        )
    if request.genre:
        context.append(f"- Requested genre: {request.genre} (prioritise it, keep some variety)")
    if request.preferred_artists:
        names = ", ".join(request.preferred_artists)
        context.append(
            f"- Preferred artists: {names}. Include several of their tracks, "
            "but still spread the remaining picks across other artists."
        )
    lines.append("Context:")
    lines.extend(context)
    lines.append("")

    lines.append(f"Catalog ({len(tracks)} tracks, format: number. name|artist|genres):")
    lines.append(format_catalog(tracks))
    lines.append("")

    lines.append(
        f"Select EXACTLY {request.track_count} tracks from the catalog above. "
        "Copy names and artists exactly as written. Do not use any track outside this list."
    )
    lines.append(
        f"Also give the playlist a name (max {MAX_PLAYLIST_NAME_CHARS} characters) "
        f"and a short description (max {MAX_DESCRIPTION_CHARS} characters)."
    )
    return "\n".join(lines)


def build_tool_schema(track_count: int) -> Dict[str, Any]:
    """Function-calling schema the model is forced to answer with."""
    return {
        "name": TOOL_NAME,
        "description": f"Return the {track_count} tracks selected from the catalog plus playlist metadata.",
        "parameters": {
            "type": "object",
            "properties": {
                "playlistName": {
                    "type": "string",
                    "description": f"Creative playlist name (max {MAX_PLAYLIST_NAME_CHARS} characters)",
                },
                "description": {
                    "type": "string",
                    "description": f"Short playlist description (max {MAX_DESCRIPTION_CHARS} characters)",
                },
                "tracks": {
                    "type": "array",
                    "description": f"Exactly {track_count} tracks copied verbatim from the catalog",
                    "items": {
                        "type": "object",
                        "properties": {
                            "trackName": {"type": "string", "description": "Exact track name"},
                            "artistName": {"type": "string", "description": "Exact artist name"},
                            "reason": {"type": "string", "description": "Why this track fits"},
                        },
                        "required": ["trackName", "artistName"],
                    },
                },
            },
            "required": ["playlistName", "description", "tracks"],
        },
    }
