from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class TrackCountPolicy:
    """Duration -> track count conversion."""
    average_track_minutes: float = 3.5
    min_tracks: int = 10
    max_tracks: int = 20
    default_duration_minutes: int = 20
    edit_default_tracks: int = 10


@dataclass(frozen=True)
class RankingWeights:
    genre_match: float = 10.0
    artist_match: float = 10.0
    has_genres: float = 2.0


@dataclass(frozen=True)
class LLMSettings:
    model: str = "gpt-4o-mini"
    temperature: float = 0.7
    timeout_seconds: float = 30.0


@dataclass(frozen=True)
class PipelineConfig:
    track_count: TrackCountPolicy = field(default_factory=TrackCountPolicy)
    ranking: RankingWeights = field(default_factory=RankingWeights)
    llm: LLMSettings = field(default_factory=LLMSettings)
    pool_cap: int = 300
    top_n: int = 250
    relaxed_retry: bool = True


def default_pipeline_config(overrides: Optional[dict] = None) -> PipelineConfig:
    """
    Build a PipelineConfig from defaults plus an optional config.yaml section.

    Args:
        overrides: Dict shaped like the ``pipeline:`` section of config.yaml,
            with optional ``track_count``, ``ranking``, ``llm`` sub-dicts and
            top-level ``pool_cap``, ``top_n``, ``relaxed_retry`` keys.
    """
    if overrides is None:
        overrides = {}
    track_count = overrides.get("track_count", {}) or {}
    ranking = overrides.get("ranking", {}) or {}
    llm = overrides.get("llm", {}) or {}

    defaults = TrackCountPolicy()
    policy = TrackCountPolicy(
        average_track_minutes=float(track_count.get("average_track_minutes", defaults.average_track_minutes)),
        min_tracks=int(track_count.get("min_tracks", defaults.min_tracks)),
        max_tracks=int(track_count.get("max_tracks", defaults.max_tracks)),
        default_duration_minutes=int(track_count.get("default_duration_minutes", defaults.default_duration_minutes)),
        edit_default_tracks=int(track_count.get("edit_default_tracks", defaults.edit_default_tracks)),
    )
    if policy.average_track_minutes <= 0:
        raise ValueError("track_count.average_track_minutes must be positive")
    if not 1 <= policy.min_tracks <= policy.max_tracks:
        raise ValueError(
            f"track_count bounds invalid: min_tracks={policy.min_tracks} max_tracks={policy.max_tracks}"
        )

    weights_defaults = RankingWeights()
    weights = RankingWeights(
        genre_match=float(ranking.get("genre_match", weights_defaults.genre_match)),
        artist_match=float(ranking.get("artist_match", weights_defaults.artist_match)),
        has_genres=float(ranking.get("has_genres", weights_defaults.has_genres)),
    )

    llm_defaults = LLMSettings()
    llm_settings = LLMSettings(
        model=str(llm.get("model", llm_defaults.model)),
        temperature=float(llm.get("temperature", llm_defaults.temperature)),
        timeout_seconds=float(llm.get("timeout_seconds", llm_defaults.timeout_seconds)),
    )

    pool_cap = int(overrides.get("pool_cap", 300))
    top_n = int(overrides.get("top_n", 250))
    if pool_cap <= 0 or top_n <= 0:
        raise ValueError("pool_cap and top_n must be positive")

    return PipelineConfig(
        track_count=policy,
        ranking=weights,
        llm=llm_settings,
        pool_cap=pool_cap,
        top_n=min(top_n, pool_cap),
        relaxed_retry=bool(overrides.get("relaxed_retry", True)),
    )
