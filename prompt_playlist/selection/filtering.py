"""
Candidate filtering and ranking.

Narrows the catalog to a bounded, relevance-ordered candidate pool before it
is serialized into the LLM payload:
- Hard pre-filter on requested genre / preferred artists (tolerant matching)
- Automatic fallback to the unfiltered catalog if the filter empties the pool
- Pool cap, then score-and-sort, then top-N slice
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

import numpy as np

from ..config import RankingWeights
from ..models import CatalogTrack, PlaylistRequest, ScoredCandidate
from ..string_utils import MatchStrictness, artist_matches, genre_matches

logger = logging.getLogger(__name__)

DEFAULT_POOL_CAP = 300
DEFAULT_TOP_N = 250


@dataclass(frozen=True)
class FilterResult:
    """
    Result of filter_and_rank with diagnostics.

    Attributes:
        candidates: Scored tracks, best first (length <= pool cap)
        stats: Diagnostic counts (catalog size, prefiltered, relaxed, ...)
    """
    candidates: List[ScoredCandidate]
    stats: Dict[str, Any] = field(default_factory=dict)

    @property
    def tracks(self) -> List[CatalogTrack]:
        return [c.track for c in self.candidates]

    @property
    def relaxed(self) -> bool:
        return bool(self.stats.get("relaxed"))

    def __len__(self) -> int:
        return len(self.candidates)


def track_matches_genre(track: CatalogTrack, genre: Optional[str]) -> bool:
    return genre_matches(track.genres, genre, MatchStrictness.SUBSTRING)


def track_matches_artists(track: CatalogTrack, artists: Sequence[str]) -> bool:
    return artist_matches(track.artists, artists)


def prefilter(
    catalog: Sequence[CatalogTrack],
    request: PlaylistRequest,
) -> List[CatalogTrack]:
    """
    Keep tracks matching the requested genre and preferred artists.

    Each filter applies only when its request field is set.
    """
    tracks = list(catalog)
    if request.genre:
        tracks = [t for t in tracks if track_matches_genre(t, request.genre)]
        logger.debug(f"Genre filter '{request.genre}': {len(catalog)} -> {len(tracks)} tracks")
    if request.preferred_artists:
        before = len(tracks)
        tracks = [t for t in tracks if track_matches_artists(t, request.preferred_artists)]
        logger.debug(f"Artist filter {list(request.preferred_artists)}: {before} -> {len(tracks)} tracks")
    return tracks


def score_tracks(
    tracks: Sequence[CatalogTrack],
    request: PlaylistRequest,
    weights: Optional[RankingWeights] = None,
) -> np.ndarray:
    """Relevance score per track (genre match, preferred artist, has genre tags)."""
    weights = weights or RankingWeights()
    scores = np.zeros(len(tracks), dtype=float)
    for i, track in enumerate(tracks):
        if request.genre and track_matches_genre(track, request.genre):
            scores[i] += weights.genre_match
        if request.preferred_artists and track_matches_artists(track, request.preferred_artists):
            scores[i] += weights.artist_match
        if track.genres:
            scores[i] += weights.has_genres
    return scores


def filter_and_rank(
    catalog: Sequence[CatalogTrack],
    request: PlaylistRequest,
    pool_cap: int = DEFAULT_POOL_CAP,
    top_n: int = DEFAULT_TOP_N,
    weights: Optional[RankingWeights] = None,
    use_filters: bool = True,
) -> FilterResult:
    """
    Build the candidate pool for one request.

    Args:
        catalog: Full catalog, in store order
        request: Structured request (genre / preferred_artists drive filtering)
        pool_cap: Max tracks considered after pre-filtering
        top_n: Max tracks returned after ranking (never above pool_cap)
        weights: Ranking weights
        use_filters: False skips the hard pre-filter entirely

    Returns:
        FilterResult; empty only when the catalog itself is empty
    """
    stats: Dict[str, Any] = {
        "catalog_size": len(catalog),
        "filters_active": bool(use_filters and request.has_filters),
        "relaxed": False,
    }
    if not catalog:
        logger.warning("Catalog is empty; no candidates to rank")
        stats.update(prefiltered=0, pool_size=0)
        return FilterResult(candidates=[], stats=stats)

    tracks = prefilter(catalog, request) if stats["filters_active"] else list(catalog)
    if not tracks and stats["filters_active"]:
        logger.info(
            f"Filters (genre={request.genre}, artists={list(request.preferred_artists)}) "
            "matched nothing; using full catalog"
        )
        tracks = list(catalog)
        stats["relaxed"] = True
    stats["prefiltered"] = len(tracks)

    pool = tracks[:pool_cap]
    if len(tracks) > pool_cap:
        logger.debug(f"Pool capped: {len(tracks)} -> {pool_cap} tracks")

    scores = score_tracks(pool, request, weights)
    # Stable sort keeps catalog order among equal scores
    order = np.argsort(-scores, kind="stable")[:min(top_n, pool_cap)]
    candidates = [ScoredCandidate(track=pool[i], score=float(scores[i])) for i in order]

    stats["pool_size"] = len(candidates)
    stats["top_score"] = float(scores[order[0]]) if len(order) else 0.0
    logger.info(
        f"Candidate pool: {len(candidates)} of {len(catalog)} tracks "
        f"(prefiltered={len(tracks)}, relaxed={stats['relaxed']})"
    )
    return FilterResult(candidates=candidates, stats=stats)
