"""
Reconcile LLM picks against the authoritative catalog.

Picks are matched in order: exact (normalized name and artist), then partial
(name containment plus artist overlap). Unmatched and invalid picks are
skipped and recorded; tracks are emitted at most once.
"""
import logging
from typing import Dict, List, Optional, Sequence, Tuple

from ..logging_utils import format_count
from ..models import (
    CatalogTrack,
    MatchOutcome,
    PickOutcome,
    ReconcileResult,
    SelectionPick,
)
from ..string_utils import names_overlap, normalize_text

logger = logging.getLogger(__name__)


class CatalogReconciler:
    """
    Resolves (name, artist) picks to catalog tracks.

    Args:
        catalog: Tracks the picks may resolve to; nothing outside it is emitted
    """

    def __init__(self, catalog: Sequence[CatalogTrack]):
        self.catalog = list(catalog)
        self._by_name: Dict[str, List[CatalogTrack]] = {}
        for track in self.catalog:
            self._by_name.setdefault(normalize_text(track.name), []).append(track)

    def _exact_match(self, name: str, artist: str) -> Optional[CatalogTrack]:
        for track in self._by_name.get(name, ()):
            if any(normalize_text(a) == artist for a in track.artists):
                return track
        return None

    def _partial_match(self, name: str, artist: str) -> Optional[CatalogTrack]:
        for track in self.catalog:
            if not names_overlap(track.name, name):
                continue
            if any(names_overlap(a, artist) for a in track.artists):
                return track
        return None

    def match(self, pick: SelectionPick) -> Tuple[Optional[CatalogTrack], MatchOutcome]:
        """Resolve one pick without deduplication."""
        if not pick.is_valid:
            return None, MatchOutcome.INVALID
        name = normalize_text(pick.track_name)
        artist = normalize_text(pick.artist_name)

        track = self._exact_match(name, artist)
        if track is not None:
            return track, MatchOutcome.EXACT
        track = self._partial_match(name, artist)
        if track is not None:
            return track, MatchOutcome.PARTIAL
        return None, MatchOutcome.NOT_FOUND

    def reconcile(self, picks: Sequence[SelectionPick]) -> ReconcileResult:
        tracks: List[CatalogTrack] = []
        outcomes: List[PickOutcome] = []
        emitted = set()

        for pick in picks:
            track, outcome = self.match(pick)

            if outcome is MatchOutcome.INVALID:
                logger.warning(f"Invalid pick skipped: {pick.track_name!r} by {pick.artist_name!r}")
            elif outcome is MatchOutcome.NOT_FOUND:
                logger.warning(f"Not in catalog: '{pick.track_name}' - {pick.artist_name}")
            elif track.external_id in emitted:
                outcome = MatchOutcome.DUPLICATE
                logger.debug(f"Duplicate pick skipped: '{track.name}' ({track.external_id})")
            else:
                emitted.add(track.external_id)
                tracks.append(track)
                if outcome is MatchOutcome.PARTIAL:
                    logger.debug(f"Partial match: '{pick.track_name}' -> '{track.name}' - {track.primary_artist}")
                else:
                    logger.debug(f"Exact match: '{track.name}' - {track.primary_artist}")

            outcomes.append(PickOutcome(
                pick=pick,
                outcome=outcome,
                track_id=track.external_id if track is not None else None,
            ))

        result = ReconcileResult(tracks=tuple(tracks), outcomes=tuple(outcomes))
        logger.info(
            f"Reconciled {format_count(len(tracks), 'track')} from {format_count(len(picks), 'pick')} "
            f"(exact={result.count(MatchOutcome.EXACT)}, partial={result.count(MatchOutcome.PARTIAL)}, "
            f"not_found={result.count(MatchOutcome.NOT_FOUND)}, duplicate={result.count(MatchOutcome.DUPLICATE)}, "
            f"invalid={result.count(MatchOutcome.INVALID)})"
        )
        return result


def reconcile(picks: Sequence[SelectionPick], catalog: Sequence[CatalogTrack]) -> ReconcileResult:
    """Convenience wrapper around CatalogReconciler."""
    return CatalogReconciler(catalog).reconcile(picks)
