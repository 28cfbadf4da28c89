"""
Playlist generation orchestrator.

prompt -> intent extraction -> filter/rank -> one LLM selection -> reconcile.
A failed selection (provider error, malformed answer, nothing reconciled) is
retried once with the genre/artist pre-filter disabled, then surfaced.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .catalog import CatalogStore, catalog_artists
from .config import PipelineConfig
from .errors import CatalogEmptyError, PipelineError, ReconciliationEmptyError, RetryableSelectionError
from .intent.activity import ActivityTable
from .intent.duration import clamp_track_count
from .intent.extractor import IntentExtractor
from .intent.validator import validate_prompt
from .logging_utils import RunSummary, format_count, run_context, stage_timer, truncate_list
from .models import (
    CatalogTrack,
    MatchOutcome,
    PlaylistRequest,
    PlaylistResult,
    ReconcileResult,
    SelectionResult,
    ValidationResult,
)
from .selection.delegate import CompletionClient, SelectionDelegate
from .selection.filtering import FilterResult, filter_and_rank
from .selection.reconcile import CatalogReconciler

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Attempt:
    pool: FilterResult
    selection: SelectionResult
    reconciled: ReconcileResult


class PlaylistPipeline:
    """
    Generates playlists from free-text prompts.

    All collaborators are injected; the pipeline holds no mutable state
    between requests.

    Args:
        catalog_store: Source of catalog tracks (read once per request)
        completion_client: LLM collaborator with ``complete(...)``
        activity_table: Activity/intensity reference data
        config: Pipeline settings (defaults if omitted)
    """

    def __init__(
        self,
        catalog_store: CatalogStore,
        completion_client: CompletionClient,
        activity_table: Optional[ActivityTable] = None,
        config: Optional[PipelineConfig] = None,
    ):
        self.catalog_store = catalog_store
        self.config = config or PipelineConfig()
        self.activity_table = activity_table or ActivityTable.load_default()
        self.extractor = IntentExtractor(self.activity_table, self.config.track_count)
        self.delegate = SelectionDelegate(completion_client)

    def validate(self, prompt: str) -> ValidationResult:
        return validate_prompt(prompt, self.activity_table)

    def resolve_track_count(
        self,
        derived: int,
        is_edit: bool = False,
        explicit_track_count: Optional[int] = None,
    ) -> int:
        """
        Track count actually requested from the LLM.

        Edits use the explicit count (or the edit default) within [1, max];
        explicit counts on new playlists stay within [min, max].
        """
        policy = self.config.track_count
        if is_edit:
            count = explicit_track_count or policy.edit_default_tracks
            return clamp_track_count(count, 1, policy.max_tracks)
        if explicit_track_count:
            return clamp_track_count(explicit_track_count, policy.min_tracks, policy.max_tracks)
        return derived

    def build_request(
        self,
        prompt: str,
        catalog: Sequence[CatalogTrack],
        is_edit: bool = False,
        explicit_track_count: Optional[int] = None,
    ) -> PlaylistRequest:
        request = self.extractor.extract(prompt, known_artists=catalog_artists(catalog))
        count = self.resolve_track_count(request.track_count, is_edit, explicit_track_count)
        if count != request.track_count:
            logger.debug(f"Track count {request.track_count} -> {count} (edit={is_edit}, explicit={explicit_track_count})")
            request = request.with_track_count(count)
        return request

    def _load_catalog(self) -> List[CatalogTrack]:
        catalog = self.catalog_store.list_all_tracks()
        if not catalog:
            raise CatalogEmptyError("The catalog has no tracks to choose from")
        return catalog

    def preview(
        self,
        prompt: str,
        is_edit: bool = False,
        explicit_track_count: Optional[int] = None,
    ) -> Tuple[PlaylistRequest, FilterResult]:
        """Extraction plus filtering only; never contacts the LLM."""
        catalog = self._load_catalog()
        request = self.build_request(prompt, catalog, is_edit, explicit_track_count)
        pool = self._rank(catalog, request, use_filters=True)
        return request, pool

    def _rank(self, catalog: Sequence[CatalogTrack], request: PlaylistRequest, use_filters: bool) -> FilterResult:
        with stage_timer("Candidate filtering", logger):
            pool = filter_and_rank(
                catalog,
                request,
                pool_cap=self.config.pool_cap,
                top_n=self.config.top_n,
                weights=self.config.ranking,
                use_filters=use_filters,
            )
        if not pool.candidates:
            raise CatalogEmptyError("No candidate tracks available after filtering")
        return pool

    def _attempt(
        self,
        catalog: Sequence[CatalogTrack],
        request: PlaylistRequest,
        use_filters: bool,
        summary: RunSummary,
    ) -> _Attempt:
        pool = self._rank(catalog, request, use_filters)

        with stage_timer("LLM selection", logger):
            summary.increment("llm_calls")
            selection = self.delegate.select(pool.tracks, request).unwrap()

        with stage_timer("Reconciliation", logger):
            reconciled = CatalogReconciler(catalog).reconcile(selection.picks)
        if not reconciled.tracks:
            raise ReconciliationEmptyError(
                f"None of the {len(selection.picks)} selected tracks matched the catalog"
            )
        return _Attempt(pool=pool, selection=selection, reconciled=reconciled)

    def generate_playlist(
        self,
        prompt: str,
        is_edit: bool = False,
        explicit_track_count: Optional[int] = None,
    ) -> PlaylistResult:
        """
        Generate one playlist.

        Raises:
            CatalogEmptyError: no tracks at all (the LLM is never called)
            RetryableSelectionError: selection still failing after the relaxed retry
        """
        with run_context():
            summary = RunSummary("Playlist generation", logger)

            catalog = self._load_catalog()
            with stage_timer("Intent extraction", logger):
                request = self.build_request(prompt, catalog, is_edit, explicit_track_count)
            logger.info(
                f"Request: {format_count(request.track_count, 'track')}, activity={request.activity}, "
                f"intensity={request.intensity}, genre={request.genre}, "
                f"artists={truncate_list(list(request.preferred_artists))}"
            )

            summary.add("tracks_requested", request.track_count)
            try:
                result = self._run_attempts(catalog, request, summary)
            except PipelineError as e:
                summary.add("failed", e.reason)
                raise
            finally:
                summary.log()
            return result

    def _run_attempts(self, catalog: Sequence[CatalogTrack], request: PlaylistRequest, summary: RunSummary) -> PlaylistResult:
        retried = False
        try:
            attempt = self._attempt(catalog, request, use_filters=True, summary=summary)
        except RetryableSelectionError as e:
            if not self.config.relaxed_retry:
                raise
            logger.warning(f"Selection failed ({e.reason}); retrying once without genre/artist filters")
            retried = True
            summary.add("retried", "True")
            attempt = self._attempt(catalog, request, use_filters=False, summary=summary)

        tracks = attempt.reconciled.tracks
        stats: Dict[str, Any] = dict(attempt.pool.stats)
        stats.update(
            retried=retried,
            picks=len(attempt.selection.picks),
            delivered=len(tracks),
        )
        result = PlaylistResult(
            playlist_name=attempt.selection.playlist_name,
            description=attempt.selection.description,
            tracks=tracks,
            detected_genre=request.genre,
            request=request,
            outcomes=attempt.reconciled.outcomes,
            relaxed=retried or attempt.pool.relaxed,
            stats=stats,
        )

        if result.shortfall:
            logger.warning(f"Delivered {len(tracks)} of {request.track_count} requested tracks")

        summary.add("tracks_delivered", len(tracks))
        summary.add("candidate_pool", len(attempt.pool))
        summary.add("relaxed", str(result.relaxed))
        summary.add("exact_matches", attempt.reconciled.count(MatchOutcome.EXACT))
        summary.add("partial_matches", attempt.reconciled.count(MatchOutcome.PARTIAL))
        summary.add("not_found", attempt.reconciled.count(MatchOutcome.NOT_FOUND))
        return result
