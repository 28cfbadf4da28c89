"""
Selection delegate: candidate pool + request -> tagged selection outcome.
"""
import logging
from typing import Any, Dict, Protocol, Sequence

from pydantic import ValidationError

from ..errors import MalformedResponseError, ProviderUnavailableError
from ..models import (
    CatalogTrack,
    PlaylistRequest,
    SchemaError,
    SelectionOk,
    SelectionOutcome,
    TransportError,
)
from .prompts import SYSTEM_INSTRUCTION, build_tool_schema, build_user_payload
from .schema import ToolSelection

logger = logging.getLogger(__name__)


class CompletionClient(Protocol):
    def complete(self, system_instruction: str, user_payload: str, tool_schema: Dict[str, Any]) -> Dict[str, Any]:
        ...


class SelectionDelegate:
    """
    Asks the LLM to curate ``request.track_count`` tracks from the pool.

    Exactly one completion call per ``select``; failures are returned as
    SchemaError / TransportError rather than raised.
    """

    def __init__(self, client: CompletionClient):
        self.client = client

    def select(self, pool: Sequence[CatalogTrack], request: PlaylistRequest) -> SelectionOutcome:
        schema = build_tool_schema(request.track_count)
        payload = build_user_payload(request, pool)

        try:
            arguments = self.client.complete(SYSTEM_INSTRUCTION, payload, schema)
        except ProviderUnavailableError as e:
            return TransportError(e.reason)
        except MalformedResponseError as e:
            return SchemaError(e.reason)

        try:
            parsed = ToolSelection.model_validate(arguments)
        except ValidationError as e:
            logger.warning(f"Selection response failed validation: {e.error_count()} errors")
            return SchemaError(f"Invalid selection response: {e}")

        result = parsed.to_result(request.track_count)
        valid = sum(1 for p in result.picks if p.is_valid)
        if valid == 0:
            return SchemaError("Selection response contained no valid picks")

        if len(parsed.tracks) > request.track_count:
            logger.debug(f"Model over-delivered: {len(parsed.tracks)} picks, kept {request.track_count}")
        elif len(parsed.tracks) < request.track_count:
            logger.info(f"Model under-delivered: {len(parsed.tracks)} of {request.track_count} picks")

        logger.info(f"Selected '{result.playlist_name}' with {len(result.picks)} picks ({valid} valid)")
        return SelectionOk(result)
