import pytest
from pydantic import ValidationError
from conftest import FakeCompletionClient, tool_answer

from prompt_playlist.errors import MalformedResponseError, ProviderUnavailableError
from prompt_playlist.models import BPMRange, PlaylistRequest, SchemaError, SelectionOk, TransportError
from prompt_playlist.selection.delegate import SelectionDelegate
from prompt_playlist.selection.prompts import (
    SYSTEM_INSTRUCTION,
    TOOL_NAME,
    build_tool_schema,
    build_user_payload,
    format_catalog,
)
from prompt_playlist.selection.schema import ToolSelection


def _request(**kwargs):
    defaults = dict(raw_prompt="running, 30 minutes", duration_minutes=30, track_count=3)
    defaults.update(kwargs)
    return PlaylistRequest(**defaults)


class TestPrompts:
    def test_compact_catalog_lines(self, small_catalog):
        lines = format_catalog(small_catalog[:4]).splitlines()
        assert lines[0] == "1. Noche de Trap|Duki|trap latino,urbano"
        assert lines[3] == "4. Sin Etiquetas|Anónimo Band|-"

    def test_payload_states_cardinality_and_context(self, small_catalog):
        request = _request(
            activity="running",
            intensity="high",
            bpm_range=BPMRange(140, 160),
            genre="trap",
            preferred_artists=("Duki",),
        )
        payload = build_user_payload(request, small_catalog)
        assert "EXACTLY 3 tracks" in payload
        assert "140-160 BPM" in payload
        assert "Preferred artists: Duki" in payload
        assert "spread the remaining picks across other artists" in payload
        assert "6. Balada Triste|Tini|balada,pop" in payload

    def test_payload_without_optional_context(self, small_catalog):
        payload = build_user_payload(_request(), small_catalog)
        assert "Preferred artists" not in payload
        assert "BPM" not in payload

    def test_system_instruction_forbids_invention(self):
        assert "Never invent" in SYSTEM_INSTRUCTION
        assert "verbatim" in SYSTEM_INSTRUCTION

    def test_tool_schema(self):
        schema = build_tool_schema(12)
        assert schema["name"] == TOOL_NAME
        params = schema["parameters"]
        assert set(params["required"]) == {"playlistName", "description", "tracks"}
        assert params["properties"]["tracks"]["items"]["required"] == ["trackName", "artistName"]


class TestToolSelection:
    def test_description_defaults_to_playlist_name(self):
        parsed = ToolSelection.model_validate({"playlistName": "Run Fast", "tracks": []})
        assert parsed.to_result(10).description == "Playlist: Run Fast"

    def test_lenient_track_entries(self):
        parsed = ToolSelection.model_validate({
            "playlistName": "Mix",
            "tracks": [{"trackName": 5, "artistName": "Duki"}, "garbage", {"trackName": "A", "artistName": "B"}],
        })
        picks = parsed.to_result(10).picks
        assert [p.is_valid for p in picks] == [False, False, True]

    def test_missing_tracks_is_an_error(self):
        with pytest.raises(ValidationError):
            ToolSelection.model_validate({"playlistName": "Mix"})

    def test_blank_name_is_an_error(self):
        with pytest.raises(ValidationError):
            ToolSelection.model_validate({"playlistName": "  ", "tracks": []})

    def test_name_and_description_are_capped(self):
        parsed = ToolSelection.model_validate({
            "playlistName": "x" * 80,
            "description": "y" * 500,
            "tracks": [],
        })
        result = parsed.to_result(10)
        assert len(result.playlist_name) == 50
        assert len(result.description) == 200


class TestSelectionDelegate:
    def test_ok_outcome(self, small_catalog):
        client = FakeCompletionClient(tool_answer(("Noche de Trap", "Duki"), ("Corazón Pop", "Tini")))
        outcome = SelectionDelegate(client).select(small_catalog, _request())
        assert isinstance(outcome, SelectionOk)
        result = outcome.unwrap()
        assert result.playlist_name == "Test Mix"
        assert [p.track_name for p in result.picks] == ["Noche de Trap", "Corazón Pop"]
        assert len(client.calls) == 1
        assert client.calls[0]["schema"]["name"] == TOOL_NAME

    def test_over_delivery_truncated(self, small_catalog):
        pairs = [(t.name, t.primary_artist) for t in small_catalog]
        client = FakeCompletionClient(tool_answer(*pairs))
        result = SelectionDelegate(client).select(small_catalog, _request(track_count=2)).unwrap()
        assert len(result.picks) == 2

    def test_transport_error(self, small_catalog):
        client = FakeCompletionClient(ProviderUnavailableError("timeout"))
        outcome = SelectionDelegate(client).select(small_catalog, _request())
        assert isinstance(outcome, TransportError)
        assert not outcome.ok
        with pytest.raises(ProviderUnavailableError):
            outcome.unwrap()

    def test_missing_tool_call(self, small_catalog):
        client = FakeCompletionClient(MalformedResponseError("no tool call"))
        outcome = SelectionDelegate(client).select(small_catalog, _request())
        assert isinstance(outcome, SchemaError)

    def test_schema_violation(self, small_catalog):
        client = FakeCompletionClient({"description": "no name or tracks"})
        outcome = SelectionDelegate(client).select(small_catalog, _request())
        assert isinstance(outcome, SchemaError)
        with pytest.raises(MalformedResponseError):
            outcome.unwrap()

    def test_zero_valid_picks(self, small_catalog):
        client = FakeCompletionClient({"playlistName": "Mix", "tracks": [{"trackName": "", "artistName": "Duki"}]})
        outcome = SelectionDelegate(client).select(small_catalog, _request())
        assert isinstance(outcome, SchemaError)
        assert "no valid picks" in outcome.details
