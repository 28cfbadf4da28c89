"""Test configuration and fixtures."""

import sys
from pathlib import Path

import pytest

# Add repo root to path for imports
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from prompt_playlist.intent.activity import ActivityTable
from prompt_playlist.models import CatalogTrack


def make_track(external_id, name, artist, genres=(), others=()):
    return CatalogTrack(
        external_id=external_id,
        name=name,
        primary_artist=artist,
        all_artists=(artist,) + tuple(others),
        genres=tuple(genres),
    )


class FakeCompletionClient:
    """
    Scripted stand-in for the LLM collaborator.

    Each call pops the next scripted item: a dict is returned as the tool
    arguments, an exception instance is raised.
    """

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def complete(self, system_instruction, user_payload, tool_schema):
        self.calls.append({
            "system": system_instruction,
            "payload": user_payload,
            "schema": tool_schema,
        })
        if not self.responses:
            raise AssertionError("FakeCompletionClient called more times than scripted")
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


def tool_answer(*pairs, name="Test Mix", description="For testing"):
    return {
        "playlistName": name,
        "description": description,
        "tracks": [{"trackName": t, "artistName": a, "reason": "fits"} for t, a in pairs],
    }


@pytest.fixture(scope="session")
def activity_table():
    return ActivityTable.load_default()


@pytest.fixture()
def small_catalog():
    return [
        make_track("t1", "Noche de Trap", "Duki", ["trap latino", "urbano"]),
        make_track("t2", "Rockeando", "Los Piojos", ["argentine rock"]),
        make_track("t3", "Corazón Pop", "Tini", ["pop latino"]),
        make_track("t4", "Sin Etiquetas", "Anónimo Band"),
        make_track("t5", "Trap Bailable", "Duki", ["trap"], others=["Bizarrap"]),
        make_track("t6", "Balada Triste", "Tini", ["balada", "pop"]),
    ]


@pytest.fixture()
def fake_client():
    return FakeCompletionClient
