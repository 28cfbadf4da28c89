import pytest

from prompt_playlist.config import TrackCountPolicy
from prompt_playlist.intent.artists import detect_artists
from prompt_playlist.intent.extractor import IntentExtractor
from prompt_playlist.intent.genre import detect_genre
from prompt_playlist.models import BPMRange


@pytest.fixture()
def extractor(activity_table):
    return IntentExtractor(activity_table)


def test_running_prompt(extractor):
    request = extractor.extract("A playlist for running, 30 minutes, high energy")
    assert request.duration_minutes == 30
    assert request.track_count == 10
    assert request.activity == "running"
    assert request.intensity == "high"
    assert request.genre is None
    assert request.bpm_range == BPMRange(140, 160)


def test_trap_prompt(extractor):
    request = extractor.extract("trap playlist, 1 hour")
    assert request.duration_minutes == 60
    assert request.track_count == 18
    assert request.genre == "trap"
    assert request.activity is None
    assert request.bpm_range is None


def test_rap_prompt_has_no_activity(extractor):
    request = extractor.extract("rap playlist, 1 hour")
    assert request.genre == "trap"
    assert request.activity is None
    assert request.bpm_range is None


@pytest.mark.parametrize(
    "prompt",
    [
        "A playlist for running, 30 minutes, high energy",
        "caminata, 40 minutos",
        "cycling at high intensity, 1 hour",
        "yoga suave, 30 minutes",
    ],
)
def test_bpm_range_belongs_to_activity(extractor, activity_table, prompt):
    request = extractor.extract(prompt)
    assert request.activity is not None
    ranges = {e.bpm for e in activity_table.entries if e.name == request.activity}
    assert request.bpm_range in ranges


def test_genre_and_activity_coexist(extractor):
    request = extractor.extract("rock for cooking, 40 minutes")
    assert request.activity == "cooking"
    assert request.genre == "rock"


def test_default_duration(extractor):
    request = extractor.extract("pop for studying")
    assert request.duration_minutes == 20
    assert request.track_count == 10


def test_known_artists_detected(extractor):
    request = extractor.extract("trap con Duki y algo de bizarrap, 1 hora", known_artists=["Duki", "Bizarrap", "Tini"])
    assert request.preferred_artists == ("Duki", "Bizarrap")


def test_policy_is_used(activity_table):
    extractor = IntentExtractor(activity_table, TrackCountPolicy(default_duration_minutes=100))
    assert extractor.extract("pop").track_count == 20


@pytest.mark.parametrize("prompt", ["", "   ", "!!!", "123", None])
def test_never_raises(extractor, prompt):
    request = extractor.extract(prompt)
    assert 10 <= request.track_count <= 20


@pytest.mark.parametrize(
    "prompt,genre",
    [
        ("some Trap Latino", "trap"),
        ("hip-hop beats", "trap"),
        ("rock nacional clásico", "rock"),
        ("indie rock", "rock"),
        ("música pop", "pop"),
        ("baladas no, balada sí", "pop"),
        ("trap and rock", "trap"),
        ("popular songs", None),
        ("trapeze music", None),
        ("", None),
    ],
)
def test_detect_genre(prompt, genre):
    assert detect_genre(prompt) == genre


class TestDetectArtists:
    def test_exact_and_diacritics(self):
        assert detect_artists("algo de tini y duki", ["Duki", "Tini"]) == ["Duki", "Tini"]
        assert detect_artists("anonimo band please", ["Anónimo Band"]) == ["Anónimo Band"]

    def test_substring_requires_three_characters(self):
        assert detect_artists("dukitrap", ["Duki"]) == ["Duki"]
        assert detect_artists("xyzab", ["AB"]) == []

    def test_short_names_need_word_boundary(self):
        assert detect_artists("music by AB today", ["AB"]) == ["AB"]

    def test_deduplicated(self):
        assert detect_artists("duki", ["Duki", "DUKI"]) == ["Duki"]

    def test_empty(self):
        assert detect_artists("", ["Duki"]) == []
        assert detect_artists("duki", []) == []
