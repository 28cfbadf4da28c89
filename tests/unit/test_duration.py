import pytest

from prompt_playlist.config import TrackCountPolicy
from prompt_playlist.intent.duration import (
    clamp_track_count,
    has_duration,
    parse_duration_minutes,
    track_count_for_duration,
)


@pytest.mark.parametrize(
    "prompt,minutes",
    [
        ("A playlist for running, 30 minutes, high energy", 30),
        ("trap playlist, 1 hour", 60),
        ("1 hour and 30 minutes of rock", 90),
        ("2 horas y 15 minutos para estudiar", 135),
        ("1h 20min chill", 80),
        ("1h30min of trap", 90),
        ("1h30 min para correr", 90),
        ("2h de rock", 120),
        ("2 hrs of pop", 120),
        ("approximately 45 minutes", 45),
        ("aprox 25 min de trap", 25),
        ("approx. 40 mins", 40),
        ("45 minutos corriendo", 45),
    ],
)
def test_parse_duration_minutes(prompt, minutes):
    assert parse_duration_minutes(prompt) == minutes


def test_hours_and_minutes_wins_over_minutes_alone():
    assert parse_duration_minutes("1 hour 15 minutes") == 75


def test_no_duration():
    assert parse_duration_minutes("some rock for cooking") is None
    assert parse_duration_minutes("") is None
    assert not has_duration("high energy trap")


def test_zero_duration_counts_as_missing():
    assert parse_duration_minutes("0 minutes of pop") is None


def test_unit_must_be_a_whole_word():
    assert parse_duration_minutes("2 high energy songs") is None


class TestTrackCount:
    def test_scenarios(self):
        assert track_count_for_duration(30) == 10
        assert track_count_for_duration(60) == 18

    def test_bounds(self):
        for minutes in range(0, 600, 7):
            assert 10 <= track_count_for_duration(minutes) <= 20

    def test_monotonic(self):
        counts = [track_count_for_duration(m) for m in range(1, 300)]
        assert counts == sorted(counts)

    def test_policy_override(self):
        policy = TrackCountPolicy(average_track_minutes=3.0, min_tracks=5, max_tracks=40)
        assert track_count_for_duration(30, policy) == 10
        assert track_count_for_duration(300, policy) == 40
        assert track_count_for_duration(3, policy) == 5


def test_clamp_track_count():
    assert clamp_track_count(0, 1, 20) == 1
    assert clamp_track_count(25, 1, 20) == 20
    assert clamp_track_count(12, 10, 20) == 12
