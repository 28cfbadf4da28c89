from conftest import make_track

from prompt_playlist.config import RankingWeights
from prompt_playlist.models import PlaylistRequest
from prompt_playlist.selection.filtering import filter_and_rank, prefilter, score_tracks


def _request(genre=None, artists=(), track_count=10):
    return PlaylistRequest(
        raw_prompt="test",
        duration_minutes=30,
        track_count=track_count,
        genre=genre,
        preferred_artists=tuple(artists),
    )


def test_empty_catalog_returns_empty_pool():
    result = filter_and_rank([], _request(genre="trap"))
    assert result.candidates == []
    assert len(result) == 0
    assert result.stats["catalog_size"] == 0


def test_genre_prefilter_uses_tolerant_matching(small_catalog):
    tracks = prefilter(small_catalog, _request(genre="rock"))
    assert [t.external_id for t in tracks] == ["t2"]

    tracks = prefilter(small_catalog, _request(genre="trap"))
    assert [t.external_id for t in tracks] == ["t1", "t5"]


def test_artist_prefilter_matches_featured_artists(small_catalog):
    tracks = prefilter(small_catalog, _request(artists=["Bizarrap"]))
    assert [t.external_id for t in tracks] == ["t5"]


def test_filters_combine(small_catalog):
    tracks = prefilter(small_catalog, _request(genre="pop", artists=["Tini"]))
    assert [t.external_id for t in tracks] == ["t3", "t6"]


def test_over_filtering_falls_back_to_full_catalog(small_catalog):
    result = filter_and_rank(small_catalog, _request(genre="rock", artists=["Duki"]))
    assert result.relaxed
    assert len(result) == len(small_catalog)
    assert result.stats["prefiltered"] == len(small_catalog)


def test_use_filters_false_skips_prefilter(small_catalog):
    result = filter_and_rank(small_catalog, _request(genre="trap"), use_filters=False)
    assert not result.relaxed
    assert len(result) == len(small_catalog)
    # Ranking still favours genre matches
    assert [t.external_id for t in result.tracks[:2]] == ["t1", "t5"]


def test_scoring_order_is_stable(small_catalog):
    result = filter_and_rank(small_catalog, _request(), use_filters=True)
    # Tracks with genre tags score 2, the untagged one 0; ties keep catalog order
    assert [t.external_id for t in result.tracks] == ["t1", "t2", "t3", "t5", "t6", "t4"]
    assert result.candidates[0].score == 2.0
    assert result.candidates[-1].score == 0.0


def test_score_tracks_weights(small_catalog):
    request = _request(genre="trap", artists=["Duki"])
    scores = score_tracks(small_catalog, request, RankingWeights())
    assert list(scores) == [22.0, 2.0, 2.0, 0.0, 22.0, 2.0]


def test_pool_cap_respected():
    catalog = [make_track(f"id{i}", f"Song {i}", f"Artist {i % 7}", ["pop"]) for i in range(1000)]
    for cap in (1, 50, 300):
        result = filter_and_rank(catalog, _request(genre="pop"), pool_cap=cap, top_n=250)
        assert len(result) <= cap
    result = filter_and_rank(catalog, _request(), pool_cap=300, top_n=250)
    assert len(result) == 250
    assert result.tracks[0].external_id == "id0"


def test_tracks_beyond_cap_are_never_considered():
    catalog = [make_track(f"id{i}", f"Song {i}", "X") for i in range(10)]
    catalog.append(make_track("late", "Late Hit", "Y", ["trap"]))
    result = filter_and_rank(catalog, _request(), pool_cap=10, top_n=10)
    assert "late" not in [t.external_id for t in result.tracks]
