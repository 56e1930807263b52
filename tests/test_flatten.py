from spotexport.flatten import flatten_playlist, join_artists
from spotexport.schema import Artist, Playlist, TrackFlattened


def test_join_artists_skips_missing_names():
    artists = [Artist("A"), Artist(None), Artist("B")]
    assert join_artists(artists) == "A && B"


def test_join_artists_leading_missing_name_has_no_separator():
    assert join_artists([Artist(None), Artist("B"), Artist("C")]) == "B && C"


def test_join_artists_empty_and_none():
    assert join_artists([]) == ""
    assert join_artists(None) == ""


def test_flatten_preserves_length_and_order(sample_playlist):
    rows = flatten_playlist(sample_playlist)

    assert len(rows) == len(sample_playlist.tracks.items)
    assert [r.name for r in rows] == ["Song A", "Söng B", None]
    assert rows[0] == TrackFlattened(
        added_at="2024-01-01T00:00:00Z", name="Song A", artists="Alice && Bob", album="First")


def test_flatten_missing_track_fields_pass_through():
    playlist = Playlist.from_dict({
        "id": "x",
        "name": "Sparse",
        "tracks": {"items": [
            {"added_at": None, "track": {"artists": None}},
            {"track": {"name": "No album", "artists": [{"name": None}]}},
            {"added_at": "2024-01-01T00:00:00Z", "track": None},
        ]},
    })

    rows = flatten_playlist(playlist)

    assert rows[0] == TrackFlattened(added_at=None, name=None, artists="", album=None)
    assert rows[1] == TrackFlattened(added_at=None, name="No album", artists="", album=None)
    assert rows[2].artists == ""


def test_flatten_empty_playlist():
    assert flatten_playlist(Playlist.from_dict({"id": "e", "name": "Empty"})) == []
