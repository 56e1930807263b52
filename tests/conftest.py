import copy

import pytest
from spotipy.exceptions import SpotifyException

from spotexport.schema import Credential, Playlist


def track_item(name, artists=("Artist",), album="Album", added_at="2024-01-01T00:00:00Z"):
    return {
        "added_at": added_at,
        "track": {
            "name": name,
            "artists": [{"name": a} for a in artists],
            "album": {"name": album},
        },
    }


def playlist_payload(playlist_id, name, track_pages, base_url="https://api.test/v1"):
    """
    Build a playlist envelope and the cursor pages that follow it.

    track_pages is a list of item lists; the first goes into the envelope.
    Returns (envelope, {url: page}).
    """
    urls = [f"{base_url}/playlists/{playlist_id}/tracks?offset={i}" for i in range(len(track_pages))]
    total = sum(len(p) for p in track_pages)
    pages = {}
    for i, items in enumerate(track_pages):
        pages[urls[i]] = {
            "items": items,
            "next": urls[i + 1] if i + 1 < len(track_pages) else None,
            "total": total,
        }
    envelope = {"id": playlist_id, "name": name, "tracks": pages[urls[0]]}
    return envelope, {url: page for url, page in pages.items() if url != urls[0]}


class FakeSpotify:
    """In-memory stand-in for spotipy.Spotify covering the calls the handler makes."""

    def __init__(self, playlists=None, pages=None, listing=None, fail_ids=(), fail_urls=()):
        self.playlists = playlists or {}
        self.pages = pages or {}
        self.listing = listing
        self.fail_ids = set(fail_ids)
        self.fail_urls = set(fail_urls)
        self.calls = []

    def playlist(self, playlist_id):
        self.calls.append(("playlist", playlist_id))
        if playlist_id in self.fail_ids or playlist_id not in self.playlists:
            raise SpotifyException(404, -1, f"Playlist {playlist_id} not found")
        return copy.deepcopy(self.playlists[playlist_id])

    def current_user_playlists(self, limit=50, offset=0):
        self.calls.append(("current_user_playlists", limit))
        return copy.deepcopy(self.listing)

    def next(self, result):
        url = result["next"]
        self.calls.append(("next", url))
        if not url:
            return None
        if url in self.fail_urls:
            raise SpotifyException(500, -1, "Internal server error")
        return copy.deepcopy(self.pages[url])


@pytest.fixture
def credential():
    return Credential(access_token="test-token")


@pytest.fixture
def sample_playlist():
    envelope, _ = playlist_payload("pl1", "Road Trip", [[
        track_item("Song A", artists=("Alice", "Bob"), album="First"),
        track_item("Söng B", artists=("Carol",), album="Second", added_at="2024-02-02T10:00:00Z"),
        {"added_at": "2024-03-03T00:00:00Z", "track": None},
    ]])
    return Playlist.from_dict(envelope)
