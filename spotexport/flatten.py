from typing import List, Optional

from spotexport.schema import Artist, Playlist, TrackFlattened

ARTIST_SEPARATOR = " && "


def join_artists(artists: Optional[List[Artist]]) -> str:
    """Join artist names in order, skipping artists without a name."""
    if not artists:
        return ""
    return ARTIST_SEPARATOR.join(a.name for a in artists if a is not None and a.name is not None)


def flatten_playlist(playlist: Playlist) -> List[TrackFlattened]:
    """Project every track item of a playlist to an export row, keeping order."""
    rows = []
    for item in playlist.tracks.items:
        track = item.track
        rows.append(TrackFlattened(
            added_at=item.added_at,
            name=track.name if track else None,
            artists=join_artists(track.artists) if track else "",
            album=track.album.name if track and track.album else None,
        ))
    return rows
