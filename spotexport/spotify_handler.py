import time
import logging
import threading
from typing import List, Dict, Any, Optional, Callable

import requests
import spotipy
from spotipy.exceptions import SpotifyException

from spotexport.errors import FetchError
from spotexport.paginator import paginate
from spotexport.schema import (
    Credential, Playlist, PlaylistAbsent, PlaylistFetched, PlaylistFetchResult, Tracks
)

logger = logging.getLogger(__name__)

SPOTIFY_API_BASE_URL = "https://api.spotify.com/v1"


class SpotifyHandler:
    """Spotify Web API access for a caller-supplied bearer credential."""

    def __init__(self, api_base_url: str = SPOTIFY_API_BASE_URL,
                 request_timeout: int = 30, retries: int = 3,
                 session: Optional[requests.Session] = None,
                 client_factory: Optional[Callable[[Credential], Any]] = None):
        """
        Initialize the Spotify handler.

        Args:
            api_base_url: Base URL of the Web API, without trailing slash
            request_timeout: Request timeout in seconds
            retries: Transport retries delegated to spotipy
            session: requests session for raw-text GETs; one is created when omitted
            client_factory: Builds a spotipy-compatible client for a credential
        """
        self.api_base_url = api_base_url.rstrip("/")
        self.request_timeout = request_timeout
        self.retries = retries
        self.session = session or requests.Session()
        self._client_factory = client_factory or self._create_client

        self._stats_lock = threading.Lock()
        self.stats = {
            'requests_made': 0,
            'errors': 0,
            'playlists_skipped': 0,
            'session_start': time.time()
        }

    def _create_client(self, credential: Credential) -> spotipy.Spotify:
        client = spotipy.Spotify(
            auth=credential.access_token,
            requests_timeout=self.request_timeout,
            retries=self.retries,
        )
        client.prefix = f"{self.api_base_url}/"
        return client

    def _count(self, key: str):
        with self._stats_lock:
            self.stats[key] += 1

    def _make_request(self, request_func, *args, **kwargs):
        """Run a spotipy call, converting transport and HTTP failures into FetchError."""
        try:
            result = request_func(*args, **kwargs)
            self._count('requests_made')
            return result
        except SpotifyException as e:
            self._count('errors')
            logger.error(f"Spotify API error: {e}")
            raise FetchError(f"Spotify API error {e.http_status}: {e.msg}",
                             http_status=e.http_status) from e
        except requests.RequestException as e:
            self._count('errors')
            logger.error(f"Spotify request failed: {e}")
            raise FetchError(f"Spotify request failed: {e}") from e

    def get_text(self, credential: Credential, path: str,
                 params: Optional[Dict[str, Any]] = None) -> str:
        """GET an API path and return the raw response body."""
        url = f"{self.api_base_url}{path}"
        try:
            response = self.session.get(
                url,
                params=params,
                headers={
                    "Authorization": credential.authorization,
                    "Accept": "application/json",
                },
                timeout=self.request_timeout,
            )
            response.raise_for_status()
        except requests.HTTPError as e:
            self._count('errors')
            status = e.response.status_code if e.response is not None else None
            logger.error(f"Spotify API error {status} for {url}")
            raise FetchError(f"Spotify API error {status}: {e}", http_status=status, url=url) from e
        except requests.RequestException as e:
            self._count('errors')
            logger.error(f"Spotify request to {url} failed: {e}")
            raise FetchError(f"Spotify request failed: {e}", url=url) from e

        self._count('requests_made')
        return response.text

    def get_user_info(self, credential: Credential) -> str:
        """Raw profile of the current user."""
        return self.get_text(credential, "/me")

    def get_user_playlists(self, credential: Credential, offset: int = 0, limit: int = 50) -> str:
        """Raw page of the current user's playlists."""
        return self.get_text(credential, "/me/playlists", params={"offset": offset, "limit": limit})

    def get_playlist_ids(self, credential: Credential, page_size: int = 50) -> List[str]:
        """
        Collect the id of every playlist in the current user's listing.

        Raises:
            FetchError: If any listing page fails; nothing partial is returned
        """
        client = self._client_factory(credential)
        first_page = self._make_request(client.current_user_playlists, limit=page_size)
        if first_page is None:
            raise FetchError("Empty response for the playlist listing",
                             url=f"{self.api_base_url}/me/playlists")
        items = paginate(first_page, lambda page: self._make_request(client.next, page))

        ids = []
        for i, item in enumerate(items):
            playlist_id = (item or {}).get("id")
            if not playlist_id:
                logger.debug(f"No ID for playlist at position {i}")
                continue
            ids.append(playlist_id)

        logger.info(f"Found {len(ids)} playlists in {len(items)} listing entries")
        return ids

    def fetch_playlist(self, credential: Credential, playlist_id: str) -> PlaylistFetchResult:
        """
        Fetch a playlist's metadata and every page of its tracks.

        Any failure, on the first request or on a later track page, yields
        PlaylistAbsent so the caller can leave the playlist out.
        """
        client = self._client_factory(credential)
        try:
            data = self._make_request(client.playlist, playlist_id)
            if not data:
                raise FetchError(f"Empty response for playlist {playlist_id}")

            playlist = Playlist.from_dict(data)
            first_page = data.get("tracks") or {}
            if first_page.get("next"):
                items = paginate(first_page, lambda page: self._make_request(client.next, page))
                playlist.tracks = Tracks.from_dict({"items": items, "total": first_page.get("total")})
                logger.debug(f"Playlist '{playlist_id}' paginated to {len(items)} track items")

        except FetchError as e:
            self._count('playlists_skipped')
            logger.warning(f"Skipping playlist '{playlist_id}': {e}")
            return PlaylistAbsent(playlist_id=playlist_id, reason=str(e))

        logger.info(f"Fetched playlist '{playlist.name}' with {len(playlist.tracks.items)} tracks")
        return PlaylistFetched(playlist=playlist)

    def get_stats(self) -> Dict[str, Any]:
        """Get handler statistics."""
        with self._stats_lock:
            stats = dict(self.stats)
        uptime = time.time() - stats['session_start']
        return {
            **stats,
            'uptime_seconds': uptime,
            'error_rate': (stats['errors'] / max(1, stats['requests_made'])) * 100
        }
