import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Union

from spotexport.exporters import ExportDispatcher
from spotexport.schema import (
    Credential, ExportType, PlaylistExportResult, PlaylistFetched, PlaylistFetchResult
)
from spotexport.spotify_handler import SpotifyHandler

logger = logging.getLogger(__name__)


class PlaylistExportService:
    """Fetches a user's playlists and exports them, one file per playlist."""

    def __init__(self, handler: SpotifyHandler, dispatcher: Optional[ExportDispatcher] = None,
                 page_size: int = 50, max_workers: int = 1):
        """
        Args:
            handler: Spotify API access
            dispatcher: Format converter; defaults to ExportDispatcher()
            page_size: Page size for the playlist listing
            max_workers: Playlists fetched concurrently; 1 fetches sequentially
        """
        self.handler = handler
        self.dispatcher = dispatcher or ExportDispatcher()
        self.page_size = page_size
        self.max_workers = max(1, int(max_workers))

    def get_user_info(self, credential: Credential) -> str:
        return self.handler.get_user_info(credential)

    def get_user_playlists(self, credential: Credential, offset: int = 0, limit: int = 50) -> str:
        return self.handler.get_user_playlists(credential, offset=offset, limit=limit)

    def fetch_playlist(self, credential: Credential, playlist_id: str) -> PlaylistFetchResult:
        return self.handler.fetch_playlist(credential, playlist_id)

    def export_all_playlists(self, credential: Credential,
                             export_type: Union[ExportType, str]) -> List[PlaylistExportResult]:
        """
        Export every playlist in the current user's listing.

        A failure while listing playlists propagates and nothing is exported.
        """
        export_type = ExportType.parse(export_type)
        playlist_ids = self.handler.get_playlist_ids(credential, page_size=self.page_size)
        return self.export_playlists(credential, export_type, playlist_ids)

    def export_playlists(self, credential: Credential, export_type: Union[ExportType, str],
                         playlist_ids: List[str]) -> List[PlaylistExportResult]:
        """
        Export the given playlists, in the given order.

        Playlists that cannot be fetched are left out of the result.
        """
        export_type = ExportType.parse(export_type)
        fetched = self._fetch_all(credential, playlist_ids)

        playlists = [result.playlist for result in fetched if isinstance(result, PlaylistFetched)]
        skipped = len(fetched) - len(playlists)
        if skipped:
            logger.warning(f"{skipped} of {len(playlist_ids)} playlist(s) could not be fetched and were skipped")

        return self.dispatcher.export(playlists, export_type)

    def _fetch_all(self, credential: Credential, playlist_ids: List[str]) -> List[PlaylistFetchResult]:
        logger.info(f"Fetching {len(playlist_ids)} playlist(s) with {self.max_workers} worker(s)")

        if self.max_workers == 1 or len(playlist_ids) <= 1:
            return [self.handler.fetch_playlist(credential, pid) for pid in playlist_ids]

        # map() yields in submission order regardless of completion order.
        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            return list(executor.map(lambda pid: self.handler.fetch_playlist(credential, pid),
                                     playlist_ids))
