"""
Exception hierarchy for spotexport.

Fetch errors are converted into skips at the playlist boundary; export errors
always propagate to the caller.
"""

from typing import Optional


class SpotexportError(Exception):
    """Base exception for spotexport errors."""
    pass


class FetchError(SpotexportError):
    """Raised when a Spotify API request fails at the transport or HTTP level."""

    def __init__(self, message: str, http_status: Optional[int] = None, url: str = ""):
        super().__init__(message)
        self.http_status = http_status
        self.url = url


class ExportError(SpotexportError):
    """Raised when a playlist cannot be serialized to the requested format."""

    def __init__(self, message: str, playlist_name: Optional[str] = None):
        super().__init__(message)
        self.playlist_name = playlist_name
