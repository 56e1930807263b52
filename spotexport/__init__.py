"""Export Spotify playlists to JSON, CSV, XLS and XLSX."""

__version__ = "0.1.0"
