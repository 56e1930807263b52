import logging
from typing import Dict, Any, Optional, List, Callable, Tuple, Union
from dataclasses import dataclass, field
from enum import Enum

from pathvalidate import sanitize_filename

logger = logging.getLogger(__name__)


class ExportType(Enum):
    """Supported export formats."""
    JSON = "json"
    CSV = "csv"
    XLS = "xls"
    XLSX = "xlsx"

    @property
    def extension(self) -> str:
        return self.value

    @property
    def media_type(self) -> str:
        return _MEDIA_TYPES[self]

    @classmethod
    def parse(cls, value: Union[str, "ExportType"]) -> "ExportType":
        """Resolve an export type from its name or value, case-insensitive."""
        if isinstance(value, cls):
            return value
        key = str(value or "").strip().lower()
        for export_type in cls:
            if export_type.value == key:
                return export_type
        raise ValueError(
            f"Unknown export type '{value}', expected one of: "
            f"{', '.join(t.value for t in cls)}")


_MEDIA_TYPES = {
    ExportType.JSON: "application/json",
    ExportType.CSV: "text/csv",
    ExportType.XLS: "application/vnd.ms-excel",
    ExportType.XLSX: "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
}


@dataclass(frozen=True)
class Credential:
    """Bearer credential attached to every outbound request."""
    access_token: str
    token_type: str = "Bearer"

    @property
    def authorization(self) -> str:
        return f"{self.token_type} {self.access_token}"

    def __repr__(self):
        return f"Credential(token_type={self.token_type}, access_token=***)"


@dataclass
class Artist:
    name: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "Artist":
        return cls(name=(data or {}).get("name"))


@dataclass
class Album:
    name: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "Album":
        return cls(name=(data or {}).get("name"))


@dataclass
class Track:
    name: Optional[str] = None
    artists: Optional[List[Artist]] = None
    album: Optional[Album] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Track":
        artists = data.get("artists")
        album = data.get("album")
        return cls(
            name=data.get("name"),
            artists=[Artist.from_dict(a) for a in artists] if artists is not None else None,
            album=Album.from_dict(album) if album is not None else None,
        )


@dataclass
class TrackItem:
    """One entry of a playlist's track listing."""
    added_at: Optional[str] = None
    track: Optional[Track] = None

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "TrackItem":
        data = data or {}
        track = data.get("track")
        return cls(
            added_at=data.get("added_at"),
            track=Track.from_dict(track) if track else None,
        )


@dataclass
class Tracks:
    """A page of a playlist's track listing, plus the cursor to the next page."""
    items: List[TrackItem] = field(default_factory=list)
    next: Optional[str] = None
    total: int = 0

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "Tracks":
        data = data or {}
        return cls(
            items=[TrackItem.from_dict(item) for item in data.get("items") or []],
            next=data.get("next"),
            total=data.get("total") or 0,
        )


@dataclass
class Playlist:
    id: str
    name: Optional[str] = None
    tracks: Tracks = field(default_factory=Tracks)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Playlist":
        return cls(
            id=data.get("id", ""),
            name=data.get("name"),
            tracks=Tracks.from_dict(data.get("tracks")),
        )

    def __repr__(self):
        return f"Playlist(id={self.id}, name={self.name}, tracks={len(self.tracks.items)})"


@dataclass(frozen=True)
class TrackFlattened:
    """Export row shape of a playlist track."""
    added_at: Optional[str]
    name: Optional[str]
    artists: str
    album: Optional[str]

    def to_dict(self) -> Dict[str, Any]:
        return {column.header: column.accessor(self) for column in TRACK_COLUMNS}


@dataclass(frozen=True)
class Column:
    header: str
    accessor: Callable[[TrackFlattened], Any]


# Shared by every tabular writer so header and cell order never diverge.
TRACK_COLUMNS: Tuple[Column, ...] = (
    Column("added_at", lambda t: t.added_at),
    Column("name", lambda t: t.name),
    Column("artists", lambda t: t.artists),
    Column("album", lambda t: t.album),
)


@dataclass(frozen=True)
class PlaylistExportResult:
    """One exported file, ready to be streamed as an attachment."""
    playlist_name: Optional[str]
    content: bytes
    content_length: int
    export_type: ExportType

    @property
    def filename(self) -> str:
        stem = sanitize_filename(self.playlist_name or "").strip() or "playlist"
        return f"{stem}.{self.export_type.extension}"

    @property
    def media_type(self) -> str:
        return self.export_type.media_type

    def __repr__(self):
        return (f"PlaylistExportResult(playlist_name={self.playlist_name}, "
                f"export_type={self.export_type.value}, content_length={self.content_length})")


@dataclass(frozen=True)
class PlaylistFetched:
    playlist: Playlist

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class PlaylistAbsent:
    """A playlist that could not be fetched and is left out of the export."""
    playlist_id: str
    reason: str = ""

    @property
    def ok(self) -> bool:
        return False


PlaylistFetchResult = Union[PlaylistFetched, PlaylistAbsent]
