"""
Conversion of fetched playlists into downloadable files.

Each playlist becomes one file. JSON and CSV carry the flattened track rows,
XLS and XLSX carry a single sheet whose first row is the column header.
"""

import csv
import io
import json
import logging
from typing import List, Callable, Dict, Union

import openpyxl
import xlwt

from spotexport.errors import ExportError
from spotexport.flatten import flatten_playlist
from spotexport.schema import (
    ExportType, Playlist, PlaylistExportResult, TrackFlattened, TRACK_COLUMNS
)

logger = logging.getLogger(__name__)


def _header() -> List[str]:
    return [column.header for column in TRACK_COLUMNS]


def _sheet_rows(tracks: List[TrackFlattened]) -> List[List[str]]:
    """Header plus one stringified row per track, in column order."""
    rows = [_header()]
    for track in tracks:
        rows.append([str(column.accessor(track)) for column in TRACK_COLUMNS])
    return rows


class ExportDispatcher:
    """Selects the converter for an export type and applies it to every playlist."""

    def __init__(self, json_indent: int = 2, sheet_title: str = "Tracks"):
        self.json_indent = json_indent
        self.sheet_title = sheet_title
        self._converters: Dict[ExportType, Callable[[List[TrackFlattened]], bytes]] = {
            ExportType.JSON: self.to_json,
            ExportType.CSV: self.to_csv,
            ExportType.XLS: self.to_xls,
            ExportType.XLSX: self.to_xlsx,
        }

    def export(self, playlists: List[Playlist],
               export_type: Union[ExportType, str]) -> List[PlaylistExportResult]:
        """
        Convert playlists into one export result each, preserving input order.

        Raises:
            ExportError: If any playlist fails to serialize; the whole batch is aborted
        """
        export_type = ExportType.parse(export_type)
        converter = self._converters[export_type]

        results = []
        for playlist in playlists:
            tracks = flatten_playlist(playlist)
            try:
                content = converter(tracks)
            except ExportError:
                raise
            except Exception as e:
                logger.error(f"Failed to export playlist '{playlist.name}' as {export_type.value}: {e}")
                raise ExportError(
                    f"Failed to export playlist '{playlist.name}' as {export_type.value}: {e}",
                    playlist_name=playlist.name) from e

            results.append(PlaylistExportResult(
                playlist_name=playlist.name,
                content=content,
                content_length=len(content),
                export_type=export_type,
            ))
            logger.debug(f"Exported '{playlist.name}': {len(tracks)} tracks, {len(content)} bytes")

        logger.info(f"Exported {len(results)} playlist(s) as {export_type.value}")
        return results

    def to_json(self, tracks: List[TrackFlattened]) -> bytes:
        rows = [track.to_dict() for track in tracks]
        return json.dumps(rows, indent=self.json_indent, ensure_ascii=False).encode("utf-8")

    def to_csv(self, tracks: List[TrackFlattened]) -> bytes:
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow(_header())
        for track in tracks:
            writer.writerow([column.accessor(track) for column in TRACK_COLUMNS])
        return buffer.getvalue().encode("utf-8")

    def to_xls(self, tracks: List[TrackFlattened]) -> bytes:
        workbook = xlwt.Workbook(encoding="utf-8")
        sheet = workbook.add_sheet(self.sheet_title)
        for r, row in enumerate(_sheet_rows(tracks)):
            for c, value in enumerate(row):
                sheet.write(r, c, value)

        buffer = io.BytesIO()
        workbook.save(buffer)
        return buffer.getvalue()

    def to_xlsx(self, tracks: List[TrackFlattened]) -> bytes:
        workbook = openpyxl.Workbook()
        sheet = workbook.active
        sheet.title = self.sheet_title
        for row in _sheet_rows(tracks):
            sheet.append(row)

        buffer = io.BytesIO()
        workbook.save(buffer)
        return buffer.getvalue()


def export_playlists(playlists: List[Playlist],
                     export_type: Union[ExportType, str]) -> List[PlaylistExportResult]:
    """Export with default formatting options."""
    return ExportDispatcher().export(playlists, export_type)
