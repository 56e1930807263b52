#!/usr/bin/env python3
"""
spotexport - Spotify playlist exporter
Command line entry point: fetches playlists with a bearer token and writes one file per playlist.
"""

import argparse
import logging
import logging.handlers
import os
import sys
from typing import List

from colorama import Fore, Style, just_fix_windows_console

from spotexport import __version__
from spotexport.config import load_config, ConfigurationError, Config
from spotexport.errors import SpotexportError
from spotexport.exporters import ExportDispatcher
from spotexport.schema import Credential, ExportType, PlaylistExportResult
from spotexport.service import PlaylistExportService
from spotexport.spotify_handler import SpotifyHandler

logger = logging.getLogger(__name__)


class ColorFormatter(logging.Formatter):
    """Colored logging formatter for console output."""

    COLORS = {
        'DEBUG': Fore.CYAN,
        'INFO': Fore.GREEN,
        'WARNING': Fore.YELLOW,
        'ERROR': Fore.RED,
        'CRITICAL': Fore.MAGENTA
    }

    def format(self, record):
        color = self.COLORS.get(record.levelname, '')
        original = record.levelname
        record.levelname = f"{color}{original}{Style.RESET_ALL}"
        try:
            return super().format(record)
        finally:
            record.levelname = original


def setup_logging(config: Config, level_override: str = None):
    """Setup logging configuration."""
    logging.getLogger().handlers.clear()

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, (level_override or config.logging.level).upper()))

    if config.logging.console:
        console_handler = logging.StreamHandler(sys.stderr)
        if config.logging.color:
            just_fix_windows_console()
            formatter = ColorFormatter(fmt=config.logging.format)
        else:
            formatter = logging.Formatter(fmt=config.logging.format)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

    if config.logging.file:
        os.makedirs(os.path.dirname(config.logging.file) or ".", exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            config.logging.file,
            maxBytes=config.logging.max_size_mb * 1024 * 1024,
            backupCount=config.logging.backup_count,
            encoding='utf-8'
        )
        file_handler.setFormatter(logging.Formatter(fmt=config.logging.format))
        root_logger.addHandler(file_handler)


def build_service(config: Config) -> PlaylistExportService:
    handler = SpotifyHandler(
        api_base_url=config.spotify.api_base_url,
        request_timeout=config.spotify.request_timeout,
        retries=config.spotify.retries,
    )
    dispatcher = ExportDispatcher(
        json_indent=config.export.json_indent,
        sheet_title=config.export.sheet_title,
    )
    return PlaylistExportService(
        handler,
        dispatcher=dispatcher,
        page_size=config.spotify.playlist_page_size,
        max_workers=config.spotify.max_workers,
    )


def write_results(results: List[PlaylistExportResult], output_dir: str) -> List[str]:
    """Write each export result to output_dir, suffixing duplicate file names."""
    os.makedirs(output_dir, exist_ok=True)
    written = []
    used = set()

    for result in results:
        filename = result.filename
        stem, ext = os.path.splitext(filename)
        counter = 1
        # Case-insensitive filesystems would let "Mix" overwrite "mix".
        while filename.lower() in used:
            counter += 1
            filename = f"{stem} ({counter}){ext}"
        used.add(filename.lower())

        path = os.path.join(output_dir, filename)
        with open(path, "wb") as f:
            f.write(result.content)
        logger.info(f"Wrote '{result.playlist_name}' to {path} ({result.content_length} bytes)")
        written.append(path)

    return written


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Export Spotify playlists to JSON, CSV, XLS or XLSX",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s --all --format csv
  %(prog)s --playlist 37i9dQZF1DX0XUsuxWHRQd --format xlsx --output-dir ./out
  %(prog)s --me
        """
    )

    parser.add_argument(
        '--config', '-c',
        default=os.getenv('SPOTEXPORT_CONFIG', 'config/config.yaml'),
        help='Configuration file path (default: config/config.yaml)'
    )

    parser.add_argument(
        '--token',
        help='Spotify access token (default: $SPOTIFY_ACCESS_TOKEN)'
    )

    parser.add_argument(
        '--format', '-f',
        choices=[t.value for t in ExportType],
        help='Export format (default: from config)'
    )

    selection = parser.add_mutually_exclusive_group()
    selection.add_argument(
        '--all',
        action='store_true',
        help='Export every playlist of the current user'
    )
    selection.add_argument(
        '--playlist', '-p',
        action='append',
        dest='playlists',
        metavar='ID',
        help='Playlist id to export (repeatable)'
    )
    selection.add_argument(
        '--me',
        action='store_true',
        help='Print the current user profile and exit'
    )

    parser.add_argument(
        '--output-dir', '-o',
        help='Directory for exported files (default: from config)'
    )

    parser.add_argument(
        '--config-example',
        action='store_true',
        help='Write an example configuration file and exit'
    )

    parser.add_argument(
        '--log-level',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
        help='Override log level from config file'
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'spotexport {__version__}'
    )

    return parser.parse_args(argv)


def main(argv=None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    if args.config_example:
        from spotexport.config import create_example_config
        create_example_config()
        return 0

    try:
        config = load_config(args.config)
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    setup_logging(config, args.log_level)

    if not (args.all or args.playlists or args.me):
        print("No operation specified. Use --help for available options.", file=sys.stderr)
        return 1

    try:
        credential = Credential(access_token=config.access_token(args.token))
        service = build_service(config)

        if args.me:
            print(service.get_user_info(credential))
            return 0

        export_type = ExportType.parse(args.format or config.export.default_format)
        if args.all:
            results = service.export_all_playlists(credential, export_type)
        else:
            results = service.export_playlists(credential, export_type, args.playlists)

        written = write_results(results, args.output_dir or config.export.output_dir)
        logger.info(f"Exported {len(written)} playlist(s)")
        logger.debug(f"Spotify handler stats: {service.handler.get_stats()}")
        return 0

    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        return 1
    except SpotexportError as e:
        logger.error(f"Export failed: {e}")
        return 1
    except OSError as e:
        logger.error(f"Failed to write exports: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
