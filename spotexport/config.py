import os
import yaml
import logging
from typing import Dict, Any, Optional
from dataclasses import dataclass, asdict
from pathlib import Path

import jsonschema

logger = logging.getLogger(__name__)

ACCESS_TOKEN_ENV = "SPOTIFY_ACCESS_TOKEN"


@dataclass
class SpotifyConfig:
    """Spotify API configuration."""
    api_base_url: str = "https://api.spotify.com/v1"
    request_timeout: int = 30
    retries: int = 3
    playlist_page_size: int = 50
    max_workers: int = 1


@dataclass
class ExportConfig:
    """Export output configuration."""
    default_format: str = "json"
    output_dir: str = "./exports"
    json_indent: int = 2
    sheet_title: str = "Tracks"


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str = "INFO"
    format: str = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"
    file: Optional[str] = None
    max_size_mb: int = 100
    backup_count: int = 5
    console: bool = True
    color: bool = True


CONFIG_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "spotify": {
            "type": "object",
            "properties": {
                "api_base_url": {"type": "string", "pattern": "^https?://"},
                "request_timeout": {"type": "integer", "minimum": 1},
                "retries": {"type": "integer", "minimum": 0},
                "playlist_page_size": {"type": "integer", "minimum": 1, "maximum": 50},
                "max_workers": {"type": "integer", "minimum": 1, "maximum": 32},
            },
            "additionalProperties": False,
        },
        "export": {
            "type": "object",
            "properties": {
                "default_format": {"type": "string", "enum": ["json", "csv", "xls", "xlsx"]},
                "output_dir": {"type": "string", "minLength": 1},
                "json_indent": {"type": "integer", "minimum": 0},
                "sheet_title": {"type": "string", "minLength": 1, "maxLength": 31},
            },
            "additionalProperties": False,
        },
        "logging": {
            "type": "object",
            "properties": {
                "level": {"type": "string", "enum": ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]},
                "format": {"type": "string"},
                "file": {"type": ["string", "null"]},
                "max_size_mb": {"type": "integer", "minimum": 1},
                "backup_count": {"type": "integer", "minimum": 0},
                "console": {"type": "boolean"},
                "color": {"type": "boolean"},
            },
            "additionalProperties": False,
        },
    },
    "additionalProperties": False,
}


class ConfigurationError(Exception):
    """Configuration-related error."""
    pass


class Config:
    """Configuration for the spotexport application."""

    def __init__(self, config_path: str = "config/config.yaml"):
        """
        Initialize configuration from file.

        Args:
            config_path: Path to the configuration YAML file; defaults apply when it is missing
        """
        self.config_path = Path(config_path)
        self.config_dir = self.config_path.parent

        self.spotify = SpotifyConfig()
        self.export = ExportConfig()
        self.logging = LoggingConfig()

        if self.config_path.exists():
            self.load_config()
        else:
            logger.info(f"Configuration file not found, using defaults: {config_path}")

    def load_config(self):
        """Load configuration from YAML file."""
        try:
            with open(self.config_path, 'r', encoding='utf-8') as f:
                config_data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Failed to load configuration: {e}") from e

        if config_data is None:
            config_data = {}
        if not isinstance(config_data, dict):
            raise ConfigurationError("Configuration root must be a mapping")

        self._validate_config(config_data)

        self.spotify = SpotifyConfig(**(config_data.get('spotify') or {}))
        self.export = ExportConfig(**(config_data.get('export') or {}))
        self.logging = LoggingConfig(**(config_data.get('logging') or {}))
        self._resolve_paths()

        logger.info(f"Configuration loaded successfully from {self.config_path}")

    def _validate_config(self, config_data: Dict[str, Any]):
        """Validate configuration against the schema."""
        try:
            jsonschema.validate(instance=config_data, schema=CONFIG_SCHEMA)
        except jsonschema.ValidationError as e:
            location = ".".join(str(p) for p in e.absolute_path) or "<root>"
            raise ConfigurationError(f"Invalid configuration at '{location}': {e.message}") from e

    def _resolve_paths(self):
        """Resolve relative paths against the configuration directory."""
        if not os.path.isabs(self.export.output_dir):
            self.export.output_dir = str((self.config_dir / self.export.output_dir).resolve())
        if self.logging.file and not os.path.isabs(self.logging.file):
            self.logging.file = str((self.config_dir / self.logging.file).resolve())

    def access_token(self, override: Optional[str] = None) -> str:
        """Access token from the command line, falling back to the environment."""
        token = override or os.getenv(ACCESS_TOKEN_ENV, "")
        if not token:
            raise ConfigurationError(
                f"No access token provided; pass --token or set {ACCESS_TOKEN_ENV}")
        return token

    def to_dict(self) -> Dict[str, Any]:
        return {
            'spotify': asdict(self.spotify),
            'export': asdict(self.export),
            'logging': asdict(self.logging),
        }


def load_config(config_path: str = "config/config.yaml") -> Config:
    """Load configuration, wrapping unexpected failures in ConfigurationError."""
    try:
        return Config(config_path)
    except ConfigurationError:
        raise
    except TypeError as e:
        raise ConfigurationError(f"Failed to load configuration: {e}") from e


def create_example_config(output_path: str = "config/example-config.yaml"):
    """Write an example configuration file holding every default value."""
    example = Config.__new__(Config)
    example.spotify = SpotifyConfig()
    example.export = ExportConfig()
    example.logging = LoggingConfig()

    os.makedirs(os.path.dirname(output_path) or ".", exist_ok=True)
    with open(output_path, 'w', encoding='utf-8') as f:
        f.write("# spotexport configuration\n")
        f.write(f"# The access token is read from --token or ${ACCESS_TOKEN_ENV}.\n")
        yaml.dump(example.to_dict(), f, default_flow_style=False, indent=2, sort_keys=False)

    logger.info(f"Example configuration created at {output_path}")
