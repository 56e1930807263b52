import pytest
import yaml

from spotexport.config import (
    ACCESS_TOKEN_ENV, Config, ConfigurationError, create_example_config, load_config
)


def _write(tmp_path, data):
    path = tmp_path / "config.yaml"
    path.write_text(yaml.dump(data), encoding="utf-8")
    return str(path)


def test_missing_file_uses_defaults(tmp_path):
    config = load_config(str(tmp_path / "absent.yaml"))

    assert config.spotify.playlist_page_size == 50
    assert config.spotify.max_workers == 1
    assert config.export.default_format == "json"
    assert config.logging.level == "INFO"


def test_values_loaded_and_paths_resolved(tmp_path):
    path = _write(tmp_path, {
        "spotify": {"request_timeout": 10, "max_workers": 4},
        "export": {"default_format": "xlsx", "output_dir": "out"},
        "logging": {"level": "DEBUG", "file": "logs/app.log"},
    })

    config = load_config(path)

    assert config.spotify.request_timeout == 10
    assert config.spotify.max_workers == 4
    assert config.spotify.retries == 3
    assert config.export.default_format == "xlsx"
    assert config.export.output_dir == str((tmp_path / "out").resolve())
    assert config.logging.file == str((tmp_path / "logs" / "app.log").resolve())


def test_empty_file_uses_defaults(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("", encoding="utf-8")

    assert load_config(str(path)).export.json_indent == 2


@pytest.mark.parametrize("data", [
    {"spotify": {"playlist_page_size": 100}},
    {"spotify": {"unknown_key": 1}},
    {"export": {"default_format": "pdf"}},
    {"logging": {"level": "LOUD"}},
    {"extra": {}},
])
def test_invalid_config_rejected(tmp_path, data):
    with pytest.raises(ConfigurationError):
        load_config(_write(tmp_path, data))


def test_malformed_yaml_rejected(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("spotify: [unclosed", encoding="utf-8")

    with pytest.raises(ConfigurationError):
        load_config(str(path))


def test_access_token_resolution(tmp_path, monkeypatch):
    config = Config(str(tmp_path / "absent.yaml"))

    monkeypatch.delenv(ACCESS_TOKEN_ENV, raising=False)
    with pytest.raises(ConfigurationError):
        config.access_token()

    monkeypatch.setenv(ACCESS_TOKEN_ENV, "from-env")
    assert config.access_token() == "from-env"
    assert config.access_token("from-cli") == "from-cli"


def test_example_config_round_trips(tmp_path):
    path = tmp_path / "example" / "config.yaml"
    create_example_config(str(path))

    config = load_config(str(path))

    assert config.spotify.api_base_url == "https://api.spotify.com/v1"
    assert config.export.sheet_title == "Tracks"
