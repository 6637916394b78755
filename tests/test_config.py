"""Unit tests for persisted settings (templatex.config).

Tests cover:
- Settings defaults
- Config directory resolution (TEMPLATEX_CONFIG, XDG_CONFIG_HOME, home)
- Merging TOML / JSON / YAML files in sorted order
- Environment overrides
- Malformed files
"""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from templatex.config import Settings, get_config_dir
from templatex.errors import SettingsError

pytestmark = pytest.mark.unit


def _write(config_dir: Path, name: str, content: str) -> Path:
    path = config_dir / "config" / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


# ---------------------------------------------------------------------------
# get_config_dir
# ---------------------------------------------------------------------------


class TestConfigDir:
    def test_env_override(self, monkeypatch, tmp_path: Path):
        monkeypatch.setenv("TEMPLATEX_CONFIG", str(tmp_path / "cfg"))
        assert get_config_dir() == tmp_path / "cfg"

    def test_xdg_config_home(self, monkeypatch, tmp_path: Path):
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
        assert get_config_dir() == tmp_path / "templatex"

    def test_home_default(self, monkeypatch, tmp_path: Path):
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))
        assert get_config_dir() == tmp_path / ".config" / "templatex"


# ---------------------------------------------------------------------------
# Settings.load
# ---------------------------------------------------------------------------


class TestSettingsLoad:
    def test_defaults_when_directory_missing(self, tmp_path: Path):
        settings = Settings.load(tmp_path / "nowhere")
        assert settings.source_dirs == []
        assert settings.theme is None

    def test_toml(self, tmp_path: Path):
        _write(tmp_path, "settings.toml", 'source_dirs = ["/srv/templates"]\ntheme = "magenta"\n')
        settings = Settings.load(tmp_path)
        assert settings.source_dirs == [Path("/srv/templates")]
        assert settings.theme == "magenta"

    def test_files_merge_in_sorted_order(self, tmp_path: Path):
        _write(tmp_path, "10-base.toml", 'source_dirs = ["/a"]\ntheme = "red"\n')
        _write(tmp_path, "20-local.yaml", "theme: green\n")
        _write(tmp_path, "30-extra.json", '{"source_dirs": ["/b", "/c"]}')
        _write(tmp_path, "notes.txt", "ignored")
        settings = Settings.load(tmp_path)
        assert settings.source_dirs == [Path("/b"), Path("/c")]
        assert settings.theme == "green"

    def test_empty_yaml_file(self, tmp_path: Path):
        _write(tmp_path, "empty.yml", "")
        assert Settings.load(tmp_path).source_dirs == []

    def test_env_overrides(self, tmp_path: Path, monkeypatch):
        _write(tmp_path, "settings.toml", 'source_dirs = ["/a"]\ntheme = "red"\n')
        monkeypatch.setenv("TEMPLATEX_SOURCE_DIRS", os.pathsep.join(["/x", "/y"]))
        monkeypatch.setenv("TEMPLATEX_THEME", "blue")
        settings = Settings.load(tmp_path)
        assert settings.source_dirs == [Path("/x"), Path("/y")]
        assert settings.theme == "blue"

    def test_default_directory_from_env(self, tmp_path: Path, monkeypatch):
        _write(tmp_path, "settings.toml", 'theme = "cyan"\n')
        monkeypatch.setenv("TEMPLATEX_CONFIG", str(tmp_path))
        assert Settings.load().theme == "cyan"

    def test_with_source_dir(self, tmp_path: Path):
        _write(tmp_path, "settings.toml", 'source_dirs = ["~/templates"]\n')
        settings = Settings.with_source_dir(tmp_path)
        assert settings.get_source_dirs() == [Path("~/templates").expanduser()]

    def test_malformed_toml(self, tmp_path: Path):
        path = _write(tmp_path, "bad.toml", "source_dirs = [\n")
        with pytest.raises(SettingsError) as exc_info:
            Settings.load(tmp_path)
        assert exc_info.value.path == path

    def test_malformed_json(self, tmp_path: Path):
        _write(tmp_path, "bad.json", "{not json")
        with pytest.raises(SettingsError):
            Settings.load(tmp_path)

    def test_non_mapping_yaml(self, tmp_path: Path):
        _write(tmp_path, "list.yaml", "- a\n- b\n")
        with pytest.raises(SettingsError, match="mapping"):
            Settings.load(tmp_path)

    def test_wrong_type(self, tmp_path: Path):
        _write(tmp_path, "settings.toml", "source_dirs = 3\n")
        with pytest.raises(SettingsError):
            Settings.load(tmp_path)
