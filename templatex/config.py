"""Persisted templatex settings.

Settings are read from every ``*.toml``, ``*.json``, ``*.yaml`` and ``*.yml``
file in ``<config dir>/config/`` (sorted by file name, later files override
earlier keys) and then from environment variables:

    TEMPLATEX_CONFIG        config directory override
    TEMPLATEX_SOURCE_DIRS   template source directories, ``os.pathsep`` separated
    TEMPLATEX_THEME         accent style used by the template picker
"""

from __future__ import annotations

import json
import os
import tomllib
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError

from templatex.errors import SettingsError

PROJECT_NAME = "templatex"
ENV_PREFIX = PROJECT_NAME.upper()

_PARSERS = {
    ".toml": tomllib.loads,
    ".json": json.loads,
    ".yaml": yaml.safe_load,
    ".yml": yaml.safe_load,
}


def get_config_dir() -> Path:
    """Return the directory holding the ``config/`` folder."""
    override = os.environ.get(f"{ENV_PREFIX}_CONFIG")
    if override:
        return Path(override).expanduser()
    xdg = os.environ.get("XDG_CONFIG_HOME")
    base = Path(xdg).expanduser() if xdg else Path.home() / ".config"
    return base / PROJECT_NAME


class Settings(BaseModel):
    """User settings for the command line tool."""

    source_dirs: list[Path] = Field(
        default_factory=list,
        description="Directories whose child directories are template roots",
    )
    theme: str | None = Field(default=None, description="Rich style used to highlight the picker")

    @classmethod
    def load(cls, config_dir: str | Path | None = None) -> Settings:
        """Load settings from *config_dir* (default: :func:`get_config_dir`).

        Raises:
            SettingsError: If a settings file is malformed.
        """
        directory = Path(config_dir).expanduser() if config_dir is not None else get_config_dir()
        data: dict[str, Any] = {}

        files_dir = directory / "config"
        if files_dir.is_dir():
            for path in sorted(files_dir.iterdir()):
                parser = _PARSERS.get(path.suffix.lower())
                if parser is None or not path.is_file():
                    continue
                data.update(_read_settings_file(path, parser))

        source_dirs = os.environ.get(f"{ENV_PREFIX}_SOURCE_DIRS")
        if source_dirs:
            data["source_dirs"] = [p for p in source_dirs.split(os.pathsep) if p]
        theme = os.environ.get(f"{ENV_PREFIX}_THEME")
        if theme:
            data["theme"] = theme

        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            raise SettingsError(files_dir, str(exc)) from exc

    @classmethod
    def with_source_dir(cls, config_dir: str | Path) -> Settings:
        """Load settings from an explicit configuration directory."""
        return cls.load(config_dir)

    def get_source_dirs(self) -> list[Path]:
        return [p.expanduser() for p in self.source_dirs]


def _read_settings_file(path: Path, parser: Any) -> dict[str, Any]:
    try:
        parsed = parser(path.read_text(encoding="utf-8"))
    except (tomllib.TOMLDecodeError, json.JSONDecodeError, yaml.YAMLError) as exc:
        raise SettingsError(path, str(exc)) from exc
    if parsed is None:
        return {}
    if not isinstance(parsed, dict):
        raise SettingsError(path, "top level must be a table/mapping")
    return parsed
