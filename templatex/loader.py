"""Template directory discovery and sidecar metadata loading.

A template root may carry a ``templatex.toml`` file describing it::

    name = "Report"
    description = "A plain LaTeX report"
    ignore = false
    exclude = ["drafts/"]
    include = ["notes.log"]

Without one, the directory's base name is used as the display name.
"""

from __future__ import annotations

import logging
import tomllib
from collections.abc import Iterable
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from templatex.errors import ConfigParseError, InvalidFilename, NotADirectory, TemplatexError
from templatex.filter import Filter

logger = logging.getLogger(__name__)

METADATA_FILENAME = "templatex.toml"


# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------


class LoadedTemplateDirectoryConfig(BaseModel):
    """Per-directory metadata read from ``templatex.toml``."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str = Field(..., description="Display name of the template")
    description: str | None = Field(default=None, description="Short description shown in the picker")
    ignore: bool = Field(default=False, description="Leave the directory out of the catalog")
    include: list[str] | None = Field(
        default=None,
        description="Patterns forcing a file to be treated as a template source",
    )
    exclude: list[str] | None = Field(
        default=None,
        description="Patterns dropping a file from the output entirely",
    )

    @property
    def include_filter(self) -> Filter | None:
        return Filter.with_patterns(self.include) if self.include is not None else None

    @property
    def exclude_filter(self) -> Filter | None:
        return Filter.with_patterns(self.exclude) if self.exclude is not None else None


class LoadedTemplateDirectory(BaseModel):
    """A candidate template root paired with its metadata."""

    model_config = ConfigDict(frozen=True)

    config: LoadedTemplateDirectoryConfig
    directory: Path

    @property
    def name(self) -> str:
        return self.config.name

    @property
    def description(self) -> str | None:
        return self.config.description


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


def load_directory(path: str | Path) -> LoadedTemplateDirectory:
    """Load a template root and its optional sidecar metadata.

    Args:
        path: Directory to load.

    Returns:
        The loaded directory, with an absolute ``directory`` path.

    Raises:
        NotADirectory: If *path* is not a directory.
        InvalidFilename: If no metadata is present and the directory has no
            base name.
        ConfigParseError: If the metadata file exists but is malformed.
    """
    path = Path(path)
    if not path.is_dir():
        raise NotADirectory(path)

    directory = path.resolve()
    metadata = directory / METADATA_FILENAME

    raw: str | None = None
    if metadata.is_file():
        try:
            raw = metadata.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.debug("Cannot read %s, using defaults: %s", metadata, exc)

    if raw is None:
        if not directory.name:
            raise InvalidFilename(directory)
        return LoadedTemplateDirectory(
            config=LoadedTemplateDirectoryConfig(name=directory.name),
            directory=directory,
        )

    try:
        data = tomllib.loads(raw)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigParseError(metadata, str(exc)) from exc

    if "name" not in data:
        if not directory.name:
            raise InvalidFilename(directory)
        data["name"] = directory.name

    try:
        config = LoadedTemplateDirectoryConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigParseError(metadata, str(exc)) from exc

    return LoadedTemplateDirectory(config=config, directory=directory)


def discover_template_dirs(source_dirs: Iterable[str | Path]) -> list[Path]:
    """Return the immediate child directories of every source directory.

    Children are sorted by name within each source.  Source directories that
    do not exist are logged and skipped.
    """
    found: list[Path] = []
    for source in source_dirs:
        source = Path(source).expanduser()
        if not source.is_dir():
            logger.warning("Template source directory not found: %s", source)
            continue
        found.extend(sorted(child for child in source.iterdir() if child.is_dir()))
    return found


def load_template_dirs(paths: Iterable[str | Path]) -> list[LoadedTemplateDirectory]:
    """Load every path, dropping the ones that fail or are marked ``ignore``."""
    loaded: list[LoadedTemplateDirectory] = []
    for path in paths:
        try:
            entry = load_directory(path)
        except (TemplatexError, OSError) as exc:
            logger.error("Failed to load template dir: %s", exc)
            continue
        logger.debug("Loaded template dir: %s (%s)", entry.name, entry.directory)
        if entry.config.ignore:
            logger.info("Ignoring template dir %s", entry.directory)
            continue
        loaded.append(entry)
    return loaded
