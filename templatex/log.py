"""Logging setup for the command line tool.

Log records from every ``templatex`` module go to two places: a Rich console
handler on stderr, filtered by the level chosen on the command line, and a
plain-text log file that always records everything at DEBUG.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

from templatex.config import ENV_PREFIX, PROJECT_NAME

LOG_FILENAME = f"{PROJECT_NAME}.log"
LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s %(filename)s:%(lineno)d %(message)s"

# Above CRITICAL: nothing reaches the console.
SILENT = logging.CRITICAL + 10


def get_data_dir() -> Path:
    """Return the directory the log file is written to."""
    override = os.environ.get(f"{ENV_PREFIX}_DATA")
    if override:
        return Path(override).expanduser()
    xdg = os.environ.get("XDG_DATA_HOME")
    base = Path(xdg).expanduser() if xdg else Path.home() / ".local" / "share"
    return base / PROJECT_NAME


def level_from_flags(silent: bool = False, verbose: bool = False, very_verbose: bool = False) -> int:
    """Map command-line verbosity flags to a console log level."""
    if very_verbose:
        return logging.DEBUG
    if silent:
        return SILENT
    if verbose:
        return logging.DEBUG
    return logging.INFO


def setup_logging(
    level: int = logging.INFO,
    log_file: str | Path | None = None,
    console: Console | None = None,
) -> logging.Logger:
    """Configure the ``templatex`` logger.

    Args:
        level: Console level (see :func:`level_from_flags`).
        log_file: Log file path.  Defaults to ``<data dir>/templatex.log``.
        console: Console for the Rich handler (defaults to stderr).

    Returns:
        The configured package logger.
    """
    logger = logging.getLogger(PROJECT_NAME)
    logger.setLevel(logging.DEBUG)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    rich_handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=level <= logging.DEBUG,
        rich_tracebacks=True,
    )
    rich_handler.setLevel(level)
    logger.addHandler(rich_handler)

    path = Path(log_file) if log_file is not None else get_data_dir() / LOG_FILENAME
    path.parent.mkdir(parents=True, exist_ok=True)
    file_handler = logging.FileHandler(path, mode="w", encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(file_handler)

    logger.propagate = False
    return logger
