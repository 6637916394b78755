"""Unit tests for logging setup (templatex.log)."""

from __future__ import annotations

import io
import logging
from pathlib import Path

import pytest
from rich.console import Console
from rich.logging import RichHandler

from templatex.log import LOG_FILENAME, SILENT, get_data_dir, level_from_flags, setup_logging

pytestmark = pytest.mark.unit


class TestLevelFromFlags:
    @pytest.mark.parametrize(
        "flags, expected",
        [
            ({}, logging.INFO),
            ({"verbose": True}, logging.DEBUG),
            ({"very_verbose": True}, logging.DEBUG),
            ({"silent": True}, SILENT),
            ({"silent": True, "very_verbose": True}, logging.DEBUG),
        ],
    )
    def test_levels(self, flags, expected):
        assert level_from_flags(**flags) == expected


class TestDataDir:
    def test_env_override(self, monkeypatch, tmp_path: Path):
        monkeypatch.setenv("TEMPLATEX_DATA", str(tmp_path / "d"))
        assert get_data_dir() == tmp_path / "d"

    def test_xdg_data_home(self, monkeypatch, tmp_path: Path):
        monkeypatch.delenv("TEMPLATEX_DATA")
        monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path))
        assert get_data_dir() == tmp_path / "templatex"


class TestSetupLogging:
    def test_handlers_and_file(self, tmp_path: Path):
        log_file = tmp_path / "logs" / "run.log"
        stream = io.StringIO()
        logger = setup_logging(logging.WARNING, log_file=log_file, console=Console(file=stream))

        assert logger.name == "templatex"
        assert any(isinstance(h, RichHandler) for h in logger.handlers)
        assert any(isinstance(h, logging.FileHandler) for h in logger.handlers)

        logging.getLogger("templatex.engine").debug("compiled main.tex")
        logging.getLogger("templatex.engine").warning("skipping broken")

        content = log_file.read_text(encoding="utf-8")
        assert "compiled main.tex" in content
        assert "skipping broken" in content
        console_output = stream.getvalue()
        assert "skipping broken" in console_output
        assert "compiled main.tex" not in console_output

    def test_default_log_file_in_data_dir(self, tmp_path: Path):
        setup_logging(logging.INFO, console=Console(file=io.StringIO()))
        logging.getLogger("templatex").info("hello")
        assert "hello" in (tmp_path / "data" / LOG_FILENAME).read_text(encoding="utf-8")

    def test_repeated_setup_does_not_duplicate_handlers(self, tmp_path: Path):
        setup_logging(logging.INFO, log_file=tmp_path / "a.log", console=Console(file=io.StringIO()))
        logger = setup_logging(logging.INFO, log_file=tmp_path / "b.log", console=Console(file=io.StringIO()))
        assert len(logger.handlers) == 2
