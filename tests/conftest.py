"""Shared pytest fixtures for the templatex test suite.

Provides reusable fixtures for:
- Building template root directories on disk
- A small binary image payload
- A clean ``TEMPLATEX_*`` environment
- Resetting the package logger between tests
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path

import pytest


# A PNG signature followed by bytes that are not valid UTF-8.
PNG_BYTES = b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR\xff\xfe\x00\x80"


# ---------------------------------------------------------------------------
# Template directories
# ---------------------------------------------------------------------------

TemplateFactory = Callable[..., Path]


@pytest.fixture
def make_template(tmp_path: Path) -> TemplateFactory:
    """Factory creating a template root under ``tmp_path / "templates"``.

    Usage::

        def test_something(make_template):
            root = make_template("report", {"main.tex": "{{ title }}"})
    """

    def factory(name: str, files: dict[str, str | bytes], metadata: str | None = None) -> Path:
        root = tmp_path / "templates" / name
        root.mkdir(parents=True, exist_ok=True)
        for relative, content in files.items():
            path = root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            if isinstance(content, bytes):
                path.write_bytes(content)
            else:
                path.write_bytes(content.encode("utf-8"))
        if metadata is not None:
            (root / "templatex.toml").write_text(metadata, encoding="utf-8")
        return root

    return factory


@pytest.fixture
def png_bytes() -> bytes:
    return PNG_BYTES


@pytest.fixture
def demo_template(make_template: TemplateFactory) -> Path:
    """The ``demo`` root: a named template with one source and one image."""
    return make_template(
        "demo",
        {
            "main.tex": "\\documentclass{article}\n\\title{ {{ project }} }\n",
            "logo.png": PNG_BYTES,
        },
        metadata='name = "Demo"\n',
    )


# ---------------------------------------------------------------------------
# Environment & logging hygiene
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Keep user settings and log files out of the tests."""
    for name in ("TEMPLATEX_CONFIG", "TEMPLATEX_SOURCE_DIRS", "TEMPLATEX_THEME", "XDG_CONFIG_HOME"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("TEMPLATEX_DATA", str(tmp_path / "data"))


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Undo ``setup_logging`` so caplog keeps seeing package records."""
    yield
    logger = logging.getLogger("templatex")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
