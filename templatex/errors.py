"""Exception hierarchy for templatex.

Every error the catalog builder, renderer, or command line raises on purpose
derives from :class:`TemplatexError`, so callers can catch the whole family
with a single ``except`` clause.  Filesystem failures are left as the
builtin ``OSError`` family and propagate unchanged.
"""

from __future__ import annotations

from pathlib import Path


class TemplatexError(Exception):
    """Base class for all templatex errors."""


# ---------------------------------------------------------------------------
# Directory loading
# ---------------------------------------------------------------------------


class NotADirectory(TemplatexError, NotADirectoryError):
    """Raised when a template root does not resolve to a directory."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        super().__init__(f"Not a directory: {self.path}")


class InvalidFilename(TemplatexError):
    """Raised when a directory has no base name to derive a template name from."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        super().__init__(f"Cannot derive a template name from {self.path}")


class ConfigParseError(TemplatexError):
    """Raised when a template's sidecar metadata file is present but malformed."""

    def __init__(self, path: str | Path, reason: str) -> None:
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Invalid template metadata in {self.path}: {reason}")


# ---------------------------------------------------------------------------
# Catalog building
# ---------------------------------------------------------------------------


class ConfigurationError(TemplatexError):
    """Raised when the catalog builder is called with unusable input."""


class CompilationError(TemplatexError):
    """Raised when a template root cannot be compiled.

    The whole root is left out of the catalog; a partially compiled entry is
    never produced.
    """

    def __init__(self, directory: str | Path, template_name: str, reason: str) -> None:
        self.directory = Path(directory)
        self.template_name = template_name
        self.reason = reason
        super().__init__(f"Failed to compile {template_name!r} in {self.directory}: {reason}")


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


class TemplateNotFound(TemplatexError):
    """Raised when a render is requested for a name the catalog does not hold."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Template not found: {name}")


class RenderError(TemplatexError):
    """A single template file failed to render.

    Recorded in the render result and logged; the remaining files are still
    rendered.
    """

    def __init__(self, template_name: str, reason: str) -> None:
        self.template_name = template_name
        self.reason = reason
        super().__init__(f"Failed to render {template_name!r}: {reason}")


class ManifestRenderError(TemplatexError):
    """Raised when the generated build manifest cannot be rendered."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Failed to render build manifest: {reason}")


# ---------------------------------------------------------------------------
# Command line
# ---------------------------------------------------------------------------


class SettingsError(TemplatexError):
    """Raised when a persisted settings file cannot be parsed."""

    def __init__(self, path: str | Path, reason: str) -> None:
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Invalid settings file {self.path}: {reason}")


class NothingSelected(TemplatexError):
    """Raised when the user leaves the template picker without choosing."""

    def __init__(self) -> None:
        super().__init__("No template selected")


class NoTemplatesFound(TemplatexError):
    """Raised when no usable template directory was found."""

    def __init__(self) -> None:
        super().__init__("No templates found")
