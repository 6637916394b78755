"""Materialise a catalog entry into an output project.

Rendering a template named ``report`` into ``out/`` produces::

    out/
        Tectonic.toml       generated build manifest
        src/
            main.tex        rendered template sources
            images/logo.png copied image assets

Individual template files that fail to render are logged and skipped; the
manifest is required and its failure aborts the render.
"""

from __future__ import annotations

import logging
import shutil
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Union

from jinja2 import Environment, FileSystemLoader, StrictUndefined, TemplateError

from templatex.engine import is_auxiliary
from templatex.errors import ManifestRenderError, RenderError, TemplateNotFound

if TYPE_CHECKING:
    from templatex.engine import Engine

logger = logging.getLogger(__name__)

Bindings = Union[Sequence[tuple[str, str]], Mapping[str, str]]

SOURCE_DIRNAME = "src"
MANIFEST_FILENAME = "Tectonic.toml"
MANIFEST_TEMPLATE = "Tectonic.toml.j2"

_MANIFEST_TEMPLATE_DIR = Path(__file__).parent / "templates"

# Errors a template can raise while evaluating its expressions.
_RENDER_ERRORS = (TemplateError, ArithmeticError, LookupError, TypeError, ValueError)


@dataclass
class RenderResult:
    """What a render call wrote."""

    output_root: Path
    written: list[Path] = field(default_factory=list)
    copied: list[Path] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)
    manifest: Path | None = None

    @property
    def ok(self) -> bool:
        return not self.failed


def build_context(bindings: Bindings) -> dict[str, str]:
    """Build a render context; later pairs override earlier ones."""
    if isinstance(bindings, Mapping):
        return dict(bindings)
    context: dict[str, str] = {}
    for name, value in bindings:
        context[name] = value
    return context


def render_template(
    engine: Engine,
    template_name: str,
    output_root: str | Path,
    bindings: Bindings,
) -> RenderResult:
    """Render *template_name* from *engine* into *output_root*.

    Args:
        engine: Catalog holding the template.
        template_name: Display name of the template.
        output_root: Project directory to create or update.  Existing files
            that the template also produces are overwritten; others are left
            alone.
        bindings: ``(variable, value)`` pairs or a mapping.

    Returns:
        A :class:`RenderResult` describing the written files.

    Raises:
        TemplateNotFound: If the engine has no template of that name.
        ManifestRenderError: If the build manifest cannot be rendered.
        OSError: On any filesystem failure.
    """
    template = engine.get_template(template_name)
    if template is None:
        raise TemplateNotFound(template_name)

    output_root = Path(output_root)
    source_root = output_root / SOURCE_DIRNAME
    source_root.mkdir(parents=True, exist_ok=True)

    context = build_context(bindings)
    result = RenderResult(output_root=output_root)

    for image in template.images:
        try:
            relative = image.relative_to(template.directory)
        except ValueError:
            logger.warning("Image %s is outside %s, skipping", image, template.directory)
            continue
        output_file = source_root / relative
        output_file.parent.mkdir(parents=True, exist_ok=True)
        logger.info("Copying %s", output_file)
        shutil.copyfile(image, output_file)
        result.copied.append(output_file)

    for name in template.source_names:
        if is_auxiliary(name) and not template.is_forced(name):
            continue
        output_file = source_root / name
        output_file.parent.mkdir(parents=True, exist_ok=True)

        logger.info("Rendering %s", output_file)
        try:
            rendered = template.environment.get_template(name).render(context)
        except _RENDER_ERRORS as exc:
            error = RenderError(name, str(exc))
            logger.error("%s", error)
            result.failed[name] = error.reason
            continue

        output_file.write_bytes(rendered.encode("utf-8"))
        result.written.append(output_file)

    result.manifest = write_manifest(output_root)
    return result


def create_manifest_environment() -> Environment:
    return Environment(
        loader=FileSystemLoader(str(_MANIFEST_TEMPLATE_DIR)),
        undefined=StrictUndefined,
        keep_trailing_newline=True,
        autoescape=False,
    )


def render_manifest(project_name: str) -> str:
    """Render the bundled build manifest for *project_name*."""
    try:
        manifest = create_manifest_environment().get_template(MANIFEST_TEMPLATE)
        return manifest.render(name=project_name)
    except _RENDER_ERRORS as exc:
        raise ManifestRenderError(str(exc)) from exc


def write_manifest(output_root: str | Path) -> Path:
    """Write the build manifest at the root of *output_root*.

    The project name is the base name of the resolved output directory.
    """
    output_root = Path(output_root)
    content = render_manifest(output_root.resolve().name)
    manifest_path = output_root / MANIFEST_FILENAME
    manifest_path.write_bytes(content.encode("utf-8"))
    logger.info("Wrote build manifest %s", manifest_path)
    return manifest_path
