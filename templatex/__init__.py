"""templatex -- scaffold projects from template directories.

Quick usage::

    from templatex import Engine

    engine = Engine.build(["./templates/report"])
    template = engine.get_template("report")
    engine.render("./my-paper", template.name, [("title", "My Paper")])
"""

from templatex.engine import Engine, FileKind, Template, TemplateFile, classify
from templatex.filter import AUXILIARY_FILTER, IMAGE_FILTER, Filter
from templatex.loader import LoadedTemplateDirectory, LoadedTemplateDirectoryConfig, load_directory
from templatex.renderer import RenderResult, render_template

__version__ = "0.1.0"

__all__ = [
    "AUXILIARY_FILTER",
    "Engine",
    "FileKind",
    "Filter",
    "IMAGE_FILTER",
    "LoadedTemplateDirectory",
    "LoadedTemplateDirectoryConfig",
    "RenderResult",
    "Template",
    "TemplateFile",
    "classify",
    "load_directory",
    "render_template",
]
