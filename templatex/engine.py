"""Template catalog: discovery, classification, compilation, and harvesting.

:meth:`Engine.build` turns a list of template root directories into an
immutable catalog.  For each root it:

1. loads the sidecar metadata (skipping roots marked ``ignore``),
2. classifies every file as a template source, an image asset, or a file to
   drop,
3. compiles the sources with Jinja2 and checks their inheritance chains,
4. harvests the variables each source references.

A root that fails any of these steps is logged and left out of the catalog;
it is never present in a half-built state.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

from jinja2 import DictLoader, Environment, StrictUndefined, TemplateSyntaxError, meta, nodes

from templatex.errors import CompilationError, ConfigurationError, TemplatexError
from templatex.filter import AUXILIARY_FILTER, IMAGE_FILTER, Filter
from templatex.loader import METADATA_FILENAME, LoadedTemplateDirectory, load_directory

if TYPE_CHECKING:
    from templatex.renderer import Bindings, RenderResult

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# File classification
# ---------------------------------------------------------------------------


class FileKind(str, Enum):
    """What the catalog does with a file found under a template root."""

    SOURCE = "source"  # compiled and rendered
    IMAGE = "image"  # copied byte for byte
    SKIPPED = "skipped"  # neither


def has_extension(name: str | Path, extensions: Filter) -> bool:
    """Whether *name* ends in one of the extensions listed in *extensions*.

    Each entry is compared whole against the same number of trailing
    suffixes, so ``synctex.gz`` matches ``main.synctex.gz`` while the dotted
    stem of ``thesis.outline.tex`` is never looked at.
    """
    suffixes = [suffix[1:] for suffix in Path(name).suffixes]
    for pattern in extensions:
        if isinstance(pattern, Filter):
            if has_extension(name, pattern):
                return True
            continue
        parts = pattern.split(".")
        if len(parts) <= len(suffixes) and suffixes[-len(parts):] == parts:
            return True
    return False


def classify(
    relative_name: str,
    exclude: Filter | None = None,
    include: Filter | None = None,
) -> FileKind:
    """Classify a file by its path relative to the template root.

    The first matching rule wins: exclude override, include override, image
    extension, auxiliary extension, and finally template source.
    """
    if exclude is not None and exclude.matches(relative_name):
        return FileKind.SKIPPED
    if include is not None and include.matches(relative_name):
        return FileKind.SOURCE

    if has_extension(relative_name, IMAGE_FILTER):
        return FileKind.IMAGE
    if has_extension(relative_name, AUXILIARY_FILTER):
        return FileKind.SKIPPED
    return FileKind.SOURCE


def is_auxiliary(relative_name: str) -> bool:
    return has_extension(relative_name, AUXILIARY_FILTER)


# ---------------------------------------------------------------------------
# Catalog entries
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TemplateFile:
    """A template source and the variables it references."""

    name: str  # compiler key: POSIX path relative to the template root
    path: Path
    variables: tuple[str, ...] = ()


@dataclass(frozen=True)
class Template:
    """One compiled template root."""

    name: str
    directory: Path
    files: tuple[TemplateFile, ...]
    images: tuple[Path, ...]
    environment: Environment = field(repr=False, compare=False)
    description: str | None = None
    include_filter: Filter | None = field(default=None, repr=False, compare=False)

    @property
    def source_names(self) -> list[str]:
        return [f.name for f in self.files]

    @property
    def variables(self) -> list[str]:
        """Union of every file's variables, in first-seen order."""
        seen: dict[str, None] = {}
        for template_file in self.files:
            for variable in template_file.variables:
                seen.setdefault(variable, None)
        return list(seen)

    def is_forced(self, relative_name: str) -> bool:
        """Whether an include override claimed *relative_name*."""
        return self.include_filter is not None and self.include_filter.matches(relative_name)


@dataclass(frozen=True)
class Engine:
    """The immutable template catalog."""

    template_dirs: tuple[Path, ...]
    templates: tuple[Template, ...] = ()

    @classmethod
    def build(
        cls,
        template_dirs: Iterable[str | Path],
        exclude_filter: Filter | None = None,
        include_filter: Filter | None = None,
    ) -> Engine:
        """Build a catalog from template root directories.

        Args:
            template_dirs: Root directories, one template each.
            exclude_filter: Extra patterns dropping files in every root.
            include_filter: Extra patterns forcing files in every root to be
                treated as template sources.

        Raises:
            ConfigurationError: If *template_dirs* is empty.
        """
        roots = tuple(Path(d) for d in template_dirs)
        if not roots:
            raise ConfigurationError("No template directories provided")

        templates: list[Template] = []
        for root in roots:
            try:
                loaded = load_directory(root)
                if loaded.config.ignore:
                    logger.info("Ignoring template dir %s", loaded.directory)
                    continue
                template = build_template(loaded, exclude=exclude_filter, include=include_filter)
            except (TemplatexError, OSError) as exc:
                logger.warning("Skipping template dir %s: %s", root, exc)
                continue
            for earlier in templates:
                if earlier.name == template.name:
                    logger.warning(
                        "Template name %r in %s is already used by %s; only the first is reachable by name",
                        template.name, template.directory, earlier.directory,
                    )
                    break
            templates.append(template)

        return cls(template_dirs=roots, templates=tuple(templates))

    @property
    def names(self) -> list[str]:
        return [t.name for t in self.templates]

    def get_template(self, name: str) -> Template | None:
        for template in self.templates:
            if template.name == name:
                return template
        return None

    def render(self, output_root: str | Path, name: str, bindings: Bindings) -> RenderResult:
        """Render the template called *name* into *output_root*.

        See :func:`templatex.renderer.render_template`.
        """
        from templatex.renderer import render_template

        return render_template(self, name, output_root, bindings)


# ---------------------------------------------------------------------------
# Compilation
# ---------------------------------------------------------------------------


def create_environment(sources: Mapping[str, str]) -> Environment:
    """Create the Jinja2 environment holding one root's template sources.

    Undefined variables are errors at render time.  Whitespace is left
    untouched so static text renders back to the same bytes.
    """
    return Environment(
        loader=DictLoader(dict(sources)),
        undefined=StrictUndefined,
        keep_trailing_newline=True,
        autoescape=False,
    )


def build_template(
    loaded: LoadedTemplateDirectory,
    exclude: Filter | None = None,
    include: Filter | None = None,
) -> Template:
    """Classify, compile, and harvest one template root.

    *exclude* and *include* are combined with the directory's own override
    lists.

    Raises:
        CompilationError: If a source cannot be decoded or parsed, references
            a template outside this root, or takes part in a cyclic
            ``extends`` chain.
        ConfigurationError: If the root has no usable files.
    """
    directory = loaded.directory
    exclude = Filter.combine(exclude, loaded.config.exclude_filter)
    include = Filter.combine(include, loaded.config.include_filter)

    source_paths: dict[str, Path] = {}
    images: list[Path] = []
    for path in sorted(p for p in directory.rglob("*") if p.is_file()):
        relative_name = path.relative_to(directory).as_posix()
        if relative_name == METADATA_FILENAME:
            continue
        kind = classify(relative_name, exclude=exclude, include=include)
        logger.debug("%s: %s", relative_name, kind.value)
        if kind is FileKind.SOURCE:
            source_paths[relative_name] = path
        elif kind is FileKind.IMAGE:
            images.append(path)

    if not source_paths and not images:
        raise ConfigurationError(f"No usable files in {directory}")

    sources: dict[str, str] = {}
    for relative_name, path in source_paths.items():
        try:
            sources[relative_name] = path.read_bytes().decode("utf-8")
        except UnicodeDecodeError as exc:
            raise CompilationError(directory, relative_name, f"not valid UTF-8 ({exc.reason})") from exc

    environment = create_environment(sources)
    trees: dict[str, nodes.Template] = {}
    for relative_name, source in sources.items():
        try:
            trees[relative_name] = environment.parse(source, name=relative_name)
            environment.get_template(relative_name)
        except TemplateSyntaxError as exc:
            raise CompilationError(directory, relative_name, f"line {exc.lineno}: {exc.message}") from exc

    resolve_inheritance(directory, trees)

    ignored = set(environment.globals)
    files = tuple(
        TemplateFile(
            name=relative_name,
            path=source_paths[relative_name],
            variables=tuple(harvest_variables(tree, ignore=ignored)),
        )
        for relative_name, tree in trees.items()
    )

    logger.info(
        "Compiled template %s from %s (%d files, %d images)",
        loaded.name, directory, len(files), len(images),
    )
    return Template(
        name=loaded.name,
        directory=directory,
        files=files,
        images=tuple(images),
        environment=environment,
        description=loaded.description,
        include_filter=include,
    )


def resolve_inheritance(directory: Path, trees: Mapping[str, nodes.Template]) -> dict[str, str]:
    """Check that every referenced template exists and ``extends`` chains end.

    Returns:
        Mapping of child template name to the parent it extends.

    Raises:
        CompilationError: On an unknown reference or a cycle.
    """
    parents: dict[str, str] = {}
    for name, tree in trees.items():
        for reference in meta.find_referenced_templates(tree):
            # Dynamic references (computed names) can only be checked at render time.
            if reference is not None and reference not in trees:
                raise CompilationError(directory, name, f"references unknown template {reference!r}")
        for node in tree.find_all(nodes.Extends):
            if isinstance(node.template, nodes.Const) and isinstance(node.template.value, str):
                parents[name] = node.template.value

    for name in parents:
        chain = [name]
        current = name
        while current in parents:
            current = parents[current]
            if current in chain:
                cycle = " -> ".join([*chain, current])
                raise CompilationError(directory, name, f"cyclic extends chain: {cycle}")
            chain.append(current)
    return parents


def harvest_variables(tree: nodes.Template, ignore: Iterable[str] = ()) -> list[str]:
    """Return the variables *tree* reads from its context.

    Names are kept in the order they first appear.  Names the template binds
    itself (``set``, loop targets, macro arguments) and names in *ignore* are
    left out.
    """
    undeclared = meta.find_undeclared_variables(tree) - set(ignore)
    seen: dict[str, None] = {}
    for node in tree.find_all(nodes.Name):
        if node.ctx == "load" and node.name in undeclared:
            seen.setdefault(node.name, None)
    return list(seen)

