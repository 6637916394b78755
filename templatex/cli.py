"""Command-line entry point.

Usage::

    templatex my-paper
    templatex my-paper --template-dir ~/templates/report --out-dir ./papers/my-paper
    python -m templatex my-paper -c ./my-config -v
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from templatex import __version__
from templatex.config import Settings
from templatex.engine import Engine
from templatex.errors import NoTemplatesFound, TemplatexError
from templatex.loader import discover_template_dirs, load_template_dirs
from templatex.log import level_from_flags, setup_logging
from templatex.picker import pick_template, prompt_variables
from templatex.renderer import RenderResult

logger = logging.getLogger(__name__)

console = Console()


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------


def _print_status(message: str, style: str) -> None:
    console.print(f"[{style}]{escape(message)}[/{style}]")


def print_result(result: RenderResult) -> None:
    """Print what a render wrote, followed by a one-line verdict."""
    table = Table(title="Scaffolded project", show_header=True, header_style="bold cyan")
    table.add_column("Item", style="dim", no_wrap=True)
    table.add_column("Value")
    table.add_row("Output", escape(str(result.output_root)))
    table.add_row("Rendered", str(len(result.written)))
    table.add_row("Copied", str(len(result.copied)))
    table.add_row("Failed", escape(", ".join(result.failed) or "-"))
    table.add_row("Manifest", escape(str(result.manifest)))
    console.print(table)
    console.print()

    if result.ok:
        _print_status("Done.", "bold green")
    else:
        _print_status(
            f"{len(result.failed)} file(s) failed to render, see the log for details.",
            "bold yellow",
        )


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="templatex",
        description="Scaffold a new project from a template directory",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  templatex my-paper\n"
            "  templatex my-paper -t ~/templates/report -o ./papers/my-paper\n"
        ),
    )
    parser.add_argument("name", help="Project name (also the default output directory)")
    parser.add_argument(
        "--template-dir", "-t",
        type=Path,
        default=None,
        help="Use this template directory instead of the configured sources",
    )
    parser.add_argument(
        "--out-dir", "-o",
        type=Path,
        default=None,
        help="Output directory (default: ./NAME)",
    )
    parser.add_argument(
        "--config-dir", "-c",
        type=Path,
        default=None,
        help="Read settings from this directory instead of the default location",
    )
    parser.add_argument("--silent", "-s", action="store_true", help="Suppress log output")
    parser.add_argument("--verbose", "-v", action="store_true", help="Show debug output")
    parser.add_argument("--very-verbose", action="store_true", help="Show all output")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def run(args: argparse.Namespace) -> RenderResult:
    """Select a template, collect its variables, and render it.

    Raises:
        NoTemplatesFound: If no usable template directory exists.
        TemplatexError: On any other user-facing failure.
    """
    settings = Settings.with_source_dir(args.config_dir) if args.config_dir else Settings.load()

    if args.template_dir is not None:
        candidates = [args.template_dir]
    else:
        candidates = discover_template_dirs(settings.get_source_dirs())

    loaded = load_template_dirs(candidates)
    if not loaded:
        raise NoTemplatesFound()

    selected = pick_template(loaded, console=console, accent=settings.theme)
    logger.info("Selected template %s (%s)", selected.name, selected.directory)

    engine = Engine.build([selected.directory])
    template = engine.get_template(selected.name)
    if template is None:
        raise TemplatexError(f"Template {selected.name!r} could not be compiled, see the log for details")

    bindings = prompt_variables(template.variables, console=console)
    out_dir = args.out_dir if args.out_dir is not None else Path(args.name)
    return engine.render(out_dir, template.name, bindings)


def main(argv: list[str] | None = None) -> int:
    """CLI entry point for ``templatex`` / ``python -m templatex``."""
    args = build_parser().parse_args(argv)
    setup_logging(level_from_flags(args.silent, args.verbose, args.very_verbose))
    logger.debug("Starting up")

    try:
        result = run(args)
    except NoTemplatesFound as exc:
        _print_status(str(exc), "bold yellow")
        return 1
    except TemplatexError as exc:
        _print_status(f"Error: {exc}", "bold red")
        return 1
    except KeyboardInterrupt:
        _print_status("Aborted", "bold yellow")
        return 130

    print_result(result)
    return 0


if __name__ == "__main__":
    sys.exit(main())
