"""Interactive template picker and variable prompt.

The picker shows the candidate template directories in a Rich table and
narrows them by free text typed at the prompt.  The narrowing filter belongs
to the picker instance, so several pickers never share state.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from rich.console import Console
from rich.markup import escape
from rich.prompt import Prompt
from rich.table import Table

from templatex.errors import NothingSelected
from templatex.filter import Filter
from templatex.loader import LoadedTemplateDirectory

QUIT_ANSWERS = frozenset({"q", ":q", "quit"})


class TemplatePicker:
    """Choose one template directory from several.

    Attributes:
        entries: All candidates, in display order.
        filter: Live free-text filter applied to display names.
    """

    def __init__(
        self,
        entries: Sequence[LoadedTemplateDirectory],
        console: Console | None = None,
        accent: str | None = None,
    ) -> None:
        self.entries = list(entries)
        self.filter = Filter()
        self.console = console or Console()
        self.accent = accent or "cyan"

    def narrow(self, text: str) -> None:
        self.filter.replace_patterns([text])

    def visible(self) -> list[LoadedTemplateDirectory]:
        """Entries whose display name matches the filter (all when unset)."""
        if not self.filter.patterns:
            return list(self.entries)
        return [entry for entry in self.entries if self.filter.matches(entry.name)]

    def table(self) -> Table:
        table = Table(show_header=True, header_style=f"bold {self.accent}")
        table.add_column("#", justify="right", style="dim")
        table.add_column("Dir", style="dim")
        table.add_column("Name", style=self.accent)
        table.add_column("Description")
        for index, entry in enumerate(self.visible(), start=1):
            table.add_row(
                str(index),
                escape(str(entry.directory)),
                escape(entry.name),
                escape(entry.description or ""),
            )
        return table

    def pick(self) -> LoadedTemplateDirectory:
        """Run the prompt loop until one entry is chosen.

        A row number selects that row, ``q`` aborts, an empty answer accepts
        the only visible row, and any other text narrows the list.

        Raises:
            NothingSelected: If the user quits.
        """
        while True:
            visible = self.visible()
            self.console.print(self.table())
            if not visible:
                self.console.print("[yellow]No template matches the filter.[/yellow]")

            answer = Prompt.ask(
                "Template number, text to filter, or q to quit",
                console=self.console,
                default="",
                show_default=False,
            ).strip()

            if answer.lower() in QUIT_ANSWERS:
                raise NothingSelected()
            if not answer:
                if len(visible) == 1:
                    return visible[0]
                self.narrow("")
                continue
            if answer.isdigit():
                index = int(answer)
                if 1 <= index <= len(visible):
                    return visible[index - 1]
                self.console.print(f"[red]No row {index}.[/red]")
                continue
            self.narrow(answer)


def pick_template(
    entries: Sequence[LoadedTemplateDirectory],
    console: Console | None = None,
    accent: str | None = None,
) -> LoadedTemplateDirectory:
    """Return the single entry, or ask the user to choose among several."""
    if not entries:
        raise NothingSelected()
    if len(entries) == 1:
        return entries[0]
    return TemplatePicker(entries, console=console, accent=accent).pick()


def prompt_variables(names: Iterable[str], console: Console | None = None) -> list[tuple[str, str]]:
    """Ask for one value per variable; an empty answer is kept as ``""``."""
    console = console or Console()
    return [
        (name, Prompt.ask(f"Enter value for {escape(name)}", console=console, default="", show_default=False))
        for name in names
    ]
