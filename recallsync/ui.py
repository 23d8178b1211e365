"""Terminal output for the recallsync commands.

Plain mode writes bare lines through ``click.echo`` (pipes, CI, tests); rich
mode styles the same lines for a terminal. Commands never branch on the mode
themselves.
"""

from __future__ import annotations

from collections.abc import Iterable

import click
from rich import box
from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text
from rich.theme import Theme

RECALL_THEME = Theme(
    {
        "recall.border": "#3b82f6",
        "recall.title": "bold #c4e0ff",
        "recall.heading": "bold #93c5fd",
        "recall.success": "#34d399",
        "recall.failed": "bold #ff6b6b",
        "recall.skipped": "#9ca3af",
        "recall.warning": "bold #f9a825",
        "recall.text": "#d6dee8",
    }
)

_RESULT_STYLES = {
    "SUCCESS:": "recall.success",
    "FAILED:": "recall.failed",
    "SKIPPED:": "recall.skipped",
}


def _style_for(line: str) -> str:
    for prefix, style in _RESULT_STYLES.items():
        if line.startswith(prefix):
            return style
    if line and not line.startswith(("-", " ")) and not line.endswith(":") and "(" in line:
        return "recall.heading"
    return "recall.text"


class ConsoleFacade:
    """Line-oriented output shared by every command."""

    def __init__(self, plain: bool):
        self.plain = plain
        self.console: Console | None = None if plain else Console(theme=RECALL_THEME, highlight=False)

    def summary(self, title: str, lines: Iterable[str]) -> None:
        lines = list(lines)
        if self.console is None:
            click.echo(f"-- {title} --")
            for line in lines:
                click.echo(line)
            return
        body = Group(*(Text(line, style=_style_for(line)) for line in lines))
        self.console.print(
            Panel(
                body,
                title=Text(title, style="recall.title"),
                title_align="left",
                border_style="recall.border",
                box=box.ROUNDED,
                padding=(0, 1),
            )
        )

    def lines(self, lines: Iterable[str]) -> None:
        for line in lines:
            if self.console is None:
                click.echo(line)
            else:
                self.console.print(Text(line, style=_style_for(line)))

    def warning(self, message: str) -> None:
        if self.console is None:
            click.echo(f"Warning: {message}")
        else:
            self.console.print(Text(f"! {message}", style="recall.warning"))

    def note(self, message: str) -> None:
        if self.console is None:
            click.echo(f"Note: {message}")
        else:
            self.console.print(Text(f"Note: {message}", style="recall.text"))


def create_ui(plain: bool) -> ConsoleFacade:
    return ConsoleFacade(plain=plain)


__all__ = ["RECALL_THEME", "ConsoleFacade", "create_ui"]
