"""Rich console front-end used by the CLI."""

from __future__ import annotations

from typing import Any

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ne_ui.ui import theme
from ne_ui.ui.models import TableModel


def build_rich_table(model: TableModel) -> Table:
    table = Table(
        title=model.title,
        show_lines=False,
        box=box.ROUNDED,
        border_style=theme.RICH_BORDER_STYLE,
        header_style=theme.RICH_ACCENT_BOLD,
        title_style=theme.RICH_ACCENT_BOLD,
    )
    for column in model.columns:
        table.add_column(column, overflow="fold")
    for row in model.rows:
        table.add_row(*row)
    return table


class RichMessagePresenter:
    def __init__(self, console: Console) -> None:
        self._console = console

    def _emit(self, kind: str, message: str) -> None:
        self._console.print(theme.PRESENTER_TEMPLATES[kind].format(message=escape(message)))

    def info(self, message: str) -> None:
        self._emit("info", message)

    def warning(self, message: str) -> None:
        self._emit("warning", message)

    def error(self, message: str) -> None:
        self._emit("error", message)

    def success(self, message: str) -> None:
        self._emit("success", message)


class RichTablePresenter:
    def __init__(self, console: Console) -> None:
        self._console = console

    def show(self, table: TableModel) -> None:
        self._console.print(build_rich_table(table))


class ConsoleUI:
    """Bundle of console presenters sharing one rich Console."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console(highlight=False, soft_wrap=True)
        self.present = RichMessagePresenter(self.console)
        self.tables = RichTablePresenter(self.console)

    def show(self, renderable: Any) -> None:
        self.console.print(renderable)
