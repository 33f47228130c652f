"""Console UI building blocks."""

from ne_ui.ui.console import ConsoleUI
from ne_ui.ui.models import TableModel

__all__ = ["ConsoleUI", "TableModel"]
