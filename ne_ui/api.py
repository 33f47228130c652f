"""Public API surface for ne_ui."""

from ne_ui.presenters.variants import create_variant_registry
from ne_ui.ui.console import ConsoleUI
from ne_ui.ui.models import TableModel
from ne_ui.wiring.dependencies import UIContext

__all__ = ["ConsoleUI", "TableModel", "UIContext", "create_variant_registry"]
