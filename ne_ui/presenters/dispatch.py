"""Presenter for behavior dispatch outcomes."""

from __future__ import annotations

from ne_app.services.dispatcher import DispatchResult
from ne_ui.ui.console import ConsoleUI


def render_dispatch_result(ui: ConsoleUI, result: DispatchResult) -> bool:
    """Report a dispatch outcome; returns True when it was applied."""
    detail = f" ({result.message})" if result.message else ""
    if result.status == "applied":
        ui.present.success(f"{result.action} applied to {result.node_id}{detail}")
        return True
    if result.status == "ignored":
        ui.present.warning(f"{result.action} ignored for {result.node_id}{detail}")
        return False
    ui.present.error(f"{result.action} {result.status} for {result.node_id}{detail}")
    return False
