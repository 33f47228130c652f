from __future__ import annotations

import asyncio
import json
from typing import Any, Optional

import typer

from ne_app.services.dispatcher import DispatchResult
from ne_ui.cli.commands.common import echo_json, engine_or_exit, require_node, require_tree
from ne_ui.presenters.dispatch import render_dispatch_result
from ne_ui.wiring.dependencies import UIContext


def register_dispatch_command(app: typer.Typer, ctx: UIContext) -> None:
    @app.command("dispatch")
    def dispatch(
        root_id: str = typer.Argument(..., help="Context root resource id."),
        node_id: str = typer.Argument(..., help="Node the behavior is attached to."),
        action: str = typer.Argument(..., help="Behavior action (toggle_status, update_field, ...)."),
        target: Optional[str] = typer.Option(None, "--target", help="Field targeted by the action."),
        payload: Optional[str] = typer.Option(None, "--payload", help="JSON payload for the action."),
        as_json: bool = typer.Option(False, "--json", help="Print the dispatch result as JSON."),
    ) -> None:
        """Dispatch a behavior descriptor against a node and persist the result."""
        parsed: Any = None
        if payload is not None:
            try:
                parsed = json.loads(payload)
            except json.JSONDecodeError as exc:
                ctx.ui.present.error(f"Invalid --payload JSON: {exc}")
                raise typer.Exit(2)
        engine = engine_or_exit(ctx)

        async def run() -> DispatchResult:
            state = require_tree(ctx, await engine.load_tree(root_id))
            node = require_node(ctx, state, node_id)
            return await engine.dispatch(
                node, {"action": action, "target": target, "payload": parsed}
            )

        result = asyncio.run(run())
        if as_json:
            echo_json(result.to_dict())
        elif not render_dispatch_result(ctx.ui, result):
            raise typer.Exit(1)
