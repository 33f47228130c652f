"""Helpers shared by CLI commands."""

from __future__ import annotations

import json
from typing import Any, Optional

import typer

from ne_app.viewmodels.view_state import ViewState
from ne_common.errors import NEError
from ne_engine.models.node import Node
from ne_ui.wiring.dependencies import UIContext


def echo_json(payload: Any) -> None:
    typer.echo(json.dumps(payload, indent=2, sort_keys=True, default=str))


def engine_or_exit(ctx: UIContext):
    try:
        return ctx.engine
    except NEError as exc:
        ctx.ui.present.error(str(exc))
        raise typer.Exit(1)


def require_tree(ctx: UIContext, state: ViewState) -> ViewState:
    """Exit with an error for failed loads and missing roots."""
    if state.status == "error":
        ctx.ui.present.error(state.message or "Could not load resources")
        raise typer.Exit(1)
    if state.root is None:
        ctx.ui.present.error(f"Root node not found: {state.root_id}")
        raise typer.Exit(1)
    return state


def require_node(ctx: UIContext, state: ViewState, node_id: Optional[str]) -> Node:
    if not node_id:
        return state.root
    node = ctx.engine.find(state, node_id)
    if node is None:
        ctx.ui.present.error(f"Node {node_id} is not part of tree {state.root_id}")
        raise typer.Exit(1)
    return node
