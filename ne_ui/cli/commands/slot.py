from __future__ import annotations

import asyncio
from typing import Optional

import typer

from ne_engine.models.fields import FieldType
from ne_ui.cli.commands.common import engine_or_exit, require_node, require_tree
from ne_ui.wiring.dependencies import UIContext


def register_slot_command(app: typer.Typer, ctx: UIContext) -> None:
    @app.command("slot")
    def slot(
        root_id: str = typer.Argument(..., help="Context root resource id."),
        node_id: str = typer.Argument(..., help="Node to read the slot from."),
        name: str = typer.Argument(..., help="Slot name (headline, subtext, badge, ...)."),
        field_type: Optional[FieldType] = typer.Option(
            None, "--type", "-t", help="Format the value as this field type."
        ),
        default: Optional[str] = typer.Option(None, "--default", help="Value when the slot is missing."),
        currency: Optional[str] = typer.Option(None, "--currency", help="Currency code override."),
    ) -> None:
        """Resolve a slot on a node and print the formatted value."""
        engine = engine_or_exit(ctx)
        state = require_tree(ctx, asyncio.run(engine.load_tree(root_id)))
        node = require_node(ctx, state, node_id)
        value = engine.resolve_slot(node, name, default, field_type=field_type, currency=currency)
        if value is None:
            ctx.ui.present.warning(f"Slot '{name}' is not defined on {node_id}")
            raise typer.Exit(1)
        typer.echo(str(value))
