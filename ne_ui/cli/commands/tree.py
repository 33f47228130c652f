from __future__ import annotations

import asyncio
from typing import Optional

import typer

from ne_engine.models.node import node_to_dict
from ne_ui.cli.commands.common import echo_json, engine_or_exit, require_tree
from ne_ui.presenters.tree import build_diagnostics_table, build_tree_renderable
from ne_ui.wiring.dependencies import UIContext


def register_tree_command(app: typer.Typer, ctx: UIContext) -> None:
    @app.command("tree")
    def tree(
        root_id: str = typer.Argument(..., help="Id of the resource to root the tree at."),
        as_json: bool = typer.Option(False, "--json", help="Print the node tree as JSON."),
        order: Optional[str] = typer.Option(
            None,
            "--order",
            help="Sibling order: 'input' (stored order) or 'title'.",
        ),
    ) -> None:
        """Build and print the node tree below ROOT_ID."""
        if order:
            if order not in ("input", "title"):
                ctx.ui.present.error("--order must be 'input' or 'title'")
                raise typer.Exit(2)
            ctx.use_config(ctx.config.model_copy(update={"child_order": order}))
        engine = engine_or_exit(ctx)
        state = require_tree(ctx, asyncio.run(engine.load_tree(root_id)))
        build = state.build

        if as_json:
            echo_json(node_to_dict(build.root if build and build.root else state.root))
            return

        if state.status == "empty":
            ctx.ui.present.info(state.message)
        ctx.ui.show(build_tree_renderable(state.root))
        diagnostics = build_diagnostics_table(build) if build else None
        if diagnostics is not None:
            ctx.ui.tables.show(diagnostics)
