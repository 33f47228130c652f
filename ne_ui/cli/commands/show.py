from __future__ import annotations

import asyncio
from typing import List, Optional

import typer

from ne_ui.cli.commands.common import engine_or_exit, require_tree
from ne_ui.wiring.dependencies import UIContext


def register_show_command(app: typer.Typer, ctx: UIContext) -> None:
    @app.command("show")
    def show(
        root_id: str = typer.Argument(..., help="Context root resource id."),
        folders: Optional[List[str]] = typer.Option(
            None,
            "--into",
            "-i",
            help="Folder id to navigate into; repeat to descend further.",
        ),
    ) -> None:
        """Render the current directory view through the variant registry."""
        engine = engine_or_exit(ctx)
        state = require_tree(ctx, asyncio.run(engine.load_tree(root_id)))
        navigation = engine.navigation
        navigation.set_context_root(state.root.id, state.root.title)
        for folder_id in folders or []:
            node = engine.find(state, folder_id)
            if node is None:
                ctx.ui.present.warning(f"Folder {folder_id} not found; staying at {navigation.current_title}")
                break
            navigation.navigate_into(node.id, node.title)

        crumbs = " / ".join(crumb.title for crumb in navigation.breadcrumbs())
        ctx.ui.present.info(crumbs)
        view = engine.current_view(state)
        ctx.ui.show(engine.present(view))
