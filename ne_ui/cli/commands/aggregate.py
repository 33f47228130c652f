from __future__ import annotations

import asyncio
from typing import Optional

import typer

from ne_analytics.engine.aggregation import AggregationConfig
from ne_ui.cli.commands.common import echo_json, engine_or_exit, require_node, require_tree
from ne_ui.presenters.aggregation import build_aggregation_table
from ne_ui.wiring.dependencies import UIContext

OPERATIONS = ("sum", "count", "average", "min", "max")


def register_aggregate_command(app: typer.Typer, ctx: UIContext) -> None:
    @app.command("aggregate")
    def aggregate(
        root_id: str = typer.Argument(..., help="Context root resource id."),
        node_id: Optional[str] = typer.Argument(None, help="Node to aggregate (defaults to the root)."),
        target: str = typer.Option(..., "--target", "-k", help="Metadata key holding the values."),
        group_by: Optional[str] = typer.Option(None, "--group-by", "-g", help="Metadata key to group on."),
        operation: str = typer.Option("sum", "--op", help=f"One of: {', '.join(OPERATIONS)}."),
        label_key: Optional[str] = typer.Option(None, "--label-key", help="Key supplying bucket labels."),
        color_key: Optional[str] = typer.Option(None, "--color-key", help="Key supplying bucket colors."),
        recursive: bool = typer.Option(False, "--recursive", "-r", help="Include all descendants."),
        source_id: Optional[str] = typer.Option(None, "--source", help="Aggregate this node instead."),
        as_json: bool = typer.Option(False, "--json", help="Print the result as JSON."),
    ) -> None:
        """Group and reduce metadata values over a node's children."""
        if operation not in OPERATIONS:
            ctx.ui.present.error(f"Unsupported operation: {operation}")
            raise typer.Exit(2)
        engine = engine_or_exit(ctx)
        state = require_tree(ctx, asyncio.run(engine.load_tree(root_id)))
        node = require_node(ctx, state, node_id)
        config = AggregationConfig(
            target_key=target,
            group_by=group_by,
            operation=operation,  # type: ignore[arg-type]
            label_key=label_key,
            color_key=color_key,
            recursive=recursive,
            source_id=source_id,
        )
        data = engine.aggregate(state, node, config)
        if engine.aggregations.last_error is not None and not as_json:
            ctx.ui.present.warning(f"Source {source_id} not found; aggregated {node.title}")
        if as_json:
            echo_json(data.to_dict())
            return
        if data.is_empty:
            ctx.ui.present.info("Nothing to aggregate.")
            return
        ctx.ui.tables.show(build_aggregation_table(data, f"{target} by {group_by or 'total'}"))
