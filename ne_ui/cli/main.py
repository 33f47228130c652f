"""
Command-line interface for lifeos-node-engine.

Builds node trees from a JSON resources file and exercises slots,
aggregations and behaviors against them.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from ne_ui.cli.commands.aggregate import register_aggregate_command
from ne_ui.cli.commands.config import create_config_app
from ne_ui.cli.commands.dispatch import register_dispatch_command
from ne_ui.cli.commands.show import register_show_command
from ne_ui.cli.commands.slot import register_slot_command
from ne_ui.cli.commands.tree import register_tree_command
from ne_ui.wiring.dependencies import UIContext, configure_logging

ctx_store = UIContext()

app = typer.Typer(help="Inspect and drive personal-data node trees.", no_args_is_help=True)


@app.callback(invoke_without_command=True)
def entry(
    ctx: typer.Context,
    resources: Optional[Path] = typer.Option(
        None,
        "--resources",
        "-r",
        help="Resources JSON file (defaults to $NE_RESOURCES_PATH or ./resources.json).",
    ),
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Engine config file (YAML or JSON).",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    """Global options shared by every command."""
    if verbose:
        configure_logging(debug=True, force=True)
    ctx_store.reset()
    ctx_store.resources_path = resources
    ctx_store.config_path = config

    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


register_tree_command(app, ctx_store)
register_show_command(app, ctx_store)
register_slot_command(app, ctx_store)
register_aggregate_command(app, ctx_store)
register_dispatch_command(app, ctx_store)
app.add_typer(create_config_app(ctx_store), name="config")


def main() -> None:
    """Console script entrypoint (Typer app)."""
    app()


if __name__ == "__main__":
    main()
