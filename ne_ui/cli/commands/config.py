from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
import yaml

from ne_common.errors import ConfigurationError
from ne_engine.models.config import EngineConfig
from ne_ui.ui.models import TableModel
from ne_ui.wiring.dependencies import UIContext


def create_config_app(ctx: UIContext) -> typer.Typer:
    """Build the config Typer app, wired to the given context."""
    app = typer.Typer(help="Inspect and create engine configuration files.", no_args_is_help=True)

    @app.command("show")
    def config_show(
        as_yaml: bool = typer.Option(False, "--yaml", help="Print the effective config as YAML."),
    ) -> None:
        """Show the effective configuration (file plus NE_* overrides)."""
        try:
            cfg = ctx.config
        except ConfigurationError as exc:
            ctx.ui.present.error(str(exc))
            raise typer.Exit(1)
        if as_yaml:
            typer.echo(yaml.safe_dump(cfg.model_dump(mode="json"), sort_keys=False))
            return
        source = ctx.config_repository.resolve_config_path(ctx.config_path)
        rows = [
            ["source", str(source) if source else "built-in defaults"],
            ["child_order", cfg.child_order],
            ["currency", cfg.formatting.currency],
            ["decimal_places", str(cfg.formatting.decimal_places)],
            ["palette", ", ".join(cfg.palette)],
            ["directory_variant", cfg.directory_variant],
            ["event_resource_type", cfg.event_resource_type],
            ["pane_history_limit", str(cfg.pane_history_limit)],
        ]
        ctx.ui.tables.show(TableModel(title="Engine config", columns=["Key", "Value"], rows=rows))

    @app.command("init")
    def config_init(
        path: Optional[Path] = typer.Option(
            None,
            "--path",
            "-p",
            help="Where to write the config; defaults to ~/.config/ne/config.yaml",
        ),
        force: bool = typer.Option(False, "--force", help="Overwrite an existing file."),
    ) -> None:
        """Write a config file populated with the defaults."""
        target = Path(path).expanduser() if path else ctx.config_repository.default_target
        if target.exists() and not force:
            ctx.ui.present.error(f"{target} already exists; use --force to overwrite")
            raise typer.Exit(1)
        written = ctx.config_repository.save(EngineConfig(), target)
        ctx.ui.present.success(f"Config written to {written}")

    return app
