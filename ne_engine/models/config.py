"""Engine configuration (tree ordering, formatting, palette, variants)."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, List, Literal, Mapping

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from ne_common.config.env import parse_int_env, parse_list_env
from ne_common.errors import ConfigurationError
from ne_engine.models.node import DEFAULT_RESOURCE_VARIANTS, DIRECTORY_VARIANT

DEFAULT_PALETTE: List[str] = [
    "#06b6d4",  # cyan
    "#ec4899",  # pink
    "#a855f7",  # purple
    "#22c55e",  # green
    "#eab308",  # yellow
    "#f97316",  # orange
    "#3b82f6",  # blue
    "#ef4444",  # red
]

DEFAULT_TYPE_VARIANTS: Dict[str, str] = {
    "space": "container_stack",
    "container": "container_stack",
    "collection": "grid_card",
    "item": "list_row",
}

ChildOrder = Literal["input", "title"]


class FormattingConfig(BaseModel):
    """Slot formatting defaults."""

    currency: str = Field(default="USD", description="ISO currency code for currency slots")
    decimal_places: int = Field(default=2, ge=0, le=6, description="Fraction digits for currency")

    @field_validator("currency")
    @classmethod
    def _upper_currency(cls, value: str) -> str:
        value = value.strip().upper()
        if len(value) != 3 or not value.isalpha():
            raise ValueError("currency must be a three-letter ISO code")
        return value


class EngineConfig(BaseModel):
    """Main configuration for the node engine."""

    child_order: ChildOrder = Field(
        default="input",
        description="Sibling order in built trees: input order or title order",
    )
    formatting: FormattingConfig = Field(default_factory=FormattingConfig)
    palette: List[str] = Field(
        default_factory=lambda: list(DEFAULT_PALETTE),
        min_length=1,
        description="Colors cycled for aggregation buckets",
    )
    resource_variants: Dict[str, str] = Field(
        default_factory=lambda: dict(DEFAULT_RESOURCE_VARIANTS),
        description="Default variant per resource type",
    )
    type_variants: Dict[str, str] = Field(
        default_factory=lambda: dict(DEFAULT_TYPE_VARIANTS),
        description="Registry fallback variant per node type",
    )
    directory_variant: str = Field(default=DIRECTORY_VARIANT)
    event_resource_type: str = Field(default="task", description="Type of records created by log_event")
    pane_history_limit: int = Field(default=10, gt=0)

    def save(self, filepath: Path) -> None:
        if filepath.suffix in {".yaml", ".yml"}:
            filepath.write_text(yaml.safe_dump(self.model_dump(mode="json"), sort_keys=False))
        else:
            filepath.write_text(self.model_dump_json(indent=2))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EngineConfig":
        return cls.model_validate(data)

    @classmethod
    def load(cls, filepath: Path) -> "EngineConfig":
        try:
            text = filepath.read_text()
            if filepath.suffix in {".yaml", ".yml"}:
                data = yaml.safe_load(text) or {}
            else:
                data = json.loads(text)
            return cls.from_dict(data)
        except (OSError, ValueError, yaml.YAMLError, ValidationError) as exc:
            raise ConfigurationError(
                f"Unable to load engine config from {filepath}",
                context={"path": filepath},
                cause=exc,
            ) from exc

    def with_env_overrides(self, environ: Mapping[str, str] | None = None) -> "EngineConfig":
        """Apply NE_* environment overrides on top of this config."""
        env = os.environ if environ is None else environ
        update: Dict[str, Any] = {}
        order = env.get("NE_CHILD_ORDER")
        if order:
            update["child_order"] = order.strip().lower()
        palette = parse_list_env(env.get("NE_PALETTE"))
        if palette:
            update["palette"] = palette
        currency = env.get("NE_CURRENCY")
        if currency:
            update["formatting"] = {**self.formatting.model_dump(), "currency": currency}
        history = parse_int_env(env.get("NE_PANE_HISTORY_LIMIT"))
        if history is not None:
            update["pane_history_limit"] = history
        if not update:
            return self
        try:
            return self.model_validate({**self.model_dump(), **update})
        except ValidationError as exc:
            raise ConfigurationError(
                "Invalid NE_* environment override", context=update, cause=exc
            ) from exc
