"""Console presenters for node variants.

Each presenter turns one node into a rich renderable. Containers render
their children back through the registry, so nested variants are honoured.
"""

from __future__ import annotations

from typing import Any

from rich.markup import escape
from rich.panel import Panel
from rich.tree import Tree

from ne_app.registry import VariantRegistry
from ne_engine.models.config import EngineConfig
from ne_engine.models.node import Node
from ne_engine.slots import SlotResolver
from ne_ui.ui import theme


class RowPresenter:
    def __init__(self, slots: SlotResolver) -> None:
        self.slots = slots

    def present(self, node: Node) -> Any:
        headline = escape(str(self.slots.resolve(node, "headline", node.title)))
        subtext = self.slots.resolve(node, "subtext")
        if subtext:
            return f"{headline} [dim]{escape(str(subtext))}[/dim]"
        return headline


class CheckRowPresenter(RowPresenter):
    MARKS = {"completed": "[green]☑[/green]", "archived": "[dim]☒[/dim]"}

    def present(self, node: Node) -> Any:
        mark = self.MARKS.get(str(node.metadata.get("status")), "☐")
        line = f"{mark} {super().present(node)}"
        badge = self.slots.resolve(node, "badge", field_type="date")
        if badge:
            line += f" [yellow]{escape(str(badge))}[/yellow]"
        return line


class CardPresenter(RowPresenter):
    def present(self, node: Node) -> Any:
        headline = str(self.slots.resolve(node, "headline", node.title))
        body = self.slots.resolve(node, "subtext") or ""
        media = self.slots.resolve(node, "media")
        if media:
            body = f"{body}\n[dim]{escape(str(media))}[/dim]" if body else f"[dim]{escape(str(media))}[/dim]"
        return Panel(body or " ", title=escape(headline), border_style=theme.RICH_BORDER_STYLE)


class ContainerPresenter:
    """Renders a node and its children through the registry."""

    def __init__(self, registry: VariantRegistry, slots: SlotResolver) -> None:
        self.registry = registry
        self.slots = slots

    def present(self, node: Node) -> Any:
        headline = escape(str(self.slots.resolve(node, "headline", node.title)))
        tree = Tree(f"[{theme.RICH_ACCENT_BOLD}]{headline}[/{theme.RICH_ACCENT_BOLD}]")
        placeholder = node.metadata.get("placeholder")
        if not node.children and placeholder:
            tree.add(f"[dim]{escape(str(placeholder))}[/dim]")
        for child in node.children:
            tree.add(self.registry.present(child))
        return tree


class RawPresenter:
    """Fallback: show the node identity and its unknown variant."""

    def present(self, node: Node) -> Any:
        return (
            f"[red]?[/red] {escape(node.title)} "
            f"[{theme.VARIANT_STYLE}]unknown variant {escape(node.variant)}[/{theme.VARIANT_STYLE}]"
        )


def create_variant_registry(config: EngineConfig, slots: SlotResolver) -> VariantRegistry:
    """Registry with every console presenter registered."""
    registry = VariantRegistry(config.type_variants, fallback=RawPresenter())
    row = RowPresenter(slots)
    check = CheckRowPresenter(slots)
    card = CardPresenter(slots)
    container = ContainerPresenter(registry, slots)
    for variant, presenter in (
        ("row_simple", row),
        ("list_row", row),
        ("row_detail_check", check),
        ("card_media_top", card),
        ("grid_card", card),
        ("row_neon_group", container),
        ("view_list_stack", container),
        ("container_stack", container),
    ):
        registry.register(variant, presenter)
    if config.directory_variant not in registry:
        registry.register(config.directory_variant, container)
    return registry
