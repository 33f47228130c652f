"""Presenters for built node trees."""

from __future__ import annotations

from typing import Optional

from rich.markup import escape
from rich.tree import Tree

from ne_engine.models.node import Node
from ne_engine.tree import TreeBuild
from ne_ui.ui import theme
from ne_ui.ui.models import TableModel


def node_label(node: Node) -> str:
    status = node.metadata.get("status")
    parts = [f"[bold]{escape(node.title)}[/bold]"]
    if status:
        parts.append(theme.status_text(str(status)))
    parts.append(f"[{theme.VARIANT_STYLE}]{escape(node.variant)}[/{theme.VARIANT_STYLE}]")
    parts.append(f"[dim]{escape(node.id)}[/dim]")
    return " ".join(parts)


def build_tree_renderable(root: Node) -> Tree:
    """Rich tree following ownership edges only."""
    tree = Tree(node_label(root), guide_style=theme.RICH_BORDER_STYLE)
    stack = [(root, tree)]
    while stack:
        node, branch = stack.pop()
        for child in node.children:
            stack.append((child, branch.add(node_label(child))))
    return tree


def build_diagnostics_table(build: TreeBuild) -> Optional[TableModel]:
    """Table of records left out of the tree, or None when all attached."""
    rows = [
        [kind, ", ".join(ids)]
        for kind, ids in (
            ("orphan", build.orphans),
            ("cycle", build.cycles),
            ("unreachable", build.unreachable),
            ("duplicate", build.duplicates),
        )
        if ids
    ]
    if not rows:
        return None
    return TableModel(title="Skipped records", columns=["Reason", "Ids"], rows=rows)
