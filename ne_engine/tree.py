"""Resource -> Node tree transformer.

Converts a flat collection of resources into a rooted Node tree in linear time:

1. index records by id (first occurrence of a duplicate id wins)
2. group children under their parent id, preserving input order
3. walk from the root with a visited set, attaching child nodes

Records that cannot be attached are never fatal. They are reported on the
returned :class:`TreeBuild` and logged once per build:

- ``orphans``: parent id does not resolve within the record set (dropped)
- ``cycles``: ancestry never terminates (parent chain loops)
- ``unreachable``: valid ancestry that does not lead to the requested root
- ``duplicates``: later records reusing an id that was already indexed
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence

from ne_engine.models.node import (
    Node,
    default_variant_for,
    iter_nodes,
    node_type_for,
)
from ne_engine.models.resource import Resource

logger = logging.getLogger(__name__)

CHILD_ORDERS = ("input", "title")


@dataclass
class TreeBuild:
    """Result of a tree build: the root (or None) plus attachment diagnostics."""

    root: Optional[Node]
    orphans: List[str] = field(default_factory=list)
    cycles: List[str] = field(default_factory=list)
    unreachable: List[str] = field(default_factory=list)
    duplicates: List[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return self.root is None

    @property
    def node_count(self) -> int:
        if self.root is None:
            return 0
        return sum(1 for _ in iter_nodes(self.root))


def resource_to_node(
    resource: Resource, resource_variants: Optional[Dict[str, str]] = None
) -> Node:
    """Convert a single resource into a childless Node.

    ``metadata.variant`` wins over the per-type default variant. Status and
    description are copied into the metadata when it does not carry them.
    """
    meta = dict(resource.metadata)
    variant = meta.get("variant") or default_variant_for(resource.type, resource_variants)
    if not meta.get("status") and resource.status:
        meta["status"] = resource.status.value
    if not meta.get("description") and resource.description:
        meta["description"] = resource.description
    return Node(
        id=resource.id,
        type=node_type_for(resource.type),
        variant=str(variant),
        title=resource.title,
        metadata=meta,
        children=[],
    )


def _index_records(resources: Iterable[Resource]) -> tuple[Dict[str, Resource], List[str]]:
    records: Dict[str, Resource] = {}
    duplicates: List[str] = []
    for resource in resources:
        if resource.is_deleted:
            continue
        if resource.id in records:
            duplicates.append(resource.id)
            continue
        records[resource.id] = resource
    return records, duplicates


def _group_children(
    records: Dict[str, Resource], child_order: str
) -> tuple[Dict[str, List[Resource]], List[str]]:
    children_of: Dict[str, List[Resource]] = defaultdict(list)
    orphans: List[str] = []
    for resource in records.values():
        parent_id = resource.parent_id
        if parent_id is None:
            continue
        if parent_id in records:
            children_of[parent_id].append(resource)
        else:
            orphans.append(resource.id)
    if child_order == "title":
        for siblings in children_of.values():
            siblings.sort(key=lambda r: r.title.casefold())
    return children_of, orphans


def _attach(
    root: Node,
    children_of: Dict[str, List[Resource]],
    visited: set[str],
    cycles: List[str],
    resource_variants: Optional[Dict[str, str]],
) -> None:
    stack = [root]
    while stack:
        parent = stack.pop()
        for child in children_of.get(parent.id, ()):
            if child.id in visited:
                cycles.append(child.id)
                continue
            visited.add(child.id)
            node = resource_to_node(child, resource_variants)
            parent.children.append(node)
            stack.append(node)


def _classify_leftovers(
    records: Dict[str, Resource],
    visited: set[str],
    skip: set[str],
) -> tuple[List[str], List[str]]:
    """Split records left out of the tree into (cycles, unreachable)."""
    verdict: Dict[str, str] = {}
    for start in records:
        if start in visited or start in skip or start in verdict:
            continue
        chain: List[str] = []
        on_chain: set[str] = set()
        current: Optional[str] = start
        result = "unreachable"
        while current is not None:
            if current in verdict:
                result = verdict[current]
                break
            if current in on_chain:
                result = "cycle"
                break
            record = records.get(current)
            if record is None or current in visited or current in skip:
                break
            chain.append(current)
            on_chain.add(current)
            current = record.parent_id
        for record_id in chain:
            verdict[record_id] = result
    cycles = [rid for rid in records if verdict.get(rid) == "cycle"]
    unreachable = [rid for rid in records if verdict.get(rid) == "unreachable"]
    return cycles, unreachable


def _log_diagnostics(build: TreeBuild, root_id: str) -> None:
    for label, ids in (
        ("orphaned", build.orphans),
        ("cyclic", build.cycles),
        ("duplicate", build.duplicates),
    ):
        if ids:
            logger.warning(
                "Ignored %d %s record(s) while building tree %s: %s",
                len(ids),
                label,
                root_id,
                ", ".join(ids[:10]),
            )


def build_tree(
    resources: Iterable[Resource],
    root_id: str,
    *,
    child_order: str = "input",
    resource_variants: Optional[Dict[str, str]] = None,
) -> TreeBuild:
    """Build the Node tree rooted at ``root_id``; never raises on bad data."""
    if child_order not in CHILD_ORDERS:
        raise ValueError(f"Unsupported child order: {child_order}")
    records, duplicates = _index_records(resources)
    if root_id not in records:
        logger.warning("Root node not found: %s", root_id)
        return TreeBuild(root=None, duplicates=duplicates)

    children_of, orphans = _group_children(records, child_order)
    # The root legitimately references a parent outside a fetched subtree.
    orphans = [rid for rid in orphans if rid != root_id]

    root = resource_to_node(records[root_id], resource_variants)
    visited = {root_id}
    cycles: List[str] = []
    _attach(root, children_of, visited, cycles, resource_variants)

    loop_members, unreachable = _classify_leftovers(records, visited, set(orphans))
    build = TreeBuild(
        root=root,
        orphans=orphans,
        cycles=cycles + [rid for rid in loop_members if rid not in cycles],
        unreachable=unreachable,
        duplicates=duplicates,
    )
    _log_diagnostics(build, root_id)
    return build


def resources_to_node_tree(
    resources: Sequence[Resource],
    root_id: str,
    *,
    child_order: str = "input",
    resource_variants: Optional[Dict[str, str]] = None,
) -> Optional[Node]:
    """Convenience wrapper returning only the root (None when absent)."""
    if not resources:
        return None
    return build_tree(
        resources,
        root_id,
        child_order=child_order,
        resource_variants=resource_variants,
    ).root


def build_forest(
    resources: Iterable[Resource],
    *,
    child_order: str = "input",
    resource_variants: Optional[Dict[str, str]] = None,
) -> List[Node]:
    """Build every top-level tree (records without a resolvable parent).

    Used by list views that show several roots at once. Cyclic records have no
    top-level ancestor and are left out, with a warning.
    """
    records, duplicates = _index_records(resources)
    children_of, _ = _group_children(records, child_order)
    top_level = [
        record
        for record in records.values()
        if record.parent_id is None or record.parent_id not in records
    ]
    if child_order == "title":
        top_level.sort(key=lambda r: r.title.casefold())

    visited: set[str] = set()
    cycles: List[str] = []
    roots: List[Node] = []
    for record in top_level:
        visited.add(record.id)
        node = resource_to_node(record, resource_variants)
        _attach(node, children_of, visited, cycles, resource_variants)
        roots.append(node)

    leftovers = [rid for rid in records if rid not in visited]
    if leftovers or duplicates:
        logger.warning(
            "Forest build left out %d cyclic and %d duplicate record(s)",
            len(leftovers),
            len(duplicates),
        )
    return roots
