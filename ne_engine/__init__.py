"""Node engine core: resource model, tree building and slot resolution."""

from ne_engine.api import (
    Node,
    Resource,
    SlotResolver,
    build_tree,
    resolve_slot,
    resources_to_node_tree,
)

__all__ = [
    "Node",
    "Resource",
    "SlotResolver",
    "build_tree",
    "resolve_slot",
    "resources_to_node_tree",
]
