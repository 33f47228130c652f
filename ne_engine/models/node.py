"""Unified node view-model.

A Node is the in-memory, hierarchical projection of resources:

- ``type`` says what the node is (space, container, collection, item)
- ``variant`` says how it is presented (resolved by the variant registry)
- ``metadata`` carries domain data and the slot configuration
- ``children`` are owned by their parent; the root owns the whole tree
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator


class NodeType(str, Enum):
    SPACE = "space"
    CONTAINER = "container"
    COLLECTION = "collection"
    ITEM = "item"


RESOURCE_TYPE_TO_NODE_TYPE: Dict[str, NodeType] = {
    "folder": NodeType.CONTAINER,
    "project": NodeType.COLLECTION,
    "task": NodeType.ITEM,
    "recipe": NodeType.ITEM,
    "ingredient": NodeType.ITEM,
    "stock_item": NodeType.ITEM,
    "workout": NodeType.ITEM,
    "exercise": NodeType.ITEM,
    "document": NodeType.ITEM,
    "event": NodeType.ITEM,
}

DEFAULT_RESOURCE_VARIANTS: Dict[str, str] = {
    "folder": "row_neon_group",
    "project": "view_list_stack",
    "task": "row_detail_check",
    "recipe": "card_media_top",
    "document": "row_simple",
    "event": "row_detail_check",
}
FALLBACK_VARIANT = "row_simple"
DIRECTORY_VARIANT = "view_directory"
EMPTY_ROOT_PLACEHOLDER = "No items yet. Tap + to create one."


@dataclass
class Node:
    """Ephemeral view-model node; rebuilt from resources on every refresh."""

    id: str
    type: NodeType
    variant: str
    title: str
    metadata: Dict[str, Any] = field(default_factory=dict)
    children: List["Node"] = field(default_factory=list)

    def with_variant(self, variant: str) -> "Node":
        """Shallow copy presenting the same subtree through another variant."""
        return Node(
            id=self.id,
            type=self.type,
            variant=variant,
            title=self.title,
            metadata=self.metadata,
            children=self.children,
        )


def node_type_for(resource_type: str) -> NodeType:
    return RESOURCE_TYPE_TO_NODE_TYPE.get(resource_type, NodeType.ITEM)


def default_variant_for(
    resource_type: str, overrides: Optional[Dict[str, str]] = None
) -> str:
    table = overrides if overrides is not None else DEFAULT_RESOURCE_VARIANTS
    return table.get(resource_type, FALLBACK_VARIANT)


def iter_nodes(root: Node) -> Iterator[Node]:
    """Depth-first, pre-order walk over ``root`` and its descendants."""
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children))


def iter_descendants(root: Node) -> Iterator[Node]:
    nodes = iter_nodes(root)
    next(nodes)
    yield from nodes


def count_nodes(root: Optional[Node]) -> int:
    if root is None:
        return 0
    return sum(1 for _ in iter_nodes(root))


def find_node_by_id(root: Optional[Node], node_id: str) -> Optional[Node]:
    if root is None:
        return None
    for node in iter_nodes(root):
        if node.id == node_id:
            return node
    return None


def create_empty_root_node(
    node_id: str, title: str, variant: str = DIRECTORY_VARIANT
) -> Node:
    """Placeholder root for a context that exists but has no children yet."""
    return Node(
        id=node_id,
        type=NodeType.CONTAINER,
        variant=variant,
        title=title,
        metadata={"placeholder": EMPTY_ROOT_PLACEHOLDER},
        children=[],
    )


def node_to_dict(node: Node) -> Dict[str, Any]:
    """Serialize a tree following ownership (children) edges only."""
    return {
        "id": node.id,
        "type": node.type.value,
        "variant": node.variant,
        "title": node.title,
        "metadata": dict(node.metadata),
        "children": [node_to_dict(child) for child in node.children],
    }


class NodeSchema(BaseModel):
    """Validation schema for JSON node trees."""

    model_config = ConfigDict(extra="ignore")

    id: str = Field(min_length=1)
    type: NodeType
    variant: str = Field(min_length=1)
    title: str = Field(min_length=1)
    metadata: Dict[str, Any] = Field(default_factory=dict)
    children: List["NodeSchema"] = Field(default_factory=list)

    @field_validator("children", mode="before")
    @classmethod
    def _none_children(cls, value: Any) -> Any:
        return [] if value is None else value

    def to_node(self) -> Node:
        return Node(
            id=self.id,
            type=self.type,
            variant=self.variant,
            title=self.title,
            metadata=dict(self.metadata),
            children=[child.to_node() for child in self.children],
        )


class NodeParseError(ValueError):
    """Raised when a JSON document is not a valid node tree."""

    def __init__(self, issues: List[str]) -> None:
        super().__init__("\n".join(issues))
        self.issues = issues


def node_from_dict(data: Any) -> Node:
    """Validate a decoded JSON document and build a Node tree from it."""
    try:
        return NodeSchema.model_validate(data).to_node()
    except ValidationError as exc:
        issues = [
            f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
            for err in exc.errors()
        ]
        raise NodeParseError(issues) from exc
