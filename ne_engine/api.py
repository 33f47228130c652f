"""Public API surface for ne_engine."""

from ne_engine.formatting import (
    apply_formatting,
    format_boolean,
    format_currency,
    format_date,
    format_number,
)
from ne_engine.index import NodeIndex
from ne_engine.memo import IdentityMemo
from ne_engine.models.config import DEFAULT_PALETTE, EngineConfig, FormattingConfig
from ne_engine.models.fields import CONFIG_KEY, TITLE_KEY, FieldType, SlotMapping
from ne_engine.models.node import (
    DIRECTORY_VARIANT,
    EMPTY_ROOT_PLACEHOLDER,
    Node,
    NodeParseError,
    NodeType,
    count_nodes,
    create_empty_root_node,
    find_node_by_id,
    iter_descendants,
    iter_nodes,
    node_from_dict,
    node_to_dict,
)
from ne_engine.models.resource import (
    STATUS_CYCLE,
    Resource,
    ResourceStatus,
    next_status,
)
from ne_engine.paths import (
    compute_path,
    depth_from_path,
    is_descendant_path,
    ltree_label,
    rebase_path,
)
from ne_engine.slots import (
    DEFAULT_SLOT_MAPPINGS,
    SlotResolver,
    resolve_slot,
    resolve_slots,
    slot_exists,
)
from ne_engine.tree import TreeBuild, build_forest, build_tree, resources_to_node_tree

__all__ = [
    "Resource",
    "ResourceStatus",
    "STATUS_CYCLE",
    "next_status",
    "Node",
    "NodeType",
    "NodeParseError",
    "DIRECTORY_VARIANT",
    "EMPTY_ROOT_PLACEHOLDER",
    "count_nodes",
    "create_empty_root_node",
    "find_node_by_id",
    "iter_descendants",
    "iter_nodes",
    "node_from_dict",
    "node_to_dict",
    "FieldType",
    "SlotMapping",
    "CONFIG_KEY",
    "TITLE_KEY",
    "EngineConfig",
    "FormattingConfig",
    "DEFAULT_PALETTE",
    "compute_path",
    "depth_from_path",
    "is_descendant_path",
    "ltree_label",
    "rebase_path",
    "TreeBuild",
    "build_tree",
    "build_forest",
    "resources_to_node_tree",
    "SlotResolver",
    "DEFAULT_SLOT_MAPPINGS",
    "resolve_slot",
    "resolve_slots",
    "slot_exists",
    "apply_formatting",
    "format_boolean",
    "format_currency",
    "format_date",
    "format_number",
    "NodeIndex",
    "IdentityMemo",
]
