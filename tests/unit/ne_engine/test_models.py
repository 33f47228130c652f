"""Tests for resources, nodes and the engine config."""

from __future__ import annotations

from pathlib import Path

import pytest

from ne_common.errors import ConfigurationError
from ne_engine.models.config import DEFAULT_PALETTE, EngineConfig
from ne_engine.models.fields import FieldType, SlotMapping
from ne_engine.models.node import (
    EMPTY_ROOT_PLACEHOLDER,
    Node,
    NodeParseError,
    NodeType,
    count_nodes,
    create_empty_root_node,
    find_node_by_id,
    iter_descendants,
    node_from_dict,
    node_to_dict,
)
from ne_engine.models.resource import Resource, ResourceStatus, next_status


pytestmark = pytest.mark.unit_engine


def test_status_cycle_wraps_and_restarts_unknown_values() -> None:
    assert next_status(ResourceStatus.ACTIVE) is ResourceStatus.COMPLETED
    assert next_status("completed") is ResourceStatus.ARCHIVED
    assert next_status("archived") is ResourceStatus.ACTIVE
    assert next_status("paused") is ResourceStatus.ACTIVE
    assert next_status(None) is ResourceStatus.ACTIVE


def test_resource_accepts_meta_data_alias_and_null_metadata() -> None:
    aliased = Resource.model_validate({"id": "a", "title": "A", "meta_data": {"x": 1}})
    assert aliased.metadata == {"x": 1}
    empty = Resource.model_validate({"id": "b", "title": "B", "metadata": None})
    assert empty.metadata == {}


def test_resource_rejects_blank_title() -> None:
    with pytest.raises(ValueError):
        Resource(id="a", title="   ")


def test_slot_mapping_parses_both_shapes() -> None:
    assert SlotMapping.parse("due_date") == SlotMapping(key="due_date")
    assert SlotMapping.parse({"key": "cost", "type": "currency"}) == SlotMapping(
        key="cost", type=FieldType.CURRENCY
    )
    assert SlotMapping.parse({"key": "cost", "type": "weird"}) == SlotMapping(key="cost")
    assert SlotMapping.parse(42) is None


def _sample_tree() -> Node:
    leaf = Node(id="leaf", type=NodeType.ITEM, variant="row_simple", title="Leaf")
    mid = Node(id="mid", type=NodeType.CONTAINER, variant="row_neon_group", title="Mid", children=[leaf])
    return Node(
        id="root",
        type=NodeType.COLLECTION,
        variant="view_list_stack",
        title="Root",
        metadata={"source_id": "leaf"},
        children=[mid],
    )


def test_node_helpers_walk_ownership_edges() -> None:
    root = _sample_tree()
    assert count_nodes(root) == 3
    assert count_nodes(None) == 0
    assert find_node_by_id(root, "leaf").title == "Leaf"
    assert find_node_by_id(root, "missing") is None
    assert [node.id for node in iter_descendants(root)] == ["mid", "leaf"]


def test_node_dict_roundtrip() -> None:
    root = _sample_tree()
    assert node_from_dict(node_to_dict(root)) == root


def test_node_from_dict_lists_offending_paths() -> None:
    with pytest.raises(NodeParseError) as excinfo:
        node_from_dict(
            {
                "id": "root",
                "type": "container",
                "variant": "x",
                "title": "Root",
                "children": [{"id": "c", "type": "planet", "variant": "x", "title": "C"}],
            }
        )
    assert any(issue.startswith("children.0.type") for issue in excinfo.value.issues)


def test_with_variant_shares_children() -> None:
    root = _sample_tree()
    directory = root.with_variant("view_directory")
    assert directory.variant == "view_directory"
    assert directory.children is root.children
    assert root.variant == "view_list_stack"


def test_empty_root_node_carries_placeholder() -> None:
    node = create_empty_root_node("ctx", "Household")
    assert node.children == []
    assert node.metadata["placeholder"] == EMPTY_ROOT_PLACEHOLDER


class TestEngineConfig:
    def test_defaults(self) -> None:
        cfg = EngineConfig()
        assert cfg.child_order == "input"
        assert cfg.formatting.currency == "USD"
        assert cfg.palette == DEFAULT_PALETTE
        assert cfg.pane_history_limit == 10

    def test_yaml_roundtrip(self, tmp_path: Path) -> None:
        cfg = EngineConfig(child_order="title", palette=["#000000"])
        target = tmp_path / "config.yaml"
        cfg.save(target)
        assert EngineConfig.load(target) == cfg

    def test_invalid_file_raises_configuration_error(self, tmp_path: Path) -> None:
        target = tmp_path / "config.json"
        target.write_text('{"child_order": "random"}')
        with pytest.raises(ConfigurationError):
            EngineConfig.load(target)

    def test_currency_is_normalized(self) -> None:
        assert EngineConfig.from_dict({"formatting": {"currency": "eur"}}).formatting.currency == "EUR"
        with pytest.raises(ValueError):
            EngineConfig.from_dict({"formatting": {"currency": "euro"}})

    def test_env_overrides(self) -> None:
        cfg = EngineConfig().with_env_overrides(
            {
                "NE_CHILD_ORDER": "Title",
                "NE_PALETTE": "#111111,#222222",
                "NE_CURRENCY": "gbp",
                "NE_PANE_HISTORY_LIMIT": "4",
            }
        )
        assert cfg.child_order == "title"
        assert cfg.palette == ["#111111", "#222222"]
        assert cfg.formatting.currency == "GBP"
        assert cfg.pane_history_limit == 4

    def test_env_overrides_without_values_return_same_config(self) -> None:
        cfg = EngineConfig()
        assert cfg.with_env_overrides({}) is cfg

    def test_invalid_env_override_raises(self) -> None:
        with pytest.raises(ConfigurationError):
            EngineConfig().with_env_overrides({"NE_CHILD_ORDER": "random"})
