"""
Aggregation engine for computing grouped statistics over node subtrees.

This module turns the children (or all descendants) of a node into a small
set of buckets suitable for charts and progress bars. Grouping and reduction
are delegated to pandas; ordering, colors and percentages follow the rules
below so the output is stable for identical inputs:

- buckets are sorted by value, descending; ties keep encounter order
- ``percentage = value / total * 100`` (0 when the total is 0)
- explicit colors (``color_key``) win, first seen per group; otherwise the
  palette is cycled by the group's encounter index
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Literal, Optional, Sequence

import pandas as pd

from ne_engine.models.config import DEFAULT_PALETTE
from ne_engine.models.node import Node

logger = logging.getLogger(__name__)

Operation = Literal["sum", "count", "average", "min", "max"]

OTHER_GROUP = "Other"
TOTAL_LABEL = "Total"

_PANDAS_REDUCERS: Dict[str, str] = {
    "sum": "sum",
    "count": "size",
    "average": "mean",
    "min": "min",
    "max": "max",
}

_LEADING_NUMBER = re.compile(r"^\s*([+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?)")


@dataclass(frozen=True)
class AggregationConfig:
    """What to aggregate and how to bucket it."""

    target_key: str
    group_by: Optional[str] = None
    operation: Operation = "sum"
    label_key: Optional[str] = None
    color_key: Optional[str] = None
    recursive: bool = False
    filter: Optional[Callable[[Node], bool]] = None
    source_id: Optional[str] = None

    def __post_init__(self) -> None:
        if self.operation not in _PANDAS_REDUCERS:
            raise ValueError(f"Unsupported aggregation operation: {self.operation}")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AggregationConfig":
        """Build a config from its JSON shape (no filter predicate)."""
        return cls(
            target_key=str(data["target_key"]),
            group_by=data.get("group_by") or None,
            operation=data.get("operation") or "sum",
            label_key=data.get("label_key") or None,
            color_key=data.get("color_key") or None,
            recursive=bool(data.get("recursive", False)),
            source_id=data.get("source_id") or None,
        )


@dataclass
class AggregatedItem:
    """One bucket of an aggregation result."""

    label: str
    value: float
    count: int
    percentage: float
    color: Optional[str] = None
    group_key: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "label": self.label,
            "value": self.value,
            "count": self.count,
            "percentage": self.percentage,
            "color": self.color,
        }
        if self.group_key is not None:
            payload["groupKey"] = self.group_key
        return payload


@dataclass
class AggregatedData:
    total: float = 0
    items: List[AggregatedItem] = field(default_factory=list)
    max: float = 0
    min: float = 0
    average: float = 0
    node_count: int = 0
    is_empty: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total": self.total,
            "items": [item.to_dict() for item in self.items],
            "max": self.max,
            "min": self.min,
            "average": self.average,
            "nodeCount": self.node_count,
            "isEmpty": self.is_empty,
        }


def empty_result() -> AggregatedData:
    return AggregatedData()


def extract_value(node: Node, key: str) -> float:
    """Numeric value of ``metadata[key]``; anything non-numeric counts as 0."""
    value = node.metadata.get(key)
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        return float(value) if math.isfinite(value) else 0.0
    if isinstance(value, str):
        match = _LEADING_NUMBER.match(value)
        if match:
            return float(match.group(1))
        logger.debug("Non-numeric %s=%r on node %s coerced to 0", key, value, node.id)
    return 0.0


def extract_string(node: Node, key: str) -> str:
    value = node.metadata.get(key)
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def collect_candidates(
    node: Node,
    recursive: bool = False,
    predicate: Optional[Callable[[Node], bool]] = None,
) -> List[Node]:
    """Children (or all descendants, pre-order) passing ``predicate``.

    The predicate only decides membership; filtered-out nodes are still
    descended into when ``recursive`` is set.
    """
    result: List[Node] = []
    stack = list(reversed(node.children))
    while stack:
        child = stack.pop()
        if predicate is None or predicate(child):
            result.append(child)
        if recursive and child.children:
            stack.extend(reversed(child.children))
    return result


def _reduce(values: Sequence[float], operation: str) -> float:
    if not values:
        return 0.0
    series = pd.Series(values, dtype="float64")
    if operation == "count":
        return float(len(series))
    return float(getattr(series, _PANDAS_REDUCERS[operation])())


def _ungrouped(
    node: Node, candidates: List[Node], config: AggregationConfig, palette: Sequence[str]
) -> AggregatedData:
    values = [extract_value(child, config.target_key) for child in candidates]
    total = _reduce(values, config.operation)
    item = AggregatedItem(
        label=node.title or TOTAL_LABEL,
        value=total,
        count=len(candidates),
        percentage=100.0,
        color=palette[0],
    )
    return AggregatedData(
        total=total,
        items=[item],
        max=total,
        min=total,
        average=total,
        node_count=len(candidates),
        is_empty=False,
    )


def _grouped(candidates: List[Node], config: AggregationConfig, palette: Sequence[str]) -> AggregatedData:
    group_by = config.group_by or ""
    frame = pd.DataFrame(
        {
            "group": [extract_string(child, group_by) or OTHER_GROUP for child in candidates],
            "value": [extract_value(child, config.target_key) for child in candidates],
            "label": [
                extract_string(child, config.label_key) if config.label_key else ""
                for child in candidates
            ],
            "color": [
                extract_string(child, config.color_key) if config.color_key else ""
                for child in candidates
            ],
        }
    )

    grouped = frame.groupby("group", sort=False)
    values = grouped["value"].agg(_PANDAS_REDUCERS[config.operation])
    counts = grouped.size()
    first_rows = frame.drop_duplicates("group").set_index("group")
    colors = frame[frame["color"] != ""].drop_duplicates("group").set_index("group")["color"]

    items: List[AggregatedItem] = []
    for position, group_key in enumerate(first_rows.index):
        label = first_rows.at[group_key, "label"] or group_key
        items.append(
            AggregatedItem(
                label=str(label),
                value=float(values[group_key]),
                count=int(counts[group_key]),
                percentage=0.0,
                color=colors.get(group_key) or palette[position % len(palette)],
                group_key=str(group_key),
            )
        )

    items.sort(key=lambda item: item.value, reverse=True)
    total = sum(item.value for item in items)
    for item in items:
        item.percentage = item.value / total * 100 if total > 0 else 0.0

    bucket_values = [item.value for item in items]
    return AggregatedData(
        total=total,
        items=items,
        max=max(bucket_values),
        min=min(bucket_values),
        average=total / len(items),
        node_count=len(candidates),
        is_empty=False,
    )


def aggregate_children(
    node: Optional[Node],
    config: AggregationConfig,
    palette: Optional[Sequence[str]] = None,
) -> AggregatedData:
    """Aggregate the children of ``node`` according to ``config``.

    Args:
        node: Source node; None yields the empty result.
        config: Target key, grouping and reduction settings.
        palette: Colors cycled for buckets without an explicit color.

    Returns:
        AggregatedData with buckets sorted by value, descending.
    """
    if node is None:
        return empty_result()
    colors = list(palette or DEFAULT_PALETTE)
    candidates = collect_candidates(node, config.recursive, config.filter)
    if not candidates:
        return empty_result()
    if config.group_by:
        return _grouped(candidates, config, colors)
    return _ungrouped(node, candidates, config, colors)


def child_sum(node: Optional[Node], target_key: str, group_by: Optional[str] = None) -> AggregatedData:
    return aggregate_children(
        node, AggregationConfig(target_key=target_key, group_by=group_by, operation="sum")
    )


def child_count(node: Optional[Node], group_by: Optional[str] = None) -> AggregatedData:
    return aggregate_children(
        node, AggregationConfig(target_key="id", group_by=group_by, operation="count")
    )


def chart_series(data: AggregatedData, palette: Optional[Sequence[str]] = None) -> List[Dict[str, Any]]:
    """Rows shaped for charting libraries: ``{name, value, fill}``."""
    fallback = (palette or DEFAULT_PALETTE)[0]
    return [
        {"name": item.label, "value": item.value, "fill": item.color or fallback}
        for item in data.items
    ]
