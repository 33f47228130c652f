"""Presenter for aggregation results."""

from __future__ import annotations

from ne_analytics.engine.aggregation import AggregatedData
from ne_ui.ui.models import TableModel


def _number(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return f"{value:.2f}"


def build_aggregation_table(data: AggregatedData, title: str) -> TableModel:
    rows = [
        [item.label, _number(item.value), str(item.count), f"{item.percentage:.2f}%", item.color or ""]
        for item in data.items
    ]
    rows.append(["total", _number(data.total), str(data.node_count), "", ""])
    return TableModel(
        title=title,
        columns=["Label", "Value", "Count", "Share", "Color"],
        rows=rows,
    )
