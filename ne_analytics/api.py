"""Public API surface for ne_analytics."""

from ne_analytics.engine.aggregation import (
    AggregatedData,
    AggregatedItem,
    AggregationConfig,
    aggregate_children,
    chart_series,
    child_count,
    child_sum,
    collect_candidates,
    empty_result,
)
from ne_analytics.engine.service import AggregationService

__all__ = [
    "AggregatedData",
    "AggregatedItem",
    "AggregationConfig",
    "AggregationService",
    "aggregate_children",
    "chart_series",
    "child_count",
    "child_sum",
    "collect_candidates",
    "empty_result",
]
