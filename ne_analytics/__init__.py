"""Aggregation package computing grouped statistics over node subtrees."""

from ne_common.api import configure_logging as _configure_logging

_configure_logging()

from ne_analytics.api import (  # noqa: F401
    AggregatedData,
    AggregatedItem,
    AggregationConfig,
    AggregationService,
    aggregate_children,
)

__all__ = [
    "AggregatedData",
    "AggregatedItem",
    "AggregationConfig",
    "AggregationService",
    "aggregate_children",
]
