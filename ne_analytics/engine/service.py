"""Aggregation service resolving the source node before aggregating.

Dashboard cards may aggregate a node other than the one they render (a
sibling ledger, a parent budget). ``source_id`` is a lookup-by-id reference
into the current tree, never an ownership edge.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import List, Optional, Sequence

from ne_analytics.engine.aggregation import (
    AggregatedData,
    AggregationConfig,
    aggregate_children,
)
from ne_common.errors import SourceNotFoundError
from ne_engine.index import NodeIndex
from ne_engine.memo import IdentityMemo
from ne_engine.models.config import DEFAULT_PALETTE
from ne_engine.models.node import Node
from ne_engine.slots import SlotResolver

logger = logging.getLogger(__name__)

SOURCE_SLOT = "source_id"


class AggregationService:
    """Aggregate nodes, following ``source_id`` references through an index."""

    def __init__(
        self,
        palette: Optional[Sequence[str]] = None,
        slots: Optional[SlotResolver] = None,
    ) -> None:
        self.palette: List[str] = list(palette or DEFAULT_PALETTE)
        self.slots = slots or SlotResolver()
        self.last_error: Optional[SourceNotFoundError] = None
        self._memo: IdentityMemo[AggregatedData] = IdentityMemo(self._compute, maxsize=64)

    def resolve_source(
        self, node: Optional[Node], config: AggregationConfig, index: Optional[NodeIndex]
    ) -> Optional[Node]:
        """Return the node to aggregate; unresolved sources fall back to ``node``."""
        self.last_error = None
        if not config.source_id:
            return node
        source = index.get(config.source_id) if index is not None else None
        if source is not None:
            return source
        self.last_error = SourceNotFoundError(
            "Aggregation source not found in tree",
            context={"source_id": config.source_id, "node_id": node.id if node else None},
        )
        logger.warning(
            "source_id %r not found in tree; falling back to current node",
            config.source_id,
        )
        return node

    def _compute(self, node: Optional[Node], config: AggregationConfig) -> AggregatedData:
        return aggregate_children(node, config, self.palette)

    def aggregate(
        self,
        node: Optional[Node],
        config: AggregationConfig,
        index: Optional[NodeIndex] = None,
    ) -> AggregatedData:
        target = self.resolve_source(node, config, index)
        return self._memo(target, config)

    def slot_based_aggregation(
        self,
        node: Optional[Node],
        config: AggregationConfig,
        index: Optional[NodeIndex] = None,
    ) -> AggregatedData:
        """Aggregate using the ``source_id`` slot of ``node`` as the source."""
        source_id = self.slots.resolve(node, SOURCE_SLOT)
        merged = replace(config, source_id=str(source_id) if source_id else None)
        return self.aggregate(node, merged, index)
