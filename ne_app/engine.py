"""NodeEngine facade wiring the store, cache, builders and dispatcher.

UI layers talk to this object only: load a view state for a context root,
read slots and aggregations from its nodes, and dispatch behaviors. Query
failures never escape :meth:`NodeEngine.load_tree`; they become an error
view state.
"""

from __future__ import annotations

import logging
from typing import Any, List, Mapping, Optional, Union

from ne_analytics.engine.aggregation import AggregatedData, AggregationConfig
from ne_analytics.engine.service import AggregationService
from ne_app.interfaces import ResourceStore
from ne_app.navigation import NavigationController
from ne_app.registry import DebugPresenter, VariantRegistry
from ne_app.services.dispatcher import BehaviorDescriptor, BehaviorDispatcher, DispatchResult
from ne_app.services.query_cache import QueryCache
from ne_app.services.resource_service import ResourceService
from ne_app.viewmodels.view_state import ViewState, error_state
from ne_common.errors import DataUnavailableError
from ne_engine.index import NodeIndex
from ne_engine.memo import IdentityMemo
from ne_engine.models.config import EngineConfig
from ne_engine.models.node import Node, create_empty_root_node, find_node_by_id
from ne_engine.models.resource import Resource
from ne_engine.slots import SlotResolver
from ne_engine.tree import TreeBuild, build_tree

logger = logging.getLogger(__name__)


class NodeEngine:
    """Application facade over one resource store."""

    def __init__(
        self,
        store: ResourceStore,
        config: Optional[EngineConfig] = None,
        *,
        cache: Optional[QueryCache] = None,
        registry: Optional[VariantRegistry] = None,
        navigation: Optional[NavigationController] = None,
    ) -> None:
        self.config = config or EngineConfig()
        self.service = ResourceService(store, cache)
        self.dispatcher = BehaviorDispatcher(
            self.service, event_resource_type=self.config.event_resource_type
        )
        self.slots = SlotResolver(self.config.formatting)
        self.aggregations = AggregationService(self.config.palette, self.slots)
        self.registry = registry or VariantRegistry(
            self.config.type_variants, fallback=DebugPresenter()
        )
        self.navigation = navigation or NavigationController(
            history_limit=self.config.pane_history_limit,
            directory_variant=self.config.directory_variant,
        )
        self._build = IdentityMemo(self._build_tree, maxsize=16)
        self._index = IdentityMemo(NodeIndex.from_tree, maxsize=16)

    @property
    def cache(self) -> QueryCache:
        return self.service.cache

    def _build_tree(self, records: List[Resource], root_id: str) -> TreeBuild:
        return build_tree(
            records,
            root_id,
            child_order=self.config.child_order,
            resource_variants=self.config.resource_variants,
        )

    async def load_tree(self, root_id: str) -> ViewState:
        """Fetch the subtree of ``root_id`` and build its view state."""
        try:
            records = await self.service.fetch_tree(root_id)
        except DataUnavailableError as exc:
            logger.error("Could not load tree %s: %s", root_id, exc)
            return error_state(root_id, exc)

        build = self._build(records, root_id)
        if build.root is None:
            return ViewState(
                root_id=root_id, status="empty", build=build, message="Root node not found"
            )
        if not build.root.children:
            placeholder = create_empty_root_node(
                build.root.id, build.root.title, self.config.directory_variant
            )
            return ViewState(
                root_id=root_id,
                status="empty",
                root=placeholder,
                build=build,
                message=str(placeholder.metadata["placeholder"]),
            )
        return ViewState(root_id=root_id, status="ready", root=build.root, build=build)

    def index(self, state: ViewState) -> NodeIndex:
        return self._index(state.root)

    def find(self, state: ViewState, node_id: str) -> Optional[Node]:
        return find_node_by_id(state.root, node_id)

    def resolve_slot(self, node: Optional[Node], slot_name: str, default: Any = None, **kwargs: Any) -> Any:
        return self.slots.resolve(node, slot_name, default, **kwargs)

    def aggregate(
        self,
        state: ViewState,
        node: Optional[Node],
        config: AggregationConfig,
    ) -> AggregatedData:
        return self.aggregations.aggregate(node, config, self.index(state))

    def current_view(self, state: ViewState) -> Optional[Node]:
        return self.navigation.current_view_node(state.root)

    def present(self, node: Node) -> Any:
        return self.registry.present(node)

    async def dispatch(
        self,
        node: Node,
        descriptor: Union[BehaviorDescriptor, Mapping[str, Any]],
    ) -> DispatchResult:
        return await self.dispatcher.dispatch(node, descriptor)
