"""Stable application-layer API surface."""

from ne_app.engine import NodeEngine
from ne_app.interfaces import ResourceStore, VariantPresenter
from ne_app.navigation import Crumb, NavigationController
from ne_app.registry import DebugPresenter, VariantRegistry, validate_variant_tag
from ne_app.services.config_repository import ConfigRepository
from ne_app.services.dispatcher import (
    BehaviorAction,
    BehaviorDescriptor,
    BehaviorDispatcher,
    DispatchResult,
)
from ne_app.services.file_store import JsonFileResourceStore, load_resources
from ne_app.services.memory_store import InMemoryResourceStore
from ne_app.services.query_cache import QueryCache, ResourceKeys
from ne_app.services.resource_service import ResourceService
from ne_app.viewmodels.view_state import ViewState

__all__ = [
    "NodeEngine",
    "ResourceStore",
    "VariantPresenter",
    "NavigationController",
    "Crumb",
    "VariantRegistry",
    "DebugPresenter",
    "validate_variant_tag",
    "ConfigRepository",
    "BehaviorAction",
    "BehaviorDescriptor",
    "BehaviorDispatcher",
    "DispatchResult",
    "InMemoryResourceStore",
    "JsonFileResourceStore",
    "load_resources",
    "QueryCache",
    "ResourceKeys",
    "ResourceService",
    "ViewState",
]
