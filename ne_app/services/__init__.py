"""Application services: stores, query cache, mutations and dispatch."""

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

__all__ = [
    "BehaviorAction",
    "BehaviorDescriptor",
    "BehaviorDispatcher",
    "ConfigRepository",
    "DispatchResult",
    "InMemoryResourceStore",
    "JsonFileResourceStore",
    "QueryCache",
    "ResourceKeys",
    "ResourceService",
    "load_resources",
]
