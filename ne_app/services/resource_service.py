"""Resource queries and optimistic mutations.

All writes funnel through this service. Optimistic writes follow one
sequence:

1. reject the write if the record already has one in flight
2. cancel in-flight fetches and patch every cached copy synchronously
3. await the store
4. on failure restore the record's previous cached copies captured in step 2
5. always mark every resource view stale
"""

from __future__ import annotations

import logging
import uuid
from typing import Any, Awaitable, Callable, List, Mapping, Optional, TypeVar

from pydantic import ValidationError

from ne_app.interfaces import ResourceStore
from ne_app.services.query_cache import QueryCache, ResourceKeys
from ne_common.errors import (
    ConcurrentMutationError,
    DataUnavailableError,
    InvalidMoveError,
    MutationFailureError,
    NEError,
    wrap_error,
)
from ne_engine.models.resource import Resource, ResourceStatus, next_status
from ne_engine.paths import compute_path, is_descendant_path, rebase_path

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ResourceService:
    """Query and mutate resources through a store and a shared cache."""

    def __init__(self, store: ResourceStore, cache: Optional[QueryCache] = None) -> None:
        self.store = store
        self.cache = cache or QueryCache()
        self._in_flight: set[str] = set()

    # -- queries -------------------------------------------------------------

    async def _read(self, description: str, loader: Callable[[], Awaitable[T]]) -> T:
        try:
            return await loader()
        except NEError:
            raise
        except Exception as exc:
            raise wrap_error(
                DataUnavailableError,
                f"Failed to load {description}",
                context={"query": description},
                cause=exc,
            ) from exc

    async def get(self, resource_id: str) -> Optional[Resource]:
        return await self.cache.fetch(
            ResourceKeys.single(resource_id),
            lambda: self._read(f"resource {resource_id}", lambda: self.store.get(resource_id)),
        )

    async def list_children(self, parent_id: Optional[str]) -> List[Resource]:
        async def load() -> List[Resource]:
            return list(await self.store.list_children(parent_id))

        return await self.cache.fetch(
            ResourceKeys.children(parent_id),
            lambda: self._read(f"children of {parent_id}", load),
        )

    async def fetch_tree(self, root_id: str) -> List[Resource]:
        """Root record plus its whole live subtree, ordered by path."""

        async def load() -> List[Resource]:
            root = await self.store.get(root_id)
            if root is None:
                return []
            return list(await self.store.fetch_subtree(root.path))

        return await self.cache.fetch(
            ResourceKeys.tree(root_id),
            lambda: self._read(f"subtree of {root_id}", load),
        )

    # -- optimistic plumbing -------------------------------------------------

    async def _optimistic(
        self,
        resource_id: str,
        patch: Callable[[Resource], Resource],
        write: Callable[[], Awaitable[T]],
        *,
        operation: str,
    ) -> T:
        self._reject_if_in_flight(resource_id, operation)
        self._in_flight.add(resource_id)
        self.cache.cancel(ResourceKeys.ALL)
        snapshot = self.cache.patch_record(resource_id, patch)
        try:
            return await write()
        except Exception as exc:
            self.cache.restore(snapshot)
            logger.warning(
                "%s failed for %s; restored %d cached view(s): %s",
                operation,
                resource_id,
                len(snapshot),
                exc,
            )
            if isinstance(exc, MutationFailureError):
                raise
            raise MutationFailureError(
                f"{operation} failed",
                context={"resource_id": resource_id, "operation": operation},
                cause=exc,
            ) from exc
        finally:
            self._in_flight.discard(resource_id)
            self.cache.invalidate(ResourceKeys.ALL)

    def is_in_flight(self, resource_id: str) -> bool:
        return resource_id in self._in_flight

    def _reject_if_in_flight(self, resource_id: str, operation: str) -> None:
        if resource_id in self._in_flight:
            raise ConcurrentMutationError(
                "A mutation is already in flight for this resource",
                context={"resource_id": resource_id, "operation": operation},
            )

    async def _authoritative(self, resource_id: str) -> Resource:
        record = await self._read(f"resource {resource_id}", lambda: self.store.get(resource_id))
        if record is None:
            raise MutationFailureError(
                "Resource not found", context={"resource_id": resource_id}
            )
        return record

    # -- mutations -----------------------------------------------------------

    async def cycle_status(self, resource_id: str) -> Resource:
        """Advance active -> completed -> archived -> active."""
        self._reject_if_in_flight(resource_id, "cycle_status")
        cached = self.cache.find_record(resource_id)
        current = cached or await self._authoritative(resource_id)
        target: ResourceStatus = next_status(current.status)

        def patch(record: Resource) -> Resource:
            return record.model_copy(update={"status": target})

        return await self._optimistic(
            resource_id,
            patch,
            lambda: self.store.update(resource_id, {"status": target}),
            operation="cycle_status",
        )

    async def update_field(self, resource_id: str, key: str, value: Any) -> Resource:
        """Set ``metadata[key]`` on the authoritative record."""
        self._reject_if_in_flight(resource_id, "update_field")
        record = await self._authoritative(resource_id)
        metadata = {**record.metadata, key: value}

        def patch(cached: Resource) -> Resource:
            return cached.model_copy(update={"metadata": {**cached.metadata, key: value}})

        return await self._optimistic(
            resource_id,
            patch,
            lambda: self.store.update(resource_id, {"metadata": metadata}),
            operation="update_field",
        )

    async def update(self, resource_id: str, changes: Mapping[str, Any]) -> Resource:
        def patch(cached: Resource) -> Resource:
            return cached.model_copy(update=dict(changes))

        return await self._optimistic(
            resource_id,
            patch,
            lambda: self.store.update(resource_id, changes),
            operation="update",
        )

    async def move(self, resource_id: str, new_parent_id: str) -> Resource:
        """Reparent a record and rewrite the paths of its whole subtree.

        When a descendant repair fails, the updates already applied to the
        store are undone in reverse order. The raised error's context lists
        the repaired ids and whether the undo succeeded; if it did not, the
        store keeps the partly repaired subtree.
        """
        self._reject_if_in_flight(resource_id, "move")
        if resource_id == new_parent_id:
            raise InvalidMoveError(
                "Cannot move a resource under itself", context={"resource_id": resource_id}
            )
        record = await self._authoritative(resource_id)
        parent = await self._read(f"resource {new_parent_id}", lambda: self.store.get(new_parent_id))
        if parent is None:
            raise InvalidMoveError(
                "Target parent does not exist",
                context={"resource_id": resource_id, "parent_id": new_parent_id},
            )
        if is_descendant_path(parent.path, record.path):
            raise InvalidMoveError(
                "Cannot move a resource under one of its descendants",
                context={"resource_id": resource_id, "parent_id": new_parent_id},
            )
        old_path = record.path
        new_path = compute_path(resource_id, parent.path)

        def patch(cached: Resource) -> Resource:
            return cached.model_copy(update={"parent_id": new_parent_id, "path": new_path})

        async def write() -> Resource:
            descendants = [
                item
                for item in await self.store.fetch_subtree(old_path)
                if item.id != resource_id
            ]
            moved = await self.store.update(
                resource_id, {"parent_id": new_parent_id, "path": new_path}
            )
            repaired: List[str] = []
            for item in descendants:
                try:
                    await self.store.update(
                        item.id, {"path": rebase_path(item.path, old_path, new_path)}
                    )
                except Exception as exc:
                    reverted = await self._undo_move(record, descendants, repaired)
                    raise MutationFailureError(
                        "Descendant path repair failed",
                        context={
                            "resource_id": resource_id,
                            "failed_id": item.id,
                            "repaired": repaired,
                            "reverted": reverted,
                        },
                        cause=exc,
                    ) from exc
                repaired.append(item.id)
            logger.info(
                "Moved %s under %s; repaired %d descendant path(s)",
                resource_id,
                new_parent_id,
                len(repaired),
            )
            return moved

        return await self._optimistic(resource_id, patch, write, operation="move")

    async def _undo_move(
        self, record: Resource, descendants: List[Resource], repaired: List[str]
    ) -> bool:
        originals = {item.id: item for item in descendants}
        try:
            for item_id in reversed(repaired):
                await self.store.update(item_id, {"path": originals[item_id].path})
            await self.store.update(
                record.id, {"parent_id": record.parent_id, "path": record.path}
            )
        except Exception as exc:
            logger.error(
                "Could not undo move of %s; store keeps %d repaired path(s): %s",
                record.id,
                len(repaired),
                exc,
            )
            return False
        logger.info("Undid move of %s after a failed path repair", record.id)
        return True

    async def create(
        self,
        parent_id: Optional[str],
        title: str,
        *,
        resource_type: str = "task",
        description: Optional[str] = None,
        metadata: Optional[Mapping[str, Any]] = None,
        resource_id: Optional[str] = None,
    ) -> Resource:
        parent_path: Optional[str] = None
        if parent_id is not None:
            parent = await self._read(f"resource {parent_id}", lambda: self.store.get(parent_id))
            if parent is None:
                raise MutationFailureError(
                    "Parent resource not found", context={"parent_id": parent_id}
                )
            parent_path = parent.path
        new_id = resource_id or str(uuid.uuid4())
        try:
            resource = Resource(
                id=new_id,
                parent_id=parent_id,
                path=compute_path(new_id, parent_path),
                type=resource_type,
                title=title,
                description=description,
                metadata=dict(metadata or {}),
            )
        except ValidationError as exc:
            raise MutationFailureError(
                "Invalid resource",
                context={"parent_id": parent_id, "resource_id": new_id},
                cause=exc,
            ) from exc
        try:
            return await self.store.insert(resource)
        except MutationFailureError:
            raise
        except Exception as exc:
            raise MutationFailureError(
                "create failed", context={"parent_id": parent_id}, cause=exc
            ) from exc
        finally:
            self.cache.invalidate(ResourceKeys.ALL)

    async def soft_delete(self, resource_id: str) -> List[str]:
        """Soft-delete a record and everything below it; returns deleted ids."""
        record = await self._authoritative(resource_id)
        subtree = await self._read(
            f"subtree of {resource_id}", lambda: self.store.fetch_subtree(record.path)
        )
        # Deepest records first.
        ordered = sorted(subtree, key=lambda item: item.path.count("."), reverse=True)
        deleted: List[str] = []
        try:
            for item in ordered:
                await self.store.soft_delete(item.id)
                deleted.append(item.id)
        except Exception as exc:
            raise MutationFailureError(
                "soft delete failed",
                context={"resource_id": resource_id, "deleted": deleted},
                cause=exc,
            ) from exc
        finally:
            self.cache.invalidate(ResourceKeys.ALL)
        return deleted
