"""Contracts between the engine and its persistence collaborator."""

from __future__ import annotations

from typing import Any, Mapping, Optional, Protocol, Sequence

from ne_engine.models.node import Node
from ne_engine.models.resource import Resource


class ResourceStore(Protocol):
    """Asynchronous CRUD plus the two hierarchy queries the engine needs.

    Implementations own timeouts and retries. Failures surface as exceptions;
    callers translate them into typed errors.
    """

    async def get(self, resource_id: str) -> Optional[Resource]:
        """Return a live (not soft-deleted) record, or None."""

    async def list_children(self, parent_id: Optional[str]) -> Sequence[Resource]:
        """Return the live direct children of ``parent_id`` (None = top level)."""

    async def fetch_subtree(self, path: str) -> Sequence[Resource]:
        """Return live records whose path is ``path`` or below it, ordered by path."""

    async def insert(self, resource: Resource) -> Resource:
        """Persist a new record and return the stored copy."""

    async def update(self, resource_id: str, changes: Mapping[str, Any]) -> Resource:
        """Apply ``changes`` to a record and return the stored copy."""

    async def soft_delete(self, resource_id: str) -> None:
        """Mark a record as deleted."""


class VariantPresenter(Protocol):
    """Presentation strategy selected by a node's variant tag."""

    def present(self, node: Node) -> Any:
        """Render ``node`` into a presentation object."""
