"""In-process resource store.

Behaves like the hosted database the application talks to: inserts compute
the materialized path from the parent record, soft deletes only stamp
``deleted_at``, and every read returns copies.
"""

from __future__ import annotations

import asyncio
import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional

from pydantic import ValidationError

from ne_common.errors import DataUnavailableError, MutationFailureError
from ne_engine.models.resource import Resource
from ne_engine.paths import ROOT_LABEL, compute_path, is_descendant_path

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryResourceStore:
    """Dictionary-backed implementation of the ResourceStore protocol."""

    def __init__(
        self,
        resources: Iterable[Resource] = (),
        *,
        latency: float = 0.0,
        maintain_paths: bool = True,
    ) -> None:
        self._records: Dict[str, Resource] = {}
        self.latency = latency
        self.maintain_paths = maintain_paths
        self._failures: List[Exception] = []
        for resource in resources:
            self._records.setdefault(resource.id, resource.model_copy(deep=True))
        if maintain_paths:
            self._materialize_missing_paths()

    async def _io(self) -> None:
        if self.latency:
            await asyncio.sleep(self.latency)
        else:
            await asyncio.sleep(0)

    def fail_next_write(self, error: Optional[Exception] = None) -> None:
        """Make the next write raise ``error``."""
        self._failures.append(error or ConnectionError("simulated write failure"))

    def _raise_injected_failure(self) -> None:
        if self._failures:
            raise self._failures.pop(0)

    def _live(self, resource_id: str) -> Optional[Resource]:
        record = self._records.get(resource_id)
        if record is None or record.is_deleted:
            return None
        return record

    def _persisted(self) -> None:
        """Hook called after every successful write."""

    def _materialize_missing_paths(self) -> None:
        """Compute paths for seeded records that arrived without one."""
        resolved: Dict[str, str] = {}

        def path_of(resource_id: str) -> str:
            chain: List[Resource] = []
            seen: set[str] = set()
            current = self._records.get(resource_id)
            while current is not None and current.id not in resolved and current.id not in seen:
                seen.add(current.id)
                chain.append(current)
                current = self._records.get(current.parent_id) if current.parent_id else None
            parent_path = resolved.get(current.id) if current is not None else None
            for record in reversed(chain):
                if record.path == ROOT_LABEL:
                    resolved[record.id] = compute_path(record.id, parent_path)
                else:
                    resolved[record.id] = record.path
                parent_path = resolved[record.id]
            return resolved[resource_id]

        for resource_id, record in list(self._records.items()):
            if record.path == ROOT_LABEL:
                record.path = path_of(resource_id)

    async def get(self, resource_id: str) -> Optional[Resource]:
        await self._io()
        record = self._live(resource_id)
        return record.model_copy(deep=True) if record else None

    async def list_children(self, parent_id: Optional[str]) -> List[Resource]:
        await self._io()
        return [
            record.model_copy(deep=True)
            for record in self._records.values()
            if record.parent_id == parent_id and not record.is_deleted
        ]

    async def fetch_subtree(self, path: str) -> List[Resource]:
        await self._io()
        matches = [
            record.model_copy(deep=True)
            for record in self._records.values()
            if not record.is_deleted and is_descendant_path(record.path, path)
        ]
        return sorted(matches, key=lambda record: record.path)

    async def insert(self, resource: Resource) -> Resource:
        await self._io()
        self._raise_injected_failure()
        if resource.id in self._records:
            raise MutationFailureError(
                "Resource already exists", context={"resource_id": resource.id}
            )
        record = resource.model_copy(deep=True)
        if self.maintain_paths:
            parent = self._live(record.parent_id) if record.parent_id else None
            record.path = compute_path(record.id, parent.path if parent else None)
        now = _utcnow()
        record.created_at = record.created_at or now
        record.updated_at = now
        self._records[record.id] = record
        self._persisted()
        logger.debug("Inserted resource %s at %s", record.id, record.path)
        return record.model_copy(deep=True)

    async def update(self, resource_id: str, changes: Mapping[str, Any]) -> Resource:
        await self._io()
        self._raise_injected_failure()
        current = self._live(resource_id)
        if current is None:
            raise DataUnavailableError(
                "Resource not found", context={"resource_id": resource_id}
            )
        data = current.model_dump()
        data.update(changes)
        data["updated_at"] = _utcnow()
        try:
            record = Resource.model_validate(data)
        except ValidationError as exc:
            raise MutationFailureError(
                "Invalid resource update",
                context={"resource_id": resource_id, "fields": sorted(changes)},
                cause=exc,
            ) from exc
        self._records[resource_id] = record
        self._persisted()
        return record.model_copy(deep=True)

    async def soft_delete(self, resource_id: str) -> None:
        await self._io()
        self._raise_injected_failure()
        current = self._live(resource_id)
        if current is None:
            raise DataUnavailableError(
                "Resource not found", context={"resource_id": resource_id}
            )
        now = _utcnow()
        self._records[resource_id] = current.model_copy(
            update={"deleted_at": now, "updated_at": now}
        )
        self._persisted()

    def all_records(self) -> List[Resource]:
        """Every stored record, deleted ones included, in insertion order."""
        return [record.model_copy(deep=True) for record in self._records.values()]

    def dump(self) -> str:
        """Stable JSON rendering of the full record set."""
        return json.dumps(
            [record.to_record() for record in self._records.values()],
            indent=2,
            sort_keys=True,
        )
