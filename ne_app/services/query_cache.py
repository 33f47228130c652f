"""Keyed cache of resource query results.

Keys are tuples starting with ``"resources"`` so a single prefix invalidates
every dependent view. Each key carries a generation counter: invalidating or
cancelling a key bumps it, and a fetch that started under an older generation
is discarded instead of being written back.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple, TypeVar

from ne_engine.models.resource import Resource

logger = logging.getLogger(__name__)

T = TypeVar("T")
QueryKey = Tuple[Any, ...]


class ResourceKeys:
    """Query key factory for resource views."""

    ALL: QueryKey = ("resources",)

    @staticmethod
    def children(parent_id: Optional[str]) -> QueryKey:
        return ("resources", "children", parent_id)

    @staticmethod
    def tree(root_id: str) -> QueryKey:
        return ("resources", "tree", root_id)

    @staticmethod
    def single(resource_id: str) -> QueryKey:
        return ("resources", "single", resource_id)


@dataclass
class CacheEntry:
    value: Any
    stale: bool = False


@dataclass(frozen=True)
class PatchedEntry:
    """One cache entry touched by an optimistic patch."""

    resource_id: str
    previous: Any
    patched: Any


def _matches(key: QueryKey, prefix: QueryKey) -> bool:
    return key[: len(prefix)] == prefix


class QueryCache:
    """Stale-while-revalidate cache driven by explicit invalidation."""

    def __init__(self) -> None:
        self._entries: Dict[QueryKey, CacheEntry] = {}
        self._generations: Dict[QueryKey, int] = {}
        self.discarded = 0

    def generation(self, key: QueryKey) -> int:
        return self._generations.get(key, 0)

    def peek(self, key: QueryKey) -> Any:
        entry = self._entries.get(key)
        return entry.value if entry else None

    def is_stale(self, key: QueryKey) -> bool:
        entry = self._entries.get(key)
        return entry is None or entry.stale

    def set(self, key: QueryKey, value: Any) -> None:
        self._entries[key] = CacheEntry(value)

    def keys(self, prefix: QueryKey = ResourceKeys.ALL) -> List[QueryKey]:
        return [key for key in self._entries if _matches(key, prefix)]

    async def fetch(self, key: QueryKey, loader: Callable[[], Awaitable[T]]) -> T:
        """Return the cached value, or load it when missing or stale.

        The loaded value is always returned to the caller, but it is only
        stored when no invalidation or cancellation happened meanwhile.
        """
        entry = self._entries.get(key)
        if entry is not None and not entry.stale:
            return entry.value
        started = self._generations.setdefault(key, 0)
        value = await loader()
        if self._generations.get(key, 0) != started:
            self.discarded += 1
            logger.debug("Discarded outdated result for %s", key)
            return value
        self._entries[key] = CacheEntry(value)
        return value

    def cancel(self, prefix: QueryKey = ResourceKeys.ALL) -> None:
        """Make in-flight fetches under ``prefix`` discard their results."""
        for key in list(self._generations):
            if _matches(key, prefix):
                self._generations[key] += 1

    def invalidate(self, prefix: QueryKey = ResourceKeys.ALL) -> int:
        """Mark every view under ``prefix`` stale; returns how many were cached."""
        self.cancel(prefix)
        count = 0
        for key, entry in self._entries.items():
            if _matches(key, prefix):
                entry.stale = True
                count += 1
        logger.debug("Invalidated %d cached view(s) under %s", count, prefix)
        return count

    def clear(self) -> None:
        self._entries.clear()
        self.cancel(())

    def patch_record(
        self, resource_id: str, patch: Callable[[Resource], Resource]
    ) -> Dict[QueryKey, PatchedEntry]:
        """Apply ``patch`` to every cached copy of a record.

        Returns what each touched entry held before and after the patch, keyed
        by query key, for :meth:`restore`. Cached values are replaced, never
        mutated.
        """
        snapshot: Dict[QueryKey, PatchedEntry] = {}
        for key, entry in self._entries.items():
            value = entry.value
            if isinstance(value, Resource) and value.id == resource_id:
                entry.value = patch(value)
                snapshot[key] = PatchedEntry(resource_id, value, entry.value)
            elif isinstance(value, list) and any(
                isinstance(item, Resource) and item.id == resource_id for item in value
            ):
                entry.value = [
                    patch(item) if isinstance(item, Resource) and item.id == resource_id else item
                    for item in value
                ]
                snapshot[key] = PatchedEntry(resource_id, value, entry.value)
        return snapshot

    def restore(self, snapshot: Dict[QueryKey, PatchedEntry]) -> None:
        """Undo a :meth:`patch_record` for its record only.

        An entry still holding the patched value gets the exact previous value
        back. When another patch replaced it meanwhile, only the record's
        previous copy is put back into the current value, leaving the other
        records' optimistic copies in place.
        """
        for key, patched in snapshot.items():
            entry = self._entries.get(key)
            if entry is None:
                self._entries[key] = CacheEntry(patched.previous)
            elif entry.value is patched.patched:
                entry.value = patched.previous
            else:
                entry.value = _splice(entry.value, patched)

    def find_record(
        self, resource_id: str, *, include_stale: bool = False
    ) -> Optional[Resource]:
        """Most specific cached copy of a record, if any.

        Entries marked stale are skipped unless ``include_stale`` is set.
        """
        single = self._entries.get(ResourceKeys.single(resource_id))
        if single is not None and isinstance(single.value, Resource):
            if include_stale or not single.stale:
                return single.value
        for entry in self._entries.values():
            if entry.stale and not include_stale:
                continue
            if isinstance(entry.value, list):
                for item in entry.value:
                    if isinstance(item, Resource) and item.id == resource_id:
                        return item
        return None


def _previous_copy(patched: PatchedEntry) -> Optional[Resource]:
    if isinstance(patched.previous, Resource):
        return patched.previous
    for item in patched.previous or ():
        if isinstance(item, Resource) and item.id == patched.resource_id:
            return item
    return None


def _splice(current: Any, patched: PatchedEntry) -> Any:
    previous = _previous_copy(patched)
    if previous is None:
        return current
    if isinstance(current, Resource):
        return previous if current.id == patched.resource_id else current
    if isinstance(current, list):
        return [
            previous if isinstance(item, Resource) and item.id == patched.resource_id else item
            for item in current
        ]
    return current
