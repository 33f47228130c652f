"""Identity-keyed memoization for pure view computations.

Tree builds, slot reads and aggregations are pure functions of their inputs.
Rebuilt inputs are new objects, so keying on object identity is enough to
recompute exactly when the inputs change. Strong references to the inputs are
kept next to each entry, so an id cannot be recycled while it is cached.
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from typing import Any, Callable, Generic, Hashable, Tuple, TypeVar

logger = logging.getLogger(__name__)

R = TypeVar("R")

_SCALARS = (str, int, float, bool, bytes, type(None))


def _key_part(value: Any) -> Hashable:
    if isinstance(value, _SCALARS):
        return ("v", type(value).__name__, value)
    return ("id", id(value))


class IdentityMemo(Generic[R]):
    """Cache ``fn(*args)`` by argument identity (scalars by value)."""

    def __init__(self, fn: Callable[..., R], maxsize: int = 32) -> None:
        if maxsize <= 0:
            raise ValueError("maxsize must be positive")
        self._fn = fn
        self._maxsize = maxsize
        self._entries: "OrderedDict[Tuple[Hashable, ...], Tuple[Tuple[Any, ...], R]]" = OrderedDict()
        self.hits = 0
        self.misses = 0

    def __call__(self, *args: Any) -> R:
        key = tuple(_key_part(arg) for arg in args)
        entry = self._entries.get(key)
        if entry is not None:
            self._entries.move_to_end(key)
            self.hits += 1
            return entry[1]
        self.misses += 1
        result = self._fn(*args)
        self._entries[key] = (args, result)
        if len(self._entries) > self._maxsize:
            self._entries.popitem(last=False)
        return result

    def __len__(self) -> int:
        return len(self._entries)

    def clear(self) -> None:
        self._entries.clear()
        logger.debug("Identity memo cleared for %s", getattr(self._fn, "__name__", self._fn))
