"""Shared error taxonomy for lifeos-node-engine."""

from __future__ import annotations

from datetime import date
from enum import Enum
from typing import Any, Mapping, TypeVar


def _normalize_context_value(value: Any) -> Any:
    if isinstance(value, Mapping):
        return normalize_context(value)
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_normalize_context_value(item) for item in value]
    if isinstance(value, Enum):
        return _normalize_context_value(value.value)
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, (str, int, float, bool)) or value is None:
        return value
    return str(value)


def normalize_context(context: Mapping[str, Any]) -> dict[str, Any]:
    """Return a JSON-friendly copy of an error context mapping."""
    return {key: _normalize_context_value(val) for key, val in context.items()}


class NEError(Exception):
    """Base error type for typed failure handling."""

    def __init__(
        self,
        message: str,
        *,
        context: Mapping[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.context = normalize_context(context or {})
        if cause is not None:
            self.__cause__ = cause

    @property
    def error_type(self) -> str:
        return self.__class__.__name__

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.error_type, "message": str(self), "context": self.context}


class DataUnavailableError(NEError):
    """The query collaborator failed to return records."""


class SourceNotFoundError(NEError):
    """An aggregation source_id did not resolve inside the current tree."""


class UnknownBehaviorError(NEError):
    """A behavior descriptor named an action outside the known vocabulary."""


class MutationFailureError(NEError):
    """A write against the backing store failed."""


class ConcurrentMutationError(MutationFailureError):
    """A record already has an optimistic mutation in flight."""


class InvalidMoveError(MutationFailureError):
    """A reparent request would detach a node or create a cycle."""


class ConfigurationError(NEError):
    """Failure due to invalid configuration."""


class VariantResolutionError(NEError):
    """No presenter could be resolved for a node variant."""


T = TypeVar("T", bound=NEError)


def wrap_error(
    error_cls: type[T],
    message: str,
    *,
    context: Mapping[str, Any] | None = None,
    cause: Exception | None = None,
) -> T:
    """Create a typed NEError with optional context and cause."""
    return error_cls(message, context=context, cause=cause)


def error_to_payload(error: NEError) -> dict[str, Any]:
    """Convert an NEError to a renderable error payload."""
    return {
        "error_type": error.error_type,
        "error": str(error),
        "error_context": error.context,
    }
