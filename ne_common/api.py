"""Public API surface for ne_common."""

from ne_common.errors import (
    ConcurrentMutationError,
    ConfigurationError,
    DataUnavailableError,
    InvalidMoveError,
    MutationFailureError,
    NEError,
    SourceNotFoundError,
    UnknownBehaviorError,
    VariantResolutionError,
    error_to_payload,
    wrap_error,
)
from ne_common.logging import configure_logging

__all__ = [
    "configure_logging",
    "NEError",
    "DataUnavailableError",
    "SourceNotFoundError",
    "UnknownBehaviorError",
    "MutationFailureError",
    "ConcurrentMutationError",
    "InvalidMoveError",
    "ConfigurationError",
    "VariantResolutionError",
    "wrap_error",
    "error_to_payload",
]
