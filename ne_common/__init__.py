"""Shared helpers for lifeos-node-engine."""

from ne_common.api import NEError, configure_logging, error_to_payload

__all__ = ["configure_logging", "NEError", "error_to_payload"]
