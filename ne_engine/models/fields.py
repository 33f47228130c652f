"""Typed field and slot configuration shapes."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional

logger = logging.getLogger(__name__)

CONFIG_KEY = "__config"
TITLE_KEY = "__title"


class FieldType(str, Enum):
    """Field types driving slot formatting."""

    TEXT = "text"
    NUMBER = "number"
    CURRENCY = "currency"
    DATE = "date"
    BOOLEAN = "boolean"
    SELECT = "select"
    REFERENCE = "reference"


def coerce_field_type(value: Any) -> Optional[FieldType]:
    """Return a FieldType for ``value`` or None when it is unknown."""
    if value is None or isinstance(value, FieldType):
        return value
    try:
        return FieldType(str(value))
    except ValueError:
        logger.warning("Ignoring unknown field type %r", value)
        return None


@dataclass(frozen=True)
class SlotMapping:
    """One slot entry: the field key to read and an optional format type."""

    key: str
    type: Optional[FieldType] = None

    @classmethod
    def parse(cls, raw: Any) -> Optional["SlotMapping"]:
        """Accept either a bare key string or a ``{key, type}`` mapping."""
        if isinstance(raw, str):
            return cls(key=raw)
        if isinstance(raw, Mapping) and isinstance(raw.get("key"), str):
            return cls(key=raw["key"], type=coerce_field_type(raw.get("type")))
        return None


def slot_config_of(metadata: Mapping[str, Any]) -> dict[str, Any]:
    """Return the raw slot configuration stored on a node, or an empty dict."""
    config = metadata.get(CONFIG_KEY)
    if isinstance(config, Mapping):
        return dict(config)
    return {}
