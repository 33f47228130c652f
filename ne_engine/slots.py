"""Slot resolution: read domain fields through a name-indirection layer.

Structural views ask for a *slot* ("headline", "subtext", "amount") instead of
a concrete metadata key. A slot is looked up, first defined wins, in:

1. the node's slot configuration (``metadata["__config"][slot]``)
2. the node metadata under the slot's own name
3. the convention table :data:`DEFAULT_SLOT_MAPPINGS`
4. the caller-supplied default

The special key ``__title`` always reads ``node.title``.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Dict, Iterable, Mapping, Optional

from ne_engine.formatting import apply_formatting
from ne_engine.models.config import FormattingConfig
from ne_engine.models.fields import (
    TITLE_KEY,
    FieldType,
    SlotMapping,
    coerce_field_type,
    slot_config_of,
)
from ne_engine.models.node import Node

logger = logging.getLogger(__name__)

DEFAULT_SLOT_MAPPINGS: Dict[str, str] = {
    "headline": TITLE_KEY,
    "subtext": "description",
    "accent_color": "color",
    "icon_start": "icon",
    "media": "imageUrl",
}

_MISSING = object()


def _read_key(node: Node, key: str) -> Any:
    if key == TITLE_KEY:
        return node.title
    return node.metadata.get(key, _MISSING)


class SlotResolver:
    """Resolve and format slot values against nodes.

    The resolver is stateless apart from its formatting defaults; one instance
    can be shared by every view.
    """

    def __init__(
        self,
        formatting: Optional[FormattingConfig] = None,
        conventions: Optional[Mapping[str, str]] = None,
    ) -> None:
        self.formatting = formatting or FormattingConfig()
        self.conventions: Dict[str, str] = dict(
            DEFAULT_SLOT_MAPPINGS if conventions is None else conventions
        )

    def _lookup(self, node: Node, slot_name: str) -> tuple[Any, Optional[FieldType]]:
        mapping = SlotMapping.parse(slot_config_of(node.metadata).get(slot_name))
        if mapping is not None:
            value = _read_key(node, mapping.key)
            if value is not _MISSING:
                return value, mapping.type
        if slot_name in node.metadata:
            return node.metadata[slot_name], None
        convention = self.conventions.get(slot_name)
        if convention is not None:
            value = _read_key(node, convention)
            if value is not _MISSING:
                return value, None
        return _MISSING, None

    def resolve(
        self,
        node: Optional[Node],
        slot_name: str,
        default: Any = None,
        *,
        field_type: FieldType | str | None = None,
        currency: Optional[str] = None,
        today: Optional[date] = None,
    ) -> Any:
        """Return the formatted value of ``slot_name`` on ``node``.

        A type declared in the slot configuration overrides ``field_type``.
        The caller default is returned as-is, without formatting.
        """
        if node is None:
            return default
        value, mapped_type = self._lookup(node, slot_name)
        if value is _MISSING:
            return default
        effective = mapped_type or coerce_field_type(field_type)
        return apply_formatting(
            value,
            effective,
            currency=currency or self.formatting.currency,
            decimal_places=self.formatting.decimal_places,
            today=today,
        )

    def resolve_many(self, node: Optional[Node], slot_names: Iterable[str]) -> Dict[str, Any]:
        """Raw (unformatted) values for several slots; missing slots map to None."""
        resolved: Dict[str, Any] = {}
        for name in slot_names:
            if node is None:
                resolved[name] = None
                continue
            value, _ = self._lookup(node, name)
            resolved[name] = None if value is _MISSING else value
        return resolved

    def exists(self, node: Optional[Node], slot_name: str) -> bool:
        if node is None:
            return False
        value, _ = self._lookup(node, slot_name)
        return value is not _MISSING and value is not None


_default_resolver = SlotResolver()


def resolve_slot(
    node: Optional[Node],
    slot_name: str,
    default: Any = None,
    *,
    field_type: FieldType | str | None = None,
    currency: Optional[str] = None,
    today: Optional[date] = None,
) -> Any:
    return _default_resolver.resolve(
        node, slot_name, default, field_type=field_type, currency=currency, today=today
    )


def resolve_slots(node: Optional[Node], slot_names: Iterable[str]) -> Dict[str, Any]:
    return _default_resolver.resolve_many(node, slot_names)


def slot_exists(node: Optional[Node], slot_name: str) -> bool:
    return _default_resolver.exists(node, slot_name)
