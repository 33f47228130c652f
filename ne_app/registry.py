"""Variant registry: closed map from variant tag to presenter.

Presenters are registered explicitly at startup. Resolution order for a node:

1. the presenter registered for ``node.variant``
2. the presenter registered for the default variant of ``node.type``
3. the fallback presenter

With no fallback configured, an unresolved node raises
:class:`VariantResolutionError`.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, List, Mapping, Optional

from ne_app.interfaces import VariantPresenter
from ne_common.errors import ConfigurationError, VariantResolutionError
from ne_engine.models.config import DEFAULT_TYPE_VARIANTS
from ne_engine.models.node import Node

logger = logging.getLogger(__name__)

VARIANT_TAG = re.compile(r"^[a-z][a-z0-9_]*$")


def validate_variant_tag(tag: str) -> str:
    if not isinstance(tag, str) or not VARIANT_TAG.match(tag):
        raise ConfigurationError("Invalid variant tag", context={"variant": tag})
    return tag


class DebugPresenter:
    """Fallback presenter exposing the raw node for inspection."""

    def present(self, node: Node) -> Dict[str, Any]:
        return {
            "id": node.id,
            "type": node.type.value,
            "variant": node.variant,
            "title": node.title,
            "children": len(node.children),
            "metadata_keys": sorted(node.metadata),
        }


class VariantRegistry:
    """Map variant tags to presenters with a type-default and fallback chain."""

    def __init__(
        self,
        type_defaults: Optional[Mapping[str, str]] = None,
        fallback: Optional[VariantPresenter] = None,
    ) -> None:
        self._presenters: Dict[str, VariantPresenter] = {}
        self._type_defaults: Dict[str, str] = dict(
            DEFAULT_TYPE_VARIANTS if type_defaults is None else type_defaults
        )
        self.fallback = fallback

    def register(self, variant: str, presenter: VariantPresenter) -> None:
        tag = validate_variant_tag(variant)
        if tag in self._presenters:
            raise ConfigurationError("Variant already registered", context={"variant": tag})
        self._presenters[tag] = presenter

    def variants(self) -> List[str]:
        return sorted(self._presenters)

    def __contains__(self, variant: object) -> bool:
        return variant in self._presenters

    def resolve_name(self, node: Node) -> Optional[str]:
        """Name of the registered variant used for ``node`` (None = fallback)."""
        if node.variant in self._presenters:
            return node.variant
        type_default = self._type_defaults.get(node.type.value)
        if type_default and type_default in self._presenters:
            return type_default
        return None

    def resolve(self, node: Node) -> VariantPresenter:
        name = self.resolve_name(node)
        if name is not None:
            return self._presenters[name]
        if self.fallback is not None:
            logger.debug("No presenter for variant %r; using fallback", node.variant)
            return self.fallback
        raise VariantResolutionError(
            "No presenter registered for node",
            context={"node_id": node.id, "variant": node.variant, "type": node.type.value},
        )

    def present(self, node: Node) -> Any:
        return self.resolve(node).present(node)
