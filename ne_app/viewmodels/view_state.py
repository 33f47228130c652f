"""Renderable view states (UI-agnostic)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Literal, Optional

from ne_common.errors import NEError, error_to_payload
from ne_engine.models.node import Node
from ne_engine.tree import TreeBuild

ViewStatus = Literal["loading", "error", "empty", "ready"]


@dataclass(frozen=True)
class ViewState:
    root_id: str
    status: ViewStatus
    root: Optional[Node] = None
    build: Optional[TreeBuild] = None
    error: Optional[Dict[str, Any]] = None
    message: str = ""

    @property
    def is_ready(self) -> bool:
        return self.status == "ready"


def loading_state(root_id: str) -> ViewState:
    return ViewState(root_id=root_id, status="loading")


def error_state(root_id: str, error: NEError) -> ViewState:
    return ViewState(
        root_id=root_id,
        status="error",
        error=error_to_payload(error),
        message=str(error),
    )
