"""Behavior dispatcher: declarative UI actions -> resource mutations.

Views attach small descriptors (``{action, target?, payload?}``) to their
affordances. The dispatcher maps the closed action vocabulary to resource
service calls and reports every outcome as a :class:`DispatchResult`.
Dispatch never raises for bad descriptors or failed writes; the error is
carried on the result for the originating affordance to show.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Literal, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ne_app.services.resource_service import ResourceService
from ne_common.errors import (
    ConcurrentMutationError,
    NEError,
    UnknownBehaviorError,
)
from ne_engine.models.node import Node
from ne_engine.models.resource import Resource

logger = logging.getLogger(__name__)

EVENT_DEFAULT_TITLE = "Event Logged"

DispatchStatus = Literal["applied", "ignored", "rejected", "failed"]


class BehaviorAction(str, Enum):
    UPDATE_FIELD = "update_field"
    TOGGLE_STATUS = "toggle_status"
    MOVE_NODE = "move_node"
    MOVE_TO_COLUMN = "move_to_column"
    LOG_EVENT = "log_event"


class BehaviorDescriptor(BaseModel):
    """Declarative action attached to a view affordance."""

    model_config = ConfigDict(extra="ignore")

    action: str = Field(description="Action name from the behavior vocabulary")
    target: Optional[str] = Field(default=None, description="Field targeted by the action")
    payload: Any = Field(default=None, description="Action argument")


@dataclass
class DispatchResult:
    """Outcome of one dispatch."""

    action: str
    node_id: str
    status: DispatchStatus
    resource: Optional[Resource] = None
    error: Optional[NEError] = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.status == "applied"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "action": self.action,
            "node_id": self.node_id,
            "status": self.status,
            "message": self.message,
            "resource": self.resource.to_record() if self.resource else None,
            "error": self.error.to_dict() if self.error else None,
        }


Handler = Callable[[Node, BehaviorDescriptor], Awaitable[DispatchResult]]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class BehaviorDispatcher:
    """Translate behavior descriptors into resource service mutations."""

    def __init__(
        self,
        service: ResourceService,
        *,
        event_resource_type: str = "task",
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.service = service
        self.event_resource_type = event_resource_type
        self._clock = clock
        self._handlers: Dict[BehaviorAction, Handler] = {
            BehaviorAction.UPDATE_FIELD: self._update_field,
            BehaviorAction.TOGGLE_STATUS: self._toggle_status,
            BehaviorAction.MOVE_NODE: self._move_node,
            BehaviorAction.MOVE_TO_COLUMN: self._move_node,
            BehaviorAction.LOG_EVENT: self._log_event,
        }

    async def dispatch(
        self, node: Node, descriptor: Union[BehaviorDescriptor, Mapping[str, Any]]
    ) -> DispatchResult:
        try:
            behavior = (
                descriptor
                if isinstance(descriptor, BehaviorDescriptor)
                else BehaviorDescriptor.model_validate(descriptor)
            )
        except ValidationError as exc:
            return self._unknown(node, str(dict(descriptor).get("action")), exc)

        try:
            action = BehaviorAction(behavior.action)
        except ValueError:
            return self._unknown(node, behavior.action, None)

        handler = self._handlers[action]
        try:
            return await handler(node, behavior)
        except ConcurrentMutationError as exc:
            logger.warning("Rejected %s on %s: %s", action.value, node.id, exc)
            return DispatchResult(action.value, node.id, "rejected", error=exc, message=str(exc))
        except NEError as exc:
            logger.error("Behavior %s failed on %s: %s", action.value, node.id, exc)
            return DispatchResult(action.value, node.id, "failed", error=exc, message=str(exc))

    def _unknown(self, node: Node, action: str, cause: Optional[Exception]) -> DispatchResult:
        error = UnknownBehaviorError(
            "Unknown behavior action",
            context={"action": action, "node_id": node.id},
            cause=cause,
        )
        logger.warning("Unknown behavior action %r on node %s; ignored", action, node.id)
        return DispatchResult(action, node.id, "ignored", error=error, message=str(error))

    @staticmethod
    def _ignored(node: Node, action: str, message: str) -> DispatchResult:
        logger.warning("%s on node %s ignored: %s", action, node.id, message)
        return DispatchResult(action, node.id, "ignored", message=message)

    async def _update_field(self, node: Node, behavior: BehaviorDescriptor) -> DispatchResult:
        if not behavior.target:
            return self._ignored(node, behavior.action, "update_field requires a target")
        record = await self.service.update_field(node.id, behavior.target, behavior.payload)
        return DispatchResult(behavior.action, node.id, "applied", resource=record)

    async def _toggle_status(self, node: Node, behavior: BehaviorDescriptor) -> DispatchResult:
        record = await self.service.cycle_status(node.id)
        return DispatchResult(
            behavior.action,
            node.id,
            "applied",
            resource=record,
            message=f"status -> {record.status.value}",
        )

    async def _move_node(self, node: Node, behavior: BehaviorDescriptor) -> DispatchResult:
        payload = behavior.payload if isinstance(behavior.payload, Mapping) else {}
        parent_id = payload.get("parent_id")
        if not parent_id:
            return self._ignored(node, behavior.action, "move requires payload.parent_id")
        record = await self.service.move(node.id, str(parent_id))
        return DispatchResult(behavior.action, node.id, "applied", resource=record)

    async def _log_event(self, node: Node, behavior: BehaviorDescriptor) -> DispatchResult:
        payload: Dict[str, Any] = (
            dict(behavior.payload) if isinstance(behavior.payload, Mapping) else {}
        )
        now = self._clock()
        metadata = {"is_event": True, "timestamp": now.isoformat(), **payload}
        title = str(payload.get("title") or "").strip() or EVENT_DEFAULT_TITLE
        record = await self.service.create(
            node.id,
            title,
            resource_type=self.event_resource_type,
            description=str(payload.get("description") or now.strftime("%b %d, %Y %H:%M:%S")),
            metadata=metadata,
        )
        return DispatchResult(behavior.action, node.id, "applied", resource=record)
