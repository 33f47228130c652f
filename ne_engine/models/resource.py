"""Persisted resource records (flat, parent-referencing)."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from ne_engine.paths import ROOT_LABEL


class ResourceStatus(str, Enum):
    """Lifecycle status of a resource."""

    ACTIVE = "active"
    COMPLETED = "completed"
    ARCHIVED = "archived"


STATUS_CYCLE: tuple[ResourceStatus, ...] = (
    ResourceStatus.ACTIVE,
    ResourceStatus.COMPLETED,
    ResourceStatus.ARCHIVED,
)


def next_status(current: ResourceStatus | str | None) -> ResourceStatus:
    """Advance a status cyclically; anything unrecognised restarts at active."""
    try:
        index = STATUS_CYCLE.index(ResourceStatus(current))
    except ValueError:
        return ResourceStatus.ACTIVE
    return STATUS_CYCLE[(index + 1) % len(STATUS_CYCLE)]


class Resource(BaseModel):
    """A persisted record with a parent reference and a materialized path."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(description="Unique identifier")
    parent_id: Optional[str] = Field(default=None, description="Parent resource id")
    path: str = Field(default=ROOT_LABEL, description="Materialized ancestry path")
    type: str = Field(default="task", description="Resource type (folder, project, task, ...)")
    title: str = Field(description="Display title")
    description: Optional[str] = None
    status: ResourceStatus = ResourceStatus.ACTIVE
    metadata: Dict[str, Any] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("metadata", "meta_data"),
        description="Open key-value document",
    )
    is_schedulable: bool = False
    scheduled_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    user_id: Optional[str] = None
    household_id: Optional[str] = None
    created_by: Optional[str] = None
    is_shared: bool = False
    deleted_at: Optional[datetime] = Field(default=None, description="Soft-delete marker")

    @field_validator("metadata", mode="before")
    @classmethod
    def _default_metadata(cls, value: Any) -> Any:
        return {} if value is None else value

    @field_validator("title")
    @classmethod
    def _title_not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("Resource: 'title' must be non-empty")
        return value

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def to_record(self) -> Dict[str, Any]:
        """JSON-friendly dict, as written by file-backed stores."""
        return self.model_dump(mode="json")
