"""Pydantic schemas for project YAML data validation."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .models import MAX_OFFSET_DAYS, DependencyType, WorkItemStatus


def _ensure_str_list(v: Any) -> list[str]:
    if v is None:
        return []
    if isinstance(v, list):
        return [str(item) for item in v]  # type: ignore[misc]
    return [str(v)]


class WorkItemSchema(BaseModel):
    """Schema for a work item entry."""

    model_config = ConfigDict(extra="forbid")

    title: str = ""
    status: WorkItemStatus = WorkItemStatus.NOT_STARTED
    start_date: date | None = None
    end_date: date | None = None
    duration_days: int | None = Field(default=None, ge=0, le=MAX_OFFSET_DAYS)
    start_after: date | None = None
    start_before: date | None = None
    assigned_user: str | None = None
    requires_milestones: list[str] = Field(default_factory=list)

    @field_validator("requires_milestones", mode="before")
    @classmethod
    def ensure_list(cls, v: Any) -> list[str]:
        """Accept a single milestone ID as well as a list."""
        return _ensure_str_list(v)

    @model_validator(mode="after")
    def check_date_order(self) -> WorkItemSchema:
        """Reject items that end before they start."""
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError(f"end_date {self.end_date} is before start_date {self.start_date}")
        return self


class DependencySchema(BaseModel):
    """Schema for a dependency edge."""

    model_config = ConfigDict(extra="forbid")

    predecessor: str
    successor: str
    type: DependencyType = DependencyType.FINISH_TO_START
    lead_lag_days: int = Field(default=0, ge=-MAX_OFFSET_DAYS, le=MAX_OFFSET_DAYS)

    @field_validator("predecessor", "successor", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> Any:
        """YAML turns numeric IDs into ints; IDs are always strings here."""
        return str(v) if isinstance(v, int) else v

    @model_validator(mode="after")
    def check_not_self(self) -> DependencySchema:
        """A work item cannot depend on itself."""
        if self.predecessor == self.successor:
            raise ValueError(f"work item '{self.predecessor}' cannot depend on itself")
        return self


class MilestoneSchema(BaseModel):
    """Schema for a milestone entry."""

    model_config = ConfigDict(extra="forbid")

    title: str
    target_date: date
    completed: bool = False
    completed_at: datetime | None = None
    color: str | None = None
    work_items: list[str] = Field(default_factory=list)

    @field_validator("work_items", mode="before")
    @classmethod
    def ensure_list(cls, v: Any) -> list[str]:
        """Accept a single work item ID as well as a list."""
        return _ensure_str_list(v)


class ProjectSchema(BaseModel):
    """Schema for the entire project YAML file."""

    work_items: dict[str, WorkItemSchema] = Field(default_factory=dict)
    dependencies: list[DependencySchema] = Field(default_factory=list)
    milestones: dict[str, MilestoneSchema] = Field(default_factory=dict)

    @field_validator("work_items", "milestones", mode="before")
    @classmethod
    def coerce_keys(cls, v: Any) -> Any:
        """YAML turns numeric IDs into ints; IDs are always strings here."""
        if v is None:
            return {}
        if isinstance(v, dict):
            # An entry with no fields at all loads as None
            return {
                str(key): {} if value is None else value
                for key, value in v.items()  # type: ignore[misc]
            }
        return v

    @field_validator("dependencies", mode="before")
    @classmethod
    def coerce_dependencies(cls, v: Any) -> Any:
        """Treat an empty section as no dependencies."""
        return [] if v is None else v
