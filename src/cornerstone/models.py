"""Data models for Cornerstone work items, dependencies and milestones."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum

from .exceptions import SelfDependencyError, ValidationError


class WorkItemStatus(str, Enum):
    """Lifecycle state of a work item."""

    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    BLOCKED = "blocked"


class DependencyType(str, Enum):
    """How a predecessor's dates constrain its successor."""

    FINISH_TO_START = "finish_to_start"
    START_TO_START = "start_to_start"
    FINISH_TO_FINISH = "finish_to_finish"
    START_TO_FINISH = "start_to_finish"


# Durations and lead/lag offsets are capped at about a century
MAX_OFFSET_DAYS = 36500


def _empty_ids() -> tuple[str, ...]:
    return ()


@dataclass(frozen=True)
class WorkItem:
    """A unit of schedulable work.

    Dates are whole calendar days. ``start_after`` and ``start_before`` are an
    inclusive window on the start date; ``duration_days`` is only consulted when
    an end date has to be derived.
    """

    id: str
    title: str = ""
    status: WorkItemStatus = WorkItemStatus.NOT_STARTED
    start_date: date | None = None
    end_date: date | None = None
    duration_days: int | None = None
    start_after: date | None = None
    start_before: date | None = None
    assigned_user_id: str | None = None
    # Milestones whose contributing work items must finish before this item starts
    required_milestone_ids: tuple[str, ...] = field(default_factory=_empty_ids)

    def __post_init__(self) -> None:
        if self.duration_days is not None and self.duration_days < 0:
            raise ValidationError(
                f"Work item '{self.id}' has negative duration: {self.duration_days}"
            )
        if self.duration_days is not None and self.duration_days > MAX_OFFSET_DAYS:
            raise ValidationError(
                f"Work item '{self.id}' duration {self.duration_days} exceeds "
                f"{MAX_OFFSET_DAYS} days"
            )
        if (
            self.start_date is not None
            and self.end_date is not None
            and self.end_date < self.start_date
        ):
            raise ValidationError(
                f"Work item '{self.id}' ends ({self.end_date}) before it starts ({self.start_date})"
            )

    @property
    def has_dates(self) -> bool:
        """True if the item carries an explicit start or end date."""
        return self.start_date is not None or self.end_date is not None


@dataclass(frozen=True)
class DependencyEdge:
    """A typed precedence constraint between two work items.

    Positive ``lead_lag_days`` delays the successor (lag); negative values let
    it overlap the predecessor (lead).
    """

    predecessor_id: str
    successor_id: str
    dependency_type: DependencyType = DependencyType.FINISH_TO_START
    lead_lag_days: int = 0

    def __post_init__(self) -> None:
        if self.predecessor_id == self.successor_id:
            raise SelfDependencyError(
                f"Work item '{self.predecessor_id}' cannot depend on itself"
            )
        if abs(self.lead_lag_days) > MAX_OFFSET_DAYS:
            raise ValidationError(
                f"Dependency {self.predecessor_id} -> {self.successor_id} lead/lag "
                f"{self.lead_lag_days} exceeds {MAX_OFFSET_DAYS} days"
            )

    def __str__(self) -> str:
        edge = f"{self.predecessor_id} -[{self.dependency_type.value}]-> {self.successor_id}"
        if self.lead_lag_days:
            return f"{edge} ({self.lead_lag_days:+d}d)"
        return edge


@dataclass(frozen=True)
class Milestone:
    """A project checkpoint linked to the work items that complete it."""

    id: str
    title: str
    target_date: date
    is_completed: bool = False
    completed_at: datetime | None = None
    color: str | None = None
    work_item_ids: tuple[str, ...] = field(default_factory=_empty_ids)


def _empty_work_items() -> tuple[WorkItem, ...]:
    return ()


def _empty_dependencies() -> tuple[DependencyEdge, ...]:
    return ()


def _empty_milestones() -> tuple[Milestone, ...]:
    return ()


@dataclass(frozen=True)
class ProjectSnapshot:
    """Immutable view of everything the scheduler reads for one run."""

    work_items: tuple[WorkItem, ...] = field(default_factory=_empty_work_items)
    dependencies: tuple[DependencyEdge, ...] = field(default_factory=_empty_dependencies)
    milestones: tuple[Milestone, ...] = field(default_factory=_empty_milestones)

    def get_all_ids(self) -> set[str]:
        """Get all work item IDs in the snapshot."""
        return {item.id for item in self.work_items}

    def get_work_item(self, work_item_id: str) -> WorkItem | None:
        """Get a work item by its ID."""
        for item in self.work_items:
            if item.id == work_item_id:
                return item
        return None

    def get_milestone(self, milestone_id: str) -> Milestone | None:
        """Get a milestone by its ID."""
        for milestone in self.milestones:
            if milestone.id == milestone_id:
                return milestone
        return None
