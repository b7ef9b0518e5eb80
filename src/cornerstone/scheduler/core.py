"""Core dataclasses produced by the scheduling engine."""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import TYPE_CHECKING, Any

from .dates import format_date

if TYPE_CHECKING:
    from cornerstone.models import DependencyEdge


class ViolationKind(str, Enum):
    """Ways a resolved start can break a work item's own constraints."""

    START_BEFORE_VIOLATED = "start_before_violated"
    START_AFTER_VIOLATED = "start_after_violated"
    DEPENDENCY_VIOLATED = "dependency_violated"


class WarningKind(str, Enum):
    """Non-fatal diagnostics about the input data."""

    NO_DURATION = "no_duration"
    DANGLING_REFERENCE = "dangling_reference"


@dataclass(frozen=True)
class ConstraintViolation:
    """A constraint the schedule could not honor for one work item."""

    work_item_id: str
    kind: ViolationKind
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {"workItemId": self.work_item_id, "type": self.kind.value, "message": self.message}


@dataclass(frozen=True)
class ScheduleWarning:
    """A non-fatal warning produced during scheduling."""

    work_item_id: str | None
    kind: WarningKind
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {"workItemId": self.work_item_id, "type": self.kind.value, "message": self.message}


def _empty_violations() -> tuple[ConstraintViolation, ...]:
    return ()


@dataclass(frozen=True)
class ScheduledItem:
    """Resolved timing for one work item.

    ``start_date``/``end_date`` are the dates the item should be shown with:
    the pinned dates for pinned items, the earliest dates for derived ones.
    All CPM fields are None when the item could not be placed (cycle, or no
    anchor date reachable).
    """

    work_item_id: str
    previous_start_date: date | None
    previous_end_date: date | None
    start_date: date | None
    end_date: date | None
    earliest_start: date | None = None
    earliest_finish: date | None = None
    latest_start: date | None = None
    latest_finish: date | None = None
    slack_days: int | None = None
    is_on_critical_path: bool = False
    is_pinned: bool = False
    violations: tuple[ConstraintViolation, ...] = field(default_factory=_empty_violations)

    @property
    def constraint_violated(self) -> bool:
        """True if any start window or fixed-date conflict was recorded."""
        return bool(self.violations)

    def to_dict(self) -> dict[str, Any]:
        return {
            "workItemId": self.work_item_id,
            "previousStartDate": format_date(self.previous_start_date),
            "previousEndDate": format_date(self.previous_end_date),
            "startDate": format_date(self.start_date),
            "endDate": format_date(self.end_date),
            "earliestStart": format_date(self.earliest_start),
            "earliestFinish": format_date(self.earliest_finish),
            "latestStart": format_date(self.latest_start),
            "latestFinish": format_date(self.latest_finish),
            "slackDays": self.slack_days,
            "isOnCriticalPath": self.is_on_critical_path,
            "isPinned": self.is_pinned,
            "constraintViolated": self.constraint_violated,
        }


@dataclass(frozen=True)
class DateRange:
    """Span of the dated work items in a project."""

    earliest: date
    latest: date

    def to_dict(self) -> dict[str, Any]:
        return {"earliest": self.earliest.isoformat(), "latest": self.latest.isoformat()}


def _empty_ids() -> tuple[str, ...]:
    return ()


@dataclass(frozen=True)
class MilestoneProjection:
    """A milestone together with its projected completion date."""

    milestone_id: str
    title: str
    target_date: date
    is_completed: bool
    completed_at: datetime | None
    color: str | None
    work_item_ids: tuple[str, ...] = field(default_factory=_empty_ids)
    projected_date: date | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.milestone_id,
            "title": self.title,
            "targetDate": self.target_date.isoformat(),
            "isCompleted": self.is_completed,
            "completedAt": self.completed_at.isoformat() if self.completed_at else None,
            "color": self.color,
            "workItemIds": list(self.work_item_ids),
            "projectedDate": format_date(self.projected_date),
        }


def _empty_items() -> dict[str, ScheduledItem]:
    return {}


def _empty_str_list() -> list[str]:
    return []


def _empty_projections() -> list[MilestoneProjection]:
    return []


def _empty_warnings() -> list[ScheduleWarning]:
    return []


def _empty_violation_list() -> list[ConstraintViolation]:
    return []


def _empty_edges() -> "list[DependencyEdge]":
    return []


@dataclass
class ScheduleResult:
    """Complete output of one scheduling run.

    ``items`` is ordered topologically on an acyclic graph and in input order
    otherwise. ``cycle`` holds one exemplar cycle for diagnostics when
    ``has_cycle`` is set; permissive consumers should not surface it.
    """

    items: dict[str, ScheduledItem] = field(default_factory=_empty_items)
    critical_path: list[str] = field(default_factory=_empty_str_list)
    date_range: DateRange | None = None
    milestones: list[MilestoneProjection] = field(default_factory=_empty_projections)
    has_cycle: bool = False
    cycle: list[str] = field(default_factory=_empty_str_list)
    warnings: list[ScheduleWarning] = field(default_factory=_empty_warnings)
    violations: list[ConstraintViolation] = field(default_factory=_empty_violation_list)
    excluded_edges: "list[DependencyEdge]" = field(default_factory=_empty_edges)

    def get_item(self, work_item_id: str) -> ScheduledItem | None:
        """Get the scheduled entry for a work item, if it was scheduled."""
        return self.items.get(work_item_id)

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready representation (ISO date strings, camelCase keys)."""
        return {
            "scheduledItems": [item.to_dict() for item in self.items.values()],
            "criticalPath": list(self.critical_path),
            "dateRange": self.date_range.to_dict() if self.date_range else None,
            "milestones": [m.to_dict() for m in self.milestones],
            "hasCycle": self.has_cycle,
            "warnings": [w.to_dict() for w in self.warnings],
            "violations": [v.to_dict() for v in self.violations],
        }
