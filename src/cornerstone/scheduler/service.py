"""High-level scheduling service with the two consumer policies for cycles."""

from dataclasses import dataclass, field
from datetime import date
from typing import TYPE_CHECKING, Any

from cornerstone.exceptions import CircularDependencyError
from cornerstone.logger import get_logger

from .config import ScheduleMode, SchedulingConfig
from .core import DateRange, MilestoneProjection, ScheduleResult
from .dates import format_date
from .engine import compute_schedule

if TYPE_CHECKING:
    from cornerstone.models import DependencyEdge, ProjectSnapshot, WorkItem

logger = get_logger()


def _empty_str_list() -> list[str]:
    return []


@dataclass
class TimelineView:
    """Everything a timeline/Gantt consumer needs, with cycles degraded away.

    ``work_items`` holds only items with an explicit start or end date.
    """

    work_items: "list[WorkItem]"
    dependencies: "list[DependencyEdge]"
    milestones: list[MilestoneProjection]
    critical_path: list[str] = field(default_factory=_empty_str_list)
    date_range: DateRange | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "workItems": [
                {
                    "id": item.id,
                    "title": item.title,
                    "status": item.status.value,
                    "startDate": format_date(item.start_date),
                    "endDate": format_date(item.end_date),
                    "durationDays": item.duration_days,
                    "startAfter": format_date(item.start_after),
                    "startBefore": format_date(item.start_before),
                    "assignedUserId": item.assigned_user_id,
                    "requiredMilestoneIds": list(item.required_milestone_ids),
                }
                for item in self.work_items
            ],
            "dependencies": [
                {
                    "predecessorId": dep.predecessor_id,
                    "successorId": dep.successor_id,
                    "dependencyType": dep.dependency_type.value,
                    "leadLagDays": dep.lead_lag_days,
                }
                for dep in self.dependencies
            ],
            "milestones": [m.to_dict() for m in self.milestones],
            "criticalPath": list(self.critical_path),
            "dateRange": self.date_range.to_dict() if self.date_range else None,
        }


class SchedulingService:
    """Runs the engine over a project snapshot on behalf of a consumer.

    The engine only reports ``has_cycle``. This service holds the two
    policies built on top of it:
    - schedule(): strict, a cycle is a conflict and raises
    - timeline(): permissive, a cycle just empties the critical path
    """

    def __init__(
        self,
        snapshot: "ProjectSnapshot",
        today: date | None = None,
        config: SchedulingConfig | None = None,
    ):
        """Initialize scheduling service.

        Args:
            snapshot: Work items, dependencies and milestones to schedule
            today: Start date for unconstrained derived items. None falls back
                to the earliest explicit date in the snapshot.
            config: Optional scheduling configuration
        """
        self.snapshot = snapshot
        self.today = today
        self.config = config or SchedulingConfig()

    def compute(
        self,
        mode: ScheduleMode = ScheduleMode.FULL,
        anchor_work_item_id: str | None = None,
    ) -> ScheduleResult:
        """Run the engine without applying any cycle policy."""
        return compute_schedule(
            self.snapshot.work_items,
            self.snapshot.dependencies,
            self.snapshot.milestones,
            today=self.today,
            mode=mode,
            anchor_work_item_id=anchor_work_item_id,
            config=self.config,
        )

    def schedule(
        self,
        mode: ScheduleMode = ScheduleMode.FULL,
        anchor_work_item_id: str | None = None,
    ) -> ScheduleResult:
        """Compute the schedule, treating a cycle as a hard conflict.

        Raises:
            CircularDependencyError: If the dependency graph has a cycle; the
                exception carries the cycle members
        """
        result = self.compute(mode, anchor_work_item_id)
        if result.has_cycle:
            raise CircularDependencyError(
                "The dependency graph contains a circular dependency", cycle=result.cycle
            )
        return result

    def timeline(self) -> TimelineView:
        """Build the timeline view, degrading gracefully on a cycle."""
        result = self.compute()
        if result.has_cycle:
            logger.changes("Timeline: dependency cycle present, critical path omitted")

        return TimelineView(
            work_items=[item for item in self.snapshot.work_items if item.has_dates],
            dependencies=[
                dep for dep in self.snapshot.dependencies if dep not in result.excluded_edges
            ],
            milestones=result.milestones,
            critical_path=[] if result.has_cycle else result.critical_path,
            date_range=result.date_range,
        )
