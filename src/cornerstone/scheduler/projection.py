"""Project date range and milestone completion projection."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date
from typing import TYPE_CHECKING

from cornerstone.exceptions import UnknownNodeReferenceError
from cornerstone.logger import get_logger

from .config import DanglingReferencePolicy
from .core import DateRange, MilestoneProjection, ScheduleWarning, WarningKind
from .dates import earliest, latest

if TYPE_CHECKING:
    from cornerstone.models import Milestone, WorkItem

logger = get_logger()


def compute_date_range(work_items: Iterable[WorkItem]) -> DateRange | None:
    """Span of the explicit dates across all dated work items.

    When only one side is present anywhere, it is used for both bounds: a
    project whose items only have start dates spans a single day at the
    earliest start.

    Returns:
        DateRange, or None if no work item has a start or end date
    """
    first: date | None = None
    last: date | None = None

    for item in work_items:
        if not item.has_dates:
            continue
        first = earliest(first, item.start_date)
        last = latest(last, item.end_date)

    if first is None and last is None:
        return None
    if first is None:
        first = last
    if last is None:
        last = first
    assert first is not None and last is not None
    return DateRange(earliest=first, latest=last)


def project_milestones(
    milestones: Iterable[Milestone],
    work_items: Iterable[WorkItem],
    policy: DanglingReferencePolicy = DanglingReferencePolicy.RAISE,
) -> tuple[list[MilestoneProjection], list[ScheduleWarning]]:
    """Project each milestone's completion from its linked items' end dates.

    The projected date is the latest end date among linked items that have
    one; it is None when none do, including milestones with no links.

    Raises:
        UnknownNodeReferenceError: If a milestone links an unknown work item
            and ``policy`` is RAISE
    """
    end_dates: dict[str, date | None] = {item.id: item.end_date for item in work_items}
    projections: list[MilestoneProjection] = []
    warnings: list[ScheduleWarning] = []

    for milestone in milestones:
        linked: list[str] = []
        for work_item_id in milestone.work_item_ids:
            if work_item_id in end_dates:
                linked.append(work_item_id)
                continue
            if policy == DanglingReferencePolicy.RAISE:
                raise UnknownNodeReferenceError(
                    f"Milestone '{milestone.id}' links unknown work item: {work_item_id}",
                    missing_ids={work_item_id},
                    milestone_id=milestone.id,
                )
            logger.changes(
                f"Skipping link from milestone '{milestone.id}' to unknown work item "
                f"'{work_item_id}'"
            )
            warnings.append(
                ScheduleWarning(
                    work_item_id=work_item_id,
                    kind=WarningKind.DANGLING_REFERENCE,
                    message=f"Milestone '{milestone.id}' links unknown work item",
                )
            )

        projected = latest(*(end_dates[work_item_id] for work_item_id in linked))
        projections.append(
            MilestoneProjection(
                milestone_id=milestone.id,
                title=milestone.title,
                target_date=milestone.target_date,
                is_completed=milestone.is_completed,
                completed_at=milestone.completed_at,
                color=milestone.color,
                work_item_ids=tuple(linked),
                projected_date=projected,
            )
        )

    return projections, warnings
