"""Classification of work items into pinned and derived placements."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from typing import TYPE_CHECKING, Union

from cornerstone.logger import get_logger

from .core import ConstraintViolation, ScheduleWarning, ViolationKind, WarningKind
from .dates import add_days, days_between

if TYPE_CHECKING:
    from cornerstone.models import WorkItem

logger = get_logger()


@dataclass(frozen=True)
class Pinned:
    """User-fixed dates. Propagation treats these as fixed points, never as bounds."""

    start: date
    end: date

    @property
    def duration(self) -> int:
        return days_between(self.start, self.end)


@dataclass(frozen=True)
class Derived:
    """Dates to be computed by the forward pass."""

    duration: int


Placement = Union[Pinned, Derived]


@dataclass(frozen=True)
class Window:
    """Inclusive window on a work item's start date."""

    start_after: date | None = None
    start_before: date | None = None

    def clamp(self, start: date) -> date:
        """Raise a computed start to ``start_after``. ``start_before`` is only checked."""
        if self.start_after is not None and start < self.start_after:
            return self.start_after
        return start

    def check(self, work_item_id: str, start: date) -> list[ConstraintViolation]:
        """Report where ``start`` falls outside the window."""
        violations: list[ConstraintViolation] = []
        if self.start_after is not None and start < self.start_after:
            violations.append(
                ConstraintViolation(
                    work_item_id=work_item_id,
                    kind=ViolationKind.START_AFTER_VIOLATED,
                    message=(
                        f"Start date ({start}) precedes start-after constraint "
                        f"({self.start_after})"
                    ),
                )
            )
        if self.start_before is not None and start > self.start_before:
            violations.append(
                ConstraintViolation(
                    work_item_id=work_item_id,
                    kind=ViolationKind.START_BEFORE_VIOLATED,
                    message=(
                        f"Scheduled start date ({start}) exceeds start-before constraint "
                        f"({self.start_before})"
                    ),
                )
            )
        return violations


@dataclass(frozen=True)
class ResolvedConstraints:
    """Placement and start window for one work item."""

    work_item_id: str
    placement: Placement
    window: Window

    @property
    def duration(self) -> int:
        return self.placement.duration

    @property
    def is_pinned(self) -> bool:
        return isinstance(self.placement, Pinned)


def resolve_placement(item: WorkItem, default_pinned_duration_days: int = 1) -> Placement:
    """Decide whether an item is pinned by its own dates or left to propagation.

    A start date pins the item; a missing end comes from the duration, or the
    default length when no duration is given either. An end date on its own
    pins the item at its finish and the start is counted back the same way.
    """
    duration = item.duration_days
    if item.start_date is not None:
        if item.end_date is not None:
            return Pinned(item.start_date, item.end_date)
        length = duration if duration is not None else default_pinned_duration_days
        return Pinned(item.start_date, add_days(item.start_date, length))

    if item.end_date is not None:
        length = duration if duration is not None else default_pinned_duration_days
        return Pinned(add_days(item.end_date, -length), item.end_date)

    return Derived(duration if duration is not None else 0)


def resolve_constraints(
    items: Iterable[WorkItem], default_pinned_duration_days: int = 1
) -> tuple[dict[str, ResolvedConstraints], list[ScheduleWarning]]:
    """Resolve placement and window for every item.

    Returns:
        Tuple of (constraints by work item ID, warnings for derived items
        scheduled without a duration)
    """
    resolved: dict[str, ResolvedConstraints] = {}
    warnings: list[ScheduleWarning] = []

    for item in items:
        placement = resolve_placement(item, default_pinned_duration_days)
        window = Window(item.start_after, item.start_before)
        resolved[item.id] = ResolvedConstraints(item.id, placement, window)

        if isinstance(placement, Derived) and item.duration_days is None:
            warnings.append(
                ScheduleWarning(
                    work_item_id=item.id,
                    kind=WarningKind.NO_DURATION,
                    message="Work item has no duration set; scheduled as zero-duration",
                )
            )

        if isinstance(placement, Pinned):
            logger.checks(f"  {item.id}: pinned {placement.start} -> {placement.end}")
        else:
            logger.checks(f"  {item.id}: derived, {placement.duration}d")

    return resolved, warnings
