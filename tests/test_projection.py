"""Tests for project date range and milestone projection."""

from collections.abc import Callable
from datetime import date

import pytest

from cornerstone.exceptions import UnknownNodeReferenceError
from cornerstone.models import Milestone, WorkItem
from cornerstone.scheduler.config import DanglingReferencePolicy
from cornerstone.scheduler.core import DateRange, WarningKind
from cornerstone.scheduler.projection import compute_date_range, project_milestones

MakeItem = Callable[..., WorkItem]
MakeMilestone = Callable[..., Milestone]


class TestComputeDateRange:
    """Test the project date range."""

    def test_start_and_end_dates(self, make_item: MakeItem) -> None:
        items = [
            make_item("a", start="2026-03-01", end="2026-03-10"),
            make_item("b", start="2026-02-01", end="2026-05-01"),
        ]
        assert compute_date_range(items) == DateRange(date(2026, 2, 1), date(2026, 5, 1))

    def test_start_only_latest_falls_back_to_earliest(self, make_item: MakeItem) -> None:
        items = [make_item("a", start="2026-06-01"), make_item("b", start="2026-02-15")]
        assert compute_date_range(items) == DateRange(date(2026, 2, 15), date(2026, 2, 15))

    def test_end_only_earliest_falls_back_to_latest(self, make_item: MakeItem) -> None:
        items = [make_item("a", end="2026-04-01"), make_item("b", end="2026-07-01")]
        assert compute_date_range(items) == DateRange(date(2026, 7, 1), date(2026, 7, 1))

    def test_undated_items_ignored(self, make_item: MakeItem) -> None:
        items = [
            make_item("a", start="2026-03-01", end="2026-03-02"),
            make_item("b", duration=100, start_after="2025-01-01"),
        ]
        assert compute_date_range(items) == DateRange(date(2026, 3, 1), date(2026, 3, 2))

    def test_no_dates(self, make_item: MakeItem) -> None:
        assert compute_date_range([make_item("a", duration=3)]) is None
        assert compute_date_range([]) is None


class TestProjectMilestones:
    """Test milestone completion projection."""

    def test_latest_linked_end_date(
        self, make_item: MakeItem, make_milestone: MakeMilestone
    ) -> None:
        items = [make_item("wi-1", end="2026-04-15"), make_item("wi-2", end="2026-07-30")]
        projections, warnings = project_milestones(
            [make_milestone("m", ("wi-1", "wi-2"))], items
        )

        assert projections[0].projected_date == date(2026, 7, 30)
        assert warnings == []

    def test_linked_item_without_end_date(
        self, make_item: MakeItem, make_milestone: MakeMilestone
    ) -> None:
        projections, _ = project_milestones(
            [make_milestone("m", ("wi-1",))], [make_item("wi-1", start="2026-04-01")]
        )
        assert projections[0].projected_date is None

    def test_unlinked_milestone(self, make_milestone: MakeMilestone) -> None:
        projections, _ = project_milestones([make_milestone("m")], [])
        assert projections[0].projected_date is None
        assert projections[0].work_item_ids == ()

    def test_carries_milestone_fields(
        self, make_item: MakeItem, make_milestone: MakeMilestone
    ) -> None:
        milestone = make_milestone("handover", ("a",), target="2026-09-01")
        projections, _ = project_milestones([milestone], [make_item("a", end="2026-08-01")])

        projection = projections[0]
        assert projection.milestone_id == "handover"
        assert projection.title == "Handover"
        assert projection.target_date == date(2026, 9, 1)
        assert projection.to_dict()["projectedDate"] == "2026-08-01"

    def test_unknown_link_raises(self, make_milestone: MakeMilestone) -> None:
        with pytest.raises(UnknownNodeReferenceError) as exc_info:
            project_milestones([make_milestone("m", ("ghost",))], [])
        assert exc_info.value.milestone_id == "m"
        assert exc_info.value.missing_ids == {"ghost"}

    def test_unknown_link_excluded(
        self, make_item: MakeItem, make_milestone: MakeMilestone
    ) -> None:
        projections, warnings = project_milestones(
            [make_milestone("m", ("ghost", "a"))],
            [make_item("a", end="2026-03-01")],
            DanglingReferencePolicy.EXCLUDE,
        )

        assert projections[0].work_item_ids == ("a",)
        assert projections[0].projected_date == date(2026, 3, 1)
        assert [w.kind for w in warnings] == [WarningKind.DANGLING_REFERENCE]
