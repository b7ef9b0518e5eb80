"""Tests for the CPM forward and backward passes."""

from collections.abc import Callable
from datetime import date

import pytest

from cornerstone.models import DependencyEdge, DependencyType, WorkItem
from cornerstone.scheduler.constraints import resolve_constraints
from cornerstone.scheduler.core import ViolationKind
from cornerstone.scheduler.cpm import (
    NodeTiming,
    Span,
    backward_bound,
    forward_bound,
    run_passes,
)
from cornerstone.scheduler.cycles import topological_order
from cornerstone.scheduler.graph import DependencyGraph

FS = DependencyType.FINISH_TO_START
SS = DependencyType.START_TO_START
FF = DependencyType.FINISH_TO_FINISH
SF = DependencyType.START_TO_FINISH


def _run(
    items: list[WorkItem], deps: list[DependencyEdge], anchor: date | None = None
) -> dict[str, NodeTiming]:
    graph = DependencyGraph.build(items, deps)
    constraints, _ = resolve_constraints(items)
    return run_passes(graph, topological_order(graph), constraints, anchor)


class TestForwardBound:
    """Successor earliest-start bound for each dependency type."""

    PRED = Span(date(2026, 3, 1), date(2026, 3, 6))

    @pytest.mark.parametrize(
        ("dep_type", "lag", "expected"),
        [
            (FS, 0, date(2026, 3, 6)),
            (FS, 2, date(2026, 3, 8)),
            (SS, 0, date(2026, 3, 1)),
            (SS, -2, date(2026, 2, 27)),
            (FF, 0, date(2026, 3, 4)),
            (FF, 1, date(2026, 3, 5)),
            (SF, 0, date(2026, 2, 27)),
            (SF, 5, date(2026, 3, 4)),
        ],
    )
    def test_bound(self, dep_type: DependencyType, lag: int, expected: date) -> None:
        """Successor duration is 2 days throughout."""
        assert forward_bound(dep_type, lag, self.PRED, 2) == expected


class TestBackwardBound:
    """Predecessor latest-finish bound for each dependency type."""

    SUCC = Span(date(2026, 3, 10), date(2026, 3, 14))

    @pytest.mark.parametrize(
        ("dep_type", "lag", "expected"),
        [
            (FS, 0, date(2026, 3, 10)),
            (FS, 2, date(2026, 3, 8)),
            (SS, 1, date(2026, 3, 14)),
            (FF, 1, date(2026, 3, 13)),
            (SF, 0, date(2026, 3, 19)),
        ],
    )
    def test_bound(self, dep_type: DependencyType, lag: int, expected: date) -> None:
        """Predecessor duration is 5 days throughout."""
        assert backward_bound(dep_type, lag, self.SUCC, 5) == expected

    @pytest.mark.parametrize("dep_type", list(DependencyType))
    def test_every_type_dispatched(self, dep_type: DependencyType) -> None:
        forward_bound(dep_type, 0, self.SUCC, 1)
        backward_bound(dep_type, 0, self.SUCC, 1)


class TestForwardPass:
    """Test earliest dates through a whole graph."""

    def test_derived_chain_from_anchor(
        self, make_item: Callable[..., WorkItem], make_dep: Callable[..., DependencyEdge]
    ) -> None:
        items = [make_item("a", duration=5), make_item("b", duration=3)]
        timings = _run(items, [make_dep("a", "b")], anchor=date(2026, 1, 5))

        assert timings["a"].earliest == Span(date(2026, 1, 5), date(2026, 1, 10))
        assert timings["b"].earliest == Span(date(2026, 1, 10), date(2026, 1, 13))

    def test_latest_predecessor_bound_wins(
        self, make_item: Callable[..., WorkItem], make_dep: Callable[..., DependencyEdge]
    ) -> None:
        items = [
            make_item("a", start="2026-03-01", end="2026-03-04"),
            make_item("b", start="2026-03-01", end="2026-03-09"),
            make_item("c", duration=2),
        ]
        deps = [make_dep("a", "c", lag=10), make_dep("b", "c")]

        timings = _run(items, deps)

        # a allows 03-14, b allows 03-09
        assert timings["c"].earliest == Span(date(2026, 3, 14), date(2026, 3, 16))

    def test_parallel_edges_tighter_wins(
        self, make_item: Callable[..., WorkItem], make_dep: Callable[..., DependencyEdge]
    ) -> None:
        items = [make_item("a", duration=5), make_item("b", duration=4)]
        deps = [make_dep("a", "b", FS, 0), make_dep("a", "b", SS, 10)]

        timings = _run(items, deps, anchor=date(2026, 3, 1))

        # FS allows 03-06, SS+10 allows 03-11
        assert timings["b"].earliest == Span(date(2026, 3, 11), date(2026, 3, 15))

    def test_start_after_raises_start(
        self, make_item: Callable[..., WorkItem], make_dep: Callable[..., DependencyEdge]
    ) -> None:
        items = [
            make_item("a", start="2026-03-01", end="2026-03-02"),
            make_item("b", duration=1, start_after="2026-03-10"),
        ]
        timings = _run(items, [make_dep("a", "b")])

        assert timings["b"].earliest == Span(date(2026, 3, 10), date(2026, 3, 11))
        assert timings["b"].violations == []

    def test_start_after_used_without_predecessors(
        self, make_item: Callable[..., WorkItem]
    ) -> None:
        items = [make_item("a", duration=2, start_after="2026-05-01")]
        timings = _run(items, [], anchor=date(2026, 1, 1))
        assert timings["a"].earliest == Span(date(2026, 5, 1), date(2026, 5, 3))

    def test_start_before_violation_recorded(
        self, make_item: Callable[..., WorkItem], make_dep: Callable[..., DependencyEdge]
    ) -> None:
        items = [
            make_item("a", start="2026-03-01", end="2026-03-05"),
            make_item("b", duration=1, start_before="2026-03-01"),
        ]
        timings = _run(items, [make_dep("a", "b")])

        assert timings["b"].earliest == Span(date(2026, 3, 5), date(2026, 3, 6))
        assert [v.kind for v in timings["b"].violations] == [
            ViolationKind.START_BEFORE_VIOLATED
        ]

    def test_unplaced_without_anchor(self, make_item: Callable[..., WorkItem]) -> None:
        timings = _run([make_item("a", duration=3)], [], anchor=None)
        assert timings["a"].earliest is None
        assert timings["a"].latest is None


class TestPinnedFixedPoints:
    """Pinned items keep their dates in both passes."""

    def test_pinned_not_moved_by_predecessor(
        self, make_item: Callable[..., WorkItem], make_dep: Callable[..., DependencyEdge]
    ) -> None:
        items = [
            make_item("a", duration=5),
            make_item("b", start="2026-03-03", end="2026-03-05"),
        ]
        timings = _run(items, [make_dep("a", "b")], anchor=date(2026, 3, 1))

        assert timings["b"].earliest == Span(date(2026, 3, 3), date(2026, 3, 5))
        assert [v.kind for v in timings["b"].violations] == [
            ViolationKind.DEPENDENCY_VIOLATED
        ]

    def test_pinned_successor_bounds_predecessor_with_its_fixed_dates(
        self, make_item: Callable[..., WorkItem], make_dep: Callable[..., DependencyEdge]
    ) -> None:
        items = [
            make_item("a", duration=2),
            make_item("b", start="2026-03-10", end="2026-03-12"),
            make_item("c", duration=1),
        ]
        deps = [make_dep("a", "b"), make_dep("b", "c")]

        timings = _run(items, deps, anchor=date(2026, 3, 1))

        # a may finish as late as b's pinned start
        assert timings["a"].latest == Span(date(2026, 3, 8), date(2026, 3, 10))
        assert timings["b"].latest is not None
        assert timings["c"].earliest == Span(date(2026, 3, 12), date(2026, 3, 13))

    def test_pinned_satisfied_has_no_violation(
        self, make_item: Callable[..., WorkItem], make_dep: Callable[..., DependencyEdge]
    ) -> None:
        items = [
            make_item("a", start="2026-03-01", end="2026-03-03"),
            make_item("b", start="2026-03-05", end="2026-03-06"),
        ]
        timings = _run(items, [make_dep("a", "b")])
        assert timings["b"].violations == []


class TestBackwardPass:
    """Test latest dates and the sink rule."""

    def test_sinks_finish_at_earliest_finish(
        self, make_item: Callable[..., WorkItem], make_dep: Callable[..., DependencyEdge]
    ) -> None:
        items = [
            make_item("a", duration=5),
            make_item("b", duration=3),
            make_item("c", duration=9),
        ]
        deps = [make_dep("a", "b"), make_dep("a", "c")]

        timings = _run(items, deps, anchor=date(2026, 1, 1))

        assert timings["b"].latest == timings["b"].earliest
        assert timings["c"].latest == timings["c"].earliest
        assert timings["a"].latest == Span(date(2026, 1, 1), date(2026, 1, 6))

    def test_float_on_shorter_branch(
        self, make_item: Callable[..., WorkItem], make_dep: Callable[..., DependencyEdge]
    ) -> None:
        items = [
            make_item("a", duration=2),
            make_item("long", duration=10),
            make_item("short", duration=3),
            make_item("end", duration=1),
        ]
        deps = [
            make_dep("a", "long"),
            make_dep("a", "short"),
            make_dep("long", "end"),
            make_dep("short", "end"),
        ]

        timings = _run(items, deps, anchor=date(2026, 1, 1))

        short = timings["short"]
        assert short.earliest == Span(date(2026, 1, 3), date(2026, 1, 6))
        assert short.latest == Span(date(2026, 1, 10), date(2026, 1, 13))

    def test_start_to_start_lag_backward(
        self, make_item: Callable[..., WorkItem], make_dep: Callable[..., DependencyEdge]
    ) -> None:
        items = [make_item("a", duration=10), make_item("b", duration=4)]
        timings = _run(items, [make_dep("a", "b", SS, 3)], anchor=date(2026, 3, 1))

        assert timings["b"].earliest == Span(date(2026, 3, 4), date(2026, 3, 8))
        # LF(a) = LS(b) - 3 + 10
        assert timings["a"].latest == Span(date(2026, 3, 1), date(2026, 3, 11))

    def test_parallel_edges_tighter_wins(
        self, make_item: Callable[..., WorkItem], make_dep: Callable[..., DependencyEdge]
    ) -> None:
        items = [make_item("a", duration=5), make_item("b", duration=4)]
        deps = [make_dep("a", "b", SS, 10), make_dep("a", "b", FS, 0)]

        timings = _run(items, deps, anchor=date(2026, 3, 1))

        assert timings["b"].latest == Span(date(2026, 3, 11), date(2026, 3, 15))
        # FS allows LF(a) = 03-11, SS+10 allows 03-11 - 10 + 5 = 03-06
        assert timings["a"].latest == Span(date(2026, 3, 1), date(2026, 3, 6))
