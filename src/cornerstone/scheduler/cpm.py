"""Critical path method forward and backward passes."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date
from typing import TYPE_CHECKING

from cornerstone.logger import get_logger
from cornerstone.models import DependencyType

from .constraints import Pinned, ResolvedConstraints
from .core import ConstraintViolation, ViolationKind
from .dates import add_days

if TYPE_CHECKING:
    from .graph import DependencyGraph

logger = get_logger()


@dataclass(frozen=True)
class Span:
    """Start and finish of a node, either earliest or latest."""

    start: date
    finish: date


# Successor earliest-start lower bound for one edge:
#   (predecessor earliest span, lead/lag, successor duration) -> date
_FORWARD: dict[DependencyType, Callable[[Span, int, int], date]] = {
    DependencyType.FINISH_TO_START: lambda pred, lag, _dur: add_days(pred.finish, lag),
    DependencyType.START_TO_START: lambda pred, lag, _dur: add_days(pred.start, lag),
    DependencyType.FINISH_TO_FINISH: lambda pred, lag, dur: add_days(pred.finish, lag - dur),
    DependencyType.START_TO_FINISH: lambda pred, lag, dur: add_days(pred.start, lag - dur),
}

# Predecessor latest-finish upper bound for one edge:
#   (successor latest span, lead/lag, predecessor duration) -> date
_BACKWARD: dict[DependencyType, Callable[[Span, int, int], date]] = {
    DependencyType.FINISH_TO_START: lambda succ, lag, _dur: add_days(succ.start, -lag),
    DependencyType.START_TO_START: lambda succ, lag, dur: add_days(succ.start, dur - lag),
    DependencyType.FINISH_TO_FINISH: lambda succ, lag, _dur: add_days(succ.finish, -lag),
    DependencyType.START_TO_FINISH: lambda succ, lag, dur: add_days(succ.finish, dur - lag),
}


def forward_bound(
    dependency_type: DependencyType, lead_lag_days: int, predecessor: Span, successor_duration: int
) -> date:
    """Earliest start a single edge allows its successor."""
    return _FORWARD[dependency_type](predecessor, lead_lag_days, successor_duration)


def backward_bound(
    dependency_type: DependencyType, lead_lag_days: int, successor: Span, predecessor_duration: int
) -> date:
    """Latest finish a single edge allows its predecessor."""
    return _BACKWARD[dependency_type](successor, lead_lag_days, predecessor_duration)


def _empty_violations() -> list[ConstraintViolation]:
    return []


@dataclass
class NodeTiming:
    """CPM dates for one node. All None when the node could not be placed."""

    earliest: Span | None = None
    latest: Span | None = None
    # What predecessors see in the backward pass; pinned nodes expose their fixed dates
    committed: Span | None = None
    violations: list[ConstraintViolation] = field(default_factory=_empty_violations)


def forward_pass(
    graph: DependencyGraph,
    order: list[str],
    constraints: dict[str, ResolvedConstraints],
    anchor: date | None,
) -> dict[str, NodeTiming]:
    """Compute earliest start/finish in topological order.

    Derived nodes start at the latest bound imposed by their placed
    predecessors and their own start-after date; with neither, they start at
    ``anchor``. Pinned nodes keep their dates and only record violations.
    """
    timings: dict[str, NodeTiming] = {}

    for node_id in order:
        resolved = constraints[node_id]
        timing = NodeTiming()
        timings[node_id] = timing

        bounds: list[tuple[date, str, DependencyType]] = []
        for adj in graph.predecessors[node_id]:
            pred_span = timings[adj.node_id].earliest
            if pred_span is None:
                continue
            bound = forward_bound(
                adj.dependency_type, adj.lead_lag_days, pred_span, resolved.duration
            )
            bounds.append((bound, adj.node_id, adj.dependency_type))

        placement = resolved.placement
        if isinstance(placement, Pinned):
            timing.earliest = Span(placement.start, placement.end)
            for bound, pred_id, dep_type in bounds:
                if bound > placement.start:
                    timing.violations.append(
                        ConstraintViolation(
                            work_item_id=node_id,
                            kind=ViolationKind.DEPENDENCY_VIOLATED,
                            message=(
                                f"Pinned start date ({placement.start}) precedes {bound} "
                                f"required by {pred_id} ({dep_type.value})"
                            ),
                        )
                    )
        else:
            start = max(bound for bound, _, _ in bounds) if bounds else None
            if start is None:
                start = resolved.window.start_after or anchor
            else:
                start = resolved.window.clamp(start)

            if start is None:
                logger.debug(f"  forward {node_id}: no anchor date reachable, left unplaced")
                continue
            timing.earliest = Span(start, add_days(start, placement.duration))

        timing.violations.extend(resolved.window.check(node_id, timing.earliest.start))
        logger.debug(
            f"  forward {node_id}: ES={timing.earliest.start} EF={timing.earliest.finish}"
        )

    return timings


def backward_pass(
    graph: DependencyGraph,
    order: list[str],
    constraints: dict[str, ResolvedConstraints],
    timings: dict[str, NodeTiming],
) -> None:
    """Fill in latest start/finish in reverse topological order.

    A node without placed successors finishes at its own earliest finish.
    Otherwise its latest finish is the tightest bound its successors impose.
    """
    for node_id in reversed(order):
        timing = timings[node_id]
        if timing.earliest is None:
            continue

        resolved = constraints[node_id]
        duration = resolved.duration

        bounds: list[date] = []
        for adj in graph.successors[node_id]:
            succ_span = timings[adj.node_id].committed
            if succ_span is None:
                continue
            bounds.append(
                backward_bound(adj.dependency_type, adj.lead_lag_days, succ_span, duration)
            )

        latest_finish = min(bounds) if bounds else timing.earliest.finish
        timing.latest = Span(add_days(latest_finish, -duration), latest_finish)
        timing.committed = timing.earliest if resolved.is_pinned else timing.latest
        logger.debug(f"  backward {node_id}: LS={timing.latest.start} LF={timing.latest.finish}")


def run_passes(
    graph: DependencyGraph,
    order: list[str],
    constraints: dict[str, ResolvedConstraints],
    anchor: date | None,
) -> dict[str, NodeTiming]:
    """Run both passes over an acyclic graph already in topological order."""
    timings = forward_pass(graph, order, constraints, anchor)
    backward_pass(graph, order, constraints, timings)
    return timings
