"""Scheduling engine entry point.

``compute_schedule`` is a pure function of its arguments: it reads the work
items, dependencies and milestones it is given, never mutates them, and
returns a fresh ScheduleResult. The pipeline is

    milestone expansion -> graph -> cycle check -> constraints
        -> forward/backward pass -> critical path -> projection

A cycle stops the pipeline after the cycle check. The result then carries
``has_cycle=True``, an empty critical path, pinned dates as given, and the
date range and milestone projections, which do not depend on propagation.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import date
from typing import TYPE_CHECKING

from cornerstone.exceptions import UnknownNodeReferenceError, ValidationError
from cornerstone.logger import get_logger
from cornerstone.models import DependencyEdge, DependencyType

from .config import DanglingReferencePolicy, ScheduleMode, SchedulingConfig
from .constraints import Pinned, ResolvedConstraints, resolve_constraints, resolve_placement
from .core import ScheduledItem, ScheduleResult, ScheduleWarning, WarningKind
from .cpm import NodeTiming, run_passes
from .critical_path import compute_slack, extract_critical_path
from .cycles import find_cycle, topological_order
from .dates import earliest
from .graph import DependencyGraph, check_references, downstream_of, partition_edges
from .projection import compute_date_range, project_milestones

if TYPE_CHECKING:
    from cornerstone.models import Milestone, WorkItem

logger = get_logger()


def expand_milestone_dependencies(
    work_items: Sequence[WorkItem],
    milestones: Sequence[Milestone],
    policy: DanglingReferencePolicy = DanglingReferencePolicy.RAISE,
) -> tuple[list[DependencyEdge], list[ScheduleWarning]]:
    """Turn "requires milestone" links into finish-to-start edges.

    A work item that requires milestone M cannot start before every work item
    contributing to M has finished. Contributions by the item itself are
    skipped, as are contributors that are not known work items.

    Raises:
        UnknownNodeReferenceError: If a required milestone does not exist and
            ``policy`` is RAISE
    """
    contributors = {milestone.id: milestone.work_item_ids for milestone in milestones}
    known_ids = {item.id for item in work_items}
    edges: list[DependencyEdge] = []
    warnings: list[ScheduleWarning] = []

    for item in work_items:
        for milestone_id in item.required_milestone_ids:
            if milestone_id not in contributors:
                if policy == DanglingReferencePolicy.RAISE:
                    raise UnknownNodeReferenceError(
                        f"Work item '{item.id}' requires unknown milestone: {milestone_id}",
                        missing_ids={milestone_id},
                        milestone_id=milestone_id,
                    )
                logger.changes(
                    f"Ignoring requirement of '{item.id}' on unknown milestone '{milestone_id}'"
                )
                warnings.append(
                    ScheduleWarning(
                        work_item_id=item.id,
                        kind=WarningKind.DANGLING_REFERENCE,
                        message=f"Requires unknown milestone '{milestone_id}'",
                    )
                )
                continue
            for contributor_id in contributors[milestone_id]:
                if contributor_id != item.id and contributor_id in known_ids:
                    edges.append(
                        DependencyEdge(
                            predecessor_id=contributor_id,
                            successor_id=item.id,
                            dependency_type=DependencyType.FINISH_TO_START,
                            lead_lag_days=0,
                        )
                    )

    return edges, warnings


def _check_unique_ids(work_items: Sequence[WorkItem]) -> None:
    seen: set[str] = set()
    for item in work_items:
        if item.id in seen:
            raise ValidationError(f"Duplicate work item ID: {item.id}")
        seen.add(item.id)


def _select_edges(
    work_items: Sequence[WorkItem],
    dependencies: list[DependencyEdge],
    policy: DanglingReferencePolicy,
) -> tuple[list[DependencyEdge], list[DependencyEdge], list[ScheduleWarning]]:
    """Apply the dangling reference policy to the full edge list."""
    node_ids = [item.id for item in work_items]
    if policy == DanglingReferencePolicy.RAISE:
        check_references(node_ids, dependencies)
        return dependencies, [], []

    valid, dangling = partition_edges(node_ids, dependencies)
    warnings: list[ScheduleWarning] = []
    for edge in dangling:
        logger.changes(f"Excluding dependency {edge}: references an unknown work item")
        warnings.append(
            ScheduleWarning(
                work_item_id=None,
                kind=WarningKind.DANGLING_REFERENCE,
                message=f"Excluded dependency {edge} referencing an unknown work item",
            )
        )
    return valid, dangling, warnings


def _unpropagated_item(item: WorkItem, default_pinned_duration_days: int) -> ScheduledItem:
    """Entry for an item that propagation never ran for: pinned dates or nothing."""
    placement = resolve_placement(item, default_pinned_duration_days)
    if isinstance(placement, Pinned):
        return ScheduledItem(
            work_item_id=item.id,
            previous_start_date=item.start_date,
            previous_end_date=item.end_date,
            start_date=placement.start,
            end_date=placement.end,
            is_pinned=True,
        )
    return ScheduledItem(
        work_item_id=item.id,
        previous_start_date=item.start_date,
        previous_end_date=item.end_date,
        start_date=None,
        end_date=None,
    )


def _scheduled_item(
    item: WorkItem,
    resolved: ResolvedConstraints,
    timing: NodeTiming,
    critical: bool,
) -> ScheduledItem:
    earliest_span = timing.earliest
    latest_span = timing.latest
    return ScheduledItem(
        work_item_id=item.id,
        previous_start_date=item.start_date,
        previous_end_date=item.end_date,
        start_date=earliest_span.start if earliest_span else None,
        end_date=earliest_span.finish if earliest_span else None,
        earliest_start=earliest_span.start if earliest_span else None,
        earliest_finish=earliest_span.finish if earliest_span else None,
        latest_start=latest_span.start if latest_span else None,
        latest_finish=latest_span.finish if latest_span else None,
        slack_days=compute_slack(timing),
        is_on_critical_path=critical,
        is_pinned=resolved.is_pinned,
        violations=tuple(timing.violations),
    )


def _project_anchor(work_items: Iterable[WorkItem], today: date | None) -> date | None:
    """Start date for derived items with nothing else to go on."""
    if today is not None:
        return today
    anchor: date | None = None
    for item in work_items:
        anchor = earliest(anchor, item.start_date, item.end_date, item.start_after)
    return anchor


def compute_schedule(  # noqa: PLR0913, PLR0915 - single entry point running the full pipeline
    work_items: Iterable[WorkItem],
    dependencies: Iterable[DependencyEdge],
    milestones: Iterable[Milestone] = (),
    *,
    today: date | None = None,
    mode: ScheduleMode = ScheduleMode.FULL,
    anchor_work_item_id: str | None = None,
    config: SchedulingConfig | None = None,
) -> ScheduleResult:
    """Compute the schedule for a snapshot of work items.

    Args:
        work_items: Work items to schedule
        dependencies: Dependency edges between them
        milestones: Milestones to project
        today: Start date for derived items with no predecessors or start-after
            date. Defaults to the earliest explicit date in the snapshot.
        mode: FULL schedules everything; CASCADE only the anchor and its
            downstream successors
        anchor_work_item_id: Required for CASCADE mode
        config: Scheduling options

    Returns:
        A fresh ScheduleResult

    Raises:
        ValidationError: On duplicate work item IDs or a missing cascade anchor
        UnknownNodeReferenceError: If an edge or milestone link names an
            unknown work item under the RAISE policy
    """
    config = config or SchedulingConfig()
    policy = config.dangling_references
    items = list(work_items)
    milestone_list = list(milestones)
    _check_unique_ids(items)

    if mode == ScheduleMode.CASCADE and not anchor_work_item_id:
        raise ValidationError("anchor_work_item_id is required for cascade mode")

    # Milestone links are checked before they are expanded into edges
    milestone_projections, warnings = project_milestones(milestone_list, items, policy)

    edges = list(dependencies)
    if config.expand_milestone_dependencies:
        synthetic, expansion_warnings = expand_milestone_dependencies(items, milestone_list, policy)
        edges.extend(synthetic)
        warnings.extend(expansion_warnings)

    edges, excluded, edge_warnings = _select_edges(items, edges, policy)
    warnings.extend(edge_warnings)

    result = ScheduleResult(
        date_range=compute_date_range(items),
        milestones=milestone_projections,
        warnings=warnings,
        excluded_edges=excluded,
    )

    if mode == ScheduleMode.CASCADE:
        assert anchor_work_item_id is not None
        scheduled_ids = downstream_of(anchor_work_item_id, edges) & {item.id for item in items}
    else:
        scheduled_ids = {item.id for item in items}

    scheduled_items = [item for item in items if item.id in scheduled_ids]
    if not scheduled_items:
        return result

    graph = DependencyGraph.build(items, edges, node_ids=scheduled_ids)
    logger.checks(f"Scheduling {len(graph)} work items over {graph.edge_count} dependencies")

    cycle = find_cycle(graph)
    if cycle is not None:
        logger.changes(f"Circular dependency detected: {' -> '.join([*cycle, cycle[0]])}")
        result.has_cycle = True
        result.cycle = cycle
        result.items = {
            item.id: _unpropagated_item(item, config.default_pinned_duration_days)
            for item in scheduled_items
        }
        return result

    constraints, constraint_warnings = resolve_constraints(
        scheduled_items, config.default_pinned_duration_days
    )
    result.warnings.extend(constraint_warnings)

    order = topological_order(graph)
    anchor = _project_anchor(items, today)
    timings = run_passes(graph, order, constraints, anchor)
    result.critical_path = extract_critical_path(order, timings)

    by_id = {item.id: item for item in scheduled_items}
    critical = set(result.critical_path)
    for node_id in order:
        item = by_id[node_id]
        scheduled = _scheduled_item(
            item, constraints[node_id], timings[node_id], node_id in critical
        )
        result.items[node_id] = scheduled
        result.violations.extend(scheduled.violations)

        for violation in scheduled.violations:
            logger.changes(f"{node_id}: {violation.message}")

    logger.changes(f"Critical path: {', '.join(result.critical_path) or '(none)'}")
    return result
