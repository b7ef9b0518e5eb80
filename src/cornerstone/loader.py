"""Project loading with config discovery and reference validation."""

from __future__ import annotations

from pathlib import Path

from . import context
from .exceptions import UnknownNodeReferenceError
from .models import ProjectSnapshot
from .parser import ProjectParser
from .scheduler import (
    DanglingReferencePolicy,
    DependencyGraph,
    expand_milestone_dependencies,
    find_cycle,
    partition_edges,
)
from .unified_config import CONFIG_FILENAME, UnifiedConfig, load_unified_config


def discover_config(
    project_path: Path,
    config_path: Path | None = None,
) -> UnifiedConfig | None:
    """Discover unified config from various locations.

    Search order:
    1. Explicit config_path argument
    2. Global context (set via CLI --config)
    3. project directory / cornerstone_config.yaml
    4. Current directory / cornerstone_config.yaml
    """
    # 1. Explicit argument
    if config_path and config_path.exists():
        return load_unified_config(config_path)

    # 2. Global context
    ctx_config = context.get_config_path()
    if ctx_config and ctx_config.exists():
        return load_unified_config(ctx_config)

    # 3. Project directory
    dir_config = Path(project_path).parent / CONFIG_FILENAME
    if dir_config.exists():
        return load_unified_config(dir_config)

    # 4. Current directory
    cwd_config = Path(CONFIG_FILENAME)
    if cwd_config.exists():
        return load_unified_config(cwd_config)

    return None


def load_project(
    path: Path | str,
    config_path: Path | None = None,
    *,
    config: UnifiedConfig | None = None,
) -> ProjectSnapshot:
    """Load and validate a project file.

    Dangling references are rejected here when the scheduler policy is
    ``raise``; under ``exclude`` they are left for the engine to skip with a
    warning. Cycles are never rejected at load time.

    Args:
        path: Path to the project YAML file
        config_path: Optional explicit path to config file
        config: Optional explicit unified config (overrides discovery)

    Raises:
        UnknownNodeReferenceError: On the first dangling reference under the
            ``raise`` policy
    """
    path = Path(path)

    if config is None:
        config = discover_config(path, config_path)

    snapshot = ProjectParser().parse_file(path)

    policy = config.scheduler.dangling_references if config else DanglingReferencePolicy.RAISE
    if policy == DanglingReferencePolicy.RAISE:
        problems = find_reference_problems(snapshot)
        if problems:
            raise problems[0]

    return snapshot


def find_reference_problems(snapshot: ProjectSnapshot) -> list[UnknownNodeReferenceError]:
    """Collect every reference to a work item or milestone that does not exist."""
    item_ids = snapshot.get_all_ids()
    milestone_ids = {milestone.id for milestone in snapshot.milestones}
    problems: list[UnknownNodeReferenceError] = []

    for edge in snapshot.dependencies:
        missing = {edge.predecessor_id, edge.successor_id} - item_ids
        if missing:
            problems.append(
                UnknownNodeReferenceError(
                    f"Dependency {edge} references unknown work item(s): "
                    f"{', '.join(sorted(missing))}",
                    missing_ids=missing,
                    edge=edge,
                )
            )

    for milestone in snapshot.milestones:
        for work_item_id in milestone.work_item_ids:
            if work_item_id not in item_ids:
                problems.append(
                    UnknownNodeReferenceError(
                        f"Milestone '{milestone.id}' links unknown work item: {work_item_id}",
                        missing_ids={work_item_id},
                        milestone_id=milestone.id,
                    )
                )

    for item in snapshot.work_items:
        for milestone_id in item.required_milestone_ids:
            if milestone_id not in milestone_ids:
                problems.append(
                    UnknownNodeReferenceError(
                        f"Work item '{item.id}' requires unknown milestone: {milestone_id}",
                        missing_ids={milestone_id},
                        milestone_id=milestone_id,
                    )
                )

    return problems


def validate_project(snapshot: ProjectSnapshot, config: UnifiedConfig | None = None) -> list[str]:
    """Report every problem that would affect scheduling.

    Unlike load_project() this does not stop at the first problem: it lists
    all dangling references and, if the known references form a cycle, one
    exemplar cycle.

    Returns:
        Human-readable problem descriptions; empty when the project is clean
    """
    problems = [str(error) for error in find_reference_problems(snapshot)]

    edges = list(snapshot.dependencies)
    expand = config.scheduler.expand_milestone_dependencies if config else True
    if expand:
        synthetic, _ = expand_milestone_dependencies(
            snapshot.work_items, snapshot.milestones, DanglingReferencePolicy.EXCLUDE
        )
        edges.extend(synthetic)

    item_ids = [item.id for item in snapshot.work_items]
    valid, _ = partition_edges(item_ids, edges)
    graph = DependencyGraph.build(snapshot.work_items, valid)
    cycle = find_cycle(graph)
    if cycle is not None:
        problems.append(f"Circular dependency detected: {' -> '.join([*cycle, cycle[0]])}")

    return problems
