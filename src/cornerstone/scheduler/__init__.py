"""Scheduler package - critical path scheduling of interdependent work items.

This package provides a pure scheduling engine with:
- Graph construction and three-color cycle detection
- Pinned/derived constraint resolution with start windows
- CPM forward/backward passes for all four dependency types with lead/lag
- Critical path extraction, project date range and milestone projection

Main entry points:
- compute_schedule: The engine itself, a pure function of its inputs
- SchedulingService: Strict (schedule) and permissive (timeline) consumers

Configuration:
- SchedulingConfig: Dangling reference policy and defaults
- ScheduleMode: Full or cascade scheduling
"""

from .config import DanglingReferencePolicy, ScheduleMode, SchedulingConfig
from .core import (
    ConstraintViolation,
    DateRange,
    MilestoneProjection,
    ScheduledItem,
    ScheduleResult,
    ScheduleWarning,
    ViolationKind,
    WarningKind,
)
from .cycles import find_cycle, topological_order
from .engine import compute_schedule, expand_milestone_dependencies
from .graph import DependencyGraph, downstream_of, partition_edges
from .projection import compute_date_range, project_milestones
from .service import SchedulingService, TimelineView

__all__ = [
    # Core dataclasses
    "ScheduledItem",
    "ScheduleResult",
    "ScheduleWarning",
    "ConstraintViolation",
    "DateRange",
    "MilestoneProjection",
    "ViolationKind",
    "WarningKind",
    # Configuration
    "SchedulingConfig",
    "ScheduleMode",
    "DanglingReferencePolicy",
    # Engine
    "compute_schedule",
    "expand_milestone_dependencies",
    # Graph utilities
    "DependencyGraph",
    "downstream_of",
    "partition_edges",
    "find_cycle",
    "topological_order",
    # Projection
    "compute_date_range",
    "project_milestones",
    # High-level service
    "SchedulingService",
    "TimelineView",
]
