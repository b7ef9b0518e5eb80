"""Configuration classes for the scheduling engine."""

from enum import Enum

from pydantic import BaseModel, Field


class ScheduleMode(str, Enum):
    """Which work items a run schedules."""

    FULL = "full"  # Every work item in the snapshot
    CASCADE = "cascade"  # An anchor item plus everything downstream of it


class DanglingReferencePolicy(str, Enum):
    """What to do when an edge or milestone link names an unknown work item."""

    RAISE = "raise"  # Report with UnknownNodeReferenceError
    EXCLUDE = "exclude"  # Drop the reference, log it and record it on the result


class SchedulingConfig(BaseModel):
    """Options for a scheduling run."""

    dangling_references: DanglingReferencePolicy = DanglingReferencePolicy.RAISE

    # Turn "work item requires milestone" links into finish-to-start edges from
    # each of the milestone's contributing work items
    expand_milestone_dependencies: bool = True

    # Length given to a pinned item that has a start date but neither an end
    # date nor a duration
    default_pinned_duration_days: int = Field(default=1, ge=0)
