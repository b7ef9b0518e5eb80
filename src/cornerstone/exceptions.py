"""Custom exceptions for Cornerstone."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import DependencyEdge


class CornerstoneError(Exception):
    """Base exception for all Cornerstone errors."""

    pass


class ValidationError(CornerstoneError):
    """Raised when validation fails."""

    pass


class SelfDependencyError(ValidationError):
    """Raised when a dependency edge names the same work item on both ends."""

    pass


class UnknownNodeReferenceError(ValidationError):
    """Raised when an edge or milestone link names a work item that does not exist."""

    def __init__(
        self,
        message: str,
        missing_ids: set[str],
        edge: DependencyEdge | None = None,
        milestone_id: str | None = None,
    ):
        super().__init__(message)
        self.missing_ids = missing_ids
        self.edge = edge
        self.milestone_id = milestone_id


class CircularDependencyError(ValidationError):
    """Raised by strict callers when the dependency graph contains a cycle."""

    def __init__(self, message: str, cycle: list[str] | None = None):
        super().__init__(message)
        self.cycle = cycle or []


class ParseError(CornerstoneError):
    """Raised when YAML parsing fails."""

    pass
