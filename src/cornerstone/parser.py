"""YAML parser for Cornerstone project files."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError as PydanticValidationError

from .exceptions import ParseError, ValidationError
from .models import DependencyEdge, Milestone, ProjectSnapshot, WorkItem
from .schemas import ProjectSchema


class ProjectParser:
    """Parser for project YAML files.

    This parser only handles YAML parsing and model creation. Reference
    checks and config discovery live in load_project() from
    cornerstone.loader.
    """

    def parse_file(self, file_path: Path | str) -> ProjectSnapshot:
        """Parse a YAML file into a ProjectSnapshot."""
        path = Path(file_path)
        if not path.exists():
            raise ParseError(f"File not found: {file_path}")

        try:
            with path.open(encoding="utf-8") as f:
                data: Any = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ParseError(f"Failed to parse YAML: {e}") from e

        if data is None:
            return ProjectSnapshot()
        if not isinstance(data, dict):
            raise ParseError("YAML must contain a dictionary at the root level")

        return self.parse_data(data)  # type: ignore[arg-type]

    def parse_data(self, data: dict[str, Any]) -> ProjectSnapshot:
        """Convert already-loaded YAML data into a ProjectSnapshot."""
        try:
            schema = ProjectSchema(**data)
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid YAML structure: {e}") from e

        work_items = tuple(
            WorkItem(
                id=item_id,
                title=item.title or item_id,
                status=item.status,
                start_date=item.start_date,
                end_date=item.end_date,
                duration_days=item.duration_days,
                start_after=item.start_after,
                start_before=item.start_before,
                assigned_user_id=item.assigned_user,
                required_milestone_ids=tuple(item.requires_milestones),
            )
            for item_id, item in schema.work_items.items()
        )

        dependencies = tuple(
            DependencyEdge(
                predecessor_id=dep.predecessor,
                successor_id=dep.successor,
                dependency_type=dep.type,
                lead_lag_days=dep.lead_lag_days,
            )
            for dep in schema.dependencies
        )

        milestones = tuple(
            Milestone(
                id=milestone_id,
                title=milestone.title,
                target_date=milestone.target_date,
                is_completed=milestone.completed,
                completed_at=milestone.completed_at,
                color=milestone.color,
                work_item_ids=tuple(milestone.work_items),
            )
            for milestone_id, milestone in schema.milestones.items()
        )

        return ProjectSnapshot(
            work_items=work_items,
            dependencies=dependencies,
            milestones=milestones,
        )
