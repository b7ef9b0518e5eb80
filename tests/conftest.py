"""Pytest configuration and fixtures for cornerstone tests."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any

import pytest

from cornerstone import context
from cornerstone.logger import reset_logger
from cornerstone.models import DependencyEdge, DependencyType, Milestone, WorkItem
from cornerstone.scheduler.dates import parse_date

EXAMPLES_DIR = Path(__file__).parent.parent / "examples"


@pytest.fixture(autouse=True)
def _reset_global_state() -> Iterator[None]:
    """Keep logger handlers and the --config path from leaking between tests."""
    yield
    reset_logger()
    context.set_config_path(None)


@pytest.fixture
def make_item() -> Callable[..., WorkItem]:
    """Factory for work items taking ISO date strings."""

    def _make(
        item_id: str,
        *,
        start: str | None = None,
        end: str | None = None,
        duration: int | None = None,
        start_after: str | None = None,
        start_before: str | None = None,
        **kwargs: Any,
    ) -> WorkItem:
        return WorkItem(
            id=item_id,
            title=kwargs.pop("title", item_id.replace("_", " ").title()),
            start_date=parse_date(start),
            end_date=parse_date(end),
            duration_days=duration,
            start_after=parse_date(start_after),
            start_before=parse_date(start_before),
            **kwargs,
        )

    return _make


@pytest.fixture
def make_dep() -> Callable[..., DependencyEdge]:
    """Factory for dependency edges, finish-to-start with no lag by default."""

    def _make(
        predecessor: str,
        successor: str,
        dependency_type: DependencyType = DependencyType.FINISH_TO_START,
        lag: int = 0,
    ) -> DependencyEdge:
        return DependencyEdge(
            predecessor_id=predecessor,
            successor_id=successor,
            dependency_type=dependency_type,
            lead_lag_days=lag,
        )

    return _make


@pytest.fixture
def make_milestone() -> Callable[..., Milestone]:
    """Factory for milestones linked to work items."""

    def _make(
        milestone_id: str, work_item_ids: tuple[str, ...] = (), target: str = "2026-06-30"
    ) -> Milestone:
        target_date = parse_date(target)
        assert target_date is not None
        return Milestone(
            id=milestone_id,
            title=milestone_id.replace("_", " ").title(),
            target_date=target_date,
            work_item_ids=work_item_ids,
        )

    return _make


@pytest.fixture
def write_yaml(tmp_path: Path) -> Callable[[str, str], Path]:
    """Write YAML text to a file under tmp_path and return its path."""

    def _write(content: str, name: str = "project.yaml") -> Path:
        path = tmp_path / name
        path.write_text(content, encoding="utf-8")
        return path

    return _write
