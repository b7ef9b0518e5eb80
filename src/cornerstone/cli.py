"""Command-line interface for Cornerstone."""

from __future__ import annotations

import json
from datetime import date
from enum import Enum
from pathlib import Path
from typing import Annotated

import typer

from . import context
from .exceptions import CircularDependencyError, CornerstoneError, ValidationError
from .loader import discover_config, load_project, validate_project
from .logger import setup_logger
from .models import ProjectSnapshot
from .parser import ProjectParser
from .scheduler import ScheduleMode, ScheduleResult, SchedulingService, TimelineView
from .scheduler.dates import format_date, parse_date
from .unified_config import TimelineConfig, UnifiedConfig

app = typer.Typer(
    name="cornerstone",
    help="Cornerstone - Critical path scheduling for construction work items",
    add_completion=False,
)


class OutputFormat(str, Enum):
    """Output formats for schedule and timeline commands."""

    TEXT = "text"
    JSON = "json"


@app.callback()
def main_callback(
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose",
            "-v",
            help="Verbosity level: 0=silent (default), 1=show changes, 2=show all checks, 3=debug",
            min=0,
            max=3,
        ),
    ] = 0,
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to config file (default: cornerstone_config.yaml)",
        ),
    ] = None,
) -> None:
    """Global options for cornerstone commands."""
    setup_logger(verbose)
    context.set_config_path(config)


def _parse_date_option(date_str: str | None, option_name: str) -> date | None:
    """Parse a YYYY-MM-DD date given on the command line."""
    try:
        return parse_date(date_str)
    except ValidationError:
        typer.echo(
            f"Error: Invalid {option_name} '{date_str}'. Use YYYY-MM-DD format.",
            err=True,
        )
        raise typer.Exit(1) from None


def _load(file: Path) -> tuple[ProjectSnapshot, UnifiedConfig | None]:
    """Load the project and its discovered config, exiting on errors."""
    try:
        unified = discover_config(file)
        snapshot = load_project(file, config=unified)
    except FileNotFoundError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None
    except CornerstoneError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None
    return snapshot, unified


def _format_cycle(cycle: list[str]) -> str:
    if not cycle:
        return ""
    return " -> ".join([*cycle, cycle[0]])


@app.command()
def schedule(
    file: Annotated[Path, typer.Argument(help="Path to the project YAML file")] = Path(
        "project.yaml"
    ),
    *,
    mode: Annotated[
        ScheduleMode, typer.Option("--mode", "-m", help="Schedule everything or cascade")
    ] = ScheduleMode.FULL,
    anchor: Annotated[
        str | None,
        typer.Option("--anchor", "-a", help="Work item to cascade from (cascade mode)"),
    ] = None,
    today: Annotated[
        str | None,
        typer.Option(
            "--today",
            help="Start date for unconstrained items (YYYY-MM-DD). "
            "Defaults to the earliest date in the project",
        ),
    ] = None,
    output_format: Annotated[
        OutputFormat, typer.Option("--format", "-f", help="Output format")
    ] = OutputFormat.TEXT,
) -> None:
    """Compute the schedule and critical path. Fails on circular dependencies."""
    if mode == ScheduleMode.CASCADE and not anchor:
        typer.echo("Error: Cascade mode requires --anchor", err=True)
        raise typer.Exit(1)

    parsed_today = _parse_date_option(today, "today")
    snapshot, unified = _load(file)

    service = SchedulingService(
        snapshot, parsed_today, unified.scheduler if unified else None
    )
    try:
        result = service.schedule(mode, anchor)
    except CircularDependencyError as e:
        typer.echo(f"Error: {e}: {_format_cycle(e.cycle)}", err=True)
        raise typer.Exit(1) from None
    except CornerstoneError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None

    if output_format == OutputFormat.JSON:
        typer.echo(json.dumps(result.to_dict(), indent=2))
    else:
        _display_schedule_results(snapshot, result)

    if result.warnings:
        typer.echo("\nWarnings:", err=True)
        for warning in result.warnings:
            typer.echo(f"  - {warning.message}", err=True)


def _display_schedule_results(snapshot: ProjectSnapshot, result: ScheduleResult) -> None:
    """Display schedule results to stdout."""
    typer.echo("Schedule Results")
    typer.echo("=" * 80)
    typer.echo("")

    for item in snapshot.work_items:
        scheduled = result.get_item(item.id)
        if scheduled is None:
            continue
        typer.echo(f"{item.title or item.id} ({item.id})")
        typer.echo(f"  Start:  {format_date(scheduled.start_date) or 'unscheduled'}")
        typer.echo(f"  End:    {format_date(scheduled.end_date) or 'unscheduled'}")
        if scheduled.slack_days is not None:
            typer.echo(f"  Slack:  {scheduled.slack_days} days")
        if scheduled.is_on_critical_path:
            typer.echo("  * CRITICAL PATH")
        if scheduled.is_pinned:
            typer.echo("  (fixed dates, not moved)")
        for violation in scheduled.violations:
            typer.echo(f"  ! {violation.message}")
        typer.echo("")

    typer.echo(f"Critical path: {' -> '.join(result.critical_path) or '(none)'}")
    if result.date_range:
        typer.echo(
            f"Project range: {result.date_range.earliest} to {result.date_range.latest}"
        )


@app.command()
def timeline(
    file: Annotated[Path, typer.Argument(help="Path to the project YAML file")] = Path(
        "project.yaml"
    ),
    *,
    today: Annotated[
        str | None,
        typer.Option("--today", help="Start date for unconstrained items (YYYY-MM-DD)"),
    ] = None,
    output_format: Annotated[
        OutputFormat, typer.Option("--format", "-f", help="Output format")
    ] = OutputFormat.TEXT,
) -> None:
    """Show dated work items, milestones and the critical path.

    Circular dependencies do not fail this command; the critical path is
    simply left empty.
    """
    parsed_today = _parse_date_option(today, "today")
    snapshot, unified = _load(file)

    service = SchedulingService(
        snapshot, parsed_today, unified.scheduler if unified else None
    )
    try:
        view = service.timeline()
    except CornerstoneError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None

    if output_format == OutputFormat.JSON:
        typer.echo(json.dumps(view.to_dict(), indent=2))
        return

    timeline_config = unified.timeline if unified else TimelineConfig()
    _display_timeline(snapshot, view, timeline_config)


def _display_timeline(
    snapshot: ProjectSnapshot, view: TimelineView, timeline_config: TimelineConfig
) -> None:
    """Display the timeline view to stdout."""
    typer.echo("Timeline")
    typer.echo("=" * 80)
    if view.date_range:
        typer.echo(f"{view.date_range.earliest} to {view.date_range.latest}")
    typer.echo("")

    critical = set(view.critical_path)
    items = snapshot.work_items if timeline_config.include_undated else view.work_items
    for item in items:
        marker = "*" if item.id in critical else " "
        start = format_date(item.start_date) or "-"
        end = format_date(item.end_date) or "-"
        typer.echo(f"{marker} {start:>10}  {end:>10}  {item.title or item.id} ({item.id})")

    if view.milestones:
        typer.echo("")
        typer.echo("Milestones")
        for milestone in view.milestones:
            projected = format_date(milestone.projected_date) or "no dated work"
            done = " [completed]" if milestone.is_completed else ""
            typer.echo(
                f"  {milestone.title} ({milestone.milestone_id}): "
                f"target {milestone.target_date}, projected {projected}{done}"
            )


@app.command()
def validate(
    file: Annotated[Path, typer.Argument(help="Path to the project YAML file")] = Path(
        "project.yaml"
    ),
) -> None:
    """Check a project for unknown references and circular dependencies."""
    try:
        unified = discover_config(file)
        snapshot = ProjectParser().parse_file(file)
    except FileNotFoundError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None
    except CornerstoneError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None

    problems = validate_project(snapshot, unified)
    if problems:
        typer.echo(f"Found {len(problems)} problem(s):", err=True)
        for problem in problems:
            typer.echo(f"  - {problem}", err=True)
        raise typer.Exit(1)

    typer.echo(
        f"OK: {len(snapshot.work_items)} work items, "
        f"{len(snapshot.dependencies)} dependencies, "
        f"{len(snapshot.milestones)} milestones"
    )


def main() -> int:
    """Main entry point."""
    # Typer handles sys.exit() internally
    app()
    return 0


if __name__ == "__main__":
    main()
