"""Calendar-day arithmetic used throughout the scheduler."""

from datetime import date, datetime, timedelta

from cornerstone.exceptions import ValidationError


def add_days(day: date, days: int) -> date:
    """Return the calendar date ``days`` after ``day`` (earlier when negative).

    Raises:
        ValidationError: If the result falls outside the supported calendar
    """
    try:
        return day + timedelta(days=days)
    except OverflowError as e:
        raise ValidationError(f"Date {day} {days:+d} days is out of range") from e


def days_between(start: date, end: date) -> int:
    """Whole days from ``start`` to ``end``; negative when ``end`` comes first."""
    return (end - start).days


def latest(*days: date | None) -> date | None:
    """Latest of the given dates, ignoring None."""
    present = [d for d in days if d is not None]
    return max(present) if present else None


def earliest(*days: date | None) -> date | None:
    """Earliest of the given dates, ignoring None."""
    present = [d for d in days if d is not None]
    return min(present) if present else None


def parse_date(value: str | date | None) -> date | None:
    """Parse an ISO ``YYYY-MM-DD`` string into a date.

    ``date`` objects pass through and ``datetime`` values are cut down to their
    calendar day, so time of day never leaks into scheduling.

    Raises:
        ValidationError: If a string is not a valid ISO date
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(value.strip()[:10])
    except ValueError as e:
        raise ValidationError(f"Invalid date '{value}': expected YYYY-MM-DD") from e


def format_date(day: date | None) -> str | None:
    """ISO string for a date, passing None through."""
    return day.isoformat() if day is not None else None
