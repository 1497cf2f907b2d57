"""Retention horizon for checklist records."""

from datetime import UTC, date, datetime, timedelta

from app.checklist.bizdate import parse_date


def expiry_for(calendar_date: str | date, retention_days: int = 400) -> datetime:
    """Return UTC midnight of ``calendar_date`` plus ``retention_days`` days."""
    if isinstance(calendar_date, str):
        calendar_date = parse_date(calendar_date)
    midnight = datetime(calendar_date.year, calendar_date.month, calendar_date.day, tzinfo=UTC)
    return midnight + timedelta(days=retention_days)
