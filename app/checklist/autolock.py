"""Automatic locking of shifts once their lock time has passed.

Lock times are "HH:mm" wall-clock times in the restaurant's timezone. A
lock time at or before the business-day cutoff belongs to the end of the
business day, i.e. the next civil day (close at 02:30 locks the night
after the business date).
"""

import logging
from datetime import UTC, datetime, time, timedelta
from zoneinfo import ZoneInfo

from sqlmodel import Session, select

from app.checklist.access import SYSTEM_ACTOR
from app.checklist.bizdate import (
    business_date_for,
    parse_date,
    resolve_timezone,
    restaurant_timezone,
)
from app.checklist.lock import submit_shift
from app.checklist.templates import get_lock_times, parse_lock_time
from app.core.config import settings
from app.core.errors import ChecklistError
from app.models import ChecklistShift, Restaurant

logger = logging.getLogger(__name__)


def lock_deadline(business_date: str, lock_time: str, tz: ZoneInfo, cutoff_hour: int) -> datetime:
    """Return the instant a shift of ``business_date`` locks."""
    day = parse_date(business_date)
    hour, minute = parse_lock_time(lock_time)
    if hour * 60 + minute <= cutoff_hour * 60:
        day += timedelta(days=1)
    return datetime.combine(day, time(hour, minute), tzinfo=tz)


def auto_lock_due_shifts(session: Session, now: datetime | None = None) -> list[tuple[str, str, str]]:
    """
    Submit every opened, unlocked shift whose lock time has passed.

    Looks at the current and previous business date of each restaurant.
    Shifts that were never opened are left alone. Returns the
    (restaurant, date, shift) keys that were locked.
    """
    now = now or datetime.now(UTC)
    cutoff = settings.business_day_cutoff_hour
    locked = []

    for restaurant in session.exec(select(Restaurant)).all():
        try:
            tz_name = restaurant_timezone(restaurant)
            tz = resolve_timezone(tz_name)
            today = business_date_for(now, tz_name, cutoff)
        except ChecklistError as e:
            logger.error(f"Skipping auto-lock for {restaurant.id}: {e.detail}")
            continue

        yesterday = (parse_date(today) - timedelta(days=1)).isoformat()
        lock_times = get_lock_times(session, restaurant.id)

        statement = (
            select(ChecklistShift)
            .where(ChecklistShift.restaurant_id == restaurant.id)
            .where(ChecklistShift.date.in_([yesterday, today]))
            .where(ChecklistShift.locked == False)  # noqa: E712
        )
        for record in session.exec(statement).all():
            key = (record.restaurant_id, record.date, record.shift.value)
            try:
                deadline = lock_deadline(record.date, lock_times[record.shift], tz, cutoff)
                if now < deadline:
                    continue
                submit_shift(session, SYSTEM_ACTOR, record.restaurant_id, record.date, record.shift, now=now)
                locked.append(key)
            except ChecklistError as e:
                logger.error(f"Auto-lock failed for {'/'.join(key)}: {e.detail}")

    return locked
