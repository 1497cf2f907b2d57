"""Business date calculation.

A business day starts at a cutoff hour rather than midnight: activity at
01:30 on June 2nd belongs to the June 1st close. The timezone and cutoff
are always passed in; callers read their defaults from settings.
"""

from datetime import UTC, date, datetime, timedelta
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from app.core.config import settings
from app.core.errors import InvalidDate, InvalidTimezone
from app.models import Restaurant

DATE_FORMAT = "%Y-%m-%d"


def resolve_timezone(name: str) -> ZoneInfo:
    """Return the zone for an IANA identifier, or raise InvalidTimezone."""
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError, TypeError) as e:
        raise InvalidTimezone(f"Unknown timezone: {name!r}") from e


def restaurant_timezone(restaurant: Restaurant) -> str:
    """The restaurant's own timezone, or the configured default."""
    return restaurant.timezone or settings.default_timezone


def parse_date(value: str) -> date:
    """Parse a "YYYY-MM-DD" string, or raise InvalidDate."""
    try:
        return datetime.strptime(value, DATE_FORMAT).date()
    except (TypeError, ValueError) as e:
        raise InvalidDate(f"Invalid date: {value!r}, expected YYYY-MM-DD") from e


def business_date_for(instant: datetime, timezone: str, cutoff_hour: int = 5) -> str:
    """
    Return the business date, as "YYYY-MM-DD", that ``instant`` falls in.

    The instant is converted to wall-clock time in ``timezone``. If the local
    hour is before ``cutoff_hour`` the business date is the previous civil
    day, otherwise it is the local civil day. Naive instants are taken as UTC.
    DST gaps and folds are resolved by zoneinfo's civil-time rules.
    """
    tz = resolve_timezone(timezone)
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=UTC)
    local = instant.astimezone(tz)
    day = local.date()
    if local.hour < cutoff_hour:
        day -= timedelta(days=1)
    return day.strftime(DATE_FORMAT)
