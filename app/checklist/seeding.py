"""Seeding checklist shifts from duty templates.

``seed_shift`` is the lazy first-load path: the first time a shift is
opened its row and items are created from the current template in one
transaction. The shift row's existence marks it as seeded, so later calls
are no-ops even when the template produced no items.

``reseed_shift`` is the admin path: it replaces every item of the shift
with a fresh copy of the current template and unlocks it, again in one
transaction, so no reader ever sees the shift emptied mid-reseed.
"""

import logging
from datetime import UTC, datetime

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from app.checklist.access import Actor, require_admin
from app.checklist.bizdate import parse_date
from app.checklist.expiry import expiry_for
from app.checklist.feed import list_items, publish_shift
from app.checklist.templates import load_duties
from app.core.config import settings
from app.core.database import transaction
from app.core.errors import PersistenceFailure
from app.models import ChecklistDay, ChecklistItem, ChecklistShift, ShiftKind

logger = logging.getLogger(__name__)


def _stamp_items(session: Session, record: ChecklistShift, expire_at: datetime) -> int:
    duties = load_duties(session, record.restaurant_id, record.shift)
    for order, duty in enumerate(duties):
        session.add(
            ChecklistItem(
                restaurant_id=record.restaurant_id,
                date=record.date,
                shift=record.shift,
                title=duty.title,
                priority=duty.priority,
                order=order,
                checked=False,
                expire_at=expire_at,
            )
        )
    return len(duties)


def _insert_shift(
    session: Session,
    restaurant_id: str,
    date: str,
    shift: ShiftKind,
    now: datetime,
    expire_at: datetime,
) -> tuple[ChecklistShift, int]:
    with transaction(session):
        if session.get(ChecklistDay, (restaurant_id, date)) is None:
            session.add(ChecklistDay(restaurant_id=restaurant_id, date=date, expire_at=expire_at))
            session.flush()
        record = ChecklistShift(
            restaurant_id=restaurant_id,
            date=date,
            shift=shift,
            locked=False,
            created_at=now,
            expire_at=expire_at,
        )
        session.add(record)
        session.flush()
        count = _stamp_items(session, record, expire_at)
    return record, count


def _lost_race(error: PersistenceFailure) -> bool:
    return isinstance(error.__cause__, IntegrityError)


def seed_shift(
    session: Session,
    restaurant_id: str,
    date: str,
    shift: ShiftKind,
    now: datetime | None = None,
) -> ChecklistShift:
    """Create the shift and its items from the template unless it exists.

    A concurrent request may create the day row or this very shift between
    the existence check and the insert. The losing insert is rolled back;
    if the shift now exists it is returned, otherwise the insert is retried
    once against the day row the other request created.
    """
    parse_date(date)
    key = (restaurant_id, date, shift)
    existing = session.get(ChecklistShift, key)
    if existing is not None:
        return existing

    now = now or datetime.now(UTC)
    expire_at = expiry_for(date, settings.retention_days)
    try:
        record, count = _insert_shift(session, restaurant_id, date, shift, now, expire_at)
    except PersistenceFailure as e:
        if not _lost_race(e):
            raise
        existing = session.get(ChecklistShift, key)
        if existing is not None:
            logger.info(f"{restaurant_id}/{date}/{shift.value} was seeded concurrently")
            return existing
        record, count = _insert_shift(session, restaurant_id, date, shift, now, expire_at)

    logger.info(f"Seeded {restaurant_id}/{date}/{shift.value} with {count} items")
    publish_shift(session, record)
    return record


def _replace_shift(
    session: Session,
    restaurant_id: str,
    date: str,
    shift: ShiftKind,
    now: datetime,
    expire_at: datetime,
) -> tuple[ChecklistShift, int]:
    with transaction(session):
        day = session.get(ChecklistDay, (restaurant_id, date))
        if day is None:
            session.add(ChecklistDay(restaurant_id=restaurant_id, date=date, expire_at=expire_at))
            session.flush()
        else:
            day.expire_at = expire_at

        record = session.get(ChecklistShift, (restaurant_id, date, shift))
        if record is None:
            record = ChecklistShift(restaurant_id=restaurant_id, date=date, shift=shift, expire_at=expire_at)
            session.add(record)
        record.locked = False
        record.completed_at = None
        record.completed_by_user_id = None
        record.completed_by_name = None
        record.created_at = now
        record.expire_at = expire_at

        for item in list_items(session, restaurant_id, date, shift):
            session.delete(item)
        # Old rows must be gone before new ones reuse their order values.
        session.flush()
        count = _stamp_items(session, record, expire_at)
    return record, count


def reseed_shift(
    session: Session,
    actor: Actor,
    restaurant_id: str,
    date: str,
    shift: ShiftKind,
    now: datetime | None = None,
) -> ChecklistShift:
    """Replace the shift's items with the current template and unlock it."""
    require_admin(actor)
    parse_date(date)
    now = now or datetime.now(UTC)
    expire_at = expiry_for(date, settings.retention_days)

    try:
        record, count = _replace_shift(session, restaurant_id, date, shift, now, expire_at)
    except PersistenceFailure as e:
        if not _lost_race(e):
            raise
        # The day or shift row was created concurrently; it is found this time.
        record, count = _replace_shift(session, restaurant_id, date, shift, now, expire_at)

    logger.info(
        f"Reseeded {restaurant_id}/{date}/{shift.value} with {count} items by {actor.user_id}"
    )
    publish_shift(session, record)
    return record
