"""Lock state machine for checklist shifts.

A shift is UNLOCKED when seeded. ``submit_shift`` moves it to LOCKED and
stamps who completed it; only ``reset_shift`` (admins) brings it back, and
that always reseeds the items. ``toggle_item`` is only allowed while
UNLOCKED.

The lock times configured per restaurant are not consulted here. The
auto-lock job (``app.checklist.autolock``) reads them and calls
``submit_shift`` as the system actor.
"""

import logging
from datetime import UTC, datetime

from sqlmodel import Session

from app.checklist.access import Actor, require_admin, require_restaurant
from app.checklist.feed import publish_shift
from app.checklist.seeding import reseed_shift, seed_shift
from app.core.database import transaction
from app.core.errors import AlreadyLocked, PersistenceFailure, ShiftLocked
from app.models import ChecklistItem, ChecklistShift, ShiftKind

logger = logging.getLogger(__name__)


def submit_shift(
    session: Session,
    actor: Actor,
    restaurant_id: str,
    date: str,
    shift: ShiftKind,
    now: datetime | None = None,
) -> ChecklistShift:
    """Lock the shift and record who completed it.

    Raises AlreadyLocked if the shift is already locked.
    """
    require_restaurant(actor, restaurant_id)
    record = seed_shift(session, restaurant_id, date, shift)
    if record.locked:
        raise AlreadyLocked(f"{restaurant_id}/{date}/{shift.value} is already locked")

    with transaction(session):
        record.locked = True
        record.completed_at = now or datetime.now(UTC)
        record.completed_by_user_id = actor.user_id
        record.completed_by_name = actor.name

    logger.info(f"Locked {restaurant_id}/{date}/{shift.value} by {actor.user_id}")
    publish_shift(session, record)
    return record


def reset_shift(
    session: Session,
    actor: Actor,
    restaurant_id: str,
    date: str,
    shift: ShiftKind,
    now: datetime | None = None,
) -> ChecklistShift:
    """Unlock the shift, clear its completion and reseed it from the template."""
    require_admin(actor)
    logger.info(f"Resetting {restaurant_id}/{date}/{shift.value} by {actor.user_id}")
    return reseed_shift(session, actor, restaurant_id, date, shift, now=now)


def toggle_item(
    session: Session,
    actor: Actor,
    item: ChecklistItem,
    now: datetime | None = None,
) -> ChecklistItem:
    """Flip an item's checked state, setting or clearing who checked it.

    Raises ShiftLocked if the item's shift is locked.
    """
    require_restaurant(actor, item.restaurant_id)
    record = session.get(ChecklistShift, item.shift_key)
    if record is None:
        raise PersistenceFailure("Checklist item has no shift")
    # Another session may have locked it since this one loaded it.
    session.refresh(record)
    if record.locked:
        raise ShiftLocked()

    with transaction(session):
        if item.checked:
            item.checked = False
            item.checked_by_user_id = None
            item.checked_by_name = None
            item.checked_at = None
        else:
            item.checked = True
            item.checked_by_user_id = actor.user_id
            item.checked_by_name = actor.name
            item.checked_at = now or datetime.now(UTC)

    logger.debug(f"Item {item.id} checked={item.checked} by {actor.user_id}")
    publish_shift(session, record)
    return item
