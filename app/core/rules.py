"""Write rules enforced by the store itself.

These checks run on every flush of every session, independent of the
checks the checklist operations make before writing. A change that slips
past (or never went through) those operations is still rejected here:

    - no checklist item may be inserted, changed or deleted while its
      shift, as it will be committed, is locked;
    - a shift's four completion fields are set together, and only while
      it is locked;
    - an item's three checked-by fields are set together, and only while
      it is checked.
"""

from sqlalchemy import event as sa_event
from sqlalchemy.orm import Session

from app.core.errors import PersistenceFailure, ShiftLocked
from app.models import ChecklistItem, ChecklistShift


def _pending_shift(session: Session, key) -> ChecklistShift | None:
    for obj in session.new:
        if isinstance(obj, ChecklistShift) and obj.key == key:
            return obj
    return session.get(ChecklistShift, key)


def _check_shift(shift: ChecklistShift) -> None:
    completion = (
        shift.completed_at,
        shift.completed_by_user_id,
        shift.completed_by_name,
    )
    if shift.locked and any(value is None for value in completion):
        raise PersistenceFailure("Locked shift is missing completion fields")
    if not shift.locked and any(value is not None for value in completion):
        raise PersistenceFailure("Unlocked shift carries completion fields")


def _check_item(item: ChecklistItem) -> None:
    checked_by = (item.checked_by_user_id, item.checked_by_name, item.checked_at)
    if item.checked and any(value is None for value in checked_by):
        raise PersistenceFailure("Checked item is missing checked-by fields")
    if not item.checked and any(value is not None for value in checked_by):
        raise PersistenceFailure("Unchecked item carries checked-by fields")


@sa_event.listens_for(Session, "before_flush")
def enforce_checklist_rules(session, flush_context, instances):
    """Reject flushes that would break the lock or sign-off invariants."""
    with session.no_autoflush:
        for obj in list(session.new) + list(session.dirty):
            if isinstance(obj, ChecklistShift):
                _check_shift(obj)

        touched = [obj for obj in session.new if isinstance(obj, ChecklistItem)]
        touched += [
            obj for obj in session.dirty
            if isinstance(obj, ChecklistItem) and session.is_modified(obj)
        ]
        touched += [obj for obj in session.deleted if isinstance(obj, ChecklistItem)]

        for item in touched:
            if item not in session.deleted:
                _check_item(item)
            shift = _pending_shift(session, item.shift_key)
            if shift is None:
                raise PersistenceFailure("Checklist item has no shift")
            if shift.locked:
                raise ShiftLocked()
