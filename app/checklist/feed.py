"""Change feed for live checklist views.

Operations that change a shift publish a full snapshot of it after their
write commits. Subscribers register interest in a shift path and receive
every later snapshot for that path, in publish order, until they
unsubscribe.
"""

import logging
import threading
from collections.abc import Callable
from datetime import UTC, datetime
from itertools import count

from sqlmodel import Session, select

from app.models import ChecklistItem, ChecklistShift, ShiftKind

logger = logging.getLogger(__name__)

Snapshot = dict
Callback = Callable[[Snapshot], None]


def shift_path(restaurant_id: str, date: str, shift: ShiftKind) -> str:
    return f"restaurants/{restaurant_id}/checklists/{date}/shifts/{shift.value}"


def _iso(value: datetime | None) -> str | None:
    if value is None:
        return None
    # SQLite drops tzinfo; stored values are UTC.
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.isoformat()


def list_items(session: Session, restaurant_id: str, date: str, shift: ShiftKind) -> list[ChecklistItem]:
    """Items of a shift, sorted by order."""
    statement = (
        select(ChecklistItem)
        .where(ChecklistItem.restaurant_id == restaurant_id)
        .where(ChecklistItem.date == date)
        .where(ChecklistItem.shift == shift)
        .order_by(ChecklistItem.order)
    )
    return list(session.exec(statement).all())


def item_snapshot(item: ChecklistItem) -> Snapshot:
    return {
        "id": str(item.id),
        "title": item.title,
        "priority": item.priority,
        "order": item.order,
        "checked": item.checked,
        "checked_by_user_id": item.checked_by_user_id,
        "checked_by_name": item.checked_by_name,
        "checked_at": _iso(item.checked_at),
        "expire_at": _iso(item.expire_at),
    }


def shift_snapshot(session: Session, record: ChecklistShift) -> Snapshot:
    """Full state of a shift and its items."""
    items = list_items(session, record.restaurant_id, record.date, record.shift)
    return {
        "restaurant_id": record.restaurant_id,
        "date": record.date,
        "shift": record.shift.value,
        "locked": record.locked,
        "created_at": _iso(record.created_at),
        "completed_at": _iso(record.completed_at),
        "completed_by_user_id": record.completed_by_user_id,
        "completed_by_name": record.completed_by_name,
        "expire_at": _iso(record.expire_at),
        "items": [item_snapshot(item) for item in items],
    }


class ChangeFeed:
    """In-process publish/subscribe keyed by document path."""

    def __init__(self):
        self._subscribers: dict[str, dict[int, Callback]] = {}
        self._ids = count()
        self._lock = threading.Lock()

    def subscribe(self, path: str, callback: Callback) -> Callable[[], None]:
        """Register ``callback`` for ``path``. Returns an unsubscribe function."""
        with self._lock:
            token = next(self._ids)
            self._subscribers.setdefault(path, {})[token] = callback

        def unsubscribe() -> None:
            with self._lock:
                subscribers = self._subscribers.get(path)
                if subscribers is None:
                    return
                subscribers.pop(token, None)
                if not subscribers:
                    del self._subscribers[path]

        return unsubscribe

    def subscriber_count(self, path: str) -> int:
        with self._lock:
            return len(self._subscribers.get(path, {}))

    def publish(self, path: str, snapshot: Snapshot) -> None:
        with self._lock:
            callbacks = list(self._subscribers.get(path, {}).values())
        for callback in callbacks:
            try:
                callback(snapshot)
            except Exception as e:
                logger.error(f"Subscriber for {path} failed: {e}")


feed = ChangeFeed()


def publish_shift(session: Session, record: ChecklistShift) -> None:
    path = shift_path(record.restaurant_id, record.date, record.shift)
    if feed.subscriber_count(path):
        feed.publish(path, shift_snapshot(session, record))
