"""Duty templates and lock times.

Templates are edited on a working copy (:class:`TemplateEditor`) and only
written by :meth:`TemplateEditor.save`, which overwrites the whole list for
one shift kind. There is no version check: the last save wins.

Lock times are written immediately, one shift kind at a time.
"""

import logging
import re
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

from sqlmodel import Session

from app.core.database import transaction
from app.core.errors import InvalidLockTime, InvalidTemplate
from app.models import RestaurantConfig, ShiftKind

logger = logging.getLogger(__name__)

# Close rolls past midnight.
DEFAULT_LOCK_TIMES = {
    ShiftKind.OPEN: "05:00",
    ShiftKind.MID: "17:00",
    ShiftKind.CLOSE: "02:30",
}

LOCK_TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")


@dataclass
class Duty:
    title: str
    priority: bool = False

    @classmethod
    def from_stored(cls, entry) -> "Duty":
        # Older configs stored bare title strings.
        if isinstance(entry, str):
            return cls(title=entry)
        return cls(title=entry.get("title") or "", priority=bool(entry.get("priority")))


def parse_lock_time(value: str) -> tuple[int, int]:
    """Split "HH:mm" into (hour, minute), or raise InvalidLockTime."""
    match = LOCK_TIME_PATTERN.match(value or "")
    if not match:
        raise InvalidLockTime(f"Invalid lock time: {value!r}, expected HH:mm")
    return int(match.group(1)), int(match.group(2))


def get_config(session: Session, restaurant_id: str) -> RestaurantConfig | None:
    return session.get(RestaurantConfig, restaurant_id)


def _get_or_create_config(session: Session, restaurant_id: str) -> RestaurantConfig:
    config = session.get(RestaurantConfig, restaurant_id)
    if config is None:
        config = RestaurantConfig(restaurant_id=restaurant_id)
        session.add(config)
    return config


def load_duties(session: Session, restaurant_id: str, shift: ShiftKind) -> list[Duty]:
    """Return the stored template for a shift kind (empty if none)."""
    config = get_config(session, restaurant_id)
    if config is None:
        return []
    entries = (config.duty_templates or {}).get(shift.value)
    if not isinstance(entries, list):
        return []
    return [Duty.from_stored(entry) for entry in entries]


def get_lock_times(session: Session, restaurant_id: str) -> dict[ShiftKind, str]:
    config = get_config(session, restaurant_id)
    stored = (config.lock_times if config else None) or {}
    return {kind: stored.get(kind.value, default) for kind, default in DEFAULT_LOCK_TIMES.items()}


def set_lock_time(session: Session, restaurant_id: str, shift: ShiftKind, value: str) -> dict[ShiftKind, str]:
    """Validate and persist one lock time. Returns all lock times."""
    parse_lock_time(value)
    with transaction(session):
        config = _get_or_create_config(session, restaurant_id)
        # Reassign so the JSON column is marked dirty.
        config.lock_times = {**(config.lock_times or {}), shift.value: value}
        config.updated_at = datetime.now(UTC)
    logger.info(f"Lock time for {restaurant_id}/{shift.value} set to {value}")
    return get_lock_times(session, restaurant_id)


class TemplateEditor:
    """Working copy of one restaurant's duty list for one shift kind.

    List operations only change the working copy. Nothing is written until
    :meth:`save`.
    """

    def __init__(self, restaurant_id: str, shift: ShiftKind, duties: list[Duty] | None = None):
        self.restaurant_id = restaurant_id
        self.shift = shift
        self.duties: list[Duty] = list(duties or [])

    @classmethod
    def load(cls, session: Session, restaurant_id: str, shift: ShiftKind) -> "TemplateEditor":
        return cls(restaurant_id, shift, load_duties(session, restaurant_id, shift))

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self.duties):
            raise IndexError(f"No duty at index {index}")

    def add_duty(self, title: str, priority: bool = False) -> bool:
        """Append a duty. Blank titles are ignored; returns whether one was added."""
        title = (title or "").strip()
        if not title:
            return False
        self.duties.append(Duty(title=title, priority=priority))
        return True

    def remove_duty(self, index: int) -> None:
        self._check_index(index)
        del self.duties[index]

    def update_title(self, index: int, text: str) -> None:
        self._check_index(index)
        self.duties[index].title = text

    def set_priority(self, index: int, priority: bool) -> None:
        self._check_index(index)
        self.duties[index].priority = bool(priority)

    def move_up(self, index: int) -> None:
        self._check_index(index)
        if index == 0:
            return
        self.duties[index - 1], self.duties[index] = self.duties[index], self.duties[index - 1]

    def move_down(self, index: int) -> None:
        self._check_index(index)
        if index == len(self.duties) - 1:
            return
        self.duties[index + 1], self.duties[index] = self.duties[index], self.duties[index + 1]

    def bulk_replace(self, text: str) -> None:
        """Replace the list with one non-priority duty per non-blank line."""
        lines = [line.strip() for line in (text or "").splitlines()]
        self.duties = [Duty(title=line) for line in lines if line]

    def save(self, session: Session) -> list[Duty]:
        """Overwrite the stored list for this shift kind with the working copy."""
        for i, duty in enumerate(self.duties):
            duty.title = (duty.title or "").strip()
            if not duty.title:
                raise InvalidTemplate(f"Duty {i} has an empty title")

        with transaction(session):
            config = _get_or_create_config(session, self.restaurant_id)
            config.duty_templates = {
                **(config.duty_templates or {}),
                self.shift.value: [asdict(duty) for duty in self.duties],
            }
            config.updated_at = datetime.now(UTC)

        logger.info(
            f"Saved {len(self.duties)} duties for {self.restaurant_id}/{self.shift.value}"
        )
        return list(self.duties)
