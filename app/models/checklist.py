"""Checklist day, shift and item models.

A checklist is materialised per (restaurant, business date, shift kind).
Items are stamped from the shift's duty template when the shift is first
opened and are only ever replaced wholesale by a reseed.

Every row carries ``expire_at``, the retention horizon used by an external
sweep; nothing in this application deletes expired rows.
"""

from datetime import UTC, datetime
from enum import Enum
from uuid import UUID, uuid4

from sqlalchemy import ForeignKeyConstraint, UniqueConstraint
from sqlmodel import Field, SQLModel


class ShiftKind(str, Enum):
    OPEN = "open"
    MID = "mid"
    CLOSE = "close"


class ChecklistDay(SQLModel, table=True):
    """A business date for one restaurant.

    Attributes:
        restaurant_id: Owning restaurant.
        date: Business date, "YYYY-MM-DD".
        expire_at: Retention horizon for the day.
    """
    restaurant_id: str = Field(foreign_key="restaurant.id", primary_key=True)
    date: str = Field(primary_key=True)
    expire_at: datetime


class ChecklistShift(SQLModel, table=True):
    """Lock state of one shift's checklist.

    The row's existence is what marks a shift as seeded. ``locked`` is the
    single flag the store's write rules consult before allowing any change
    to the shift's items.

    Attributes:
        restaurant_id: Owning restaurant.
        date: Business date, "YYYY-MM-DD".
        shift: Shift kind.
        locked: True once submitted; cleared only by an admin reset.
        created_at: When the shift was last (re)seeded.
        completed_at: Submission time. Set iff locked.
        completed_by_user_id: Submitting identity. Set iff locked.
        completed_by_name: Submitting user's name. Set iff locked.
        expire_at: Retention horizon.
    """
    __table_args__ = (
        ForeignKeyConstraint(
            ["restaurant_id", "date"],
            ["checklistday.restaurant_id", "checklistday.date"],
        ),
    )

    restaurant_id: str = Field(primary_key=True)
    date: str = Field(primary_key=True)
    shift: ShiftKind = Field(primary_key=True)
    locked: bool = Field(default=False)
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    completed_at: datetime | None = None
    completed_by_user_id: str | None = None
    completed_by_name: str | None = None
    expire_at: datetime

    @property
    def key(self) -> tuple[str, str, ShiftKind]:
        return (self.restaurant_id, self.date, self.shift)


class ChecklistItem(SQLModel, table=True):
    """A duty to be checked off during a shift.

    Attributes:
        id: Generated identity; titles are not unique.
        restaurant_id, date, shift: The owning shift.
        title: Copied from the template at seed time.
        priority: Copied from the template at seed time.
        order: Template index at seed time; dense 0..N-1 within a shift.
        checked: Whether the duty has been signed off.
        checked_by_user_id: Who signed off. Set iff checked.
        checked_by_name: Name of who signed off. Set iff checked.
        checked_at: When it was signed off. Set iff checked.
        expire_at: Retention horizon.
    """
    __table_args__ = (
        ForeignKeyConstraint(
            ["restaurant_id", "date", "shift"],
            ["checklistshift.restaurant_id", "checklistshift.date", "checklistshift.shift"],
        ),
        UniqueConstraint("restaurant_id", "date", "shift", "order"),
    )

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    restaurant_id: str = Field(index=True)
    date: str = Field(index=True)
    shift: ShiftKind
    title: str
    priority: bool = Field(default=False)
    order: int
    checked: bool = Field(default=False)
    checked_by_user_id: str | None = None
    checked_by_name: str | None = None
    checked_at: datetime | None = None
    expire_at: datetime

    @property
    def shift_key(self) -> tuple[str, str, ShiftKind]:
        return (self.restaurant_id, self.date, self.shift)
