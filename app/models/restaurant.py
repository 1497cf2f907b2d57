"""Restaurant and per-restaurant configuration models.

Restaurants are created out-of-band by an administrator (see
``scripts/provision.py``). Their configuration row holds the duty
templates and lock times and is created implicitly on first write.
"""

from datetime import datetime

from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel


class Restaurant(SQLModel, table=True):
    """A restaurant that checklists are kept for.

    Attributes:
        id: String key used in every checklist path (e.g. "tulia").
        name: Display name.
        timezone: IANA zone for business-date math. Falls back to the
            configured default timezone when unset.
    """
    id: str = Field(primary_key=True)
    name: str
    timezone: str | None = None


class RestaurantConfig(SQLModel, table=True):
    """Duty templates and lock times for one restaurant.

    Attributes:
        restaurant_id: Owning restaurant.
        duty_templates: Mapping of shift kind ("open", "mid", "close") to an
            ordered list of ``{"title": str, "priority": bool}``. Each list
            is overwritten as a whole on save.
        lock_times: Mapping of shift kind to an "HH:mm" string. Missing
            kinds use the defaults in ``app.checklist.templates``.
        updated_at: When either mapping was last written.
    """
    restaurant_id: str = Field(foreign_key="restaurant.id", primary_key=True)
    duty_templates: dict = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))
    lock_times: dict = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))
    updated_at: datetime | None = None
