"""User profile model.

Profiles are keyed by the identity provider's id. An authenticated identity
without a profile cannot use the application.
"""

from enum import Enum

from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel


class Role(str, Enum):
    ADMIN = "admin"
    MANAGER = "manager"


class UserProfile(SQLModel, table=True):
    """Role and restaurant permissions for an identity.

    Attributes:
        id: Identity id issued by the identity provider.
        display_name: Name stamped on checked items and submissions.
        email: Fallback name when no display name is set.
        role: "admin" or "manager".
        restaurants: Mapping of restaurant id to bool; only true entries
            grant access. Ignored for admins.
    """
    id: str = Field(primary_key=True)
    display_name: str | None = None
    email: str | None = None
    role: Role = Field(default=Role.MANAGER)
    restaurants: dict = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))
