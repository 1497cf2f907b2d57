"""Access policy: who may do what, for which restaurant.

Managers work only in the restaurants their profile enables. Admins are
permitted everywhere and are the only ones who may edit templates and lock
times or reseed/reset a shift.
"""

from dataclasses import dataclass, field

from sqlmodel import Session

from app.core.errors import PermissionDenied, ProfileNotFound
from app.models import Role, UserProfile


@dataclass(frozen=True)
class Actor:
    """A resolved identity acting on checklists."""
    user_id: str
    name: str
    role: Role
    restaurants: frozenset[str] = field(default_factory=frozenset)

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    def can_access(self, restaurant_id: str) -> bool:
        return self.is_admin or restaurant_id in self.restaurants


# Acts on behalf of the auto-lock job.
SYSTEM_ACTOR = Actor(user_id="system", name="Auto-lock", role=Role.ADMIN)


def actor_from_profile(profile: UserProfile) -> Actor:
    permitted = frozenset(k for k, enabled in (profile.restaurants or {}).items() if enabled)
    return Actor(
        user_id=profile.id,
        name=profile.display_name or profile.email or "Manager",
        role=Role(profile.role),
        restaurants=permitted,
    )


def resolve_actor(session: Session, identity_id: str) -> Actor:
    """Look up the profile for an authenticated identity."""
    profile = session.get(UserProfile, identity_id)
    if profile is None:
        raise ProfileNotFound(
            f"No user profile found for {identity_id}. Ask an admin to create one."
        )
    return actor_from_profile(profile)


def require_restaurant(actor: Actor, restaurant_id: str) -> None:
    if not actor.can_access(restaurant_id):
        raise PermissionDenied(f"Not permitted for restaurant {restaurant_id!r}")


def require_admin(actor: Actor) -> None:
    if not actor.is_admin:
        raise PermissionDenied("Admins only")
