"""Tests for the access policy."""

import pytest
from sqlmodel import Session

from app.checklist.access import (
    SYSTEM_ACTOR,
    actor_from_profile,
    require_admin,
    require_restaurant,
    resolve_actor,
)
from app.core.errors import PermissionDenied, ProfileNotFound
from app.models import Role, UserProfile


class TestResolveActor:
    """Tests for turning an identity into an actor."""

    def test_manager_profile(self, session: Session, manager_profile: UserProfile):
        """Test a manager profile resolves with its enabled restaurants."""
        actor = resolve_actor(session, "mgr-1")
        assert actor.role == Role.MANAGER
        assert actor.name == "Morgan Manager"
        assert actor.restaurants == frozenset({"tulia"})

    def test_missing_profile(self, session: Session):
        """Test an identity without a profile is rejected."""
        with pytest.raises(ProfileNotFound):
            resolve_actor(session, "nobody")

    def test_name_falls_back_to_email_then_default(self):
        """Test the actor name falls back to email and then a default."""
        with_email = UserProfile(id="u1", email="sam@example.com")
        assert actor_from_profile(with_email).name == "sam@example.com"
        assert actor_from_profile(UserProfile(id="u2")).name == "Manager"


class TestPermissions:
    """Tests for role and restaurant checks."""

    def test_manager_limited_to_enabled_restaurants(self, session: Session, manager_profile: UserProfile):
        """Test a manager may act only on enabled restaurants."""
        actor = actor_from_profile(manager_profile)
        require_restaurant(actor, "tulia")
        with pytest.raises(PermissionDenied):
            require_restaurant(actor, "beacon")
        with pytest.raises(PermissionDenied):
            require_admin(actor)

    def test_admin_permitted_everywhere(self, session: Session, admin_profile: UserProfile):
        """Test an admin passes every check."""
        actor = actor_from_profile(admin_profile)
        require_restaurant(actor, "anywhere")
        require_admin(actor)

    def test_system_actor_is_admin(self):
        """Test the auto-lock actor has admin rights."""
        assert SYSTEM_ACTOR.is_admin
        assert SYSTEM_ACTOR.user_id == "system"
