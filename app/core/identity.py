"""Request identity resolution.

The identity provider sits in front of this service and passes the
authenticated identity id in a request header. A request without it is
not authenticated; an identity without a profile is a separate error.
"""

from fastapi import Depends, Request
from sqlmodel import Session

from app.checklist.access import Actor, resolve_actor
from app.core.config import settings
from app.core.database import get_session
from app.core.errors import NotAuthenticated


def get_identity(request: Request) -> str:
    """Dependency returning the authenticated identity id."""
    identity = request.headers.get(settings.identity_header, "").strip()
    if not identity:
        raise NotAuthenticated()
    return identity


def get_actor(
    identity: str = Depends(get_identity),
    session: Session = Depends(get_session),
) -> Actor:
    """Dependency resolving the identity's profile into an Actor."""
    return resolve_actor(session, identity)
