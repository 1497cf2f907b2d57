"""Identity routes."""
from fastapi import APIRouter, Depends

from app.checklist.access import Actor
from app.core.identity import get_actor

router = APIRouter(prefix="/auth", tags=["auth"])


@router.get("/me")
async def me(actor: Actor = Depends(get_actor)):
    """
    Return the caller's resolved profile.

    Responds 401 when no identity is present and 403 with error
    "profile_not_found" when the identity has no profile.
    """
    return {
        "user_id": actor.user_id,
        "name": actor.name,
        "role": actor.role.value,
        "restaurants": sorted(actor.restaurants),
        "is_admin": actor.is_admin,
    }
