"""Restaurant routes: selection, business date and checklist history."""
from datetime import UTC, datetime

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select

from app.checklist.access import Actor, require_restaurant
from app.checklist.bizdate import business_date_for, restaurant_timezone
from app.checklist.templates import get_lock_times
from app.core.config import settings
from app.core.database import get_session
from app.core.identity import get_actor
from app.models import ChecklistDay, ChecklistShift, Restaurant, ShiftKind

router = APIRouter(prefix="/restaurants", tags=["restaurants"])

SHIFT_ORDER = {kind.value: i for i, kind in enumerate(ShiftKind)}


def get_restaurant(session: Session, restaurant_id: str) -> Restaurant:
    restaurant = session.get(Restaurant, restaurant_id)
    if not restaurant:
        raise HTTPException(status_code=404, detail="Restaurant not found")
    return restaurant


@router.get("")
async def list_restaurants(
    actor: Actor = Depends(get_actor),
    session: Session = Depends(get_session),
):
    """
    List restaurants the caller can open checklists for.

    Admins see every restaurant; managers see those enabled on their profile.
    """
    restaurants = session.exec(select(Restaurant).order_by(Restaurant.id)).all()
    return [
        {"id": r.id, "name": r.name}
        for r in restaurants
        if actor.can_access(r.id)
    ]


@router.get("/{restaurant_id}")
async def restaurant_detail(
    restaurant_id: str,
    actor: Actor = Depends(get_actor),
    session: Session = Depends(get_session),
):
    """
    Show a restaurant with its current business date and lock times.

    The business date is computed in the restaurant's timezone with the
    configured cutoff hour, and is the default date offered for checklists.
    """
    require_restaurant(actor, restaurant_id)
    restaurant = get_restaurant(session, restaurant_id)
    tz_name = restaurant_timezone(restaurant)

    return {
        "id": restaurant.id,
        "name": restaurant.name,
        "timezone": tz_name,
        "business_date": business_date_for(
            datetime.now(UTC), tz_name, settings.business_day_cutoff_hour
        ),
        "cutoff_hour": settings.business_day_cutoff_hour,
        "lock_times": {
            kind.value: value for kind, value in get_lock_times(session, restaurant_id).items()
        },
    }


@router.get("/{restaurant_id}/checklists")
async def checklist_history(
    restaurant_id: str,
    actor: Actor = Depends(get_actor),
    session: Session = Depends(get_session),
):
    """
    List checklist days for a restaurant, most recent first.

    Each day shows which shifts were opened and whether they are locked,
    with who completed them.
    """
    require_restaurant(actor, restaurant_id)
    get_restaurant(session, restaurant_id)

    days = session.exec(
        select(ChecklistDay)
        .where(ChecklistDay.restaurant_id == restaurant_id)
        .order_by(ChecklistDay.date.desc())
    ).all()
    shifts = session.exec(
        select(ChecklistShift).where(ChecklistShift.restaurant_id == restaurant_id)
    ).all()

    by_date: dict[str, list[dict]] = {}
    for record in shifts:
        by_date.setdefault(record.date, []).append({
            "shift": record.shift.value,
            "locked": record.locked,
            "completed_by_name": record.completed_by_name,
        })

    return [
        {
            "date": day.date,
            "shifts": sorted(by_date.get(day.date, []), key=lambda s: SHIFT_ORDER[s["shift"]]),
        }
        for day in days
    ]
