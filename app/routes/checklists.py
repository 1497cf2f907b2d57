"""Checklist routes for one restaurant, business date and shift."""
import asyncio
import json
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import StreamingResponse
from sqlmodel import Session

from app.checklist.access import Actor, require_restaurant
from app.checklist.feed import feed, list_items, shift_path, shift_snapshot
from app.checklist.lock import reset_shift, submit_shift, toggle_item
from app.checklist.seeding import reseed_shift, seed_shift
from app.core.database import get_session
from app.core.identity import get_actor
from app.models import ChecklistItem, ShiftKind
from app.routes.restaurants import get_restaurant

router = APIRouter(
    prefix="/restaurants/{restaurant_id}/checklists/{date}/{shift}",
    tags=["checklists"],
)

KEEPALIVE_SECONDS = 15


@router.get("")
async def get_checklist(
    restaurant_id: str,
    date: str,
    shift: ShiftKind,
    actor: Actor = Depends(get_actor),
    session: Session = Depends(get_session),
):
    """
    Open a shift checklist.

    Seeds the shift from the current duty template the first time it is
    opened, then returns the shift state with its items sorted by order.
    An empty item list means no duties are configured for the shift.
    """
    require_restaurant(actor, restaurant_id)
    get_restaurant(session, restaurant_id)
    record = seed_shift(session, restaurant_id, date, shift)
    return shift_snapshot(session, record)


@router.post("/items/{item_id}/toggle")
async def toggle_checklist_item(
    restaurant_id: str,
    date: str,
    shift: ShiftKind,
    item_id: UUID,
    actor: Actor = Depends(get_actor),
    session: Session = Depends(get_session),
):
    """
    Toggle an item's checked state.

    Checking stamps the caller as signer; unchecking clears the signer.
    Returns 409 when the shift is locked, along with progress counts
    otherwise.
    """
    require_restaurant(actor, restaurant_id)
    item = session.get(ChecklistItem, item_id)
    if not item or item.shift_key != (restaurant_id, date, shift):
        raise HTTPException(status_code=404, detail="Item not found")

    item = toggle_item(session, actor, item)

    items = list_items(session, restaurant_id, date, shift)
    checked_count = sum(1 for i in items if i.checked)
    return {
        "success": True,
        "item_id": str(item.id),
        "checked": item.checked,
        "checked_by_name": item.checked_by_name,
        "checked_count": checked_count,
        "total_count": len(items),
        "all_checked": checked_count == len(items),
    }


@router.post("/submit")
async def submit_checklist(
    restaurant_id: str,
    date: str,
    shift: ShiftKind,
    actor: Actor = Depends(get_actor),
    session: Session = Depends(get_session),
):
    """
    Submit and lock the checklist.

    Items can no longer be toggled afterwards. Returns 409 with error
    "already_locked" if the shift was already submitted.
    """
    get_restaurant(session, restaurant_id)
    record = submit_shift(session, actor, restaurant_id, date, shift)
    return shift_snapshot(session, record)


@router.post("/reseed")
async def reseed_checklist(
    restaurant_id: str,
    date: str,
    shift: ShiftKind,
    actor: Actor = Depends(get_actor),
    session: Session = Depends(get_session),
):
    """
    Apply the latest duty template to this day (admin only).

    Existing items, including their check marks, are replaced.
    """
    get_restaurant(session, restaurant_id)
    record = reseed_shift(session, actor, restaurant_id, date, shift)
    return shift_snapshot(session, record)


@router.post("/reset")
async def reset_checklist(
    restaurant_id: str,
    date: str,
    shift: ShiftKind,
    actor: Actor = Depends(get_actor),
    session: Session = Depends(get_session),
):
    """
    Unlock a submitted checklist (admin only).

    Clears the completion record and reseeds the items from the current
    template. This is the only way back from a locked shift.
    """
    get_restaurant(session, restaurant_id)
    record = reset_shift(session, actor, restaurant_id, date, shift)
    return shift_snapshot(session, record)


def _sse(snapshot: dict) -> str:
    return f"data: {json.dumps(snapshot)}\n\n"


@router.get("/stream")
async def stream_checklist(
    restaurant_id: str,
    date: str,
    shift: ShiftKind,
    request: Request,
    actor: Actor = Depends(get_actor),
    session: Session = Depends(get_session),
):
    """
    Stream the shift as server-sent events.

    Sends the current snapshot, then a full snapshot after every change
    until the client disconnects.
    """
    require_restaurant(actor, restaurant_id)
    get_restaurant(session, restaurant_id)
    record = seed_shift(session, restaurant_id, date, shift)

    queue: asyncio.Queue = asyncio.Queue()
    loop = asyncio.get_running_loop()
    unsubscribe = feed.subscribe(
        shift_path(restaurant_id, date, shift),
        lambda snapshot: loop.call_soon_threadsafe(queue.put_nowait, snapshot),
    )
    initial = shift_snapshot(session, record)

    async def events():
        try:
            yield _sse(initial)
            while not await request.is_disconnected():
                try:
                    snapshot = await asyncio.wait_for(queue.get(), timeout=KEEPALIVE_SECONDS)
                except asyncio.TimeoutError:
                    yield ": keep-alive\n\n"
                    continue
                yield _sse(snapshot)
        finally:
            unsubscribe()

    return StreamingResponse(events(), media_type="text/event-stream")
