"""Admin settings routes: duty templates and lock times."""
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlmodel import Session

from app.checklist.access import Actor, require_admin
from app.checklist.templates import (
    Duty,
    TemplateEditor,
    get_lock_times,
    load_duties,
    set_lock_time,
)
from app.core.database import get_session
from app.core.identity import get_actor
from app.models import ShiftKind
from app.routes.restaurants import get_restaurant

router = APIRouter(prefix="/settings/{restaurant_id}", tags=["settings"])


class DutyIn(BaseModel):
    title: str = Field(min_length=1)
    priority: bool = False


class TemplateSaveRequest(BaseModel):
    duties: list[DutyIn]


class EditOperation(BaseModel):
    """One working-copy edit. Which fields are needed depends on ``op``."""
    op: Literal["add", "remove", "update_title", "set_priority", "move_up", "move_down", "bulk_replace"]
    index: int | None = None
    title: str | None = None
    priority: bool | None = None
    text: str | None = None


class TemplateEditRequest(BaseModel):
    operations: list[EditOperation]


class LockTimeRequest(BaseModel):
    time: str


def _duty_dicts(duties: list[Duty]) -> list[dict]:
    return [{"title": d.title, "priority": d.priority} for d in duties]


def _duties_response(shift: ShiftKind, duties: list[Duty]) -> dict:
    return {"shift": shift.value, "duties": _duty_dicts(duties)}


def _apply(editor: TemplateEditor, operation: EditOperation) -> None:
    if operation.op == "add":
        editor.add_duty(operation.title or "", bool(operation.priority))
    elif operation.op == "bulk_replace":
        editor.bulk_replace(operation.text or "")
    else:
        if operation.index is None:
            raise HTTPException(status_code=400, detail=f"{operation.op} requires an index")
        if operation.op == "remove":
            editor.remove_duty(operation.index)
        elif operation.op == "update_title":
            editor.update_title(operation.index, operation.title or "")
        elif operation.op == "set_priority":
            editor.set_priority(operation.index, bool(operation.priority))
        elif operation.op == "move_up":
            editor.move_up(operation.index)
        elif operation.op == "move_down":
            editor.move_down(operation.index)


@router.get("")
async def get_settings(
    restaurant_id: str,
    actor: Actor = Depends(get_actor),
    session: Session = Depends(get_session),
):
    """
    Show a restaurant's duty templates and lock times (admin only).

    Shift kinds without a saved template have an empty list; lock times not
    yet configured show their defaults.
    """
    require_admin(actor)
    restaurant = get_restaurant(session, restaurant_id)
    return {
        "restaurant_id": restaurant.id,
        "name": restaurant.name,
        "duty_templates": {
            kind.value: _duty_dicts(load_duties(session, restaurant_id, kind))
            for kind in ShiftKind
        },
        "lock_times": {
            kind.value: value for kind, value in get_lock_times(session, restaurant_id).items()
        },
    }


@router.put("/templates/{shift}")
async def save_template(
    restaurant_id: str,
    shift: ShiftKind,
    body: TemplateSaveRequest,
    actor: Actor = Depends(get_actor),
    session: Session = Depends(get_session),
):
    """
    Save the full duty list for a shift kind (admin only).

    Overwrites the stored list; the last save wins.
    """
    require_admin(actor)
    get_restaurant(session, restaurant_id)
    editor = TemplateEditor(
        restaurant_id, shift, [Duty(title=d.title, priority=d.priority) for d in body.duties]
    )
    return _duties_response(shift, editor.save(session))


@router.post("/templates/{shift}/edit")
async def edit_template(
    restaurant_id: str,
    shift: ShiftKind,
    body: TemplateEditRequest,
    actor: Actor = Depends(get_actor),
    session: Session = Depends(get_session),
):
    """
    Apply a batch of edits to the stored duty list and save once (admin only).

    Operations run in order on a working copy. Moving the first duty up or
    the last duty down does nothing. An index outside the list returns 400
    and nothing is saved.
    """
    require_admin(actor)
    get_restaurant(session, restaurant_id)
    editor = TemplateEditor.load(session, restaurant_id, shift)
    for operation in body.operations:
        try:
            _apply(editor, operation)
        except IndexError as e:
            raise HTTPException(status_code=400, detail=str(e))
    return _duties_response(shift, editor.save(session))


@router.put("/lock-times/{shift}")
async def update_lock_time(
    restaurant_id: str,
    shift: ShiftKind,
    body: LockTimeRequest,
    actor: Actor = Depends(get_actor),
    session: Session = Depends(get_session),
):
    """
    Set the lock time for a shift kind (admin only).

    Takes effect immediately; there is no separate save step.
    """
    require_admin(actor)
    get_restaurant(session, restaurant_id)
    lock_times = set_lock_time(session, restaurant_id, shift, body.time)
    return {"lock_times": {kind.value: value for kind, value in lock_times.items()}}
