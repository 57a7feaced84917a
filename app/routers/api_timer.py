from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..crud.timers import (
    TimerConflict,
    delete_timer,
    get_timer,
    start_timer,
    stop_timer,
    timer_elapsed,
    update_timer,
)
from ..db.session import get_db
from ..deps.auth import require_user_access
from ..models.timer import Timer
from ..schemas.fast import FastOut
from ..schemas.timer import TimerOut, TimerStart, TimerUpdate
from .api_fasts import fast_to_schema

router = APIRouter(prefix="/api/timer", tags=["timer"])


def timer_to_schema(timer: Timer) -> TimerOut:
    return TimerOut(
        user_id=timer.owner_id,
        start_time=timer.start_time,
        is_paused=bool(timer.is_paused),
        paused_at=timer.paused_at,
        notes=timer.notes or "",
        elapsed_seconds=timer_elapsed(timer),
        updated_at=timer.updated_at,
    )


def _require_timer(db: Session, user_id: str) -> Timer:
    timer = get_timer(db, user_id)
    if not timer:
        raise HTTPException(404, "No active timer")
    return timer


@router.get("/{user_id}", response_model=Optional[TimerOut])
def api_get_timer(user_id: str = Depends(require_user_access), db: Session = Depends(get_db)):
    timer = get_timer(db, user_id)
    return timer_to_schema(timer) if timer else None


@router.post("/{user_id}", response_model=TimerOut, status_code=201)
def api_start_timer(payload: TimerStart, user_id: str = Depends(require_user_access), db: Session = Depends(get_db)):
    try:
        timer = start_timer(db, user_id, payload.start_time, payload.notes)
    except TimerConflict as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    return timer_to_schema(timer)


@router.patch("/{user_id}", response_model=TimerOut)
def api_update_timer(payload: TimerUpdate, user_id: str = Depends(require_user_access), db: Session = Depends(get_db)):
    timer = _require_timer(db, user_id)
    try:
        updated = update_timer(db, timer, payload.model_dump(exclude_unset=True))
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return timer_to_schema(updated)


@router.delete("/{user_id}")
def api_delete_timer(user_id: str = Depends(require_user_access), db: Session = Depends(get_db)):
    delete_timer(db, _require_timer(db, user_id))
    return {"status": "deleted"}


@router.post("/{user_id}/stop", response_model=FastOut, status_code=201)
def api_stop_timer(user_id: str = Depends(require_user_access), db: Session = Depends(get_db)):
    timer = _require_timer(db, user_id)
    try:
        fast = stop_timer(db, timer)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return fast_to_schema(fast)
