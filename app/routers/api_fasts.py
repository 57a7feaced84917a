from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ..crud.fasts import create_fast, delete_fast, fast_hours, get_fast, list_fasts, update_fast
from ..db.session import get_db
from ..deps.auth import require_user_access
from ..models.fast import Fast
from ..schemas.fast import FastCreate, FastOut, FastStats, FastUpdate
from ..services.reporting import calculate_fast_stats

router = APIRouter(prefix="/api/fasts", tags=["fasts"])


def fast_to_schema(fast: Fast) -> FastOut:
    return FastOut(
        id=fast.id,
        user_id=fast.owner_id,
        start_time=fast.start_time,
        end_time=fast.end_time,
        notes=fast.notes,
        duration_hours=fast_hours(fast),
        created_at=fast.created_at,
    )


def _require_fast(db: Session, user_id: str, fast_id: int) -> Fast:
    fast = get_fast(db, user_id, fast_id)
    if not fast:
        raise HTTPException(404, "Not found")
    return fast


@router.get("/{user_id}", response_model=list[FastOut])
def api_list_fasts(
    user_id: str = Depends(require_user_access),
    limit: int = Query(default=200, ge=1, le=1000),
    offset: int = Query(default=0, ge=0),
    db: Session = Depends(get_db),
):
    return [fast_to_schema(fast) for fast in list_fasts(db, user_id, limit=limit, offset=offset)]


@router.get("/{user_id}/stats", response_model=FastStats)
def api_fast_stats(user_id: str = Depends(require_user_access), db: Session = Depends(get_db)):
    return FastStats(**calculate_fast_stats(db, user_id))


@router.post("/{user_id}", response_model=FastOut, status_code=201)
def api_create_fast(payload: FastCreate, user_id: str = Depends(require_user_access), db: Session = Depends(get_db)):
    try:
        fast = create_fast(db, user_id, payload.model_dump(exclude_unset=True))
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return fast_to_schema(fast)


@router.patch("/{user_id}/{fast_id}", response_model=FastOut)
def api_update_fast(
    fast_id: int,
    payload: FastUpdate,
    user_id: str = Depends(require_user_access),
    db: Session = Depends(get_db),
):
    fast = _require_fast(db, user_id, fast_id)
    try:
        updated = update_fast(db, fast, payload.model_dump(exclude_unset=True))
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return fast_to_schema(updated)


@router.delete("/{user_id}/{fast_id}")
def api_delete_fast(fast_id: int, user_id: str = Depends(require_user_access), db: Session = Depends(get_db)):
    delete_fast(db, _require_fast(db, user_id, fast_id))
    return {"status": "deleted"}
