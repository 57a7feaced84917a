"""CRUD helpers for the fast history log."""

from __future__ import annotations

import logging
from datetime import datetime
from zoneinfo import ZoneInfo

from sqlalchemy import desc, select
from sqlalchemy.orm import Session

from ..core.config import settings
from ..models.fast import Fast
from ..services.fastcalc import ends_after, parse_iso, resolve_window, to_utc_iso, utcnow

logger = logging.getLogger(__name__)

END_BEFORE_START = "End time must be after start time"


def _iso(value: datetime | str) -> str:
    if isinstance(value, str):
        value = parse_iso(value, settings.TZ)
    return to_utc_iso(value, settings.TZ)


def _aware(value: datetime | str) -> datetime:
    # Naive values (no offset in the JSON) are wall-clock times in settings.TZ.
    return parse_iso(_iso(value), settings.TZ)


def _window_from_payload(payload: dict) -> tuple[datetime, datetime]:
    if payload.get("start_date") is not None:
        return resolve_window(
            payload["start_date"],
            payload["start_hour"],
            payload["end_date"],
            payload["end_hour"],
            ZoneInfo(settings.TZ),
        )
    start, end = payload.get("start_time"), payload.get("end_time")
    if start is None or end is None:
        raise ValueError("startTime and endTime are required")
    return _aware(start), _aware(end)


def fast_hours(fast: Fast) -> float:
    start = parse_iso(fast.start_time, settings.TZ)
    end = parse_iso(fast.end_time, settings.TZ)
    return round((end - start).total_seconds() / 3600, 2)


def list_fasts(db: Session, owner_id: str, limit: int = 200, offset: int = 0) -> list[Fast]:
    stmt = (
        select(Fast)
        .where(Fast.owner_id == owner_id)
        .order_by(desc(Fast.start_time), desc(Fast.id))
        .limit(limit)
        .offset(offset)
    )
    return list(db.execute(stmt).scalars().all())


def get_fast(db: Session, owner_id: str, fast_id: int) -> Fast | None:
    stmt = select(Fast).where(Fast.id == fast_id, Fast.owner_id == owner_id)
    return db.execute(stmt).scalars().first()


def create_fast(db: Session, owner_id: str, payload: dict) -> Fast:
    start, end = _window_from_payload(payload)
    if not ends_after(start, end):
        raise ValueError(END_BEFORE_START)
    fast = Fast(
        owner_id=owner_id,
        start_time=_iso(start),
        end_time=_iso(end),
        notes=(payload.get("notes") or None),
        created_at=_iso(utcnow()),
    )
    db.add(fast)
    db.commit()
    db.refresh(fast)
    logger.info(
        "fast.recorded",
        extra={"extra_data": {"user_id": owner_id, "fast_id": fast.id, "hours": fast_hours(fast)}},
    )
    return fast


def update_fast(db: Session, fast: Fast, payload: dict) -> Fast:
    start = payload.get("start_time") or fast.start_time
    end = payload.get("end_time") or fast.end_time
    start_dt = _aware(start)
    end_dt = _aware(end)
    if not ends_after(start_dt, end_dt):
        raise ValueError(END_BEFORE_START)
    fast.start_time = _iso(start_dt)
    fast.end_time = _iso(end_dt)
    if "notes" in payload:
        fast.notes = payload.get("notes") or None
    db.commit()
    db.refresh(fast)
    return fast


def delete_fast(db: Session, fast: Fast) -> None:
    db.delete(fast)
    db.commit()
