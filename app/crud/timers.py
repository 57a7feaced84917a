"""CRUD helpers for the per-user live timer."""

from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..core.config import settings
from ..models.fast import Fast
from ..models.timer import Timer
from ..services.fastcalc import elapsed_seconds, parse_iso, to_utc_iso, utcnow

logger = logging.getLogger(__name__)


class TimerConflict(Exception):
    """Raised when a user who already has a timer tries to start another."""


def _iso(value: datetime | str | None) -> str | None:
    if value is None:
        return None
    if isinstance(value, str):
        value = parse_iso(value, settings.TZ)
    return to_utc_iso(value, settings.TZ)


def _dt(value: str | None) -> datetime | None:
    return parse_iso(value, settings.TZ)


def get_timer(db: Session, owner_id: str) -> Timer | None:
    return db.execute(select(Timer).where(Timer.owner_id == owner_id)).scalars().first()


def timer_elapsed(timer: Timer, now: datetime | None = None) -> int:
    return elapsed_seconds(
        _dt(timer.start_time),
        now=now,
        is_paused=bool(timer.is_paused),
        paused_at=_dt(timer.paused_at),
    )


def start_timer(db: Session, owner_id: str, start_time: datetime | None = None, notes: str | None = None) -> Timer:
    if get_timer(db, owner_id) is not None:
        raise TimerConflict("A timer is already running for this user")
    now = _iso(utcnow())
    timer = Timer(
        owner_id=owner_id,
        start_time=_iso(start_time) or now,
        is_paused=0,
        paused_at=None,
        notes=notes or "",
        created_at=now,
        updated_at=now,
    )
    db.add(timer)
    try:
        db.commit()
    except IntegrityError as exc:
        # two starts raced past the lookup; the unique owner index decides
        db.rollback()
        raise TimerConflict("A timer is already running for this user") from exc
    db.refresh(timer)
    logger.info("timer.started", extra={"extra_data": {"user_id": owner_id, "start_time": timer.start_time}})
    return timer


def _pause(timer: Timer, paused_at: datetime | None) -> None:
    if timer.is_paused:
        return
    stamp = paused_at or utcnow()
    start = _dt(timer.start_time)
    if start is not None and _dt(_iso(stamp)) < start:
        raise ValueError("pausedAt cannot be earlier than the timer start")
    timer.is_paused = 1
    timer.paused_at = _iso(stamp)


def _resume(timer: Timer, now: datetime) -> None:
    if not timer.is_paused:
        return
    paused_at = _dt(timer.paused_at)
    if paused_at is not None and now > paused_at:
        # Slide the start forward by the paused span so the time already
        # accumulated carries on from where it froze.
        timer.start_time = _iso(_dt(timer.start_time) + (now - paused_at))
    timer.is_paused = 0
    timer.paused_at = None


def update_timer(db: Session, timer: Timer, payload: dict, now: datetime | None = None) -> Timer:
    """Apply a partial update: ``is_paused``, ``paused_at`` and/or ``notes``."""

    now = now or utcnow()
    event = None
    if payload.get("notes") is not None:
        timer.notes = payload["notes"]
        event = "timer.notes_updated"
    is_paused = payload.get("is_paused")
    if is_paused is True:
        _pause(timer, payload.get("paused_at"))
        event = "timer.paused"
    elif is_paused is False:
        _resume(timer, now)
        event = "timer.resumed"
    elif payload.get("paused_at") is not None and timer.is_paused:
        timer.paused_at = _iso(payload["paused_at"])
    timer.updated_at = _iso(now)
    db.commit()
    db.refresh(timer)
    if event:
        logger.info(event, extra={"extra_data": {"user_id": timer.owner_id}})
    return timer


def delete_timer(db: Session, timer: Timer) -> None:
    owner_id = timer.owner_id
    db.delete(timer)
    db.commit()
    logger.info("timer.deleted", extra={"extra_data": {"user_id": owner_id}})


def stop_timer(db: Session, timer: Timer, end_time: datetime | None = None) -> Fast:
    """Turn the running timer into a history entry and drop the timer.

    The recorded start is the timer's current ``start_time``, which resumes have
    moved forward by the paused spans, so the entry covers fasting time only.
    """

    end = end_time or utcnow()
    start = _dt(timer.start_time)
    if _dt(_iso(end)) <= start:
        raise ValueError("End time must be after start time")
    fast = Fast(
        owner_id=timer.owner_id,
        start_time=timer.start_time,
        end_time=_iso(end),
        notes=timer.notes or None,
        created_at=_iso(utcnow()),
    )
    db.add(fast)
    db.delete(timer)
    db.commit()
    db.refresh(fast)
    logger.info(
        "timer.stopped",
        extra={"extra_data": {"user_id": fast.owner_id, "fast_id": fast.id, "end_time": fast.end_time}},
    )
    return fast
