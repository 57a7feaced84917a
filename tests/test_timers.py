"""Timer persistence: one timer per user, pause/resume continuity, stop."""

from datetime import datetime, timedelta, timezone

import pytest

from app.crud.fasts import list_fasts
from app.crud.timers import (
    TimerConflict,
    get_timer,
    start_timer,
    stop_timer,
    timer_elapsed,
    update_timer,
)
from app.services.fastcalc import parse_iso

START = datetime(2024, 5, 1, 20, 0, tzinfo=timezone.utc)


def test_start_timer_persists_state(db_session):
    timer = start_timer(db_session, "u1", START, "water only")

    stored = get_timer(db_session, "u1")
    assert stored.id == timer.id
    assert stored.start_time == "2024-05-01T20:00:00.000Z"
    assert stored.is_paused == 0
    assert stored.paused_at is None
    assert stored.notes == "water only"


def test_second_timer_for_same_user_is_rejected(db_session):
    start_timer(db_session, "u1", START)
    with pytest.raises(TimerConflict):
        start_timer(db_session, "u1", START + timedelta(hours=1))

    # other users are unaffected
    assert start_timer(db_session, "u2", START).owner_id == "u2"


def test_pause_freezes_elapsed_time(db_session):
    timer = start_timer(db_session, "u1", START)
    paused_at = START + timedelta(hours=2)
    update_timer(db_session, timer, {"is_paused": True, "paused_at": paused_at}, now=paused_at)

    assert timer.is_paused == 1
    assert parse_iso(timer.paused_at) == paused_at
    later = START + timedelta(hours=10)
    assert timer_elapsed(timer, now=later) == 2 * 3600


def test_resume_keeps_accumulated_time(db_session):
    timer = start_timer(db_session, "u1", START)
    update_timer(db_session, timer, {"is_paused": True, "paused_at": START + timedelta(hours=2)})
    resumed_at = START + timedelta(hours=5)
    update_timer(db_session, timer, {"is_paused": False, "paused_at": None}, now=resumed_at)

    assert timer.is_paused == 0
    assert timer.paused_at is None
    # the three paused hours are skipped
    assert parse_iso(timer.start_time) == START + timedelta(hours=3)
    assert timer_elapsed(timer, now=resumed_at) == 2 * 3600
    assert timer_elapsed(timer, now=resumed_at + timedelta(minutes=30)) == 2 * 3600 + 1800

    # a second cycle keeps adding up
    update_timer(db_session, timer, {"is_paused": True, "paused_at": resumed_at + timedelta(hours=1)})
    update_timer(db_session, timer, {"is_paused": False}, now=resumed_at + timedelta(hours=4))
    assert timer_elapsed(timer, now=resumed_at + timedelta(hours=4)) == 3 * 3600


def test_pause_before_start_is_invalid(db_session):
    timer = start_timer(db_session, "u1", START)
    with pytest.raises(ValueError):
        update_timer(db_session, timer, {"is_paused": True, "paused_at": START - timedelta(minutes=1)})


def test_notes_update_leaves_timing_alone(db_session):
    timer = start_timer(db_session, "u1", START)
    update_timer(db_session, timer, {"notes": "feeling good"})
    assert timer.notes == "feeling good"
    assert timer.is_paused == 0
    assert timer.start_time == "2024-05-01T20:00:00.000Z"


def test_stop_converts_timer_into_fast(db_session):
    timer = start_timer(db_session, "u1", START, "first one")
    fast = stop_timer(db_session, timer, end_time=START + timedelta(hours=16))

    assert get_timer(db_session, "u1") is None
    assert fast.start_time == "2024-05-01T20:00:00.000Z"
    assert fast.end_time == "2024-05-02T12:00:00.000Z"
    assert fast.notes == "first one"
    assert [f.id for f in list_fasts(db_session, "u1")] == [fast.id]


def test_stop_after_pause_records_fasting_time_only(db_session):
    timer = start_timer(db_session, "u1", START)
    update_timer(db_session, timer, {"is_paused": True, "paused_at": START + timedelta(hours=2)})
    update_timer(db_session, timer, {"is_paused": False}, now=START + timedelta(hours=3))
    fast = stop_timer(db_session, timer, end_time=START + timedelta(hours=17))

    # the recorded start is the one shifted past the paused hour
    assert fast.start_time == "2024-05-01T21:00:00.000Z"
    assert parse_iso(fast.end_time) - parse_iso(fast.start_time) == timedelta(hours=16)


def test_stop_rejects_end_before_start(db_session):
    timer = start_timer(db_session, "u1", START)
    with pytest.raises(ValueError):
        stop_timer(db_session, timer, end_time=START)
    assert get_timer(db_session, "u1") is not None
