"""Manual "Add Past Fast" form: defaults, blocked submission, rollover."""

import asyncio
from datetime import date, datetime, timezone

from app.client.entry import ManualFastEntry


class Sink:
    def __init__(self):
        self.fasts = []
        self.alerts = []

    def add_fast(self, start, end, notes):
        self.fasts.append((start, end, notes))


def _form(sink):
    return ManualFastEntry(sink.add_fast, alert=sink.alerts.append, tz=timezone.utc, today=lambda: date(2024, 5, 1))


def test_defaults_describe_an_overnight_fast():
    form = _form(Sink())
    assert (form.start_date, form.start_hour) == (date(2024, 5, 1), 20)
    assert (form.end_date, form.end_hour) == (date(2024, 5, 1), 12)
    assert form.can_submit
    assert form.duration.hours == 16
    assert form.summary() == "20:00 -> 12:00: 16 hours (16h 0m exactly)"


def test_submit_hands_rolled_over_window_and_resets():
    sink = Sink()
    form = _form(sink)
    form.start_hour = 21
    form.end_hour = 9
    form.notes = "easy one"

    assert asyncio.run(form.submit())
    start, end, notes = sink.fasts[0]
    assert start == datetime(2024, 5, 1, 21, tzinfo=timezone.utc)
    assert end == datetime(2024, 5, 2, 9, tzinfo=timezone.utc)
    assert notes == "easy one"
    assert (form.start_hour, form.end_hour, form.notes) == (20, 12, "")


def test_submit_is_blocked_when_end_is_not_after_start():
    sink = Sink()
    form = _form(sink)
    form.start_date = date(2024, 5, 3)
    form.end_date = date(2024, 5, 2)

    assert not form.can_submit
    assert form.summary() == "Please ensure end time is after start time"
    assert not asyncio.run(form.submit())
    assert sink.fasts == []
    assert sink.alerts == ["End time must be after start time"]
    # nothing was reset
    assert form.start_date == date(2024, 5, 3)
