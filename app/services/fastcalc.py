"""Duration arithmetic shared by the API and the timer client.

Two kinds of input reach this module:

* manual entries, where the user picks a start date + hour and an end date +
  hour from sliders (whole hours 0-23);
* live timers, described by a start timestamp and, while paused, the moment
  the pause began.

Nothing in here raises for "end before start". Manual entries get a zero
``Duration`` back and the caller decides whether to block the submission.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone, tzinfo
from zoneinfo import ZoneInfo

SECONDS_PER_HOUR = 3600


@dataclass(frozen=True)
class Duration:
    hours: int
    minutes: int
    total_hours: float

    @classmethod
    def zero(cls) -> "Duration":
        return cls(0, 0, 0.0)

    def __bool__(self) -> bool:
        return self.total_hours > 0

    @property
    def rounded_hours(self) -> int:
        return int(self.total_hours + 0.5)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_iso(ts: str | None, tz: str = "UTC") -> datetime | None:
    """Parse an ISO-8601 timestamp string.

    A trailing ``Z`` is accepted. Naive values are placed in ``tz``. Returns
    ``None`` for empty input; malformed strings raise ``ValueError``.
    """
    if not ts:
        return None
    dt = datetime.fromisoformat(ts.strip().replace("Z", "+00:00"))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=ZoneInfo(tz))
    return dt


def to_utc_iso(dt: datetime, tz: str = "UTC") -> str:
    """Render ``dt`` the way JavaScript's ``toISOString`` does (ms, ``Z``)."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=ZoneInfo(tz))
    return dt.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _as_utc(dt: datetime) -> datetime:
    # Aware datetimes sharing a tzinfo subtract as wall-clock time in Python;
    # going through UTC gives the real elapsed span across DST changes.
    return dt.astimezone(timezone.utc) if dt.tzinfo is not None else dt


def combine(day: date, hour: int, tz: tzinfo | None = None) -> datetime:
    """Place ``day`` at ``hour``:00:00."""
    if isinstance(hour, bool) or not isinstance(hour, int) or not 0 <= hour <= 23:
        raise ValueError(f"hour must be an integer between 0 and 23, got {hour!r}")
    if isinstance(day, datetime):
        day = day.date()
    return datetime(day.year, day.month, day.day, hour, tzinfo=tz)


def resolve_window(
    start_date: date,
    start_hour: int,
    end_date: date,
    end_hour: int,
    tz: tzinfo | None = None,
) -> tuple[datetime, datetime]:
    """Return the (start, end) datetimes a manual entry describes.

    Picking the same calendar day for both ends with an end hour earlier than
    the start hour means "I stopped the next morning", so the end moves to the
    following day.
    """
    if isinstance(start_date, datetime):
        start_date = start_date.date()
    if isinstance(end_date, datetime):
        end_date = end_date.date()
    if start_date == end_date and end_hour < start_hour:
        end_date = end_date + timedelta(days=1)
    return combine(start_date, start_hour, tz), combine(end_date, end_hour, tz)


def ends_after(start: datetime, end: datetime) -> bool:
    return _as_utc(end) > _as_utc(start)


def duration_between(start: datetime, end: datetime) -> Duration:
    seconds = (_as_utc(end) - _as_utc(start)).total_seconds()
    if seconds <= 0:
        return Duration.zero()
    total_minutes = int(seconds // 60)
    hours = int(seconds // SECONDS_PER_HOUR)
    minutes = total_minutes % 60
    return Duration(hours=hours, minutes=minutes, total_hours=hours + minutes / 60)


def calculate_duration(
    start_date: date,
    start_hour: int,
    end_date: date,
    end_hour: int,
    tz: tzinfo | None = None,
) -> Duration:
    start, end = resolve_window(start_date, start_hour, end_date, end_hour, tz)
    return duration_between(start, end)


def elapsed_seconds(
    start_time: datetime,
    *,
    now: datetime | None = None,
    is_paused: bool = False,
    paused_at: datetime | None = None,
) -> int:
    """Whole seconds a timer has been running.

    A paused timer is frozen at ``paused_at``. A paused timer without a pause
    stamp falls back to ``now``, matching how it is displayed until the next
    reload.
    """
    if is_paused and paused_at is not None:
        reference = paused_at
    else:
        reference = now if now is not None else utcnow()
    seconds = int((_as_utc(reference) - _as_utc(start_time)).total_seconds())
    return max(seconds, 0)


def format_hour(hour: int) -> str:
    return f"{hour:02d}:00"


def format_timer(seconds: int) -> str:
    seconds = max(int(seconds), 0)
    hours, remainder = divmod(seconds, SECONDS_PER_HOUR)
    minutes, secs = divmod(remainder, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


def describe(duration: Duration) -> str:
    return f"{duration.hours}h {duration.minutes}m"
