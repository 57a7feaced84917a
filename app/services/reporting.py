from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Iterable

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..core.config import settings
from ..models.fast import Fast
from .fastcalc import parse_iso

HOUR_PLACES = Decimal("0.01")
SECONDS_PER_HOUR = Decimal(3600)


def _quantize_hours(seconds: Decimal) -> Decimal:
    if not seconds:
        return Decimal("0.00")
    return (seconds / SECONDS_PER_HOUR).quantize(HOUR_PLACES, rounding=ROUND_HALF_UP)


def _fast_seconds(fast: Fast) -> Decimal:
    start = parse_iso(fast.start_time, settings.TZ)
    end = parse_iso(fast.end_time, settings.TZ)
    if start is None or end is None:
        return Decimal("0")
    seconds = Decimal(str((end - start).total_seconds()))
    return seconds if seconds > 0 else Decimal("0")


def summarize_fasts(fasts: Iterable[Fast]) -> Dict[str, Any]:
    """Aggregate a user's history into the numbers shown on the stats card."""

    count = 0
    total = Decimal("0")
    longest = Decimal("0")
    last_end = None
    for fast in fasts:
        seconds = _fast_seconds(fast)
        count += 1
        total += seconds
        longest = max(longest, seconds)
        # ISO UTC strings with a fixed format sort chronologically
        if last_end is None or fast.end_time > last_end:
            last_end = fast.end_time

    average = total / count if count else Decimal("0")
    return {
        "count": count,
        "total_hours": float(_quantize_hours(total)),
        "average_hours": float(_quantize_hours(average)),
        "longest_hours": float(_quantize_hours(longest)),
        "last_end_time": last_end,
    }


def calculate_fast_stats(db: Session, owner_id: str) -> Dict[str, Any]:
    fasts = db.execute(select(Fast).where(Fast.owner_id == owner_id)).scalars().all()
    return summarize_fasts(fasts)
