"""Form model behind "Add Past Fast": two dates, two hour sliders, notes."""

from __future__ import annotations

import inspect
import logging
from datetime import date, datetime, tzinfo
from typing import Callable, Optional
from zoneinfo import ZoneInfo

from ..core.config import settings
from ..services.fastcalc import Duration, calculate_duration, describe, format_hour, resolve_window
from .timer import AddFast, Alert, log_alert

logger = logging.getLogger(__name__)


class ManualFastEntry:
    def __init__(
        self,
        on_add_fast: AddFast,
        *,
        alert: Alert = log_alert,
        tz: Optional[tzinfo] = None,
        today: Optional[Callable[[], date]] = None,
    ) -> None:
        self.on_add_fast = on_add_fast
        self.alert = alert
        self.tz = tz or ZoneInfo(settings.TZ)
        self._today = today or (lambda: datetime.now(self.tz).date())
        self.reset()

    def reset(self) -> None:
        today = self._today()
        self.start_date = today
        self.end_date = today
        self.start_hour = settings.DEFAULT_START_HOUR
        self.end_hour = settings.DEFAULT_END_HOUR
        self.notes = ""

    @property
    def window(self) -> tuple[datetime, datetime]:
        return resolve_window(self.start_date, self.start_hour, self.end_date, self.end_hour, self.tz)

    @property
    def duration(self) -> Duration:
        return calculate_duration(self.start_date, self.start_hour, self.end_date, self.end_hour, self.tz)

    @property
    def can_submit(self) -> bool:
        return bool(self.duration)

    def summary(self) -> str:
        duration = self.duration
        if not duration:
            return "Please ensure end time is after start time"
        return (
            f"{format_hour(self.start_hour)} -> {format_hour(self.end_hour)}: "
            f"{duration.rounded_hours} hours ({describe(duration)} exactly)"
        )

    async def submit(self) -> bool:
        """Hand the fast to ``on_add_fast``; blocked when end is not after start."""
        if not self.can_submit:
            self.alert("End time must be after start time")
            return False
        start, end = self.window
        result = self.on_add_fast(start, end, self.notes)
        if inspect.isawaitable(result):
            await result
        logger.info("manual fast submitted", extra={"extra_data": {"hours": self.duration.total_hours}})
        self.reset()
        return True
