"""Live fasting timer kept in step with the backend.

The backend's timer record is the source of truth. ``LiveFastTimer`` mirrors
it locally so a display can refresh every second without polling:

* ``load`` adopts whatever the backend has (running or paused), so a page
  reload or a second device picks the timer up where it is;
* every mutation goes to the backend first and only touches local state once
  the backend acknowledged it; on failure the user is alerted and nothing
  local changes;
* the one-second tick runs only while the timer is active and not paused and
  is cancelled inside the same call that changes that state.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from datetime import datetime
from typing import Any, Awaitable, Callable, Optional, Union

from ..services.fastcalc import elapsed_seconds, format_timer, utcnow
from .api import RemoteTimer, TimerApiClient

logger = logging.getLogger(__name__)

AddFast = Callable[[datetime, datetime, str], Union[Awaitable[Any], Any]]
Alert = Callable[[str], None]

TICK_SECONDS = 1.0


def log_alert(message: str) -> None:
    logger.error("alert: %s", message)


class LiveFastTimer:
    def __init__(
        self,
        api: TimerApiClient,
        user_id: str,
        on_add_fast: AddFast,
        *,
        alert: Alert = log_alert,
        clock: Callable[[], datetime] = utcnow,
        on_tick: Optional[Callable[["LiveFastTimer"], None]] = None,
        tick_seconds: float = TICK_SECONDS,
    ) -> None:
        self.api = api
        self.user_id = user_id
        self.on_add_fast = on_add_fast
        self.alert = alert
        self.clock = clock
        self.on_tick = on_tick
        self.tick_seconds = tick_seconds

        self.is_active = False
        self.start_time: Optional[datetime] = None
        self.elapsed_seconds = 0
        self.is_paused = False
        self.notes = ""
        self.is_loading = False
        self._tick_task: Optional[asyncio.Task] = None

    @property
    def display(self) -> str:
        return format_timer(self.elapsed_seconds if self.is_active else 0)

    # ---- ticking
    def _cancel_tick(self) -> None:
        if self._tick_task is not None:
            self._tick_task.cancel()
            self._tick_task = None

    def _sync_tick(self) -> None:
        self._cancel_tick()
        if self.is_active and self.start_time is not None and not self.is_paused:
            self._tick_task = asyncio.get_running_loop().create_task(self._run_tick())

    async def _run_tick(self) -> None:
        while True:
            await asyncio.sleep(self.tick_seconds)
            if not self.is_active or self.is_paused or self.start_time is None:
                return
            self.elapsed_seconds = elapsed_seconds(self.start_time, now=self.clock())
            if self.on_tick is not None:
                self.on_tick(self)

    async def close(self) -> None:
        """Stop ticking; call when the view goes away."""
        task = self._tick_task
        self._cancel_tick()
        if task is not None:
            try:
                await task
            except asyncio.CancelledError:
                pass

    # ---- state
    def _adopt(self, remote: RemoteTimer) -> None:
        self.start_time = remote.start_time
        self.is_active = True
        self.is_paused = remote.is_paused
        self.notes = remote.notes
        self.elapsed_seconds = elapsed_seconds(
            remote.start_time,
            now=self.clock(),
            is_paused=remote.is_paused,
            paused_at=remote.paused_at,
        )
        self._sync_tick()

    def _reset(self) -> None:
        self.is_active = False
        self.start_time = None
        self.elapsed_seconds = 0
        self.is_paused = False
        self.notes = ""
        self._sync_tick()

    async def load(self) -> None:
        """Pick up the persisted timer, if any. Failures are only logged."""
        self.is_loading = True
        try:
            remote = await self.api.get_timer(self.user_id)
            if remote is not None:
                self._adopt(remote)
                logger.info("timer state loaded from backend", extra={"extra_data": {"user_id": self.user_id}})
        except Exception:
            logger.exception("Failed to load timer from backend")
        finally:
            self.is_loading = False

    async def start(self) -> bool:
        self.is_loading = True
        try:
            now = self.clock()
            await self.api.start_timer(self.user_id, now, self.notes)
            self.start_time = now
            self.is_active = True
            self.is_paused = False
            self.elapsed_seconds = 0
            self._sync_tick()
            logger.info("timer started", extra={"extra_data": {"user_id": self.user_id}})
            return True
        except Exception:
            logger.exception("Failed to start timer")
            self.alert("Failed to start timer. Please try again.")
            return False
        finally:
            self.is_loading = False

    async def pause(self) -> bool:
        if not self.is_active or self.is_paused:
            return False
        self.is_loading = True
        try:
            remote = await self.api.update_timer(
                self.user_id, is_paused=True, paused_at=self.clock(), notes=self.notes
            )
            self._adopt(remote)
            logger.info("timer paused", extra={"extra_data": {"user_id": self.user_id}})
            return True
        except Exception:
            logger.exception("Failed to pause timer")
            self.alert("Failed to pause timer. Please try again.")
            return False
        finally:
            self.is_loading = False

    async def resume(self) -> bool:
        if not self.is_active or not self.is_paused:
            return False
        self.is_loading = True
        try:
            # The backend slides startTime past the pause; adopting its answer
            # keeps the elapsed time continuous.
            remote = await self.api.update_timer(
                self.user_id, is_paused=False, paused_at=None, notes=self.notes
            )
            self._adopt(remote)
            logger.info("timer resumed", extra={"extra_data": {"user_id": self.user_id}})
            return True
        except Exception:
            logger.exception("Failed to resume timer")
            self.alert("Failed to resume timer. Please try again.")
            return False
        finally:
            self.is_loading = False

    async def stop(self) -> bool:
        """Record the fast through ``on_add_fast`` and clear the backend timer."""
        if not self.is_active or self.start_time is None:
            return False
        self.is_loading = True
        try:
            end_time = self.clock()
            result = self.on_add_fast(self.start_time, end_time, self.notes)
            if inspect.isawaitable(result):
                await result
            await self.api.delete_timer(self.user_id)
            self._reset()
            logger.info("timer stopped and fast saved", extra={"extra_data": {"user_id": self.user_id}})
            return True
        except Exception:
            logger.exception("Failed to stop timer")
            self.alert("Failed to stop timer. Please try again.")
            return False
        finally:
            self.is_loading = False

    async def update_notes(self, notes: str) -> None:
        self.notes = notes
        if not self.is_active:
            return
        try:
            await self.api.update_timer(self.user_id, notes=notes)
        except Exception:
            logger.exception("Failed to update timer notes")
