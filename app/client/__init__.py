"""Client side of FastTrack: the live timer, manual entry form and CLI."""

from .api import RemoteTimer, TimerApiClient, TimerApiError
from .entry import ManualFastEntry
from .timer import LiveFastTimer

__all__ = [
    "LiveFastTimer",
    "ManualFastEntry",
    "RemoteTimer",
    "TimerApiClient",
    "TimerApiError",
]
