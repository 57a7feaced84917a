"""Pydantic schemas for the live timer endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import Field

from .common import CamelModel


class TimerStart(CamelModel):
    # Clients send their own clock reading; the server stamps "now" otherwise.
    start_time: Optional[datetime] = None
    notes: str = Field(default="", max_length=5000)

    model_config = {
        "json_schema_extra": {
            "example": {"startTime": "2024-05-01T20:00:00.000Z", "notes": "Water only"}
        },
    }


class TimerUpdate(CamelModel):
    is_paused: Optional[bool] = None
    paused_at: Optional[datetime] = None
    notes: Optional[str] = Field(default=None, max_length=5000)

    model_config = {
        "json_schema_extra": {
            "example": {"isPaused": True, "pausedAt": "2024-05-02T08:00:00.000Z", "notes": "Break"}
        },
    }


class TimerOut(CamelModel):
    user_id: str
    start_time: str
    is_paused: bool
    paused_at: Optional[str] = None
    notes: str = ""
    elapsed_seconds: int = 0
    updated_at: str
