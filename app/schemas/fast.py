"""Pydantic schemas for fast history payloads."""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from pydantic import Field, model_validator

from .common import CamelModel


class FastCreate(CamelModel):
    """A finished fast, given either as timestamps or as the manual form.

    The manual form (dates plus whole hours) goes through the overnight
    rollover rule before it is stored.
    """

    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    start_date: Optional[date] = None
    start_hour: Optional[int] = Field(default=None, ge=0, le=23)
    end_date: Optional[date] = None
    end_hour: Optional[int] = Field(default=None, ge=0, le=23)
    notes: Optional[str] = Field(default=None, max_length=5000)

    @model_validator(mode="after")
    def _one_shape(self) -> "FastCreate":
        timestamps = (self.start_time, self.end_time)
        manual = (self.start_date, self.start_hour, self.end_date, self.end_hour)
        if all(v is not None for v in timestamps):
            if any(v is not None for v in manual):
                raise ValueError("send either startTime/endTime or the date/hour fields, not both")
            return self
        if all(v is not None for v in manual) and not any(v is not None for v in timestamps):
            return self
        raise ValueError("startTime and endTime (or startDate, startHour, endDate and endHour) are required")


class FastUpdate(CamelModel):
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    notes: Optional[str] = Field(default=None, max_length=5000)


class FastOut(CamelModel):
    id: int
    user_id: str
    start_time: str
    end_time: str
    notes: Optional[str] = None
    duration_hours: float = 0.0
    created_at: str


class FastStats(CamelModel):
    count: int = 0
    total_hours: float = 0.0
    average_hours: float = 0.0
    longest_hours: float = 0.0
    last_end_time: Optional[str] = None
