"""SQLAlchemy model for the single in-progress fast a user may be running."""

from __future__ import annotations

from sqlalchemy import Column, Integer, Text

from ..db.session import Base


class Timer(Base):
    """Live timer record.

    ``owner_id`` is unique: a user has at most one running (or paused) timer.
    Timestamps are stored as UTC ISO-8601 strings. When the timer is resumed
    ``start_time`` is moved forward by the paused span, so ``now - start_time``
    is always the accumulated fasting time of a running timer.
    """

    __tablename__ = "timers"

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(Text, nullable=False, unique=True, index=True)
    start_time = Column(Text, nullable=False)
    is_paused = Column(Integer, nullable=False, default=0)
    paused_at = Column(Text, nullable=True)
    notes = Column(Text, nullable=False, default="")
    created_at = Column(Text, nullable=False)
    updated_at = Column(Text, nullable=False)


__all__ = ["Timer"]
