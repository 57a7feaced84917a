"""SQLAlchemy model for completed fasts (the history log)."""

from __future__ import annotations

from sqlalchemy import Column, Integer, Text

from ..db.session import Base


class Fast(Base):
    __tablename__ = "fasts"

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(Text, nullable=False, index=True)
    start_time = Column(Text, nullable=False)
    end_time = Column(Text, nullable=False)
    notes = Column(Text, nullable=True)
    created_at = Column(Text, nullable=False)


__all__ = ["Fast"]
