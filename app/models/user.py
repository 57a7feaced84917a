"""SQLAlchemy model for the people who own timers and fast history."""

from __future__ import annotations

from sqlalchemy import Column, Text

from ..db.session import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Text, primary_key=True)
    username = Column(Text, nullable=False, unique=True, index=True)
    password_hash = Column(Text, nullable=False)
    created_at = Column(Text, nullable=False)


__all__ = ["User"]
