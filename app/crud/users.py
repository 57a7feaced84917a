"""CRUD helpers for user accounts."""

from __future__ import annotations

from uuid import uuid4

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from ..core.security import hash_password, verify_password
from ..models.user import User
from ..services.fastcalc import to_utc_iso, utcnow


def _utcnow() -> str:
    return to_utc_iso(utcnow())


def get_user(db: Session, user_id: str) -> User | None:
    return db.get(User, user_id)


def get_user_by_username(db: Session, username: str) -> User | None:
    stmt = select(User).where(func.lower(User.username) == username.strip().lower())
    return db.execute(stmt).scalars().first()


def create_user(db: Session, username: str, password: str) -> User:
    username = (username or "").strip()
    if not username:
        raise ValueError("username is required")
    if get_user_by_username(db, username) is not None:
        raise ValueError("username is already taken")
    user = User(
        id=uuid4().hex,
        username=username,
        password_hash=hash_password(password),
        created_at=_utcnow(),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def authenticate(db: Session, username: str, password: str) -> User | None:
    user = get_user_by_username(db, username)
    if user is None or not verify_password(password, user.password_hash):
        return None
    return user
