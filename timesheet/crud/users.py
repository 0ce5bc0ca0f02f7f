"""Account storage for the auth primitive."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..core.security import hash_password, verify_password
from ..models.user import User
from ._common import utcnow_iso


def get_user(db: Session, user_id: int) -> User | None:
    return db.get(User, user_id)


def get_user_by_email(db: Session, email: str) -> User | None:
    stmt = select(User).where(User.email == (email or "").strip().lower())
    return db.execute(stmt).scalars().first()


def create_user(db: Session, email: str, password: str) -> User:
    normalized = (email or "").strip().lower()
    if not normalized or "@" not in normalized:
        raise ValueError("A valid email address is required")
    if not password:
        raise ValueError("Password is required")
    if get_user_by_email(db, normalized):
        raise ValueError("User already registered")
    user = User(email=normalized, password_hash=hash_password(password), created_at=utcnow_iso())
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def authenticate(db: Session, email: str, password: str) -> User | None:
    user = get_user_by_email(db, email)
    if user is None or not verify_password(password, user.password_hash):
        return None
    return user
