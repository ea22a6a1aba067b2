"""
Credential store: key-based access to users and refresh-token records.

Every function commits its own unit of work; the auth protocol never needs
cross-call transactions.
"""
from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from task_tracker.models.refresh_token import RefreshToken
from task_tracker.models.user import User


class DuplicateRecordError(Exception):
    """Raised when an insert violates a unique constraint (email or token value)."""


# -----------------------------
# Users
# -----------------------------
def find_user_by_email(db: Session, email: str) -> User | None:
    return db.query(User).filter(User.email == email).first()


def find_user_by_id(db: Session, user_id: str) -> User | None:
    return db.query(User).filter(User.id == user_id).first()


def create_user(db: Session, *, email: str, password_hash: str, name: str) -> User:
    user = User(email=email, password_hash=password_hash, name=name)
    db.add(user)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise DuplicateRecordError("email") from e
    db.refresh(user)
    return user


# -----------------------------
# Refresh-token records
# -----------------------------
def create_refresh_token_record(db: Session, *, token: str, user_id: str, expires_at: datetime) -> RefreshToken:
    rt = RefreshToken(token=token, user_id=user_id, expires_at=expires_at)
    db.add(rt)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise DuplicateRecordError("token") from e
    db.refresh(rt)
    return rt


def find_refresh_token_record(db: Session, token: str) -> RefreshToken | None:
    return db.query(RefreshToken).filter(RefreshToken.token == token).first()


def delete_refresh_token_records(db: Session, token: str) -> int:
    deleted = db.query(RefreshToken).filter(RefreshToken.token == token).delete(synchronize_session=False)
    db.commit()
    return int(deleted or 0)


def record_is_live(rt: RefreshToken, now: datetime | None = None) -> bool:
    now = now or datetime.now(timezone.utc)
    expires_at = rt.expires_at
    if expires_at is None:
        return False
    # SQLite may round-trip tz-aware datetimes as naive. Compare consistently.
    if getattr(expires_at, "tzinfo", None) is None and now.tzinfo is not None:
        now = now.astimezone(timezone.utc).replace(tzinfo=None)
    return expires_at > now
