# task_tracker/services/auth.py
"""
Authentication protocol: register, login, refresh, logout, current user.

Session lifecycle:
  anonymous -> registered -> active session (live refresh-token record)
  -> anonymous again on logout, refresh-token expiry or record deletion.

Refresh tokens are not rotated: a refresh returns a new access token and leaves
the stored record untouched, so one refresh token renews repeatedly until it
expires or is deleted.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from task_tracker.core.errors import AuthFailure, ConflictError, NotFoundError, UnauthorizedError
from task_tracker.core.security import burn_password_check, hash_password, verify_password
from task_tracker.core.tokens import (
    TokenError,
    TokenExpiredError,
    TokenKind,
    TokenPayload,
    compute_refresh_expiry,
    issue_access_token,
    issue_refresh_token,
    verify_token,
)
from task_tracker.models.user import User
from task_tracker.services import credentials

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS_MESSAGE = "Invalid credentials"
DUPLICATE_EMAIL_MESSAGE = "User with this email already exists"


@dataclass(frozen=True)
class LoginResult:
    access_token: str
    refresh_token: str
    refresh_expires_at: datetime
    user: User


def register(db: Session, *, email: str, password: str, name: str) -> User:
    if credentials.find_user_by_email(db, email):
        raise ConflictError(DUPLICATE_EMAIL_MESSAGE)

    try:
        user = credentials.create_user(
            db,
            email=email,
            password_hash=hash_password(password),
            name=name,
        )
    except credentials.DuplicateRecordError:
        # Lost a race with a concurrent registration for the same email.
        raise ConflictError(DUPLICATE_EMAIL_MESSAGE)

    logger.info("Registered user id=%s", user.id)
    return user


def login(db: Session, *, email: str, password: str) -> LoginResult:
    user = credentials.find_user_by_email(db, email)
    if not user:
        burn_password_check(password)
        logger.info("Login rejected: unknown email")
        raise UnauthorizedError(INVALID_CREDENTIALS_MESSAGE, reason=AuthFailure.INVALID_CREDENTIALS)

    if not verify_password(password, user.password_hash):
        logger.info("Login rejected: bad password for user id=%s", user.id)
        raise UnauthorizedError(INVALID_CREDENTIALS_MESSAGE, reason=AuthFailure.INVALID_CREDENTIALS)

    payload = TokenPayload(user_id=user.id, email=user.email)
    access_token = issue_access_token(payload)
    refresh_token = issue_refresh_token(payload)
    expires_at = compute_refresh_expiry()

    credentials.create_refresh_token_record(
        db,
        token=refresh_token,
        user_id=user.id,
        expires_at=expires_at,
    )

    logger.info("Login succeeded for user id=%s", user.id)
    return LoginResult(
        access_token=access_token,
        refresh_token=refresh_token,
        refresh_expires_at=expires_at,
        user=user,
    )


def refresh(db: Session, refresh_token: str | None) -> str:
    """
    Exchange a refresh token for a new access token.

    The token must pass signature/expiry verification AND match a live store
    record; cryptographic validity alone is not enough.
    """
    if not refresh_token:
        raise UnauthorizedError("Refresh token not found", reason=AuthFailure.NO_TOKEN)

    try:
        payload = verify_token(refresh_token, TokenKind.REFRESH)
    except TokenExpiredError:
        logger.info("Refresh rejected: refresh token expired")
        raise UnauthorizedError("Refresh token expired", reason=AuthFailure.TOKEN_EXPIRED)
    except TokenError:
        logger.info("Refresh rejected: invalid refresh token")
        raise UnauthorizedError("Invalid refresh token", reason=AuthFailure.INVALID_TOKEN)

    record = credentials.find_refresh_token_record(db, refresh_token)
    if not record or not credentials.record_is_live(record):
        logger.info("Refresh rejected: no live record for user id=%s", payload.user_id)
        raise UnauthorizedError("Invalid or expired refresh token", reason=AuthFailure.INVALID_TOKEN)

    return issue_access_token(TokenPayload(user_id=payload.user_id, email=payload.email))


def logout(db: Session, refresh_token: str | None) -> None:
    """Idempotent: a missing cookie or an already-deleted record is still a successful logout."""
    if not refresh_token:
        return
    try:
        deleted = credentials.delete_refresh_token_records(db, refresh_token)
    except SQLAlchemyError:
        # The cookie is still cleared; the orphaned record expires on its own.
        db.rollback()
        logger.exception("Logout could not delete the refresh token record")
        return
    logger.info("Logout removed %d refresh token record(s)", deleted)


def get_current_user(db: Session, user_id: str) -> User:
    user = credentials.find_user_by_id(db, user_id)
    if not user:
        raise NotFoundError("User not found")
    return user
