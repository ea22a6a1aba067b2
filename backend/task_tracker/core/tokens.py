# task_tracker/core/tokens.py
"""
Access / refresh token codec.

Two independently configured codecs sign the same claim set with different
secrets and lifetimes:
- access:  short-lived, sent as ``Authorization: Bearer <token>``
- refresh: long-lived, delivered only as an HttpOnly cookie and paired with a
  server-side record (see ``task_tracker.services.credentials``)

Verification failures are typed so callers can tell an expired token (worth a
refresh) from an invalid one without inspecting messages.
"""
from __future__ import annotations

import threading
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any

from jose import ExpiredSignatureError, JWTError, jwt

from task_tracker.core.config import settings


class TokenKind(str, Enum):
    ACCESS = "access"
    REFRESH = "refresh"


class TokenFailure(str, Enum):
    EXPIRED = "expired"
    INVALID = "invalid"


@dataclass(frozen=True)
class TokenPayload:
    user_id: str
    email: str

    def to_claims(self) -> dict[str, Any]:
        return {"sub": self.user_id, "email": self.email}


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class TokenError(Exception):
    """Base exception for token verification failures."""

    reason: TokenFailure = TokenFailure.INVALID


class TokenExpiredError(TokenError):
    """Signature is valid but the token lifetime has elapsed."""

    reason = TokenFailure.EXPIRED


class TokenInvalidError(TokenError):
    """Bad signature, malformed token, wrong-kind secret or missing claims."""

    reason = TokenFailure.INVALID


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


class TokenCodec:
    def __init__(self, kind: TokenKind, secret: str, lifetime: timedelta, algorithm: str = "HS256") -> None:
        if not secret:
            raise RuntimeError(f"{kind.value} token secret must be set")
        self.kind = kind
        self.lifetime = lifetime
        self.algorithm = algorithm
        self._secret = secret

    def issue(self, payload: TokenPayload, *, now: datetime | None = None) -> str:
        issued_at = now or _now_utc()
        exp = issued_at + self.lifetime
        claims = {
            **payload.to_claims(),
            "purpose": self.kind.value,
            # Unique per issuance so two logins in the same second never collide on the stored token.
            "jti": uuid.uuid4().hex,
            "iat": int(issued_at.timestamp()),
            "exp": int(exp.timestamp()),
        }
        return jwt.encode(claims, self._secret, algorithm=self.algorithm)

    def verify(self, token: str) -> TokenPayload:
        try:
            claims = jwt.decode(token, self._secret, algorithms=[self.algorithm])
        except ExpiredSignatureError as e:
            raise TokenExpiredError(f"{self.kind.value} token expired") from e
        except JWTError as e:
            raise TokenInvalidError(f"Invalid {self.kind.value} token") from e

        if claims.get("purpose") != self.kind.value:
            raise TokenInvalidError(f"Invalid {self.kind.value} token purpose")

        user_id = claims.get("sub")
        email = claims.get("email")
        if not user_id or not email:
            raise TokenInvalidError(f"Invalid {self.kind.value} token payload")
        return TokenPayload(user_id=str(user_id), email=str(email))

    def expiry_from(self, now: datetime | None = None) -> datetime:
        return (now or _now_utc()) + self.lifetime


# -------------------------
# Configured codecs
# -------------------------
_codecs: dict[TokenKind, TokenCodec] | None = None
_lock = threading.Lock()


def _build_codecs() -> dict[TokenKind, TokenCodec]:
    return {
        TokenKind.ACCESS: TokenCodec(
            TokenKind.ACCESS,
            settings.JWT_ACCESS_SECRET,
            settings.access_token_lifetime,
            settings.JWT_ALGORITHM,
        ),
        TokenKind.REFRESH: TokenCodec(
            TokenKind.REFRESH,
            settings.JWT_REFRESH_SECRET,
            settings.refresh_token_lifetime,
            settings.JWT_ALGORITHM,
        ),
    }


def get_codec(kind: TokenKind) -> TokenCodec:
    global _codecs
    if _codecs is None:
        with _lock:
            if _codecs is None:
                _codecs = _build_codecs()
    return _codecs[TokenKind(kind)]


def reset_token_codecs() -> None:
    """Rebuild codecs from the current settings on next use (tests, config reload)."""
    global _codecs
    with _lock:
        _codecs = None


def issue_access_token(payload: TokenPayload, *, now: datetime | None = None) -> str:
    return get_codec(TokenKind.ACCESS).issue(payload, now=now)


def issue_refresh_token(payload: TokenPayload, *, now: datetime | None = None) -> str:
    return get_codec(TokenKind.REFRESH).issue(payload, now=now)


def verify_token(token: str, kind: TokenKind | str) -> TokenPayload:
    return get_codec(TokenKind(kind)).verify(token)


def compute_refresh_expiry(now: datetime | None = None) -> datetime:
    """
    Wall-clock expiry for a new refresh-token record.

    Uses the same parsed lifetime as refresh-token signing, so the stored expiry
    and the token's own ``exp`` stay aligned.
    """
    return get_codec(TokenKind.REFRESH).expiry_from(now)
