# task_tracker/dependencies/auth.py
from __future__ import annotations

from fastapi import Header, Request

from task_tracker.core.errors import AuthFailure, UnauthorizedError
from task_tracker.core.tokens import TokenExpiredError, TokenError, TokenKind, TokenPayload, verify_token

BEARER_PREFIX = "bearer "


def authenticate_authorization(authorization: str | None) -> TokenPayload:
    """
    Verify a raw ``Authorization`` header value and return the access-token payload.

    Raises UnauthorizedError with reason:
      - no_token:      header missing, not the Bearer scheme, or empty token
      - token_expired: signature valid but lifetime elapsed (client should refresh)
      - invalid_token: anything else
    """
    if not authorization or not authorization.lower().startswith(BEARER_PREFIX):
        raise UnauthorizedError("Authentication required", reason=AuthFailure.NO_TOKEN, hint="No token provided")

    token = authorization[len(BEARER_PREFIX):].strip()
    if not token:
        raise UnauthorizedError("Authentication required", reason=AuthFailure.NO_TOKEN, hint="No token provided")

    try:
        return verify_token(token, TokenKind.ACCESS)
    except TokenExpiredError:
        raise UnauthorizedError(
            "Token expired",
            reason=AuthFailure.TOKEN_EXPIRED,
            hint="Please refresh your token",
        )
    except TokenError:
        raise UnauthorizedError(
            "Invalid authentication",
            reason=AuthFailure.INVALID_TOKEN,
            hint="Invalid or malformed token",
        )


def require_principal(
    request: Request,
    authorization: str | None = Header(None),
) -> TokenPayload:
    """
    Boundary guard for protected routes.

    Stores the verified payload on ``request.state.principal`` for downstream
    handlers. Does not touch the database.
    """
    principal = authenticate_authorization(authorization)
    request.state.principal = principal
    return principal
