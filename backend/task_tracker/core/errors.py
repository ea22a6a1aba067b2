# task_tracker/core/errors.py
"""
Typed API errors.

Every failure the core raises carries its HTTP status, a stable error code and,
for authentication failures, a machine-readable reason. The single handler in
``task_tracker.main`` turns these into the JSON error envelope:

    {"error": CODE, "message": "...", "reason": "...", "details": {...}}
"""
from __future__ import annotations

from enum import Enum
from typing import Any


class AuthFailure(str, Enum):
    NO_TOKEN = "no_token"
    TOKEN_EXPIRED = "token_expired"
    INVALID_TOKEN = "invalid_token"
    INVALID_CREDENTIALS = "invalid_credentials"


class ApiError(Exception):
    status_code: int = 500
    code: str = "INTERNAL_ERROR"

    def __init__(
        self,
        message: str,
        *,
        reason: str | None = None,
        details: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.reason = reason
        self.details = details
        self.headers = headers

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"error": self.code, "message": self.message}
        if self.reason:
            payload["reason"] = self.reason
        if self.details:
            payload["details"] = self.details
        return payload


class ValidationFailed(ApiError):
    status_code = 400
    code = "VALIDATION_ERROR"

    @classmethod
    def from_fields(cls, errors: list[dict[str, str]], message: str = "Validation error") -> ValidationFailed:
        return cls(message, details={"errors": errors})


class ConflictError(ApiError):
    # Duplicate registrations are reported as 400, matching the public API contract.
    status_code = 400
    code = "CONFLICT"


class UnauthorizedError(ApiError):
    status_code = 401
    code = "UNAUTHORIZED"

    def __init__(
        self,
        message: str,
        *,
        reason: AuthFailure,
        hint: str | None = None,
    ) -> None:
        challenge = "Bearer"
        if reason in (AuthFailure.TOKEN_EXPIRED, AuthFailure.INVALID_TOKEN):
            challenge = 'Bearer error="invalid_token"'
        super().__init__(
            message,
            reason=reason.value,
            details={"hint": hint} if hint else None,
            headers={"WWW-Authenticate": challenge},
        )
        self.failure = reason


class NotFoundError(ApiError):
    status_code = 404
    code = "NOT_FOUND"
