# task_tracker/core/security.py
from __future__ import annotations

from passlib.context import CryptContext

pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")


# -------------------------
# Password hashing
# -------------------------
def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    if not password_hash:
        return False
    return pwd_context.verify(password, password_hash)


# Verified against when the email is unknown, so both login failure paths pay the
# same hashing cost.
_DUMMY_HASH = pwd_context.hash("task-tracker-dummy-password")


def burn_password_check(password: str) -> None:
    pwd_context.verify(password, _DUMMY_HASH)
