from __future__ import annotations

import re
from typing import List

from task_tracker.core.config import settings

_UPPERCASE_RE = re.compile(r"[A-Z]")
_NUMBER_RE = re.compile(r"[0-9]")

VIOLATION_MESSAGES = {
    "min_length": "Password must be at least {min_length} characters",
    "uppercase": "Password must contain at least one uppercase letter",
    "number": "Password must contain at least one number",
}


def evaluate_password(password: str) -> List[str]:
    """
    Returns a list of violation codes if the password does not meet policy.
    """
    pw = password or ""
    violations: list[str] = []
    min_length = max(int(getattr(settings, "PASSWORD_MIN_LENGTH", 8) or 0), 1)

    if len(pw) < min_length:
        violations.append("min_length")
    if not _UPPERCASE_RE.search(pw):
        violations.append("uppercase")
    if not _NUMBER_RE.search(pw):
        violations.append("number")
    return violations


def describe_violations(violations: list[str]) -> list[str]:
    min_length = max(int(getattr(settings, "PASSWORD_MIN_LENGTH", 8) or 0), 1)
    return [VIOLATION_MESSAGES[v].format(min_length=min_length) for v in violations]
