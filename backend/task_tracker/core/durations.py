from __future__ import annotations

import re
from datetime import timedelta

_DURATION_RE = re.compile(r"^\s*(\d+)\s*([smhdw]?)\s*$", re.IGNORECASE)

_UNIT_SECONDS = {
    "": 1,
    "s": 1,
    "m": 60,
    "h": 60 * 60,
    "d": 24 * 60 * 60,
    "w": 7 * 24 * 60 * 60,
}


def parse_duration(value: str | int) -> timedelta:
    """
    Parse a unit-suffixed duration such as "15m", "12h", "7d" or "2w".

    A bare integer (or digit string) is read as seconds. Zero and negative
    values are rejected.
    """
    if isinstance(value, bool):
        raise ValueError(f"Unsupported duration: {value!r}")
    if isinstance(value, int):
        seconds = value
    else:
        match = _DURATION_RE.match(str(value or ""))
        if not match:
            raise ValueError(f"Unsupported duration: {value!r}")
        amount, unit = match.groups()
        seconds = int(amount) * _UNIT_SECONDS[unit.lower()]

    if seconds <= 0:
        raise ValueError(f"Duration must be positive: {value!r}")
    return timedelta(seconds=seconds)
