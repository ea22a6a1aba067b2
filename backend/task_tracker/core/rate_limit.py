from __future__ import annotations

from slowapi import Limiter
from slowapi.util import get_remote_address

from task_tracker.core.config import settings

# In-memory storage; limits are per process. Toggled at runtime through
# ``limiter.enabled`` so tests don't need to re-import the routes.
limiter = Limiter(key_func=get_remote_address, enabled=settings.ENABLE_RATE_LIMITING)


def auth_rate_limit() -> str:
    return settings.AUTH_RATE_LIMIT
