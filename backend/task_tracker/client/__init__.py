# task_tracker/client/__init__.py
"""
Python client for the Task Tracker API.

This package contains:
- session.py: SessionContext and its persistence adapters
- renewal.py: httpx auth flow that refreshes an expired access token once and retries
- api.py: TaskTrackerClient, the typed endpoint wrapper
- optimistic.py: two-phase optimistic cache updates
"""
from task_tracker.client.api import ApiClientError, TaskTrackerClient
from task_tracker.client.optimistic import OptimisticCache
from task_tracker.client.renewal import SessionExpiredError, TokenRenewalAuth
from task_tracker.client.session import JsonFileSessionStore, MemorySessionStore, SessionContext

__all__ = [
    "ApiClientError",
    "JsonFileSessionStore",
    "MemorySessionStore",
    "OptimisticCache",
    "SessionContext",
    "SessionExpiredError",
    "TaskTrackerClient",
    "TokenRenewalAuth",
]
