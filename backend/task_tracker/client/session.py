"""
Client-side session context.

``SessionContext`` is the single owner of the cached access token and user for
one client. Persistence goes through a ``SessionStore`` adapter so tests can use
memory and a CLI can keep credentials across runs in a JSON file.
"""
from __future__ import annotations

import json
import logging
import os
import threading
from pathlib import Path
from typing import Any, Protocol

logger = logging.getLogger(__name__)


class SessionStore(Protocol):
    def load(self) -> dict[str, Any]:
        ...

    def save(self, state: dict[str, Any]) -> None:
        ...

    def clear(self) -> None:
        ...


class MemorySessionStore:
    def __init__(self) -> None:
        self._state: dict[str, Any] = {}

    def load(self) -> dict[str, Any]:
        return dict(self._state)

    def save(self, state: dict[str, Any]) -> None:
        self._state = dict(state)

    def clear(self) -> None:
        self._state = {}


class JsonFileSessionStore:
    """Persists ``{"user": ..., "accessToken": ...}`` to a file readable only by its owner."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def load(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            logger.warning("Ignoring unreadable session file %s", self.path)
            return {}
        return data if isinstance(data, dict) else {}

    def save(self, state: dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps(state), encoding="utf-8")
        os.chmod(tmp, 0o600)
        tmp.replace(self.path)

    def clear(self) -> None:
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass


class SessionContext:
    def __init__(self, store: SessionStore | None = None) -> None:
        self._store = store or MemorySessionStore()
        self._lock = threading.RLock()
        state = self._store.load()
        self._user: dict[str, Any] | None = state.get("user")
        self._access_token: str | None = state.get("accessToken")

    @property
    def access_token(self) -> str | None:
        with self._lock:
            return self._access_token

    @property
    def user(self) -> dict[str, Any] | None:
        with self._lock:
            return dict(self._user) if self._user else None

    @property
    def is_authenticated(self) -> bool:
        with self._lock:
            return bool(self._access_token)

    def set_auth(self, user: dict[str, Any], access_token: str) -> None:
        with self._lock:
            self._user = dict(user)
            self._access_token = access_token
            self._persist()

    def set_access_token(self, access_token: str) -> None:
        with self._lock:
            self._access_token = access_token
            self._persist()

    def clear(self) -> None:
        with self._lock:
            self._user = None
            self._access_token = None
            self._store.clear()

    def _persist(self) -> None:
        self._store.save({"user": self._user, "accessToken": self._access_token})
