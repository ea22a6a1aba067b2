"""
Two-phase optimistic updates for a client-side task cache.

apply()    -> snapshot the current task, install the speculative state
commit()   -> replace with the server's copy
rollback() -> restore the snapshot

Each pending change is keyed by its own request id, so overlapping mutations of
different tasks do not interfere.
"""
from __future__ import annotations

import copy
import threading
import uuid
from dataclasses import dataclass
from typing import Any, Callable

Task = dict[str, Any]


@dataclass(frozen=True)
class PendingChange:
    request_id: str
    task_id: str
    snapshot: Task | None


class OptimisticCache:
    def __init__(self, tasks: list[Task] | None = None) -> None:
        self._lock = threading.Lock()
        self._tasks: dict[str, Task] = {}
        self._order: list[str] = []
        self._pending: dict[str, PendingChange] = {}
        self.replace_all(tasks or [])

    def replace_all(self, tasks: list[Task]) -> None:
        with self._lock:
            self._tasks = {t["id"]: copy.deepcopy(t) for t in tasks}
            self._order = [t["id"] for t in tasks]

    def get(self, task_id: str) -> Task | None:
        with self._lock:
            task = self._tasks.get(task_id)
            return copy.deepcopy(task) if task is not None else None

    def tasks(self) -> list[Task]:
        with self._lock:
            return [copy.deepcopy(self._tasks[i]) for i in self._order if i in self._tasks]

    @property
    def pending(self) -> list[str]:
        with self._lock:
            return list(self._pending)

    def apply(self, task_id: str, change: Callable[[Task], Task], request_id: str | None = None) -> str:
        request_id = request_id or uuid.uuid4().hex
        with self._lock:
            if request_id in self._pending:
                raise ValueError(f"Request {request_id} already pending")
            current = self._tasks.get(task_id)
            if current is None:
                raise KeyError(task_id)
            self._pending[request_id] = PendingChange(request_id, task_id, copy.deepcopy(current))
            self._tasks[task_id] = change(copy.deepcopy(current))
        return request_id

    def commit(self, request_id: str, server_task: Task | None = None) -> None:
        with self._lock:
            change = self._pending.pop(request_id)
            if server_task is not None:
                self._tasks[change.task_id] = copy.deepcopy(server_task)

    def rollback(self, request_id: str) -> None:
        with self._lock:
            change = self._pending.pop(request_id)
            if change.snapshot is not None:
                self._tasks[change.task_id] = change.snapshot


def flip_status(task: Task) -> Task:
    task["status"] = "COMPLETED" if task.get("status") == "PENDING" else "PENDING"
    return task
