from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

import httpx

from task_tracker.client.optimistic import OptimisticCache, flip_status
from task_tracker.client.renewal import TokenRenewalAuth
from task_tracker.client.session import SessionContext

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0


class ApiClientError(Exception):
    """Non-2xx response from the API, carrying the server's error envelope."""

    def __init__(self, response: httpx.Response) -> None:
        self.status_code = response.status_code
        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}
        self.code: str | None = body.get("error")
        self.reason: str | None = body.get("reason")
        self.details: dict[str, Any] | None = body.get("details")
        self.message: str = body.get("message") or response.reason_phrase or "Request failed"
        super().__init__(f"{self.status_code} {self.message}")


class TaskTrackerClient:
    """
    Typed wrapper over the REST API.

    Owns (or adopts) an ``httpx.Client`` whose auth is a ``TokenRenewalAuth``
    bound to this client's ``SessionContext``.
    """

    def __init__(
        self,
        base_url: str | None = None,
        *,
        http_client: httpx.Client | None = None,
        session: SessionContext | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        if http_client is None:
            if not base_url:
                raise ValueError("base_url or http_client is required")
            http_client = httpx.Client(base_url=base_url, timeout=timeout)
            self._owns_client = True
        else:
            self._owns_client = False

        self.http = http_client
        self.session = session or SessionContext()
        self.http.auth = TokenRenewalAuth(
            self.session,
            refresh_url=str(self.http.base_url.join("auth/refresh")),
            cookies=self.http.cookies,
        )

    def close(self) -> None:
        if self._owns_client:
            self.http.close()

    def __enter__(self) -> TaskTrackerClient:
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    # -----------------------------
    # Transport
    # -----------------------------
    def _request(self, method: str, path: str, **kwargs) -> Any:
        response = self.http.request(method, path, **kwargs)
        if response.status_code >= 400:
            raise ApiClientError(response)
        if not response.content:
            return None
        return response.json()

    # -----------------------------
    # Auth
    # -----------------------------
    def register(self, email: str, password: str, name: str) -> dict[str, Any]:
        body = self._request("POST", "/auth/register", json={"email": email, "password": password, "name": name})
        return body["user"]

    def login(self, email: str, password: str) -> dict[str, Any]:
        body = self._request("POST", "/auth/login", json={"email": email, "password": password})
        self.session.set_auth(body["user"], body["accessToken"])
        return body["user"]

    def refresh(self) -> str:
        body = self._request("POST", "/auth/refresh")
        self.session.set_access_token(body["accessToken"])
        return body["accessToken"]

    def logout(self) -> None:
        try:
            self._request("POST", "/auth/logout")
        finally:
            self.session.clear()

    def me(self) -> dict[str, Any]:
        return self._request("GET", "/auth/me")["user"]

    # -----------------------------
    # Tasks
    # -----------------------------
    def list_tasks(self, **params: Any) -> dict[str, Any]:
        query = {k: v for k, v in params.items() if v is not None}
        return self._request("GET", "/tasks", params=query)

    def get_task(self, task_id: str) -> dict[str, Any]:
        return self._request("GET", f"/tasks/{task_id}")["task"]

    def create_task(
        self,
        title: str,
        *,
        description: str | None = None,
        priority: str | None = None,
        due_date: datetime | str | None = None,
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {"title": title}
        if description is not None:
            payload["description"] = description
        if priority is not None:
            payload["priority"] = priority
        if due_date is not None:
            payload["dueDate"] = due_date.isoformat() if isinstance(due_date, datetime) else due_date
        return self._request("POST", "/tasks", json=payload)["task"]

    def update_task(self, task_id: str, **fields: Any) -> dict[str, Any]:
        return self._request("PATCH", f"/tasks/{task_id}", json=fields)["task"]

    def delete_task(self, task_id: str) -> None:
        self._request("DELETE", f"/tasks/{task_id}")

    def toggle_task(self, task_id: str) -> dict[str, Any]:
        return self._request("PATCH", f"/tasks/{task_id}/toggle")["task"]

    def toggle_task_optimistic(self, cache: OptimisticCache, task_id: str) -> dict[str, Any]:
        """Flip the cached status immediately; roll back if the server call fails."""
        request_id = cache.apply(task_id, flip_status)
        try:
            task = self.toggle_task(task_id)
        except Exception:
            logger.info("Toggle of task %s failed; rolling back", task_id)
            cache.rollback(request_id)
            raise
        cache.commit(request_id, task)
        return task
