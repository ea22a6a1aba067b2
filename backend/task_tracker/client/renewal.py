"""
Transparent access-token renewal for httpx clients.

``TokenRenewalAuth`` attaches the cached access token to every request. When a
protected call comes back 401 because the token expired (or is otherwise
unusable), it performs one ``POST /auth/refresh`` with the ambient refresh
cookie, caches the new token and re-sends the original request exactly once.

Synchronous ``httpx.Client`` only: the refresh lock is a thread lock.
"""
from __future__ import annotations

import logging
import threading
from typing import Generator

import httpx

from task_tracker.client.session import SessionContext

logger = logging.getLogger(__name__)

# Structured reasons from the server's 401 body that a refresh can fix.
RENEWABLE_REASONS = frozenset({"token_expired", "invalid_token", "no_token"})

# Endpoints that authenticate by other means and must never trigger a refresh.
UNINTERCEPTED_PATHS = ("/auth/login", "/auth/register", "/auth/refresh")


class SessionExpiredError(Exception):
    """Raised when the refresh call fails; the session has been cleared and the user must log in again."""

    def __init__(self, message: str, response: httpx.Response | None = None) -> None:
        super().__init__(message)
        self.response = response


def failure_reason(response: httpx.Response) -> str | None:
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        reason = body.get("reason")
        return reason if isinstance(reason, str) else None
    return None


class TokenRenewalAuth(httpx.Auth):
    requires_request_body = True
    requires_response_body = True

    def __init__(self, session: SessionContext, refresh_url: str, cookies: httpx.Cookies) -> None:
        self.session = session
        self.refresh_url = refresh_url
        self._cookies = cookies
        self._refresh_lock = threading.Lock()

    def auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        if request.url.path.rstrip("/").endswith(UNINTERCEPTED_PATHS):
            yield request
            return

        sent_token = self.session.access_token
        if sent_token:
            request.headers["Authorization"] = f"Bearer {sent_token}"

        response = yield request

        # The retry below happens at most once: this generator never loops.
        if not self._should_renew(response):
            return

        with self._refresh_lock:
            current = self.session.access_token
            if current and current != sent_token:
                # Another in-flight request already renewed the token.
                token = current
            else:
                logger.info("Access token rejected (%s); refreshing", failure_reason(response) or "unauthorized")
                refresh_response = yield self._build_refresh_request()
                token = self._accept_refresh(refresh_response)

        request.headers["Authorization"] = f"Bearer {token}"
        yield request

    def _should_renew(self, response: httpx.Response) -> bool:
        if response.status_code != 401:
            return False
        reason = failure_reason(response)
        # A 401 without a structured reason is treated as renewable.
        return reason is None or reason in RENEWABLE_REASONS

    def _build_refresh_request(self) -> httpx.Request:
        refresh_request = httpx.Request("POST", self.refresh_url)
        self._cookies.set_cookie_header(refresh_request)
        return refresh_request

    def _accept_refresh(self, response: httpx.Response) -> str:
        token = None
        if response.status_code == 200:
            try:
                token = response.json().get("accessToken")
            except (ValueError, AttributeError):
                token = None

        if not token:
            logger.info("Refresh failed with status %s; clearing session", response.status_code)
            self.session.clear()
            raise SessionExpiredError("Session expired, please log in again", response=response)

        self.session.set_access_token(token)
        return token
