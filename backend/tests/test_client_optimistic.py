from __future__ import annotations

import httpx
import pytest

from task_tracker.client.api import ApiClientError, TaskTrackerClient
from task_tracker.client.optimistic import OptimisticCache, flip_status


def _tasks():
    return [
        {"id": "t1", "title": "one", "status": "PENDING"},
        {"id": "t2", "title": "two", "status": "COMPLETED"},
    ]


def test_apply_installs_speculative_state():
    cache = OptimisticCache(_tasks())
    rid = cache.apply("t1", flip_status)
    assert cache.get("t1")["status"] == "COMPLETED"
    assert cache.pending == [rid]


def test_commit_replaces_with_server_copy():
    cache = OptimisticCache(_tasks())
    rid = cache.apply("t1", flip_status)
    cache.commit(rid, {"id": "t1", "title": "one (server)", "status": "COMPLETED"})
    assert cache.get("t1")["title"] == "one (server)"
    assert cache.pending == []


def test_commit_without_server_copy_keeps_speculative_state():
    cache = OptimisticCache(_tasks())
    rid = cache.apply("t1", flip_status)
    cache.commit(rid)
    assert cache.get("t1")["status"] == "COMPLETED"


def test_rollback_restores_snapshot():
    cache = OptimisticCache(_tasks())
    rid = cache.apply("t2", flip_status)
    assert cache.get("t2")["status"] == "PENDING"
    cache.rollback(rid)
    assert cache.get("t2")["status"] == "COMPLETED"


def test_overlapping_changes_on_different_tasks_are_independent():
    cache = OptimisticCache(_tasks())
    r1 = cache.apply("t1", flip_status)
    r2 = cache.apply("t2", flip_status)

    cache.rollback(r1)
    cache.commit(r2)

    assert cache.get("t1")["status"] == "PENDING"
    assert cache.get("t2")["status"] == "PENDING"
    assert [t["id"] for t in cache.tasks()] == ["t1", "t2"]


def test_apply_unknown_task_or_duplicate_request_id():
    cache = OptimisticCache(_tasks())
    with pytest.raises(KeyError):
        cache.apply("missing", flip_status)

    cache.apply("t1", flip_status, request_id="r")
    with pytest.raises(ValueError):
        cache.apply("t2", flip_status, request_id="r")


def test_cache_hands_out_copies():
    cache = OptimisticCache(_tasks())
    cache.get("t1")["status"] = "COMPLETED"
    assert cache.get("t1")["status"] == "PENDING"


def _client(handler) -> TaskTrackerClient:
    http = httpx.Client(base_url="http://api.test", transport=httpx.MockTransport(handler))
    client = TaskTrackerClient(http_client=http)
    client.session.set_auth({"id": "u1"}, "tok")
    return client


def test_toggle_optimistic_commits_server_result():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/tasks/t1/toggle"
        return httpx.Response(200, json={"task": {"id": "t1", "title": "one", "status": "COMPLETED", "updatedAt": "x"}})

    cache = OptimisticCache(_tasks())
    task = _client(handler).toggle_task_optimistic(cache, "t1")

    assert task["status"] == "COMPLETED"
    assert cache.get("t1")["updatedAt"] == "x"
    assert cache.pending == []


def test_toggle_optimistic_rolls_back_on_failure():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json={"error": "NOT_FOUND", "message": "Task not found"})

    cache = OptimisticCache(_tasks())
    with pytest.raises(ApiClientError) as exc:
        _client(handler).toggle_task_optimistic(cache, "t1")

    assert exc.value.status_code == 404
    assert exc.value.code == "NOT_FOUND"
    assert cache.get("t1")["status"] == "PENDING"
    assert cache.pending == []
