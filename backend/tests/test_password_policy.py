from task_tracker.core import config as app_config
from task_tracker.core.password_policy import describe_violations, evaluate_password


def test_strong_password_has_no_violations():
    assert evaluate_password("Password123") == []


def test_each_rule_is_reported():
    assert evaluate_password("") == ["min_length", "uppercase", "number"]
    assert evaluate_password("password123") == ["uppercase"]
    assert evaluate_password("Password") == ["number"]
    assert evaluate_password("Pass1") == ["min_length"]


def test_min_length_follows_settings():
    app_config.settings.PASSWORD_MIN_LENGTH = 12
    assert evaluate_password("Password123") == ["min_length"]
    assert describe_violations(["min_length"]) == ["Password must be at least 12 characters"]


def test_login_does_not_reapply_policy(anon_client, users):
    # Policy gates registration only; an existing password that no longer complies still logs in.
    user_a, _ = users
    app_config.settings.PASSWORD_MIN_LENGTH = 20

    res = anon_client.post("/auth/login", json={"email": user_a.email, "password": "Password123"})
    assert res.status_code == 200


def test_register_caps_password_length(anon_client):
    base = {"email": "long@example.com", "name": "Long Password"}
    too_long = "Aa1" + "x" * 126
    assert len(too_long) == 129

    res = anon_client.post("/auth/register", json={**base, "password": too_long})
    assert res.status_code == 400
    assert res.json()["details"]["errors"][0]["field"] == "password"

    assert anon_client.post("/auth/register", json={**base, "password": too_long[:128]}).status_code == 201
