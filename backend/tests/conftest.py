import os

# Settings are read at import time; pin a test environment before importing task_tracker.
os.environ.setdefault("ENV", "test")
os.environ.setdefault("JWT_ACCESS_SECRET", "test_access_secret")
os.environ.setdefault("JWT_REFRESH_SECRET", "test_refresh_secret")
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")
os.environ.setdefault("ENABLE_RATE_LIMITING", "false")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from task_tracker.core.base import Base
from task_tracker.core import config as app_config
from task_tracker.core.database import get_db
from task_tracker.core.rate_limit import limiter
from task_tracker.core.security import hash_password
from task_tracker.core.tokens import reset_token_codecs

# Import models so they register with SQLAlchemy metadata.
from task_tracker.models.user import User
from task_tracker.models.refresh_token import RefreshToken  # noqa: F401
from task_tracker.models.task import Task  # noqa: F401

TEST_PASSWORD = "Password123"


@pytest.fixture(scope="session")
def db_engine():
    # In-memory SQLite for fast, isolated tests.
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    return engine


@pytest.fixture()
def db_session(db_engine):
    # The in-memory DB persists across tests (StaticPool); reset schema per test.
    Base.metadata.drop_all(bind=db_engine)
    Base.metadata.create_all(bind=db_engine)

    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(autouse=True)
def _reset_mutable_settings():
    """
    Tests sometimes tweak the process-global settings. Restore them afterwards and
    rebuild token codecs so lifetime/secret changes never leak between tests.
    """
    keys = [
        "ENABLE_RATE_LIMITING",
        "AUTH_RATE_LIMIT",
        "PASSWORD_MIN_LENGTH",
        "JWT_ACCESS_EXPIRY",
        "JWT_REFRESH_EXPIRY",
        "JWT_ACCESS_SECRET",
        "JWT_REFRESH_SECRET",
        "ENV",
    ]
    original = {k: getattr(app_config.settings, k) for k in keys}
    reset_token_codecs()
    try:
        yield
    finally:
        for k, v in original.items():
            setattr(app_config.settings, k, v)
        reset_token_codecs()
        # Default all tests to "rate limiting disabled" unless a test enables it explicitly.
        limiter.enabled = False
        limiter.reset()


@pytest.fixture()
def app(db_session):
    from task_tracker.main import app as fastapi_app

    def override_get_db():
        yield db_session

    fastapi_app.dependency_overrides[get_db] = override_get_db
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest.fixture()
def users(db_session):
    """
    Two distinct users for ownership / isolation tests. Both use TEST_PASSWORD.
    """
    user_a = User(email="test@example.com", name="Test User", password_hash=hash_password(TEST_PASSWORD))
    user_b = User(email="other@example.com", name="Other User", password_hash=hash_password(TEST_PASSWORD))
    db_session.add_all([user_a, user_b])
    db_session.commit()
    db_session.refresh(user_a)
    db_session.refresh(user_b)
    return user_a, user_b


@pytest.fixture()
def anon_client(app):
    with TestClient(app) as c:
        yield c


def login(client: TestClient, email: str, password: str = TEST_PASSWORD) -> str:
    res = client.post("/auth/login", json={"email": email, "password": password})
    assert res.status_code == 200, res.text
    return res.json()["accessToken"]


@pytest.fixture()
def client(app, users):
    """
    Client logged in as user_a: the refresh cookie sits in the cookie jar and the
    access token is sent as a default Authorization header.
    """
    user_a, _ = users
    with TestClient(app) as c:
        token = login(c, user_a.email)
        c.headers["Authorization"] = f"Bearer {token}"
        yield c


@pytest.fixture()
def client_for(app):
    """
    Factory for clients logged in as an arbitrary user.

    Usage:
        c = client_for(user)
    """
    opened: list[TestClient] = []

    def _client_for(user: User) -> TestClient:
        c = TestClient(app)
        opened.append(c)
        token = login(c, user.email)
        c.headers["Authorization"] = f"Bearer {token}"
        return c

    yield _client_for
    for c in opened:
        c.close()
