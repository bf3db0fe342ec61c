import os

# must be set before linkhub.core.config is imported
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("RATE_LIMIT_BACKEND", "memory")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from linkhub.main import app
from linkhub.api.deps import get_rate_limit_store
from linkhub.db.base import Base
from linkhub.db.session import get_db
from linkhub.services.auth_service import register
from linkhub.services.rate_limiter import InMemoryRateLimitStore


@pytest.fixture()
def engine():
    # one shared in-memory connection so the app and the tests see the same data
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture()
def rate_store() -> InMemoryRateLimitStore:
    return InMemoryRateLimitStore()


@pytest.fixture(autouse=True)
def isolate_app(session_factory, rate_store):
    """
    Full test isolation:
    - Fresh in-memory database per test
    - Fresh rate limiter store so requests don't randomly 429
    """

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_rate_limit_store] = lambda: rate_store
    yield
    app.dependency_overrides.clear()


def _register(db, username: str):
    user, profile, token = register(
        db,
        {
            "email": f"{username}@example.com",
            "password": "correct-horse",
            "username": username,
        },
    )
    return user, token


@pytest.fixture()
def user_a(db):
    return _register(db, "alice")


@pytest.fixture()
def user_b(db):
    return _register(db, "bob")


@pytest.fixture()
def anon_client() -> TestClient:
    return TestClient(app)


@pytest.fixture()
def client_a(user_a) -> TestClient:
    c = TestClient(app)
    c.headers.update({"Authorization": f"Bearer {user_a[1]}"})
    return c


@pytest.fixture()
def client_b(user_b) -> TestClient:
    c = TestClient(app)
    c.headers.update({"Authorization": f"Bearer {user_b[1]}"})
    return c
