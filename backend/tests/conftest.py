"""
Shared fixtures for the Deepmetric test suite.
"""

import os

# Must be set before deepmetric.core.config is imported
os.environ["TESTING"] = "True"
os.environ.pop("GEMINI_API_KEY", None)

import itertools

import pytest
from fastapi.testclient import TestClient

from deepmetric.core.config import settings
from deepmetric.core.database import Base, DatabaseManager, SessionLocal, engine, init_db
from deepmetric.core.storage import KeyValueStore
from deepmetric.main import app
from deepmetric.services.advisor import get_advisor
from deepmetric.services.catalog import CatalogStore, ReviewStore
from deepmetric.services.directory import EnrollmentService
from deepmetric.services.notifications import NotificationSink, notifier


STUDENT_EMAIL = "ama@example.com"


@pytest.fixture
def db():
    import deepmetric.models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    init_db(session)
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def store(db):
    return KeyValueStore(db)


@pytest.fixture
def sink():
    return NotificationSink(ttl_seconds=6.0, clock=lambda: 1000.0)


@pytest.fixture
def catalog(store):
    return CatalogStore(store)


@pytest.fixture
def reviews(store):
    return ReviewStore(store)


@pytest.fixture
def service(store, catalog, sink):
    ids = itertools.count(1)
    return EnrollmentService(store, catalog, sink, id_factory=lambda: f"user-{next(ids)}")


@pytest.fixture
def client():
    DatabaseManager.reset_database()
    notifier.clear()
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.pop(get_advisor, None)
    notifier.clear()


def api(path: str) -> str:
    return f"{settings.API_V1_STR}{path}"


def login(client: TestClient, email: str = STUDENT_EMAIL, name: str = "Ama") -> dict:
    response = client.post(api("/auth/login"), json={"name": name, "email": email})
    assert response.status_code == 200
    return response.json()["user"]
