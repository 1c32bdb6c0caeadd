"""
Shared fixtures.

DATABASE_URL points at an in-memory SQLite database before any app module is
imported; tables are created and dropped around every test.
"""
import os

os.environ["DATABASE_URL"] = os.environ.get("TEST_DATABASE_URL", "sqlite://")
os.environ.setdefault("APP_ID", "test-8d-app")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

import app.models  # noqa: E402,F401
from app.api.deps import get_session_registry, get_subscription_hub  # noqa: E402
from app.core.config import settings  # noqa: E402
from app.db.base import Base  # noqa: E402
from app.db.session import SessionLocal, engine  # noqa: E402
from app.main import app  # noqa: E402
from app.services.document_store import DocumentStore  # noqa: E402
from app.services.subscriptions import SubscriptionHub  # noqa: E402
from app.services.workspace_session import SessionRegistry  # noqa: E402


@pytest.fixture
def db_session():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def hub() -> SubscriptionHub:
    return SubscriptionHub()


@pytest.fixture
def store(db_session, hub) -> DocumentStore:
    return DocumentStore(db=db_session, hub=hub, app_id=settings.APP_ID)


@pytest.fixture
def registry():
    registry = SessionRegistry()
    yield registry
    registry.close_all()


@pytest.fixture
def client(db_session, hub, registry):
    app.dependency_overrides[get_subscription_hub] = lambda: hub
    app.dependency_overrides[get_session_registry] = lambda: registry
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


AUTH_HEADERS = {"X-User-Id": "user-alpha-1234"}
AUTH_HEADERS_USER2 = {"X-User-Id": "user-beta-5678"}
