"""
Pytest configuration file for backend testing.
"""
import os
import sys
from pathlib import Path

# Tests run against an in-memory SQLite database with in-process cart drafts
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENVIRONMENT"] = "test"
os.environ.pop("REDIS_URL", None)

# Add the backend directory to Python path so imports work correctly
backend_dir = Path(__file__).parent
if str(backend_dir) not in sys.path:
    sys.path.insert(0, str(backend_dir))

import pytest
from fastapi.testclient import TestClient

from core.config import settings
from core.database import Base, SessionLocal, engine, get_db
from app.main import app
from modules.realtime.websocket.connection_manager import (
    connection_manager,
    get_event_publisher,
)
from modules.tables.services.cart_draft_service import (
    MemoryCartDraftStore,
    cart_draft_service,
)
from modules.orders.tests import factories as model_factories


class RecordingPublisher:
    """Event publisher that keeps every event for assertions"""

    def __init__(self):
        self.events = []

    async def publish(self, event, payload):
        self.events.append((event, payload))

    @property
    def names(self):
        return [event.value for event, _ in self.events]

    def payloads(self, event):
        return [payload for recorded, payload in self.events if recorded == event]


@pytest.fixture(scope="function")
def db_session():
    """Create a fresh database session for each test."""
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def publisher():
    return RecordingPublisher()


@pytest.fixture(autouse=True)
def reset_process_state():
    """Cart drafts and socket registrations are process-wide singletons"""
    cart_draft_service.store = MemoryCartDraftStore(settings.cart_draft_ttl_seconds)
    cart_draft_service.publisher = connection_manager
    connection_manager.connection_metadata.clear()
    yield
    connection_manager.connection_metadata.clear()


def _override_get_db(db_session):
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    return override_get_db


@pytest.fixture(scope="function")
def client(db_session, publisher):
    """Test client with the database and event publisher overridden."""
    app.dependency_overrides[get_db] = _override_get_db(db_session)
    app.dependency_overrides[get_event_publisher] = lambda: publisher
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def live_client(db_session):
    """Test client that broadcasts through the real WebSocket manager."""
    app.dependency_overrides[get_db] = _override_get_db(db_session)
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def factories(db_session):
    """factory_boy factories bound to the test session"""
    model_factories.bind_factories(db_session)
    return model_factories
