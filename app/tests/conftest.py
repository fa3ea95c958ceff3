import os

# Point the application at throwaway stores before anything imports it
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["NOTIFICATION_URL"] = ""

from unittest.mock import Mock

import fakeredis
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import Engine, StaticPool, create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.orm.session import Session

from app.database.db import Base, get_db
from app.main import app
from app.models.events import Event

# Use an in-memory SQLite database for testing
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"
engine: Engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(autouse=True)
def setup_database():
    """Give every test empty tables."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


# Override the database dependency
def override_get_db():
    db: Session = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db


@pytest.fixture
def db_session():
    db: Session = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def fake_redis_server():
    return fakeredis.FakeServer()


@pytest.fixture
def fake_redis(fake_redis_server):
    return fakeredis.FakeRedis(server=fake_redis_server, decode_responses=True)


@pytest.fixture(autouse=True)
def redis_client(monkeypatch: pytest.MonkeyPatch, fake_redis_server, fake_redis):
    """Route the per-event lock through fakeredis."""
    monkeypatch.setattr(
        "app.core.locks.get_redis_client",
        lambda: fakeredis.FakeRedis(server=fake_redis_server, decode_responses=True),
    )
    return fake_redis


@pytest.fixture(autouse=True)
def sent_notifications(monkeypatch: pytest.MonkeyPatch) -> list[dict]:
    """Capture notification payloads instead of enqueueing Celery tasks."""
    sent: list[dict] = []
    task = Mock()
    task.delay.side_effect = sent.append
    monkeypatch.setattr("app.services.notifications.send_notification_task", task)
    return sent


@pytest.fixture
def make_event(db_session: Session):
    def _make_event(**fields) -> Event:
        fields.setdefault("title", "Test Event")
        fields.setdefault("capacity", 10)
        event = Event(**fields)
        db_session.add(event)
        db_session.commit()
        db_session.refresh(event)
        return event

    return _make_event
