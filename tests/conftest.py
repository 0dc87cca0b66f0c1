"""Pytest fixtures."""

import os

os.environ["DATABASE_URL"] = "sqlite:///./test.db"
os.environ["OPENAI_API_KEY"] = ""

from uuid import uuid4  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

from daybook.core.database import Base, get_db  # noqa: E402
from daybook.core.dependency import get_ai_service, get_orchestrator, get_session_factory  # noqa: E402
from daybook.journals.models import JournalEntry  # noqa: E402
from daybook.chat.models import ChatMessage  # noqa: E402
from daybook.journals.schemas import JournalEntryBase  # noqa: E402
from daybook.journals.service import make_entry_loader  # noqa: E402
from daybook.analysis.service import InsightOrchestrator  # noqa: E402
from main import app  # noqa: E402
from fakes import FakeAIService  # noqa: E402

TEST_DATABASE_URL = "sqlite:///./test.db"

engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
)
TestingSessionLocal = sessionmaker(
    autocommit=False, autoflush=False, expire_on_commit=False, bind=engine
)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(scope="session")
def setup_db():
    """Create tables once for test session."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session(setup_db):
    """Session on emptied journal and chat tables."""
    db = TestingSessionLocal()
    db.query(JournalEntry).delete()
    db.query(ChatMessage).delete()
    db.commit()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def fake_ai():
    return FakeAIService()


@pytest.fixture
def orchestrator(fake_ai):
    return InsightOrchestrator(fake_ai, make_entry_loader(TestingSessionLocal))


@pytest.fixture
def client(db_session, fake_ai, orchestrator):
    """Test client with overridden DB, AI provider and orchestrator."""
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: TestingSessionLocal
    app.dependency_overrides[get_ai_service] = lambda: fake_ai
    app.dependency_overrides[get_orchestrator] = lambda: orchestrator
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def make_entry():
    """Factory for detached entry snapshots."""

    def _make(date, mood=0.0, **fields):
        return JournalEntryBase(id=uuid4(), date=date, mood_value=mood, **fields)

    return _make


@pytest.fixture
def session_factory(setup_db):
    return TestingSessionLocal
