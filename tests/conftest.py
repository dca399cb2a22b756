from __future__ import annotations

import os

# Select TestSettings before anything imports the settings singleton.
os.environ.setdefault("APP_ENV", "test")

import pytest  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from invoice_insights.db import session as db_session  # noqa: E402
from invoice_insights.db.base_class import Base  # noqa: E402
from invoice_insights.db.session import SessionLocal  # noqa: E402
from invoice_insights.models import models  # noqa: E402,F401

from factories import FakeSummarizer  # noqa: E402

TEST_DATABASE_URL = "sqlite:///:memory:"

test_engine = create_engine(
    TEST_DATABASE_URL,
    future=True,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

# Ensure application code uses the test engine
db_session.engine = test_engine  # type: ignore[assignment]
SessionLocal.configure(bind=test_engine)
TestingSession = sessionmaker(bind=test_engine, expire_on_commit=False, autoflush=False)


@pytest.fixture(autouse=True)
def _reset_database_state():
    """Ensure each test sees a fresh database schema."""
    Base.metadata.drop_all(bind=test_engine)
    Base.metadata.create_all(bind=test_engine)
    yield


@pytest.fixture
def db_session():
    """Provide a database session bound to the in-memory test engine."""
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def fake_summarizer():
    return FakeSummarizer(
        "Your top clients are growing steadily.\n\n"
        "1. Acme Corp leads revenue\nAcme has spent the most this quarter.\n\n"
        "RECOMMENDATIONS:\n- Follow up with Beta"
    )


# FastAPI TestClient fixture for route tests
from fastapi.testclient import TestClient  # noqa: E402

from invoice_insights.api.main import app  # noqa: E402


@pytest.fixture
def client():
    """Provide a FastAPI TestClient bound to the application."""
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
