"""Test configuration and fixtures."""

from typing import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from ops_dashboard.api import app
from ops_dashboard.db import models  # noqa: F401
from ops_dashboard.db.base import Base, get_db

# Shared in-memory SQLite database; tables are rebuilt for every test
test_engine = create_engine(
    "sqlite:///:memory:",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


def override_get_db() -> Generator[Session, None, None]:
    """Override the get_db dependency for testing."""
    db = TestSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(autouse=True)
def setup_database() -> Generator[None, None, None]:
    """Create all tables before each test, drop them after."""
    Base.metadata.drop_all(bind=test_engine)
    Base.metadata.create_all(bind=test_engine)
    yield
    Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def db_session() -> Generator[Session, None, None]:
    """A session on the test database."""
    session = TestSessionLocal()
    yield session
    session.close()


@pytest.fixture
def client() -> Generator[TestClient, None, None]:
    """A TestClient with the database dependency overridden.

    The client is not entered as a context manager, so the lifespan (which
    runs migrations against the configured database) does not run.
    """
    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def session_factory() -> sessionmaker:
    """The sessionmaker bound to the test database."""
    return TestSessionLocal
