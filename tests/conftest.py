"""
Pytest configuration and fixtures for testing.

This file provides reusable test fixtures for:
- Database setup/teardown
- A temporary upload directory
- FastAPI test client
"""

import os

# Keep the application engine off the real database file
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from cvintake.core.database import Base, get_db
from cvintake.core.storage import LocalStorage, get_storage
from cvintake.models.candidate import Candidate
from main import app


# Use in-memory SQLite for testing (fast, isolated)
SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session():
    """
    Create a fresh database session for each test.
    Tables are dropped after the test completes.
    """
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def storage(tmp_path):
    """Upload directory rooted in a per-test temporary folder"""
    return LocalStorage(str(tmp_path / "uploads"))


@pytest.fixture
def client(db_session, storage):
    """
    FastAPI test client with overridden database and storage dependencies.
    """
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_storage] = lambda: storage

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def make_candidate(db_session):
    """Insert a candidate row directly, bypassing ingestion"""
    def _make(**kwargs):
        candidate = Candidate(**kwargs)
        db_session.add(candidate)
        db_session.commit()
        db_session.refresh(candidate)
        return candidate
    return _make


@pytest.fixture
def sample_resume_text():
    """Plain-text resume used across ingestion tests"""
    return "Marie Curie\nmarie@example.com\n0612345678\nPython, React\nFrançais, Anglais\n"
