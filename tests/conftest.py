"""
Shared pytest fixtures.

Uses a SQLite database file so no Postgres is required for tests.
DATABASE_URL is set before cadence is imported so the app's engine is
SQLite too.
"""
import os
import uuid

os.environ.setdefault("DATABASE_URL", "sqlite:///./test_cadence.db")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from cadence.db.base import Base, get_db
from cadence.main import app
import cadence.models  # noqa: F401

SQLITE_URL = os.environ["DATABASE_URL"]

engine = create_engine(SQLITE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(scope="session", autouse=True)
def create_tables():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def client(db):
    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture()
def user_id() -> str:
    """Fresh user per test so activity logs never bleed between tests."""
    return f"user-{uuid.uuid4().hex[:12]}"
