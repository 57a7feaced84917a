"""Shared fixtures: an in-memory database and an API client bound to it."""

import os
import sys
from pathlib import Path

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Settings are read once, on first import of app.core.config.
os.environ.setdefault("DATA_DIR", str(ROOT / "data"))
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("API_KEY", "test-service-key")
os.environ["TZ"] = "UTC"

from app.db.session import Base, get_db  # noqa: E402

# Ensure models are registered so metadata tables are created
from app.models import fast as fast_model  # noqa: E402,F401
from app.models import timer as timer_model  # noqa: E402,F401
from app.models import user as user_model  # noqa: E402,F401

SERVICE_HEADERS = {"X-API-Key": "test-service-key"}


@pytest.fixture()
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield sessionmaker(bind=engine, autocommit=False, autoflush=False)
    finally:
        engine.dispose()


@pytest.fixture()
def db_session(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def api_app(session_factory):
    from app.main import app

    def _get_test_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _get_test_db
    try:
        yield app
    finally:
        app.dependency_overrides.clear()


@pytest.fixture()
def client(api_app):
    from fastapi.testclient import TestClient

    with TestClient(api_app) as test_client:
        yield test_client


@pytest.fixture()
def user(client):
    """Register a fresh account; returns (user_id, auth headers)."""
    response = client.post("/api/auth/register", json={"username": "faster", "password": "correct-horse"})
    assert response.status_code == 201
    data = response.json()
    return data["user_id"], {"Authorization": f"Bearer {data['access_token']}"}
