# tests/conftest.py

from typing import Tuple

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine

from todo_api.config import AUTH_HEADER
from todo_api.database import get_db
from todo_api.main import app


@pytest.fixture()
def engine():
    # One shared in-memory connection so every session sees the same data.
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture()
def db_session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def client(db_session_factory):
    def override_get_db():
        db = db_session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    # No context manager: the startup hook would create tables in the real DB.
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture()
def register(client):
    """Register a user and return ``(user_json, token)``."""

    def _register(email: str, password: str = "secret123") -> Tuple[dict, str]:
        resp = client.post("/users", json={"email": email, "password": password})
        assert resp.status_code == 200, resp.text
        return resp.json(), resp.headers[AUTH_HEADER]

    return _register


