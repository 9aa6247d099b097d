# ruff: noqa: E402
# File: /tests/conftest.py | Version: 2.0 | Title: Fresh in-memory database per test + API client
import pathlib
import sys

# Make repo root importable as "app"
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from typing import Callable, Dict

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.db.base_class import Base
from app.db.session import get_db
from app.main import app
from app.models import User
from app.security import get_password_hash
from app.storage import SqlBackingStore


@pytest.fixture()
def engine():
    # one shared connection, so every session sees the same in-memory database
    eng = create_engine(
        "sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool
    )
    Base.metadata.create_all(bind=eng)
    try:
        yield eng
    finally:
        eng.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db_session(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def store(db_session):
    return SqlBackingStore(db_session)


@pytest.fixture()
def user(db_session) -> User:
    u = User(email="crud@example.com", hashed_password=get_password_hash("pass123"))
    db_session.add(u)
    db_session.commit()
    db_session.refresh(u)
    return u


@pytest.fixture()
def client(session_factory):
    def _override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def register_and_login(client: TestClient, email: str, password: str = "pass123") -> Dict[str, str]:
    client.post("/auth/register", json={"email": email, "password": password})
    r = client.post(
        "/auth/token",
        data={"username": email, "password": password},
        headers={"Content-Type": "application/x-www-form-urlencoded"},
    )
    assert r.status_code == 200, f"Login failed for {email}: {r.text}"
    return {"Authorization": f"Bearer {r.json()['access_token']}"}


@pytest.fixture()
def make_headers(client) -> Callable[[str], Dict[str, str]]:
    return lambda email: register_and_login(client, email)


@pytest.fixture()
def auth_headers(make_headers) -> Dict[str, str]:
    return make_headers("owner@example.com")
