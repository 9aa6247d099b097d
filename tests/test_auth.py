# File: tests/test_auth.py | Version: 2.1 | Path: /tests/test_auth.py
from datetime import timedelta

import pytest
from fastapi.testclient import TestClient
from jose import jwt

from app.core.config import settings
from app.security import create_access_token


def test_register_and_login(client: TestClient):
    reg = client.post(
        "/auth/register", json={"email": "Test@Example.com", "password": "secret123"}
    )
    assert reg.status_code in (200, 201)
    assert reg.json()["email"] == "test@example.com"

    # registering again returns the same account
    again = client.post("/auth/register", json={"email": "test@example.com", "password": "secret123"})
    assert again.json()["id"] == reg.json()["id"]

    login = client.post(
        "/auth/login",
        data={"username": "test@example.com", "password": "secret123"},
        headers={"Content-Type": "application/x-www-form-urlencoded"},
    )
    assert login.status_code == 200
    data = login.json()
    assert "access_token" in data
    assert data.get("token_type") in ("bearer", "Bearer")


def test_json_login_and_me(client: TestClient):
    client.post("/auth/register", json={"email": "me@example.com", "password": "secret123"})
    login = client.post("/auth/login", json={"email": "me@example.com", "password": "secret123"})
    assert login.status_code == 200
    token = login.json()["access_token"]

    me = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["email"] == "me@example.com"


def test_wrong_password_is_rejected(client: TestClient):
    client.post("/auth/register", json={"email": "wp@example.com", "password": "secret123"})
    r = client.post(
        "/auth/token",
        data={"username": "wp@example.com", "password": "nope"},
        headers={"Content-Type": "application/x-www-form-urlencoded"},
    )
    assert r.status_code == 401
    assert r.json()["error"]["code"] == "UNAUTHORIZED"


def test_register_requires_credentials(client: TestClient):
    r = client.post("/auth/register", json={"email": "only@example.com"})
    assert r.status_code == 422


def test_garbage_token_is_rejected(client: TestClient):
    r = client.get("/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert r.status_code == 401


def test_token_subject_is_the_user_id(client: TestClient):
    reg = client.post("/auth/register", json={"email": "sub@example.com", "password": "secret123"})
    token = create_access_token(reg.json()["id"])
    assert jwt.get_unverified_claims(token)["sub"] == reg.json()["id"]

    me = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["email"] == "sub@example.com"


@pytest.mark.parametrize(
    "token",
    [
        pytest.param(create_access_token("no-such-user"), id="unknown-user"),
        pytest.param(create_access_token("x", expires_delta=timedelta(minutes=-1)), id="expired"),
        pytest.param(
            jwt.encode({"sub": "x", "type": "refresh"}, settings.SECRET_KEY, algorithm=settings.ALGORITHM),
            id="wrong-type",
        ),
        pytest.param(
            jwt.encode({"type": "access"}, settings.SECRET_KEY, algorithm=settings.ALGORITHM), id="no-subject"
        ),
    ],
)
def test_unusable_tokens_are_rejected(client: TestClient, token):
    r = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 401
    assert r.json()["error"]["code"] == "UNAUTHORIZED"
