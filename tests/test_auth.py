"""Tests for registration, login and bearer token handling."""
from datetime import datetime, timedelta

import pytest
from fastapi.security import HTTPAuthorizationCredentials
from jose import jwt

from tubely.auth import create_access_token, decode_token, get_bearer_user_id, settings
from tubely.errors import UnauthorizedError


def test_register_and_login(client):
    res = client.post("/api/users", json={"email": "New@Example.com", "password": "hunter22"})
    assert res.status_code == 201
    user = res.json()
    assert user["email"] == "new@example.com"
    assert "password" not in user

    res = client.post("/api/auth/login", json={"email": "new@example.com", "password": "hunter22"})
    assert res.status_code == 200
    token = res.json()["access_token"]
    assert res.json()["token_type"] == "bearer"

    res = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert res.status_code == 200
    assert res.json()["id"] == user["id"]


def test_register_duplicate_email(client, owner):
    res = client.post("/api/users", json={"email": owner.email, "password": "hunter22"})
    assert res.status_code == 400


def test_register_short_password(client):
    res = client.post("/api/users", json={"email": "a@b.c", "password": "123"})
    assert res.status_code == 400


def test_login_wrong_password(client, owner):
    res = client.post("/api/auth/login", json={"email": owner.email, "password": "wrong-password"})
    assert res.status_code == 401


def test_me_without_token(client):
    res = client.get("/api/auth/me")
    assert res.status_code == 401
    assert res.headers["www-authenticate"] == "Bearer"


def test_decode_token_round_trip():
    payload = decode_token(create_access_token("user-1", "u@example.com"))
    assert payload.sub == "user-1"
    assert payload.email == "u@example.com"


def test_decode_token_rejects_wrong_secret():
    token = jwt.encode(
        {"sub": "user-1", "email": "u@example.com", "exp": datetime.utcnow() + timedelta(minutes=5)},
        "another-secret",
        algorithm="HS256",
    )
    assert decode_token(token) is None


def test_decode_token_rejects_expired():
    token = jwt.encode(
        {"sub": "user-1", "email": "u@example.com", "exp": datetime.utcnow() - timedelta(minutes=5)},
        settings.secret_key,
        algorithm=settings.algorithm,
    )
    assert decode_token(token) is None


def test_get_bearer_user_id():
    creds = HTTPAuthorizationCredentials(scheme="Bearer", credentials=create_access_token("user-9", "x@y.z"))
    assert get_bearer_user_id(creds) == "user-9"
    with pytest.raises(UnauthorizedError):
        get_bearer_user_id(None)
    with pytest.raises(UnauthorizedError):
        get_bearer_user_id(HTTPAuthorizationCredentials(scheme="Bearer", credentials="garbage"))
