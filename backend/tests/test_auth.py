import pytest

from app.config.settings import settings
from app.services import AuthenticationError
from app.services.auth import (
    create_access_token, decode_access_token, hash_password, verify_password
)


def test_password_hash_roundtrip():
    hashed = hash_password("secret123")
    assert hashed != "secret123"
    assert verify_password("secret123", hashed)
    assert not verify_password("wrong", hashed)
    assert not verify_password("secret123", None)


def test_token_carries_user_claims(user):
    claims = decode_access_token(create_access_token(user))
    assert claims["sub"] == str(user.id)
    assert claims["email"] == user.email
    assert claims["role"] == "USER"


def test_expired_token_rejected(user):
    token = create_access_token(user, expires_minutes=-1)
    with pytest.raises(AuthenticationError):
        decode_access_token(token)


def test_register_creates_user(client):
    r = client.post("/api/register", json={
        "name": "Akinyi Odhiambo",
        "email": "Akinyi@Example.com",
        "password": "sukuma1"
    })
    assert r.status_code == 201
    body = r.json()
    assert body["message"] == "User created successfully"
    assert body["user"]["email"] == "akinyi@example.com"
    assert body["user"]["role"] == "USER"
    assert "password" not in body["user"]


def test_register_duplicate_email(client, user):
    r = client.post("/api/register", json={
        "name": "Someone Else",
        "email": user.email,
        "password": "another1"
    })
    assert r.status_code == 409


def test_register_validation_errors_are_400(client):
    r = client.post("/api/register", json={"name": "A", "email": "not-an-email", "password": "123"})
    assert r.status_code == 400
    assert r.json()["message"] == "Invalid request data"


def test_register_admin_email_gets_admin_role(client, monkeypatch):
    monkeypatch.setattr(settings, "ADMIN_EMAILS", "boss@shambafresh.co.ke")
    r = client.post("/api/register", json={
        "name": "The Boss",
        "email": "boss@shambafresh.co.ke",
        "password": "secret123"
    })
    assert r.status_code == 201
    assert r.json()["user"]["role"] == "ADMIN"


def test_login_and_me(client, user):
    r = client.post("/api/auth/login", json={"email": user.email, "password": "secret123"})
    assert r.status_code == 200
    token = r.json()["access_token"]

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["id"] == user.id


def test_login_wrong_password(client, user):
    r = client.post("/api/auth/login", json={"email": user.email, "password": "nope"})
    assert r.status_code == 401


def test_me_requires_token(client):
    assert client.get("/api/auth/me").status_code == 401
    r = client.get("/api/auth/me", headers={"Authorization": "Bearer garbage"})
    assert r.status_code == 401
