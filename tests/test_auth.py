import logging

import pytest
from firebase_admin import auth

import dependencies
from context import RequestContextFilter
from dependencies import get_current_user
from main import app


@pytest.fixture
def real_auth(client):
    """Use the real token dependency instead of the test override"""
    app.dependency_overrides.pop(get_current_user)
    return client


def fake_verify(expected_token, claims):
    def verify(token, **kwargs):
        if token != expected_token:
            raise ValueError("Token signature mismatch")
        return claims

    return verify


def test_bearer_token_identifies_author(real_auth, monkeypatch):
    monkeypatch.setattr(dependencies, "verify_id_token", fake_verify("good", {"uid": "u2", "email": "bob@example.com"}))

    response = real_auth.post("/posts", json={"title": "t", "content": "c"}, headers={"Authorization": "Bearer good"})

    assert response.status_code == 201
    assert response.json()["user"] == "u2"


def test_invalid_bearer_token_is_rejected(real_auth, monkeypatch):
    monkeypatch.setattr(dependencies, "verify_id_token", fake_verify("good", {"uid": "u2"}))

    response = real_auth.post("/posts", json={"title": "t", "content": "c"}, headers={"Authorization": "Bearer bad"})

    assert response.status_code == 401
    assert real_auth.get("/posts").json() == []


def test_malformed_authorization_header(real_auth):
    response = real_auth.put("/posts/x/like", headers={"Authorization": "Token abc"})

    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid authorization header"


def test_session_cookie_is_accepted(real_auth, monkeypatch):
    monkeypatch.setattr(dependencies, "verify_session_cookie", fake_verify("cookie", {"uid": "u3"}))
    real_auth.cookies.set("session", "cookie")

    response = real_auth.post("/posts", json={"title": "t", "content": "c"})

    assert response.status_code == 201
    assert response.json()["user"] == "u3"


def test_login_sets_session_cookie(client, monkeypatch):
    monkeypatch.setattr(auth, "verify_id_token", lambda id_token, **kwargs: {"uid": "u1"})
    monkeypatch.setattr(auth, "create_session_cookie", lambda id_token, expires_in: f"session-for-{id_token}")

    response = client.post("/auth/login", json={"id_token": "abc"})

    assert response.status_code == 200
    assert response.json() == {"success": True, "user_id": "u1"}
    assert response.cookies.get("session") == "session-for-abc"


def test_login_rejects_bad_token(client, monkeypatch):
    def reject(id_token, **kwargs):
        raise auth.InvalidIdTokenError("expired")

    monkeypatch.setattr(auth, "verify_id_token", reject)

    response = client.post("/auth/login", json={"id_token": "abc"})

    assert response.status_code == 401


def test_verify_session(client, monkeypatch):
    monkeypatch.setattr(auth, "verify_session_cookie", lambda session_cookie, **kwargs: {"uid": "u1", "email": "alice@example.com"})
    client.cookies.set("session", "cookie")

    response = client.get("/auth/verify")

    assert response.status_code == 200
    assert response.json() == {"valid": True, "user": {"uid": "u1", "email": "alice@example.com"}}


def test_verify_without_cookie(client):
    assert client.get("/auth/verify").status_code == 401


def test_logout(client):
    response = client.post("/auth/logout")

    assert response.status_code == 200
    assert response.json() == {"success": True}


def test_log_records_carry_no_request_outside_a_request():
    record = logging.LogRecord("posts", logging.INFO, __file__, 1, "msg", None, None)

    assert RequestContextFilter().filter(record)
    assert record.request == "-"
