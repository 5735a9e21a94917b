import pytest
from fastapi.testclient import TestClient

from dependencies import get_current_user, get_firestore
from main import app
from models.user import User
from services.firestore import FirestoreDB
from fake_firestore import FakeFirestoreClient

USERNAMES = {
    "u1": "alice",
    "u2": "bob",
    "u3": "carol",
}


@pytest.fixture
def fake_client():
    client = FakeFirestoreClient()
    for uid, username in USERNAMES.items():
        client.collection("users").document(uid).set({"username": username, "email": f"{username}@example.com"})
    return client


@pytest.fixture
def db(fake_client):
    return FirestoreDB(fake_client)


@pytest.fixture
def auth_as():
    """Switch the authenticated user for subsequent requests"""

    def _set(user_id):
        app.dependency_overrides[get_current_user] = lambda: User(user_id=user_id, email=f"{user_id}@example.com")

    return _set


@pytest.fixture
def client(db, auth_as):
    app.dependency_overrides[get_firestore] = lambda: db
    auth_as("u1")
    # not entered as a context manager: lifespan (Firebase init) is skipped
    yield TestClient(app)
    app.dependency_overrides.clear()
