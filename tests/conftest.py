"""Shared fixtures: a Flask app on a throwaway SQLite file and signed-in users."""

import pytest

from backend.app import create_app


@pytest.fixture
def app(tmp_path):
    app = create_app({
        "TESTING": True,
        "DB_PATH": str(tmp_path / "test.db"),
        "JWT_SECRET_KEY": "test-secret-key-with-enough-length-for-hs256",
    })
    yield app


@pytest.fixture
def client(app):
    return app.test_client()


def register_and_login(client, username, email, password="secret123"):
    r = client.post("/api/v1/users/register",
                    json={"username": username, "email": email, "password": password})
    assert r.status_code == 201, r.get_json()
    r = client.post("/api/v1/users/login", json={"email": email, "password": password})
    assert r.status_code == 200, r.get_json()
    body = r.get_json()
    return {"Authorization": f"Bearer {body['token']}"}, body["id"]


@pytest.fixture
def user_a(client):
    """Auth headers and id of a first user."""
    return register_and_login(client, "alice", "alice@example.com")


@pytest.fixture
def user_b(client):
    return register_and_login(client, "bob", "bob@example.com")


@pytest.fixture
def auth_a(user_a):
    return user_a[0]


@pytest.fixture
def auth_b(user_b):
    return user_b[0]
