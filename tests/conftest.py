import pytest
from fastapi.testclient import TestClient

from ingestor.config import Settings
from ingestor.repository import InMemoryLogRepository, InMemoryUserRepository
from main import create_app

SECRET = "test-secret-0123456789abcdef-0123456789"


@pytest.fixture
def settings():
    # plaintext keeps the API tests fast; hashing is covered in test_credentials
    return Settings(jwt_secret=SECRET, password_scheme="plaintext")


@pytest.fixture
def users():
    return InMemoryUserRepository()


@pytest.fixture
def logs():
    return InMemoryLogRepository()


@pytest.fixture
def client(settings, users, logs):
    return TestClient(create_app(settings, users=users, logs=logs))


def _bearer(client, username, role):
    resp = client.post("/register", json={"username": username, "password": "pw", "role": role})
    assert resp.status_code == 201
    resp = client.post("/login", json={"username": username, "password": "pw"})
    assert resp.status_code == 200
    return {"Authorization": f"Bearer {resp.json()['token']}"}


@pytest.fixture
def admin_headers(client):
    return _bearer(client, "root", "admin")


@pytest.fixture
def user_headers(client):
    return _bearer(client, "alice", "user")
