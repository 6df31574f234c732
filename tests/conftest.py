import pytest
from fastapi.testclient import TestClient

from bookkeep.app import create_app
from bookkeep.auth.jwt_handler import JWTHandler
from bookkeep.config import Config
from bookkeep.storage import InMemoryBookStore, InMemoryUserStore

TEST_SECRET = "test-secret-key-for-testing-only"


@pytest.fixture(autouse=True)
def fast_bcrypt(monkeypatch):
    """Minimum bcrypt cost keeps the suite quick."""
    monkeypatch.setattr("bookkeep.auth.password.BCRYPT_ROUNDS", 4)


@pytest.fixture
def jwt_handler():
    return JWTHandler(secret_key=TEST_SECRET, algorithm="HS256", access_token_expire_minutes=60)


@pytest.fixture
def user_store():
    return InMemoryUserStore()


@pytest.fixture
def book_store():
    return InMemoryBookStore()


@pytest.fixture
def settings():
    settings = Config()
    settings.JWT_SECRET_KEY = TEST_SECRET
    settings.STORAGE_BACKEND = "memory"
    settings.API_PREFIX = "/api"
    return settings


@pytest.fixture
def app(settings, user_store, book_store, jwt_handler):
    return create_app(settings, user_store=user_store, book_store=book_store, jwt_handler=jwt_handler)


@pytest.fixture
def client(app):
    return TestClient(app)


def _register_and_login(client, username, email, password="pw1"):
    response = client.post(
        "/api/auth/register",
        json={"username": username, "email": email, "password": password},
    )
    assert response.status_code == 201, response.text
    response = client.post("/api/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return response.json()["token"]


@pytest.fixture
def register_and_login(client):
    """Register a user and return the bearer token from login."""
    return lambda username, email, password="pw1": _register_and_login(client, username, email, password)


def _bearer(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def bearer():
    return _bearer


@pytest.fixture
def alice_token(client):
    return _register_and_login(client, "alice", "a@x.com", "pw1")


@pytest.fixture
def bob_token(client):
    return _register_and_login(client, "bob", "b@x.com", "pw2")


@pytest.fixture
def dune():
    return {"title": "Dune", "author": "Herbert", "totalPages": 412, "genre": "Sci-Fi"}
