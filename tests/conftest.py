"""
Test fixtures for the DSA Tracker API.

Every test gets a fresh application wired to in-memory tables and a
temporary upload directory.
"""
import os
import tempfile

import pytest
from fastapi.testclient import TestClient

os.environ.setdefault("STORE_BACKEND", "memory")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="dsa-uploads-"))

from app.core.config import Settings  # noqa: E402
from app.core.security import PasswordHasher, TokenService  # noqa: E402
from app.db.tables import build_tables  # noqa: E402
from app.main import create_app  # noqa: E402
from app.services.auth_service import AuthService, UserRepository  # noqa: E402


@pytest.fixture
def settings(tmp_path):
    return Settings(
        STORE_BACKEND="memory",
        BCRYPT_ROUNDS=4,
        JWT_SECRET="test-access-secret",
        JWT_REFRESH_SECRET="test-refresh-secret",
        UPLOAD_DIR=str(tmp_path / "uploads"),
        S3_BUCKET=None,
        ENVIRONMENT="test",
    )


@pytest.fixture
def tables(settings):
    return build_tables(settings)


@pytest.fixture
def tokens(settings):
    return TokenService(settings)


@pytest.fixture
def hasher():
    return PasswordHasher(rounds=4)


@pytest.fixture
def auth_service(tables, tokens, hasher):
    return AuthService(UserRepository(tables.users), tokens, hasher)


@pytest.fixture
def app(settings, tables):
    return create_app(settings, tables)


@pytest.fixture
def client(app):
    return TestClient(app)


def signup(client, email, password="secret1", name="Test User"):
    return client.post("/api/auth/signup", json={"email": email, "password": password, "name": name})


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers(client):
    """First signup in an empty store, therefore an admin."""
    resp = signup(client, "admin@example.com", name="Admin")
    assert resp.json()["user"]["role"] == "admin"
    return bearer(resp.json()["accessToken"])


@pytest.fixture
def user_headers(client, admin_headers):
    resp = signup(client, "user@example.com", name="Regular")
    assert resp.json()["user"]["role"] == "user"
    return bearer(resp.json()["accessToken"])
