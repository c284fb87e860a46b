"""
Fixtures for HTTP-level tests.

The app is built fresh per test and its data-access dependencies are
overridden with the in-memory services from the top-level conftest.
"""

import bcrypt
import pytest
from fastapi.testclient import TestClient

from api.app import create_app
from api.dependencies import (
    get_auth_service,
    get_token_service,
    get_user_repository,
)
from modules.users.models import UserRole

DEFAULT_PASSWORD = "Secr3t!pass"


@pytest.fixture
def app(user_repo, token_service, auth_service):
    """Create a fresh app wired to in-memory storage."""
    app = create_app()
    app.dependency_overrides[get_user_repository] = lambda: user_repo
    app.dependency_overrides[get_token_service] = lambda: token_service
    app.dependency_overrides[get_auth_service] = lambda: auth_service
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)


@pytest.fixture
def stored_user(user_repo):
    """Factory inserting a user with a real bcrypt hash."""

    def _stored_user(
        email: str = "student@ecolearn.org",
        password: str = DEFAULT_PASSWORD,
        role: UserRole = UserRole.STUDENT,
        name: str = "Test User",
    ):
        password_hash = bcrypt.hashpw(
            password.encode("utf-8"), bcrypt.gensalt(rounds=4)
        ).decode("utf-8")
        return user_repo.add(name=name, email=email, password_hash=password_hash, role=role)

    return _stored_user


@pytest.fixture
def login(client, stored_user):
    """Create a user and log in over HTTP, returning ``(user, session data)``."""

    def _login(
        email: str = "student@ecolearn.org",
        password: str = DEFAULT_PASSWORD,
        role: UserRole = UserRole.STUDENT,
    ):
        user = stored_user(email=email, password=password, role=role)
        response = client.post("/api/auth/login", json={"email": email, "password": password})
        assert response.status_code == 200, response.text
        return user, response.json()["data"]

    return _login
