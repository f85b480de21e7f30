"""
Name: API Test Fixtures

Responsibilities:
  - Provide a TestClient over backoffice.api.main:app (in-memory storage)
  - Seed a superadmin and log users in through /v1/auth/login
"""

from uuid import uuid4

import pytest
from backoffice.container import get_user_repository
from backoffice.domain.entities import User, UserRole
from backoffice.identity.passwords import hash_password
from fastapi.testclient import TestClient

SUPERADMIN_EMAIL = "root@backoffice.test"
SUPERADMIN_PASSWORD = "superadmin-pass"


@pytest.fixture
def client() -> TestClient:
    from backoffice.api.main import app

    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture
def seeded_superadmin() -> User:
    return get_user_repository().create(
        User(
            id=uuid4(),
            email=SUPERADMIN_EMAIL,
            password_hash=hash_password(SUPERADMIN_PASSWORD),
            name="Root",
            role=UserRole.SUPERADMIN,
        )
    )


def _login(client: TestClient, email: str, password: str) -> dict[str, str]:
    response = client.post("/v1/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture
def login_as(client):
    """Callable (email, password) -> headers Authorization del usuario logueado."""

    def _login_as(email: str, password: str) -> dict[str, str]:
        return _login(client, email, password)

    return _login_as


@pytest.fixture
def admin_headers(client, seeded_superadmin) -> dict[str, str]:
    return _login(client, SUPERADMIN_EMAIL, SUPERADMIN_PASSWORD)
