"""
Name: Pytest Configuration and Shared Fixtures

Responsibilities:
  - Configure test environment (APP_ENV=test => in-memory repositories)
  - Reset cached settings and container singletons between tests
  - Provide factories for tenants, users and grants

Collaborators:
  - pytest: Test framework
  - backoffice.container: composition root (lru_cache singletons)
  - backoffice.infrastructure.repositories.in_memory: fake persistence

Notes:
  - Fixtures are auto-discovered by pytest
  - Entities are frozen dataclasses: factories return ready snapshots
"""

import os
import sys
from pathlib import Path
from uuid import UUID, uuid4

import pytest

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

os.environ.setdefault("APP_ENV", "test")

from backoffice.crosscutting import config as app_config  # noqa: E402

app_config.Settings.model_config["env_file"] = None

from backoffice.container import clear_container_caches  # noqa: E402
from backoffice.domain.entities import (  # noqa: E402
    Grant,
    Tenant,
    TenantStatus,
    User,
    UserRole,
    UserStatus,
)
from backoffice.domain.module_catalog import BUILTIN_CATALOG  # noqa: E402
from backoffice.infrastructure.repositories import (  # noqa: E402
    InMemoryAuditEventRepository,
    InMemoryModuleRequestRepository,
    InMemoryTenantRepository,
    InMemoryUserRepository,
)


def pytest_configure(config) -> None:
    config.addinivalue_line(
        "markers", "unit: Unit tests (fast, no external dependencies)"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests (require DATABASE_URL)"
    )


@pytest.fixture(autouse=True)
def _reset_singletons():
    """R: Each test starts with fresh settings and empty repositories."""
    app_config.get_settings.cache_clear()
    clear_container_caches()
    yield
    app_config.get_settings.cache_clear()
    clear_container_caches()


# ============================================================================
# Test Data Factories
# ============================================================================


class TenantFactory:
    """R: Factory for tenant snapshots with custom attributes."""

    @staticmethod
    def create(
        *,
        status: TenantStatus = TenantStatus.APPROVED,
        active_modules: frozenset[str] | set[str] = frozenset(),
        requested_modules: frozenset[str] | set[str] = frozenset(),
        name: str = "Agence Atlas",
        email: str | None = None,
        tenant_id: UUID | None = None,
    ) -> Tenant:
        tenant_id = tenant_id or uuid4()
        return Tenant(
            id=tenant_id,
            name=name,
            email=email or f"contact-{tenant_id.hex[:8]}@atlas.test",
            phone="+33 1 23 45 67 89",
            address="12 rue de Rivoli, Paris",
            status=status,
            active_modules=frozenset(active_modules),
            requested_modules=frozenset(requested_modules),
        )


class UserFactory:
    """R: Factory for user snapshots (password_hash is opaque here)."""

    @staticmethod
    def create(
        *,
        role: UserRole = UserRole.AGENT,
        agences: tuple[UUID, ...] | list[UUID] = (),
        grants: tuple[Grant, ...] | list[Grant] = (),
        status: UserStatus = UserStatus.ACTIF,
        email: str | None = None,
        password_hash: str = "hash",
    ) -> User:
        user_id = uuid4()
        return User(
            id=user_id,
            email=email or f"{role.value}-{user_id.hex[:8]}@atlas.test",
            password_hash=password_hash,
            name="Durand",
            first_name="Camille",
            role=role,
            status=status,
            agences=tuple(agences),
            grants=tuple(grants),
        )

    @classmethod
    def superadmin(cls, **kwargs) -> User:
        return cls.create(role=UserRole.SUPERADMIN, **kwargs)

    @classmethod
    def owner_of(cls, tenant: Tenant, **kwargs) -> User:
        return cls.create(role=UserRole.AGENCE, agences=(tenant.id,), **kwargs)

    @classmethod
    def agent_of(cls, *tenants: Tenant, grants=(), **kwargs) -> User:
        return cls.create(
            role=UserRole.AGENT,
            agences=tuple(t.id for t in tenants),
            grants=grants,
            **kwargs,
        )


@pytest.fixture
def tenant_factory() -> type[TenantFactory]:
    return TenantFactory


@pytest.fixture
def user_factory() -> type[UserFactory]:
    return UserFactory


@pytest.fixture
def catalog():
    return BUILTIN_CATALOG


# ============================================================================
# In-memory repositories
# ============================================================================


@pytest.fixture
def tenant_repo() -> InMemoryTenantRepository:
    return InMemoryTenantRepository()


@pytest.fixture
def request_repo() -> InMemoryModuleRequestRepository:
    return InMemoryModuleRequestRepository()


@pytest.fixture
def user_repo() -> InMemoryUserRepository:
    return InMemoryUserRepository()


@pytest.fixture
def audit_repo() -> InMemoryAuditEventRepository:
    return InMemoryAuditEventRepository()
