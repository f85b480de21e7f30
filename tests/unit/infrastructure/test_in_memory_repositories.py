"""
Name: In-Memory Repository Tests

Responsibilities:
  - Compare-and-set semantics (version bump, ConflictError on stale writes)
  - Atomic set operations on requested/active modules
  - Concurrent writers: exactly one winner per version
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from uuid import uuid4

import pytest
from backoffice.crosscutting.exceptions import (
    ConflictError,
    NotFoundError,
    ValidationError,
)
from backoffice.domain.entities import TenantStatus

pytestmark = pytest.mark.unit


def test_create_assigns_version_and_timestamps(tenant_repo, tenant_factory):
    tenant = tenant_repo.create(tenant_factory.create())

    assert tenant.version == 1
    assert tenant.created_at is not None
    assert tenant.updated_at is not None


def test_create_rejects_duplicate_email(tenant_repo, tenant_factory):
    tenant_repo.create(tenant_factory.create(email="a@atlas.test"))

    with pytest.raises(ValidationError):
        tenant_repo.create(tenant_factory.create(email="A@ATLAS.test"))


def test_update_bumps_version_and_rejects_stale(tenant_repo, tenant_factory):
    tenant = tenant_repo.create(tenant_factory.create())

    updated = tenant_repo.update(
        replace(tenant, status=TenantStatus.SUSPENDED), expected_version=1
    )
    assert updated.version == 2

    with pytest.raises(ConflictError) as exc_info:
        tenant_repo.update(replace(tenant, name="Autre"), expected_version=1)
    assert exc_info.value.expected_version == 1
    assert tenant_repo.get(tenant.id).name == tenant.name


def test_update_unknown_tenant(tenant_repo, tenant_factory):
    with pytest.raises(NotFoundError):
        tenant_repo.update(tenant_factory.create(), expected_version=1)


def test_delete_frees_contact_email(tenant_repo, tenant_factory):
    tenant = tenant_repo.create(tenant_factory.create(email="gone@atlas.test"))

    tenant_repo.delete(tenant.id)
    tenant_repo.delete(tenant.id)

    assert tenant_repo.get(tenant.id) is None
    assert tenant_repo.create(tenant_factory.create(email="gone@atlas.test")).version == 1


def test_concurrent_writers_single_winner(tenant_repo, tenant_factory):
    tenant = tenant_repo.create(tenant_factory.create(status=TenantStatus.PENDING))

    def attempt(status: TenantStatus) -> str:
        try:
            tenant_repo.update(replace(tenant, status=status), expected_version=1)
            return "ok"
        except ConflictError:
            return "conflict"

    statuses = [TenantStatus.APPROVED, TenantStatus.REJECTED] * 8
    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(attempt, statuses))

    assert results.count("ok") == 1
    assert results.count("conflict") == len(statuses) - 1
    assert tenant_repo.get(tenant.id).version == 2


def test_module_set_operations_are_commutative(tenant_repo, tenant_factory):
    tenant = tenant_repo.create(tenant_factory.create(active_modules={"clients"}))

    tenant_repo.add_requested_modules(tenant.id, ["caisse", "crm"])
    after_reject = tenant_repo.apply_module_decision(
        tenant.id, module_ids=["crm"], activate=False
    )
    assert after_reject.requested_modules == {"caisse"}
    assert after_reject.active_modules == {"clients"}

    once = tenant_repo.apply_module_decision(
        tenant.id, module_ids=["caisse"], activate=True
    )
    twice = tenant_repo.apply_module_decision(
        tenant.id, module_ids=["caisse"], activate=True
    )
    assert once.active_modules == twice.active_modules == {"clients", "caisse"}
    assert twice.requested_modules == frozenset()
    assert twice.version == once.version + 1


def test_set_operations_on_unknown_tenant(tenant_repo):
    with pytest.raises(NotFoundError):
        tenant_repo.add_requested_modules(uuid4(), ["caisse"])


def test_list_tenants_filters(tenant_repo, tenant_factory):
    approved = tenant_repo.create(tenant_factory.create(name="A"))
    pending = tenant_repo.create(
        tenant_factory.create(name="B", status=TenantStatus.PENDING)
    )

    assert [t.id for t in tenant_repo.list_tenants(status=TenantStatus.PENDING)] == [
        pending.id
    ]
    assert [t.id for t in tenant_repo.list_tenants(tenant_ids=[approved.id])] == [
        approved.id
    ]


def test_user_repository_cas(user_repo, user_factory):
    user = user_repo.create(user_factory.create())

    user_repo.update(replace(user, name="Nouveau"), expected_version=1)

    with pytest.raises(ConflictError) as exc_info:
        user_repo.update(replace(user, name="Perdu"), expected_version=1)
    assert exc_info.value.aggregate == "user"
    assert user_repo.get(user.id).name == "Nouveau"


def test_list_users_by_agence(user_repo, user_factory, tenant_factory):
    tenant = tenant_factory.create()
    bound = user_repo.create(user_factory.agent_of(tenant))
    user_repo.create(user_factory.create())

    assert [u.id for u in user_repo.list_users(agence_id=tenant.id)] == [bound.id]
