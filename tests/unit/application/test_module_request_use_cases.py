"""
Name: Module Request Use Case Tests

Responsibilities:
  - Request creation by the agence owner (validation + bookkeeping)
  - Superadmin decision (approve activates, reject only clears)
  - Idempotent approval and optimistic concurrency on the request
  - Listing visibility
"""

from uuid import uuid4

import pytest
from backoffice.application.usecases import (
    DecideModuleRequestUseCase,
    ListModuleRequestsUseCase,
    RequestModulesUseCase,
)
from backoffice.crosscutting.exceptions import (
    ConflictError,
    InvalidStateError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from backoffice.domain.entities import (
    ApprovalDecision,
    RequestStatus,
    TenantStatus,
)

pytestmark = pytest.mark.unit


@pytest.fixture
def t1(tenant_repo, tenant_factory):
    return tenant_repo.create(tenant_factory.create(active_modules={"clients", "factures"}))


@pytest.fixture
def owner(user_factory, t1):
    return user_factory.owner_of(t1)


@pytest.fixture
def superadmin(user_factory):
    return user_factory.superadmin()


@pytest.fixture
def request_modules(tenant_repo, request_repo, catalog):
    return RequestModulesUseCase(tenant_repo, request_repo, catalog)


@pytest.fixture
def decide_request(request_repo, tenant_repo):
    return DecideModuleRequestUseCase(request_repo, tenant_repo)


# ============================================================================
# Request
# ============================================================================


def test_owner_requests_modules(request_modules, tenant_repo, t1, owner):
    request = request_modules.execute(
        t1.id, ["caisse", "caisse", " crm "], "Besoin de la caisse", owner
    )

    assert request.status == RequestStatus.PENDING
    assert request.modules == ("caisse", "crm")
    assert request.requested_by == owner.id
    stored = tenant_repo.get(t1.id)
    assert stored.requested_modules == {"caisse", "crm"}
    assert stored.active_modules == {"clients", "factures"}


def test_only_the_owner_may_request(request_modules, t1, user_factory, superadmin):
    agent = user_factory.agent_of(t1)

    for actor in (agent, superadmin, None):
        with pytest.raises(PermissionDeniedError):
            request_modules.execute(t1.id, ["caisse"], "msg", actor)


@pytest.mark.parametrize(
    "modules, message",
    [([], "msg"), (["  "], "msg"), (["inexistant"], "msg"), (["caisse"], "   ")],
)
def test_request_validation(request_modules, t1, owner, modules, message):
    with pytest.raises(ValidationError):
        request_modules.execute(t1.id, modules, message, owner)


def test_request_on_suspended_tenant_is_invalid_state(
    request_modules, tenant_repo, tenant_factory, user_factory
):
    tenant = tenant_repo.create(tenant_factory.create(status=TenantStatus.SUSPENDED))

    with pytest.raises(InvalidStateError):
        request_modules.execute(
            tenant.id, ["caisse"], "msg", user_factory.owner_of(tenant)
        )


# ============================================================================
# Decision
# ============================================================================


def test_approve_adds_module_to_entitlement(
    request_modules, decide_request, tenant_repo, t1, owner, superadmin
):
    request = request_modules.execute(t1.id, ["caisse"], "msg", owner)

    decided = decide_request.execute(
        request.id, ApprovalDecision.APPROVE, "  ok  ", superadmin
    )

    assert decided.status == RequestStatus.APPROVED
    assert decided.admin_comment == "ok"
    assert decided.decided_by == superadmin.id
    assert decided.decided_at is not None
    tenant = tenant_repo.get(t1.id)
    assert tenant.active_modules == {"clients", "factures", "caisse"}
    assert tenant.requested_modules == frozenset()

    with pytest.raises(InvalidStateError):
        decide_request.execute(request.id, ApprovalDecision.APPROVE, None, superadmin)


def test_reject_clears_pending_without_activation(
    request_modules, decide_request, tenant_repo, t1, owner, superadmin
):
    request = request_modules.execute(t1.id, ["caisse"], "msg", owner)

    decided = decide_request.execute(request.id, ApprovalDecision.REJECT, "", superadmin)

    assert decided.status == RequestStatus.REJECTED
    assert decided.admin_comment is None
    tenant = tenant_repo.get(t1.id)
    assert tenant.active_modules == {"clients", "factures"}
    assert tenant.requested_modules == frozenset()


def test_approving_same_module_twice_is_idempotent(
    request_modules, decide_request, tenant_repo, t1, owner, superadmin
):
    first = request_modules.execute(t1.id, ["caisse"], "msg", owner)
    decide_request.execute(first.id, ApprovalDecision.APPROVE, None, superadmin)
    once = tenant_repo.get(t1.id).active_modules

    second = request_modules.execute(t1.id, ["caisse"], "encore", owner)
    decide_request.execute(second.id, ApprovalDecision.APPROVE, None, superadmin)

    assert tenant_repo.get(t1.id).active_modules == once


def test_only_superadmin_decides(request_modules, decide_request, t1, owner):
    request = request_modules.execute(t1.id, ["caisse"], "msg", owner)

    with pytest.raises(PermissionDeniedError):
        decide_request.execute(request.id, ApprovalDecision.APPROVE, None, owner)


def test_decide_unknown_request(decide_request, superadmin):
    with pytest.raises(NotFoundError):
        decide_request.execute(uuid4(), ApprovalDecision.APPROVE, None, superadmin)


def test_stale_request_version_leaves_tenant_untouched(
    request_modules, decide_request, tenant_repo, t1, owner, superadmin
):
    request = request_modules.execute(t1.id, ["caisse"], "msg", owner)
    before = tenant_repo.get(t1.id)

    with pytest.raises(ConflictError) as exc_info:
        decide_request.execute(
            request.id,
            ApprovalDecision.APPROVE,
            None,
            superadmin,
            expected_version=request.version + 1,
        )

    assert exc_info.value.aggregate == "module_request"
    assert tenant_repo.get(t1.id) == before


# ============================================================================
# Listing
# ============================================================================


def test_list_requests_visibility(
    request_modules, request_repo, tenant_repo, tenant_factory, user_factory, t1, owner, superadmin
):
    other = tenant_repo.create(tenant_factory.create())
    request_modules.execute(t1.id, ["caisse"], "msg", owner)
    request_modules.execute(other.id, ["crm"], "msg", user_factory.owner_of(other))
    use_case = ListModuleRequestsUseCase(request_repo)

    assert len(use_case.execute(superadmin)) == 2
    assert [r.agence_id for r in use_case.execute(owner)] == [t1.id]
    assert use_case.execute(superadmin, status=RequestStatus.APPROVED) == []

    with pytest.raises(PermissionDeniedError):
        use_case.execute(owner, agence_id=other.id)
    with pytest.raises(PermissionDeniedError):
        use_case.execute(user_factory.agent_of(t1))
