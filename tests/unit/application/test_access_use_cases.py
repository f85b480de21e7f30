"""
Name: Access Use Case Tests

Responsibilities:
  - Accessible modules (navigation) per actor, incl. pending entries
  - Superadmin diagnostics over decide()
"""

from uuid import uuid4

import pytest
from backoffice.application.usecases import (
    EvaluateAccessUseCase,
    ListAccessibleModulesUseCase,
)
from backoffice.crosscutting.exceptions import (
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from backoffice.domain.authorization import DenyReason, Verdict
from backoffice.domain.entities import Grant

pytestmark = pytest.mark.unit


@pytest.fixture
def t1(tenant_repo, tenant_factory):
    return tenant_repo.create(
        tenant_factory.create(
            active_modules={"clients", "factures"}, requested_modules={"caisse"}
        )
    )


def test_accessible_modules_for_agent(tenant_repo, catalog, user_factory, t1):
    agent = user_factory.agent_of(t1, grants=(Grant("factures", ("lire",)),))

    result = ListAccessibleModulesUseCase(tenant_repo, catalog).execute(t1.id, agent)

    assert result.tenant_id == t1.id
    assert result.modules == ("factures",)
    assert result.pending_modules == ("caisse",)


def test_accessible_modules_hides_foreign_tenant(
    tenant_repo, catalog, tenant_factory, user_factory, t1
):
    other = tenant_repo.create(tenant_factory.create())
    use_case = ListAccessibleModulesUseCase(tenant_repo, catalog)

    with pytest.raises(NotFoundError):
        use_case.execute(other.id, user_factory.owner_of(t1))
    with pytest.raises(NotFoundError):
        use_case.execute(uuid4(), user_factory.superadmin())
    with pytest.raises(PermissionDeniedError):
        use_case.execute(t1.id, None)


def test_evaluate_access_reports_reason(
    tenant_repo, user_repo, catalog, user_factory, t1
):
    agent = user_repo.create(
        user_factory.agent_of(t1, grants=(Grant("clients", ("lire",)),))
    )
    use_case = EvaluateAccessUseCase(user_repo, tenant_repo, catalog)
    superadmin = user_factory.superadmin()

    allowed = use_case.execute(agent.id, t1.id, "clients", "lire", superadmin)
    denied = use_case.execute(agent.id, t1.id, "clients", "creer", superadmin)

    assert allowed.verdict == Verdict.ALLOW
    assert denied.reason == DenyReason.ACTION_NOT_GRANTED


def test_evaluate_access_guards(tenant_repo, user_repo, catalog, user_factory, t1):
    agent = user_repo.create(user_factory.agent_of(t1))
    use_case = EvaluateAccessUseCase(user_repo, tenant_repo, catalog)
    superadmin = user_factory.superadmin()

    with pytest.raises(PermissionDeniedError):
        use_case.execute(agent.id, t1.id, "clients", "lire", agent)
    with pytest.raises(ValidationError):
        use_case.execute(agent.id, t1.id, "inexistant", "lire", superadmin)
    with pytest.raises(NotFoundError):
        use_case.execute(uuid4(), t1.id, "clients", "lire", superadmin)
    with pytest.raises(NotFoundError):
        use_case.execute(agent.id, uuid4(), "clients", "lire", superadmin)
