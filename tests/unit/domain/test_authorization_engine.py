"""
Name: Authorization Decision Engine Tests

Responsibilities:
  - Cover the ordered rule table (first match wins, default Deny)
  - Reference scenarios (agent grants, suspended tenant)
  - Properties: fail-closed, superadmin universality, suspension precedence
  - Malformed input raises AuthorizationInputError (Deny is never an exception)
"""

import itertools

import pytest
from backoffice.crosscutting.exceptions import AuthorizationInputError
from backoffice.domain.authorization import (
    DenyReason,
    Verdict,
    decide,
    list_accessible_modules,
)
from backoffice.domain.entities import (
    AuthorizationContext,
    Grant,
    TenantStatus,
    UserRole,
    UserStatus,
)
from backoffice.domain.module_catalog import BUILTIN_CATALOG

pytestmark = pytest.mark.unit


def _ctx(actor, tenant, module, action):
    return AuthorizationContext(actor=actor, tenant=tenant, module=module, action=action)


@pytest.fixture
def t1(tenant_factory):
    return tenant_factory.create(active_modules={"clients", "factures"})


@pytest.fixture
def a1(user_factory, t1):
    return user_factory.agent_of(t1, grants=(Grant("clients", ("lire",)),))


# ============================================================================
# Reference scenarios
# ============================================================================


def test_agent_with_read_grant(t1, a1):
    creer = decide(_ctx(a1, t1, "clients", "creer"))
    lire = decide(_ctx(a1, t1, "clients", "lire"))
    factures = decide(_ctx(a1, t1, "factures", "lire"))

    assert creer.verdict == Verdict.DENY
    assert creer.reason == DenyReason.ACTION_NOT_GRANTED
    assert lire.allowed
    assert lire.reason is None
    assert factures.reason == DenyReason.ACTION_NOT_GRANTED


def test_owner_of_suspended_tenant_is_denied(tenant_factory, user_factory):
    t2 = tenant_factory.create(
        status=TenantStatus.SUSPENDED, active_modules={"clients"}
    )
    o2 = user_factory.owner_of(t2)

    decision = decide(_ctx(o2, t2, "clients", "lire"))

    assert decision.reason == DenyReason.TENANT_NOT_ACTIVE


# ============================================================================
# Rule table
# ============================================================================


def test_inactive_actor_is_denied_first(t1, user_factory):
    superadmin = user_factory.superadmin(status=UserStatus.SUSPENDU)

    decision = decide(_ctx(superadmin, None, "inexistant", "lire"))

    assert decision.reason == DenyReason.ACTOR_INACTIVE


@pytest.mark.parametrize("status", [UserStatus.EN_ATTENTE, UserStatus.REJETE])
def test_non_active_statuses_are_denied(t1, user_factory, status):
    owner = user_factory.owner_of(t1, status=status)

    assert decide(_ctx(owner, t1, "clients", "lire")).reason == DenyReason.ACTOR_INACTIVE


@pytest.mark.parametrize(
    "status",
    [TenantStatus.PENDING, TenantStatus.REJECTED, TenantStatus.SUSPENDED],
)
def test_tenant_outside_approved_is_denied(tenant_factory, user_factory, status):
    tenant = tenant_factory.create(status=status, active_modules={"clients"})
    owner = user_factory.owner_of(tenant)

    assert decide(_ctx(owner, tenant, "clients", "lire")).reason == (
        DenyReason.TENANT_NOT_ACTIVE
    )


def test_module_not_entitled(t1, user_factory):
    owner = user_factory.owner_of(t1)

    decision = decide(_ctx(owner, t1, "caisse", "lire"))

    assert decision.reason == DenyReason.MODULE_NOT_ENTITLED


def test_owner_has_full_access_to_active_modules(t1, user_factory):
    owner = user_factory.owner_of(t1)

    for action in ("lire", "creer", "modifier", "supprimer", "exporter"):
        assert decide(_ctx(owner, t1, "clients", action)).allowed


def test_owner_with_unrecognized_action_falls_to_default(t1, user_factory):
    owner = user_factory.owner_of(t1)

    decision = decide(_ctx(owner, t1, "clients", "archiver"))

    assert decision.reason == DenyReason.NO_MATCHING_RULE


def test_owner_of_other_tenant_gets_no_matching_rule(t1, tenant_factory, user_factory):
    other = tenant_factory.create(active_modules={"clients"})
    stranger = user_factory.owner_of(other)

    assert decide(_ctx(stranger, t1, "clients", "lire")).reason == (
        DenyReason.NO_MATCHING_RULE
    )


def test_agent_not_bound_to_tenant_is_not_granted(t1, tenant_factory, user_factory):
    other = tenant_factory.create(active_modules={"clients"})
    agent = user_factory.agent_of(other, grants=(Grant("clients", ("lire",)),))

    assert decide(_ctx(agent, t1, "clients", "lire")).reason == (
        DenyReason.ACTION_NOT_GRANTED
    )


def test_multi_tenant_agent_uses_active_tenant_entitlement(tenant_factory, user_factory):
    with_caisse = tenant_factory.create(active_modules={"caisse"})
    without_caisse = tenant_factory.create(active_modules={"clients"})
    agent = user_factory.agent_of(
        with_caisse, without_caisse, grants=(Grant("caisse", ("lire",)),)
    )

    assert decide(_ctx(agent, with_caisse, "caisse", "lire")).allowed
    assert decide(_ctx(agent, without_caisse, "caisse", "lire")).reason == (
        DenyReason.MODULE_NOT_ENTITLED
    )


# ============================================================================
# Malformed input
# ============================================================================


def test_missing_actor_raises(t1):
    with pytest.raises(AuthorizationInputError):
        decide(_ctx(None, t1, "clients", "lire"))


def test_missing_tenant_raises_for_non_superadmin(user_factory):
    agent = user_factory.create(role=UserRole.AGENT)

    with pytest.raises(AuthorizationInputError):
        decide(_ctx(agent, None, "clients", "lire"))


def test_unknown_module_raises_for_non_superadmin(t1, a1):
    with pytest.raises(AuthorizationInputError):
        decide(_ctx(a1, t1, "inexistant", "lire"))


# ============================================================================
# Properties
# ============================================================================


def test_superadmin_universality(tenant_factory, user_factory):
    superadmin = user_factory.superadmin()
    tenants = [tenant_factory.create(status=s) for s in TenantStatus] + [None]
    modules = [d.id for d in BUILTIN_CATALOG.list_modules()] + ["inexistant", ""]
    actions = ["lire", "creer", "purger"]

    for tenant, module, action in itertools.product(tenants, modules, actions):
        assert decide(_ctx(superadmin, tenant, module, action)).allowed


def test_suspension_precedence_over_any_grant(tenant_factory, user_factory):
    every_grant = tuple(
        Grant(d.id, tuple(sorted(d.actions))) for d in BUILTIN_CATALOG.list_modules()
    )
    tenant = tenant_factory.create(
        status=TenantStatus.SUSPENDED,
        active_modules={d.id for d in BUILTIN_CATALOG.list_modules()},
    )
    agent = user_factory.agent_of(tenant, grants=every_grant)

    for definition in BUILTIN_CATALOG.list_modules():
        for action in definition.actions:
            decision = decide(_ctx(agent, tenant, definition.id, action))
            assert decision.reason == DenyReason.TENANT_NOT_ACTIVE


def test_fail_closed_for_unmatched_tuples(t1, user_factory):
    actors = [
        user_factory.agent_of(t1),
        user_factory.create(role=UserRole.AGENCE, agences=()),
        user_factory.create(role=UserRole.AGENT, agences=()),
    ]
    for actor in actors:
        for definition in BUILTIN_CATALOG.list_modules():
            for action in definition.actions:
                assert not decide(_ctx(actor, t1, definition.id, action)).allowed


# ============================================================================
# Accessible modules
# ============================================================================


def test_list_accessible_modules_for_agent(t1, a1):
    assert list_accessible_modules(a1, t1) == ["clients"]


def test_list_accessible_modules_for_owner(t1, user_factory):
    owner = user_factory.owner_of(t1)

    assert list_accessible_modules(owner, t1) == ["clients", "factures"]


def test_list_accessible_modules_for_superadmin_is_full_catalog(t1, user_factory):
    superadmin = user_factory.superadmin()

    assert list_accessible_modules(superadmin, t1) == [
        d.id for d in BUILTIN_CATALOG.list_modules()
    ]


def test_list_accessible_modules_empty_for_suspended_agent(t1, user_factory):
    agent = user_factory.agent_of(
        t1, grants=(Grant("clients", ("lire",)),), status=UserStatus.SUSPENDU
    )

    assert list_accessible_modules(agent, t1) == []
