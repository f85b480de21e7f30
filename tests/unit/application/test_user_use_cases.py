"""
Name: User / Agent Directory Use Case Tests

Responsibilities:
  - createUser: bindings, grant subset invariant, actor rights
  - authenticate: generic failure for every cause
  - updateGrants / setUserStatus: owner vs superadmin rights, CAS
  - Read side visibility
"""

from dataclasses import replace
from uuid import uuid4

import pytest
from backoffice.application.usecases import (
    AuthenticateUserUseCase,
    CreateUserUseCase,
    GetUserUseCase,
    ListUsersUseCase,
    SetUserStatusUseCase,
    UpdateGrantsUseCase,
)
from backoffice.crosscutting.exceptions import (
    AuthenticationError,
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from backoffice.domain.entities import (
    Grant,
    TenantStatus,
    UserProfile,
    UserRole,
    UserStatus,
)

pytestmark = pytest.mark.unit


def _hasher(password: str) -> str:
    return f"hashed:{password}"


def _verifier(password: str, password_hash: str) -> bool:
    return password_hash == f"hashed:{password}"


def _profile(email: str = "agent@atlas.test", password: str = "motdepasse"):
    return UserProfile(email=email, password=password, name="Martin", first_name="Lea")


@pytest.fixture
def t1(tenant_repo, tenant_factory):
    return tenant_repo.create(
        tenant_factory.create(active_modules={"clients", "factures", "rapports"})
    )


@pytest.fixture
def t2(tenant_repo, tenant_factory):
    return tenant_repo.create(tenant_factory.create(active_modules={"caisse"}))


@pytest.fixture
def superadmin(user_factory):
    return user_factory.superadmin()


@pytest.fixture
def create_user(user_repo, tenant_repo, catalog):
    return CreateUserUseCase(user_repo, tenant_repo, catalog, password_hasher=_hasher)


@pytest.fixture
def stored_owner(user_repo, user_factory, t1):
    return user_repo.create(user_factory.owner_of(t1))


# ============================================================================
# createUser
# ============================================================================


def test_create_agent_with_valid_grants(create_user, t1, superadmin):
    user = create_user.execute(
        _profile(email=" Agent@Atlas.test "),
        role=UserRole.AGENT,
        tenant_bindings=[t1.id],
        grants=[Grant("clients", ("lire", "creer", "lire"))],
        actor=superadmin,
    )

    assert user.email == "agent@atlas.test"
    assert user.password_hash == "hashed:motdepasse"
    assert user.grants == (Grant("clients", ("lire", "creer")),)
    assert user.agences == (t1.id,)
    assert user.status == UserStatus.ACTIF


def test_grant_with_unrecognized_action_is_rejected(create_user, t1, superadmin):
    with pytest.raises(ValidationError, match="supprimer"):
        create_user.execute(
            _profile(),
            role=UserRole.AGENT,
            tenant_bindings=[t1.id],
            grants=[Grant("rapports", ("supprimer",))],
            actor=superadmin,
        )


def test_grant_outside_entitlement_is_rejected(create_user, t1, superadmin):
    with pytest.raises(ValidationError, match="caisse"):
        create_user.execute(
            _profile(),
            role=UserRole.AGENT,
            tenant_bindings=[t1.id],
            grants=[Grant("caisse", ("lire",))],
            actor=superadmin,
        )


def test_multi_tenant_agent_grants_use_union_of_entitlements(
    create_user, t1, t2, superadmin
):
    user = create_user.execute(
        _profile(),
        role=UserRole.AGENT,
        tenant_bindings=[t1.id, t2.id],
        grants=[Grant("clients", ("lire",)), Grant("caisse", ("lire",))],
        actor=superadmin,
    )

    assert user.agences == (t1.id, t2.id)


@pytest.mark.parametrize(
    "grants",
    [
        [Grant("inexistant", ("lire",))],
        [Grant("clients", ())],
        [Grant("clients", ("lire",)), Grant("clients", ("creer",))],
    ],
)
def test_invalid_grants(create_user, t1, superadmin, grants):
    with pytest.raises(ValidationError):
        create_user.execute(
            _profile(),
            role=UserRole.AGENT,
            tenant_bindings=[t1.id],
            grants=grants,
            actor=superadmin,
        )


def test_binding_rules(create_user, t1, t2, superadmin):
    cases = [
        (UserRole.AGENT, []),
        (UserRole.AGENCE, [t1.id, t2.id]),
        (UserRole.SUPERADMIN, [t1.id]),
        (UserRole.AGENT, [uuid4()]),
    ]
    for role, bindings in cases:
        with pytest.raises(ValidationError):
            create_user.execute(
                _profile(), role=role, tenant_bindings=bindings, actor=superadmin
            )


def test_superadmin_takes_no_grants(create_user, superadmin):
    with pytest.raises(ValidationError):
        create_user.execute(
            _profile(),
            role=UserRole.SUPERADMIN,
            tenant_bindings=[],
            grants=[Grant("clients", ("lire",))],
            actor=superadmin,
        )


def test_password_and_email_validation(create_user, t1, superadmin):
    with pytest.raises(ValidationError):
        create_user.execute(
            _profile(password="court"),
            role=UserRole.AGENT,
            tenant_bindings=[t1.id],
            actor=superadmin,
        )
    with pytest.raises(ValidationError):
        create_user.execute(
            _profile(email="sans-arobase"),
            role=UserRole.AGENT,
            tenant_bindings=[t1.id],
            actor=superadmin,
        )


def test_duplicate_email_is_rejected(create_user, t1, superadmin):
    create_user.execute(
        _profile(), role=UserRole.AGENT, tenant_bindings=[t1.id], actor=superadmin
    )

    with pytest.raises(ValidationError):
        create_user.execute(
            _profile(email="AGENT@atlas.test"),
            role=UserRole.AGENT,
            tenant_bindings=[t1.id],
            actor=superadmin,
        )


def test_owner_creates_agents_only_in_own_tenant(
    create_user, t1, t2, stored_owner
):
    agent = create_user.execute(
        _profile(),
        role=UserRole.AGENT,
        tenant_bindings=[t1.id],
        grants=[Grant("clients", ("lire",))],
        actor=stored_owner,
    )
    assert agent.role == UserRole.AGENT

    with pytest.raises(PermissionDeniedError):
        create_user.execute(
            _profile(email="x@atlas.test"),
            role=UserRole.AGENT,
            tenant_bindings=[t1.id, t2.id],
            actor=stored_owner,
        )
    with pytest.raises(PermissionDeniedError):
        create_user.execute(
            _profile(email="y@atlas.test"),
            role=UserRole.AGENCE,
            tenant_bindings=[t1.id],
            actor=stored_owner,
        )


def test_agent_cannot_create_users(create_user, t1, user_factory):
    with pytest.raises(PermissionDeniedError):
        create_user.execute(
            _profile(),
            role=UserRole.AGENT,
            tenant_bindings=[t1.id],
            actor=user_factory.agent_of(t1),
        )


# ============================================================================
# authenticate
# ============================================================================


@pytest.fixture
def authenticate(user_repo):
    return AuthenticateUserUseCase(user_repo, password_verifier=_verifier)


def test_authenticate_ok(authenticate, user_repo, user_factory):
    user = user_repo.create(
        user_factory.superadmin(email="admin@atlas.test", password_hash=_hasher("secret123"))
    )

    assert authenticate.execute("ADMIN@atlas.test", "secret123").id == user.id


def test_authenticate_failures_are_generic(authenticate, user_repo, user_factory):
    user_repo.create(
        user_factory.superadmin(email="admin@atlas.test", password_hash=_hasher("secret123"))
    )
    user_repo.create(
        user_factory.create(
            email="suspendu@atlas.test",
            password_hash=_hasher("secret123"),
            status=UserStatus.SUSPENDU,
        )
    )

    messages = set()
    for email, password in [
        ("inconnu@atlas.test", "secret123"),
        ("admin@atlas.test", "mauvais"),
        ("suspendu@atlas.test", "secret123"),
        ("", ""),
    ]:
        with pytest.raises(AuthenticationError) as exc_info:
            authenticate.execute(email, password)
        messages.add(exc_info.value.message)

    assert len(messages) == 1


def test_unknown_email_still_verifies_against_dummy_hash(user_repo):
    checked = []

    def recording_verifier(password: str, password_hash: str) -> bool:
        checked.append((password, password_hash))
        return False

    authenticate = AuthenticateUserUseCase(
        user_repo,
        password_verifier=recording_verifier,
        dummy_password_hash="dummy-hash",
    )

    with pytest.raises(AuthenticationError):
        authenticate.execute("inconnu@atlas.test", "secret123")

    assert checked == [("secret123", "dummy-hash")]


# ============================================================================
# updateGrants
# ============================================================================


@pytest.fixture
def stored_agent(user_repo, user_factory, t1):
    return user_repo.create(
        user_factory.agent_of(t1, grants=(Grant("clients", ("lire",)),))
    )


@pytest.fixture
def update_grants(user_repo, tenant_repo, catalog):
    return UpdateGrantsUseCase(user_repo, tenant_repo, catalog)


def test_owner_replaces_agent_grants(update_grants, stored_agent, stored_owner):
    updated = update_grants.execute(
        stored_agent.id,
        [Grant("factures", ("lire", "exporter"))],
        stored_owner,
    )

    assert updated.grants == (Grant("factures", ("lire", "exporter")),)
    assert updated.version == stored_agent.version + 1


def test_update_grants_validates_against_current_entitlement(
    update_grants, stored_agent, superadmin
):
    with pytest.raises(ValidationError):
        update_grants.execute(stored_agent.id, [Grant("caisse", ("lire",))], superadmin)


def test_update_grants_rights(update_grants, stored_agent, user_factory, tenant_repo, tenant_factory, t1):
    other_owner = user_factory.owner_of(tenant_repo.create(tenant_factory.create()))

    for actor in (other_owner, user_factory.agent_of(t1), None):
        with pytest.raises(PermissionDeniedError):
            update_grants.execute(stored_agent.id, [], actor)


def test_update_grants_with_stale_version(update_grants, stored_agent, superadmin):
    update_grants.execute(stored_agent.id, [], superadmin)

    with pytest.raises(ConflictError):
        update_grants.execute(
            stored_agent.id,
            [Grant("clients", ("creer",))],
            superadmin,
            expected_version=stored_agent.version,
        )


def test_update_grants_unknown_user(update_grants, superadmin):
    with pytest.raises(NotFoundError):
        update_grants.execute(uuid4(), [], superadmin)


def test_grant_update_ignores_tenant_suspension(
    update_grants, stored_agent, superadmin, tenant_repo, t1
):
    """Grant validation looks at entitlement only; suspension is the engine's job."""
    suspended = tenant_repo.update(
        replace(tenant_repo.get(t1.id), status=TenantStatus.SUSPENDED),
        expected_version=tenant_repo.get(t1.id).version,
    )
    assert suspended.status == TenantStatus.SUSPENDED

    updated = update_grants.execute(
        stored_agent.id, [Grant("clients", ("modifier",))], superadmin
    )

    assert updated.grants == (Grant("clients", ("modifier",)),)


# ============================================================================
# setUserStatus
# ============================================================================


@pytest.fixture
def set_status(user_repo):
    return SetUserStatusUseCase(user_repo)


def test_owner_suspends_and_reactivates_agent(set_status, stored_agent, stored_owner):
    suspended = set_status.execute(stored_agent.id, UserStatus.SUSPENDU, stored_owner)
    active = set_status.execute(stored_agent.id, UserStatus.ACTIF, stored_owner)

    assert suspended.status == UserStatus.SUSPENDU
    assert active.status == UserStatus.ACTIF


def test_same_status_is_a_noop(set_status, stored_agent, stored_owner):
    result = set_status.execute(stored_agent.id, UserStatus.ACTIF, stored_owner)

    assert result.version == stored_agent.version


def test_owner_limits(set_status, stored_agent, stored_owner, user_repo, user_factory):
    with pytest.raises(ValidationError):
        set_status.execute(stored_agent.id, UserStatus.REJETE, stored_owner)

    admin = user_repo.create(user_factory.superadmin())
    with pytest.raises(PermissionDeniedError):
        set_status.execute(admin.id, UserStatus.SUSPENDU, user_factory.superadmin())
    with pytest.raises(PermissionDeniedError):
        set_status.execute(stored_owner.id, UserStatus.SUSPENDU, stored_owner)


def test_superadmin_may_reject_owner(set_status, stored_owner, superadmin):
    result = set_status.execute(stored_owner.id, UserStatus.REJETE, superadmin)

    assert result.status == UserStatus.REJETE


# ============================================================================
# Read side
# ============================================================================


def test_get_user_visibility(user_repo, stored_agent, stored_owner, user_factory, tenant_repo, tenant_factory):
    use_case = GetUserUseCase(user_repo)
    outsider = user_factory.owner_of(tenant_repo.create(tenant_factory.create()))

    assert use_case.execute(stored_agent.id, stored_owner).id == stored_agent.id
    assert use_case.execute(stored_agent.id, stored_agent).id == stored_agent.id
    with pytest.raises(NotFoundError):
        use_case.execute(stored_agent.id, outsider)


def test_list_users_visibility(user_repo, stored_agent, stored_owner, superadmin, t1, t2):
    use_case = ListUsersUseCase(user_repo)

    assert {u.id for u in use_case.execute(stored_owner)} == {
        stored_agent.id,
        stored_owner.id,
    }
    assert [u.id for u in use_case.execute(superadmin, role=UserRole.AGENT)] == [
        stored_agent.id
    ]
    with pytest.raises(PermissionDeniedError):
        use_case.execute(stored_owner, agence_id=t2.id)
    with pytest.raises(PermissionDeniedError):
        use_case.execute(stored_agent)
