"""
===============================================================================
TARJETA CRC — backoffice/interfaces/api/http/routers/users.py
===============================================================================

Responsibilities:
    - Alta de usuarios/agentes (superadmin o dueño de agencia).
    - Lectura (visibilidad por actor).
    - Reemplazo de grants y cambio de estado con compare-and-set.
    - Auditoría best-effort de cada mutación.

Collaborators:
    - CreateUserUseCase / UpdateGrantsUseCase / SetUserStatusUseCase
    - GetUserUseCase / ListUsersUseCase
    - identity.auth_users.require_user
===============================================================================
"""

from __future__ import annotations

from uuid import UUID

from backoffice.application.usecases import (
    CreateUserUseCase,
    GetUserUseCase,
    ListUsersUseCase,
    SetUserStatusUseCase,
    UpdateGrantsUseCase,
)
from backoffice.audit import emit_audit_event
from backoffice.container import (
    get_audit_repository,
    get_create_user_use_case,
    get_get_user_use_case,
    get_list_users_use_case,
    get_set_user_status_use_case,
    get_update_grants_use_case,
)
from backoffice.domain.entities import User, UserProfile, UserRole
from backoffice.domain.repositories import AuditEventRepository
from backoffice.identity.auth_users import require_user
from fastapi import APIRouter, Depends, Query

from ..schemas.users import (
    CreateUserReq,
    SetUserStatusReq,
    UpdateGrantsReq,
    UserRes,
    UsersListRes,
)

router = APIRouter(prefix="/users", tags=["users"])


@router.post("", response_model=UserRes, status_code=201)
def create_user(
    req: CreateUserReq,
    use_case: CreateUserUseCase = Depends(get_create_user_use_case),
    actor: User = Depends(require_user()),
    audit_repo: AuditEventRepository = Depends(get_audit_repository),
):
    user = use_case.execute(
        UserProfile(
            email=req.email,
            password=req.password,
            name=req.name,
            first_name=req.first_name,
        ),
        role=req.role,
        tenant_bindings=req.agences,
        grants=[g.to_domain() for g in req.grants],
        actor=actor,
    )
    emit_audit_event(
        audit_repo,
        action="user.create",
        actor=actor,
        target_id=user.id,
        metadata={
            "role": user.role.value,
            "agences": [str(a) for a in user.agences],
            "grants": [g.module for g in user.grants],
        },
    )
    return UserRes.from_domain(user)


@router.get("", response_model=UsersListRes)
def list_users(
    agence_id: UUID | None = Query(None),
    role: UserRole | None = Query(None),
    use_case: ListUsersUseCase = Depends(get_list_users_use_case),
    actor: User = Depends(require_user()),
):
    users = use_case.execute(actor, agence_id=agence_id, role=role)
    return UsersListRes(users=[UserRes.from_domain(u) for u in users])


@router.get("/{user_id}", response_model=UserRes)
def get_user(
    user_id: UUID,
    use_case: GetUserUseCase = Depends(get_get_user_use_case),
    actor: User = Depends(require_user()),
):
    return UserRes.from_domain(use_case.execute(user_id, actor))


@router.put("/{user_id}/grants", response_model=UserRes)
def update_grants(
    user_id: UUID,
    req: UpdateGrantsReq,
    use_case: UpdateGrantsUseCase = Depends(get_update_grants_use_case),
    actor: User = Depends(require_user()),
    audit_repo: AuditEventRepository = Depends(get_audit_repository),
):
    user = use_case.execute(
        user_id,
        [g.to_domain() for g in req.grants],
        actor,
        expected_version=req.expected_version,
    )
    emit_audit_event(
        audit_repo,
        action="user.grants.update",
        actor=actor,
        target_id=user.id,
        metadata={
            "grants": {g.module: list(g.actions) for g in user.grants},
        },
    )
    return UserRes.from_domain(user)


@router.patch("/{user_id}/status", response_model=UserRes)
def set_user_status(
    user_id: UUID,
    req: SetUserStatusReq,
    use_case: SetUserStatusUseCase = Depends(get_set_user_status_use_case),
    actor: User = Depends(require_user()),
    audit_repo: AuditEventRepository = Depends(get_audit_repository),
):
    user = use_case.execute(
        user_id, req.status, actor, expected_version=req.expected_version
    )
    emit_audit_event(
        audit_repo,
        action="user.status.update",
        actor=actor,
        target_id=user.id,
        metadata={"status": user.status.value},
    )
    return UserRes.from_domain(user)
