"""
===============================================================================
TARJETA CRC — backoffice/interfaces/api/http/routers/agences.py
===============================================================================

Class/Module:
    Agences Router

Responsibilities:
    - Wizard de inscripción (público).
    - Lectura de agencias (visibilidad por actor).
    - Workflow de aprobación y suspensión (superadmin).
    - Módulos navegables del actor en la agencia.
    - Registrar auditoría (best-effort) y métricas de workflow.

Collaborators:
    - backoffice.application.usecases (tenants / access)
    - backoffice.identity.auth_users.require_user
    - backoffice.audit.emit_audit_event
    - backoffice.container (factories DI)
    - schemas.agences (DTOs Pydantic)

Patterns:
    - Controller / Router
    - Adapter (HTTP -> UseCase)
===============================================================================
"""

from __future__ import annotations

from uuid import UUID

from backoffice.application.usecases import (
    DecideTenantApprovalUseCase,
    GetTenantUseCase,
    ListAccessibleModulesUseCase,
    ListTenantsUseCase,
    RegisterAgencyUseCase,
    ReinstateTenantUseCase,
    SuspendTenantUseCase,
)
from backoffice.audit import emit_audit_event
from backoffice.container import (
    get_audit_repository,
    get_decide_tenant_approval_use_case,
    get_get_tenant_use_case,
    get_list_accessible_modules_use_case,
    get_list_tenants_use_case,
    get_register_agency_use_case,
    get_reinstate_tenant_use_case,
    get_suspend_tenant_use_case,
)
from backoffice.crosscutting.metrics import record_workflow_decision
from backoffice.domain.entities import ApprovalDecision, TenantStatus, User, UserProfile
from backoffice.domain.repositories import AuditEventRepository
from backoffice.identity.auth_users import require_user
from fastapi import APIRouter, Depends, Query

from ..schemas.agences import (
    AccessibleModulesRes,
    AgenceRes,
    AgencesListRes,
    RegisterAgencyReq,
    RegisterAgencyRes,
    VersionedActionReq,
)
from ..schemas.users import UserRes

router = APIRouter(prefix="/agences", tags=["agences"])


def _expected_version(req: VersionedActionReq | None) -> int | None:
    """Body opcional: sin versión => CAS contra el snapshot leído por el caso de uso."""
    return req.expected_version if req is not None else None


# =============================================================================
# Endpoints
# =============================================================================


@router.post("", response_model=RegisterAgencyRes, status_code=201)
def register_agency(
    req: RegisterAgencyReq,
    use_case: RegisterAgencyUseCase = Depends(get_register_agency_use_case),
    audit_repo: AuditEventRepository = Depends(get_audit_repository),
):
    result = use_case.execute(
        req.to_profile(),
        UserProfile(
            email=req.owner.email,
            password=req.owner.password,
            name=req.owner.name,
            first_name=req.owner.first_name,
        ),
    )

    emit_audit_event(
        audit_repo,
        action="agence.register",
        actor=result.owner,
        target_id=result.tenant.id,
        agence_id=result.tenant.id,
        metadata={"requested_modules": sorted(result.tenant.requested_modules)},
    )
    return RegisterAgencyRes(
        agence=AgenceRes.from_domain(result.tenant),
        owner=UserRes.from_domain(result.owner),
    )


@router.get("", response_model=AgencesListRes)
def list_agences(
    status: TenantStatus | None = Query(None),
    use_case: ListTenantsUseCase = Depends(get_list_tenants_use_case),
    actor: User = Depends(require_user()),
):
    tenants = use_case.execute(actor, status=status)
    return AgencesListRes(agences=[AgenceRes.from_domain(t) for t in tenants])


@router.get("/{agence_id}", response_model=AgenceRes)
def get_agence(
    agence_id: UUID,
    use_case: GetTenantUseCase = Depends(get_get_tenant_use_case),
    actor: User = Depends(require_user()),
):
    return AgenceRes.from_domain(use_case.execute(agence_id, actor))


def _decide(
    agence_id: UUID,
    decision: ApprovalDecision,
    req: VersionedActionReq | None,
    use_case: DecideTenantApprovalUseCase,
    actor: User,
    audit_repo: AuditEventRepository,
) -> AgenceRes:
    tenant = use_case.execute(
        agence_id, decision, actor, expected_version=_expected_version(req)
    )
    record_workflow_decision("tenant", decision.value)
    emit_audit_event(
        audit_repo,
        action=f"agence.{decision.value}",
        actor=actor,
        target_id=tenant.id,
        agence_id=tenant.id,
        metadata={
            "status": tenant.status.value,
            "active_modules": sorted(tenant.active_modules),
        },
    )
    return AgenceRes.from_domain(tenant)


@router.post("/{agence_id}/approve", response_model=AgenceRes)
def approve_agence(
    agence_id: UUID,
    req: VersionedActionReq | None = None,
    use_case: DecideTenantApprovalUseCase = Depends(get_decide_tenant_approval_use_case),
    actor: User = Depends(require_user()),
    audit_repo: AuditEventRepository = Depends(get_audit_repository),
):
    return _decide(
        agence_id, ApprovalDecision.APPROVE, req, use_case, actor, audit_repo
    )


@router.post("/{agence_id}/reject", response_model=AgenceRes)
def reject_agence(
    agence_id: UUID,
    req: VersionedActionReq | None = None,
    use_case: DecideTenantApprovalUseCase = Depends(get_decide_tenant_approval_use_case),
    actor: User = Depends(require_user()),
    audit_repo: AuditEventRepository = Depends(get_audit_repository),
):
    return _decide(
        agence_id, ApprovalDecision.REJECT, req, use_case, actor, audit_repo
    )


@router.post("/{agence_id}/suspend", response_model=AgenceRes)
def suspend_agence(
    agence_id: UUID,
    req: VersionedActionReq | None = None,
    use_case: SuspendTenantUseCase = Depends(get_suspend_tenant_use_case),
    actor: User = Depends(require_user()),
    audit_repo: AuditEventRepository = Depends(get_audit_repository),
):
    tenant = use_case.execute(agence_id, actor, expected_version=_expected_version(req))
    emit_audit_event(
        audit_repo,
        action="agence.suspend",
        actor=actor,
        target_id=tenant.id,
        agence_id=tenant.id,
    )
    return AgenceRes.from_domain(tenant)


@router.post("/{agence_id}/reinstate", response_model=AgenceRes)
def reinstate_agence(
    agence_id: UUID,
    req: VersionedActionReq | None = None,
    use_case: ReinstateTenantUseCase = Depends(get_reinstate_tenant_use_case),
    actor: User = Depends(require_user()),
    audit_repo: AuditEventRepository = Depends(get_audit_repository),
):
    tenant = use_case.execute(agence_id, actor, expected_version=_expected_version(req))
    emit_audit_event(
        audit_repo,
        action="agence.reinstate",
        actor=actor,
        target_id=tenant.id,
        agence_id=tenant.id,
    )
    return AgenceRes.from_domain(tenant)


@router.get("/{agence_id}/modules/accessible", response_model=AccessibleModulesRes)
def accessible_modules(
    agence_id: UUID,
    use_case: ListAccessibleModulesUseCase = Depends(
        get_list_accessible_modules_use_case
    ),
    actor: User = Depends(require_user()),
):
    result = use_case.execute(agence_id, actor)
    return AccessibleModulesRes(
        agence_id=result.tenant_id,
        modules=list(result.modules),
        pending_modules=list(result.pending_modules),
    )
