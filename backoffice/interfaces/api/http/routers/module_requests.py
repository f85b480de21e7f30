"""
===============================================================================
TARJETA CRC — backoffice/interfaces/api/http/routers/module_requests.py
===============================================================================

Responsibilities:
    - POST /agences/{agence_id}/module-requests: el dueño pide módulos.
    - GET  /module-requests: listado (superadmin: todas; dueño: las suyas).
    - POST /module-requests/{id}/approve|reject: decisión del superadmin.
    - Auditoría best-effort + métricas de workflow.

Collaborators:
    - RequestModulesUseCase / DecideModuleRequestUseCase / ListModuleRequestsUseCase
    - identity.auth_users.require_user
    - audit.emit_audit_event
===============================================================================
"""

from __future__ import annotations

from uuid import UUID

from backoffice.application.usecases import (
    DecideModuleRequestUseCase,
    ListModuleRequestsUseCase,
    RequestModulesUseCase,
)
from backoffice.audit import emit_audit_event
from backoffice.container import (
    get_audit_repository,
    get_decide_module_request_use_case,
    get_list_module_requests_use_case,
    get_request_modules_use_case,
)
from backoffice.crosscutting.metrics import record_workflow_decision
from backoffice.domain.entities import ApprovalDecision, RequestStatus, User
from backoffice.domain.repositories import AuditEventRepository
from backoffice.identity.auth_users import require_user
from fastapi import APIRouter, Depends, Query

from ..schemas.agences import (
    CreateModuleRequestReq,
    DecideModuleRequestReq,
    ModuleRequestRes,
    ModuleRequestsListRes,
)

router = APIRouter(tags=["module-requests"])


@router.post(
    "/agences/{agence_id}/module-requests",
    response_model=ModuleRequestRes,
    status_code=201,
)
def create_module_request(
    agence_id: UUID,
    req: CreateModuleRequestReq,
    use_case: RequestModulesUseCase = Depends(get_request_modules_use_case),
    actor: User = Depends(require_user()),
    audit_repo: AuditEventRepository = Depends(get_audit_repository),
):
    request = use_case.execute(agence_id, req.modules, req.message, actor)
    emit_audit_event(
        audit_repo,
        action="modules.request",
        actor=actor,
        target_id=request.id,
        agence_id=agence_id,
        metadata={"modules": list(request.modules)},
    )
    return ModuleRequestRes.from_domain(request)


@router.get("/module-requests", response_model=ModuleRequestsListRes)
def list_module_requests(
    agence_id: UUID | None = Query(None),
    status: RequestStatus | None = Query(None),
    use_case: ListModuleRequestsUseCase = Depends(get_list_module_requests_use_case),
    actor: User = Depends(require_user()),
):
    requests = use_case.execute(actor, agence_id=agence_id, status=status)
    return ModuleRequestsListRes(
        requests=[ModuleRequestRes.from_domain(r) for r in requests]
    )


def _decide(
    request_id: UUID,
    decision: ApprovalDecision,
    req: DecideModuleRequestReq | None,
    use_case: DecideModuleRequestUseCase,
    actor: User,
    audit_repo: AuditEventRepository,
) -> ModuleRequestRes:
    req = req or DecideModuleRequestReq()
    request = use_case.execute(
        request_id,
        decision,
        req.comment,
        actor,
        expected_version=req.expected_version,
    )
    record_workflow_decision("module_request", decision.value)
    emit_audit_event(
        audit_repo,
        action=f"modules.{decision.value}",
        actor=actor,
        target_id=request.id,
        agence_id=request.agence_id,
        metadata={"modules": list(request.modules)},
    )
    return ModuleRequestRes.from_domain(request)


@router.post("/module-requests/{request_id}/approve", response_model=ModuleRequestRes)
def approve_module_request(
    request_id: UUID,
    req: DecideModuleRequestReq | None = None,
    use_case: DecideModuleRequestUseCase = Depends(get_decide_module_request_use_case),
    actor: User = Depends(require_user()),
    audit_repo: AuditEventRepository = Depends(get_audit_repository),
):
    return _decide(
        request_id, ApprovalDecision.APPROVE, req, use_case, actor, audit_repo
    )


@router.post("/module-requests/{request_id}/reject", response_model=ModuleRequestRes)
def reject_module_request(
    request_id: UUID,
    req: DecideModuleRequestReq | None = None,
    use_case: DecideModuleRequestUseCase = Depends(get_decide_module_request_use_case),
    actor: User = Depends(require_user()),
    audit_repo: AuditEventRepository = Depends(get_audit_repository),
):
    return _decide(
        request_id, ApprovalDecision.REJECT, req, use_case, actor, audit_repo
    )
