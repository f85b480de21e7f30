"""
===============================================================================
TARJETA CRC — backoffice/interfaces/api/http/routers/access.py
===============================================================================

Responsibilities:
    - GET  /modules: catálogo de módulos (lectura para el UI).
    - POST /access/decide: diagnóstico del motor (superadmin; incluye motivo).
    - GET  /access/check/{module}/{action}: verificación del actor actual en
      la agencia activa (X-Agence-Id) vía enforce_module_action. Es la misma
      guardia que usan los routers de módulos CRUD.

Collaborators:
    - domain.module_catalog (vía container)
    - EvaluateAccessUseCase
    - dependencies.enforce_module_action
===============================================================================
"""

from __future__ import annotations

from backoffice.application.usecases import EvaluateAccessUseCase
from backoffice.container import get_evaluate_access_use_case, get_module_catalog
from backoffice.crosscutting.error_responses import validation_error
from backoffice.domain.entities import User
from backoffice.identity.auth_users import require_user
from fastapi import APIRouter, Depends, Header

from ..dependencies import AGENCE_HEADER, enforce_module_action, parse_agence_id
from ..schemas.access import (
    ActionCheckRes,
    DecisionRes,
    EvaluateAccessReq,
    ModuleRes,
    ModulesListRes,
)

router = APIRouter(tags=["access"])


@router.get("/modules", response_model=ModulesListRes)
def list_modules(_actor: User = Depends(require_user())):
    catalog = get_module_catalog()
    return ModulesListRes(
        version=catalog.version,
        modules=[ModuleRes.from_domain(d) for d in catalog.list_modules()],
    )


@router.post("/access/decide", response_model=DecisionRes)
def evaluate_access(
    req: EvaluateAccessReq,
    use_case: EvaluateAccessUseCase = Depends(get_evaluate_access_use_case),
    actor: User = Depends(require_user()),
):
    decision = use_case.execute(
        req.user_id, req.agence_id, req.module, req.action, actor
    )
    return DecisionRes(
        verdict=decision.verdict.value,
        reason=decision.reason.value if decision.reason else None,
    )


@router.get("/access/check/{module}/{action}", response_model=ActionCheckRes)
def check_action(
    module: str,
    action: str,
    actor: User = Depends(require_user(allow_inactive=True)),
    agence_header: str | None = Header(None, alias=AGENCE_HEADER),
):
    if not get_module_catalog().has_module(module):
        raise validation_error(f"Módulo desconocido: {module!r}")

    access = enforce_module_action(
        actor, parse_agence_id(agence_header), module, action
    )
    return ActionCheckRes(
        agence_id=access.tenant.id, module=access.module, action=access.action
    )
