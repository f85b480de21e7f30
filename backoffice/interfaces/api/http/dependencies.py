"""
===============================================================================
TARJETA CRC — dependencies.py (Dependencias y helpers comunes)
===============================================================================

Responsabilidades:
  - require_module_action(module, action) y enforce_module_action: ÚNICO punto
    de enforcement inbound del motor de autorización para rutas de módulos
    de agencia.
      * resuelve el actor (snapshot fresco, incluso si no está activo)
      * resuelve la agencia activa (path `agence_id` o header X-Agence-Id)
      * decide() -> Allow | Deny(reason)
      * Deny: métrica + auditoría + log con el motivo; 403 genérico al cliente
  - Helpers chicos de parseo compartidos por routers.

Patrones aplicados:
  - Policy Enforcement Point (el motor es el Policy Decision Point).
  - Fail-closed: sin agencia resoluble no hay decisión posible.

Colaboradores:
  - domain.authorization.decide
  - container (repositorios, catálogo)
  - identity.auth_users.require_user
  - audit.emit_audit_event
  - crosscutting.metrics.record_access_decision
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable
from uuid import UUID

from backoffice.audit import emit_audit_event
from backoffice.container import (
    get_audit_repository,
    get_module_catalog,
    get_tenant_repository,
)
from backoffice.context import set_actor_context
from backoffice.crosscutting.error_responses import forbidden, not_found, validation_error
from backoffice.crosscutting.logger import logger
from backoffice.crosscutting.metrics import record_access_decision
from backoffice.domain.authorization import Decision, decide
from backoffice.domain.entities import AuthorizationContext, Tenant, User
from backoffice.identity.auth_users import require_user
from fastapi import Depends, Header, Request

AGENCE_HEADER = "X-Agence-Id"

# R: mensaje único para todo Deny (el motivo nunca sale al cliente).
ACCESS_DENIED_DETAIL = "Acceso denegado."


@dataclass(frozen=True)
class ModuleAccess:
    """Resultado de una decisión Allow (lo que el handler necesita)."""

    actor: User
    tenant: Tenant
    module: str
    action: str


def parse_agence_id(raw: str | None) -> UUID:
    """Valida el id de agencia recibido por header."""
    value = (raw or "").strip()
    if not value:
        raise validation_error(f"Falta el header {AGENCE_HEADER}.")
    try:
        return UUID(value)
    except ValueError:
        raise validation_error(f"{AGENCE_HEADER} debe ser un UUID.")


def _resolve_agence_id(request: Request, header_value: str | None) -> UUID:
    path_value = request.path_params.get("agence_id")
    if path_value:
        return parse_agence_id(str(path_value))
    return parse_agence_id(header_value)


def _record_deny(actor: User, tenant: Tenant, module: str, action: str, decision: Decision) -> None:
    reason = decision.reason.value if decision.reason else None
    logger.warning(
        "Acceso denegado",
        extra={
            "actor_id": str(actor.id),
            "agence_id": str(tenant.id),
            "module_id": module,
            "action": action,
            "reason": reason,
        },
    )
    emit_audit_event(
        get_audit_repository(),
        action="access.deny",
        actor=actor,
        target_id=tenant.id,
        agence_id=tenant.id,
        metadata={"module": module, "requested_action": action, "reason": reason},
    )


def enforce_module_action(
    actor: User, agence_id: UUID, module: str, action: str
) -> ModuleAccess:
    """
    Carga la agencia, evalúa decide() y aplica el resultado.

    Allow -> ModuleAccess. Deny -> métrica + auditoría + log; 403 genérico.
    """
    tenant = get_tenant_repository().get(agence_id)
    if tenant is None:
        raise not_found("Agence", str(agence_id))

    set_actor_context(actor_id=str(actor.id), agence_id=str(tenant.id))

    decision = decide(
        AuthorizationContext(actor=actor, tenant=tenant, module=module, action=action),
        catalog=get_module_catalog(),
    )
    record_access_decision(
        module,
        decision.verdict.value,
        decision.reason.value if decision.reason else None,
    )

    if not decision.allowed:
        _record_deny(actor, tenant, module, action, decision)
        raise forbidden(ACCESS_DENIED_DETAIL)

    return ModuleAccess(actor=actor, tenant=tenant, module=module, action=action)


def require_module_action(module: str, action: str) -> Callable:
    """
    Dependency FastAPI: exige Allow del motor para (module, action) en la
    agencia activa del request.
    """

    async def dependency(
        request: Request,
        actor: User = Depends(require_user(allow_inactive=True)),
        agence_header: str | None = Header(None, alias=AGENCE_HEADER),
    ) -> ModuleAccess:
        agence_id = _resolve_agence_id(request, agence_header)
        return enforce_module_action(actor, agence_id, module, action)

    return dependency


__all__ = [
    "AGENCE_HEADER",
    "ACCESS_DENIED_DETAIL",
    "ModuleAccess",
    "enforce_module_action",
    "parse_agence_id",
    "require_module_action",
]
