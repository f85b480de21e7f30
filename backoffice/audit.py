"""
===============================================================================
TARJETA CRC — backoffice/audit.py (Emisión de auditoría)
===============================================================================

Responsabilidades:
  - Armar AuditEvent a partir del actor autenticado (id + rol).
  - Llevar metadata a tipos JSON (enums -> value, sets -> lista ordenada).
  - Persistir best-effort: una falla del repositorio se loguea y no corta
    la operación de negocio que ya se confirmó.

Acciones:
  - agence.register | agence.approve | agence.reject | agence.suspend | agence.reinstate
  - modules.request | modules.approve | modules.reject
  - user.create | user.grants.update | user.status.update
  - auth.login
  - access.deny  (metadata: module, requested_action, reason)

Colaboradores:
  - domain.audit.AuditEvent / domain.repositories.AuditEventRepository
  - crosscutting.logger
===============================================================================
"""

from __future__ import annotations

from enum import Enum
from typing import Any
from uuid import UUID, uuid4

from .crosscutting.logger import logger
from .domain.audit import ANONYMOUS_ACTOR, AuditEvent
from .domain.entities import User
from .domain.repositories import AuditEventRepository


def _jsonable(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {str(k): _jsonable(v) for k, v in value.items()}
    if isinstance(value, (set, frozenset)):
        return sorted(_jsonable(v) for v in value)
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    return str(value)


def build_audit_event(
    *,
    action: str,
    actor: User | None = None,
    target_id: UUID | None = None,
    agence_id: UUID | None = None,
    metadata: dict[str, Any] | None = None,
) -> AuditEvent:
    return AuditEvent(
        id=uuid4(),
        actor=f"user:{actor.id}" if actor else ANONYMOUS_ACTOR,
        actor_role=actor.role.value if actor else ANONYMOUS_ACTOR,
        action=action,
        target_id=target_id,
        agence_id=agence_id,
        metadata=_jsonable(metadata or {}),
    )


def emit_audit_event(
    repository: AuditEventRepository | None,
    *,
    action: str,
    actor: User | None = None,
    target_id: UUID | None = None,
    agence_id: UUID | None = None,
    metadata: dict[str, Any] | None = None,
) -> None:
    """Registra el evento; nunca propaga fallas del repositorio."""
    if repository is None:
        return

    event = build_audit_event(
        action=action,
        actor=actor,
        target_id=target_id,
        agence_id=agence_id,
        metadata=metadata,
    )
    try:
        repository.record_event(event)
    except Exception as exc:
        logger.warning(
            "No se pudo registrar el evento de auditoría",
            extra={"audit_action": action, "error": str(exc)},
        )
