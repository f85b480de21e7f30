"""
===============================================================================
TARJETA CRC — domain/audit.py
===============================================================================

Módulo:
    Evento de auditoría (append-only)

Campos:
    actor       "user:<uuid>" | "anonymous"
    actor_role  rol del actor al momento del evento
    action      "<agregado>.<verbo>" (agence.approve, access.deny, ...)
    target_id   agregado afectado
    agence_id   agencia en cuyo alcance ocurrió (None para eventos globales)
    metadata    detalle serializable a JSON (ej. reason de un Deny)

Colaboradores:
    - backoffice/audit.py (emit_audit_event)
    - domain.repositories.AuditEventRepository
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from uuid import UUID

ANONYMOUS_ACTOR = "anonymous"


@dataclass(frozen=True, slots=True)
class AuditEvent:
    id: UUID
    actor: str
    action: str
    actor_role: str = ANONYMOUS_ACTOR
    target_id: UUID | None = None
    agence_id: UUID | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    created_at: datetime | None = None
