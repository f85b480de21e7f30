"""
===============================================================================
USE CASE: Decide Module Request (workflow de entitlement)
===============================================================================

Business Goal:
    Un superadmin aprueba o rechaza una solicitud de módulos. Aprobar es el
    ÚNICO camino (además de la aprobación inicial de la agencia) por el que
    crece active_modules.

-------------------------------------------------------------------------------
CRC CARD (Class-Responsibility-Collaborator)
-------------------------------------------------------------------------------
Class:
    DecideModuleRequestUseCase

Responsibilities:
    - Solo superadmin (PermissionDeniedError).
    - Solo solicitudes pending (InvalidStateError).
    - Cerrar la solicitud con compare-and-set (ConflictError si otro admin
      decidió en paralelo).
    - Aplicar la decisión en la agencia con una operación atómica:
        approve -> requested -= mods, active |= mods
        reject  -> requested -= mods

Collaborators:
    - ModuleRequestRepository: get / update(expected_version)
    - TenantRepository: apply_module_decision

-------------------------------------------------------------------------------
IDEMPOTENCIA
-------------------------------------------------------------------------------
Aprobar un módulo ya activo es una unión sin efecto (no falla ni duplica).
Re-decidir la misma solicitud falla con InvalidStateError.
===============================================================================
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional
from uuid import UUID

from ....crosscutting.exceptions import InvalidStateError, NotFoundError
from ....domain.entities import (
    ApprovalDecision,
    ModuleRequest,
    RequestStatus,
    User,
    utcnow,
)
from ....domain.repositories import ModuleRequestRepository, TenantRepository
from ..actor_checks import ensure_superadmin

logger = logging.getLogger(__name__)


class DecideModuleRequestUseCase:
    """Command: approve/reject de una ModuleRequest pending."""

    def __init__(
        self,
        request_repository: ModuleRequestRepository,
        tenant_repository: TenantRepository,
    ) -> None:
        self._requests = request_repository
        self._tenants = tenant_repository

    def execute(
        self,
        request_id: UUID,
        decision: ApprovalDecision,
        comment: Optional[str],
        actor: Optional[User],
        *,
        expected_version: int | None = None,
    ) -> ModuleRequest:
        ensure_superadmin(actor, "decidir una solicitud de módulos")
        decision = ApprovalDecision(decision)

        request = self._requests.get(request_id)
        if request is None:
            raise NotFoundError("ModuleRequest", request_id)
        if not request.is_pending:
            raise InvalidStateError(
                f"La solicitud ya fue decidida (estado: {request.status.value})."
            )

        approve = decision == ApprovalDecision.APPROVE
        decided = self._requests.update(
            replace(
                request,
                status=RequestStatus.APPROVED if approve else RequestStatus.REJECTED,
                admin_comment=(comment or "").strip() or None,
                decided_by=actor.id,
                decided_at=utcnow(),
            ),
            expected_version=(
                expected_version if expected_version is not None else request.version
            ),
        )

        # R: la solicitud ya quedó cerrada; la agencia se ajusta en un solo paso atómico.
        tenant = self._tenants.apply_module_decision(
            decided.agence_id, module_ids=decided.modules, activate=approve
        )

        logger.info(
            "Solicitud de módulos decidida",
            extra={
                "module_request_id": str(decided.id),
                "agence_id": str(decided.agence_id),
                "decision": decision.value,
                "active_modules": sorted(tenant.active_modules),
                "actor_id": str(actor.id),
            },
        )
        return decided
