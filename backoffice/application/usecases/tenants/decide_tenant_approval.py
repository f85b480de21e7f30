"""
===============================================================================
USE CASE: Decide Tenant Approval (workflow de activación de agencia)
===============================================================================

Business Goal:
    Un superadmin aprueba o rechaza una agencia `pending`.

-------------------------------------------------------------------------------
CRC CARD (Class-Responsibility-Collaborator)
-------------------------------------------------------------------------------
Class:
    DecideTenantApprovalUseCase

Responsibilities:
    - Verificar que el actor sea superadmin (PermissionDeniedError).
    - Verificar estado elegible: solo `pending` (InvalidStateError).
    - Aprobar: status approved + módulos elegidos en la inscripción pasan
      de requested_modules a active_modules.
    - Rechazar: status rejected (terminal).
    - Escribir con compare-and-set (ConflictError si otro admin ganó).
    - Best-effort: activar/rechazar cuentas de dueño en `en_attente`.

Collaborators:
    - TenantRepository: get / update(expected_version)
    - UserRepository: list_users / update(expected_version)
    - ModuleCatalog: filtra módulos que ya no existen

-------------------------------------------------------------------------------
CONCURRENCY
-------------------------------------------------------------------------------
Dos superadmins deciden a la vez (approve vs reject): ambos leen version N,
solo uno escribe N+1; el otro recibe ConflictError. Al recargar ve el estado
ya decidido y obtiene InvalidStateError.
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
    Tenant,
    TenantStatus,
    User,
    UserRole,
    UserStatus,
)
from ....domain.module_catalog import ModuleCatalog
from ....domain.repositories import TenantRepository, UserRepository
from ..actor_checks import ensure_superadmin

logger = logging.getLogger(__name__)


class DecideTenantApprovalUseCase:
    """Command: approve/reject de una agencia pending."""

    def __init__(
        self,
        tenant_repository: TenantRepository,
        user_repository: UserRepository,
        catalog: ModuleCatalog,
    ) -> None:
        self._tenants = tenant_repository
        self._users = user_repository
        self._catalog = catalog

    def execute(
        self,
        tenant_id: UUID,
        decision: ApprovalDecision,
        actor: Optional[User],
        *,
        expected_version: int | None = None,
    ) -> Tenant:
        ensure_superadmin(actor, "decidir la aprobación de una agencia")

        tenant = self._tenants.get(tenant_id)
        if tenant is None:
            raise NotFoundError("Agence", tenant_id)

        if tenant.status != TenantStatus.PENDING:
            raise InvalidStateError(
                f"La agencia ya fue decidida (estado: {tenant.status.value})."
            )

        decision = ApprovalDecision(decision)
        if decision == ApprovalDecision.APPROVE:
            chosen = frozenset(m for m in tenant.requested_modules if m in self._catalog)
            updated = replace(
                tenant,
                status=TenantStatus.APPROVED,
                active_modules=tenant.active_modules | chosen,
                requested_modules=frozenset(),
            )
        else:
            updated = replace(tenant, status=TenantStatus.REJECTED)

        stored = self._tenants.update(
            updated,
            expected_version=(
                expected_version if expected_version is not None else tenant.version
            ),
        )

        logger.info(
            "Agencia decidida",
            extra={
                "agence_id": str(stored.id),
                "decision": decision.value,
                "actor_id": str(actor.id),
            },
        )

        self._settle_pending_owners(stored, decision)
        return stored

    def _settle_pending_owners(self, tenant: Tenant, decision: ApprovalDecision) -> None:
        """
        Segundo paso best-effort sobre los agregados User.

        La decisión de la agencia ya es la mutación autoritativa; si esto falla,
        la cuenta queda en_attente y el superadmin puede activarla a mano.
        """
        new_status = (
            UserStatus.ACTIF
            if decision == ApprovalDecision.APPROVE
            else UserStatus.REJETE
        )
        try:
            owners = self._users.list_users(agence_id=tenant.id, role=UserRole.AGENCE)
            for owner in owners:
                if owner.status != UserStatus.EN_ATTENTE:
                    continue
                self._users.update(
                    replace(owner, status=new_status),
                    expected_version=owner.version,
                )
        except Exception:
            logger.exception(
                "Agencia decidida pero falló la actualización de cuentas dueño",
                extra={"agence_id": str(tenant.id)},
            )
