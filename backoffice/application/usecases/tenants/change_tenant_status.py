"""
===============================================================================
USE CASES: Suspend / Reinstate Tenant
===============================================================================

Transiciones válidas (solo superadmin):
    suspend   : approved  -> suspended
    reinstate : suspended -> approved

Efecto:
    - Suspender NO toca usuarios ni módulos: el motor de autorización niega
      todo (tenant_not_active) apenas se lee el snapshot suspendido.
    - Reinstalar devuelve el acceso con los mismos active_modules.

Errores:
    - PermissionDeniedError: actor no superadmin
    - NotFoundError: agencia inexistente
    - InvalidStateError: estado de origen no elegible
    - ConflictError: otro admin modificó la agencia
===============================================================================
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional
from uuid import UUID

from ....crosscutting.exceptions import InvalidStateError, NotFoundError
from ....domain.entities import Tenant, TenantStatus, User
from ....domain.repositories import TenantRepository
from ..actor_checks import ensure_superadmin

logger = logging.getLogger(__name__)


class _TenantStatusTransition:
    """Base: una transición from_status -> to_status con CAS."""

    from_status: TenantStatus
    to_status: TenantStatus
    operation: str

    def __init__(self, tenant_repository: TenantRepository) -> None:
        self._tenants = tenant_repository

    def execute(
        self,
        tenant_id: UUID,
        actor: Optional[User],
        *,
        expected_version: int | None = None,
    ) -> Tenant:
        ensure_superadmin(actor, self.operation)

        tenant = self._tenants.get(tenant_id)
        if tenant is None:
            raise NotFoundError("Agence", tenant_id)

        if tenant.status != self.from_status:
            raise InvalidStateError(
                f"No se puede {self.operation} una agencia en estado "
                f"{tenant.status.value}."
            )

        stored = self._tenants.update(
            replace(tenant, status=self.to_status),
            expected_version=(
                expected_version if expected_version is not None else tenant.version
            ),
        )
        logger.info(
            "Estado de agencia actualizado",
            extra={
                "agence_id": str(stored.id),
                "from_status": self.from_status.value,
                "to_status": self.to_status.value,
                "actor_id": str(actor.id),
            },
        )
        return stored


class SuspendTenantUseCase(_TenantStatusTransition):
    """Command: approved -> suspended (fail-closed inmediato)."""

    from_status = TenantStatus.APPROVED
    to_status = TenantStatus.SUSPENDED
    operation = "suspender"


class ReinstateTenantUseCase(_TenantStatusTransition):
    """Command: suspended -> approved."""

    from_status = TenantStatus.SUSPENDED
    to_status = TenantStatus.APPROVED
    operation = "reactivar"
