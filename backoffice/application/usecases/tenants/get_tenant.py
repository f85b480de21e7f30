"""
===============================================================================
USE CASES: Get / List Tenants (read side)
===============================================================================

Visibilidad:
    - superadmin: todas las agencias (filtro opcional por estado)
    - agence / agent: solo las agencias a las que está vinculado

Nota:
    Una agencia no visible para el actor se reporta como NotFound (no se
    revela su existencia).
===============================================================================
"""

from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from ....crosscutting.exceptions import NotFoundError, PermissionDeniedError
from ....domain.entities import Tenant, TenantStatus, User
from ....domain.repositories import TenantRepository
from ..actor_checks import is_active_superadmin


class GetTenantUseCase:
    """Query: una agencia visible para el actor."""

    def __init__(self, tenant_repository: TenantRepository) -> None:
        self._tenants = tenant_repository

    def execute(self, tenant_id: UUID, actor: Optional[User]) -> Tenant:
        if actor is None or not actor.is_active:
            raise PermissionDeniedError("Actor no autorizado.")

        tenant = self._tenants.get(tenant_id)
        if tenant is None:
            raise NotFoundError("Agence", tenant_id)
        if not actor.is_superadmin and not actor.is_bound_to(tenant.id):
            raise NotFoundError("Agence", tenant_id)
        return tenant


class ListTenantsUseCase:
    """Query: agencias visibles para el actor."""

    def __init__(self, tenant_repository: TenantRepository) -> None:
        self._tenants = tenant_repository

    def execute(
        self, actor: Optional[User], *, status: TenantStatus | None = None
    ) -> List[Tenant]:
        if actor is None or not actor.is_active:
            raise PermissionDeniedError("Actor no autorizado.")

        if is_active_superadmin(actor):
            return self._tenants.list_tenants(status=status)

        return self._tenants.list_tenants(status=status, tenant_ids=actor.agences)
