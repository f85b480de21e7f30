"""
===============================================================================
USE CASE: List Accessible Modules (navegación del UI)
===============================================================================

Business Goal:
    Devolver los módulos que el actor puede ver (acción `lire`) en la agencia
    activa, más los módulos pedidos y aún no decididos ("en attente
    d'approbation").

Notas:
    - Cosmético: el enforcement real es decide() en cada request.
    - Un actor no vinculado a la agencia recibe NotFound (como GetTenant).
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from ....crosscutting.exceptions import NotFoundError, PermissionDeniedError
from ....domain.authorization import list_accessible_modules
from ....domain.entities import User
from ....domain.module_catalog import ModuleCatalog
from ....domain.repositories import TenantRepository


@dataclass(frozen=True)
class AccessibleModules:
    tenant_id: UUID
    modules: tuple[str, ...]
    pending_modules: tuple[str, ...]


class ListAccessibleModulesUseCase:
    """Query: módulos navegables del actor en una agencia."""

    def __init__(
        self, tenant_repository: TenantRepository, catalog: ModuleCatalog
    ) -> None:
        self._tenants = tenant_repository
        self._catalog = catalog

    def execute(self, tenant_id: UUID, actor: Optional[User]) -> AccessibleModules:
        if actor is None:
            raise PermissionDeniedError("Actor no autorizado.")

        tenant = self._tenants.get(tenant_id)
        if tenant is None or not (actor.is_superadmin or actor.is_bound_to(tenant.id)):
            raise NotFoundError("Agence", tenant_id)

        modules = list_accessible_modules(actor, tenant, catalog=self._catalog)
        pending = sorted(m for m in tenant.requested_modules if m not in tenant.active_modules)
        return AccessibleModules(
            tenant_id=tenant.id,
            modules=tuple(modules),
            pending_modules=tuple(pending),
        )
