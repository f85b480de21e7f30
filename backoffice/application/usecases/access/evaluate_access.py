"""
===============================================================================
USE CASE: Evaluate Access (diagnóstico del motor)
===============================================================================

Business Goal:
    Permitir que un superadmin pregunte "¿puede el usuario U hacer A sobre
    el módulo M en la agencia T?" y vea el código de motivo del Deny.

Reglas:
    - Solo superadmin (el motivo de un Deny no se expone a otros actores).
    - Módulo desconocido -> ValidationError (input de usuario, no bug).
    - Usuario o agencia inexistente -> NotFoundError.
===============================================================================
"""

from __future__ import annotations

from typing import Optional
from uuid import UUID

from ....crosscutting.exceptions import NotFoundError, ValidationError
from ....domain.authorization import Decision, decide
from ....domain.entities import AuthorizationContext, User
from ....domain.module_catalog import ModuleCatalog
from ....domain.repositories import TenantRepository, UserRepository
from ..actor_checks import ensure_superadmin


class EvaluateAccessUseCase:
    def __init__(
        self,
        user_repository: UserRepository,
        tenant_repository: TenantRepository,
        catalog: ModuleCatalog,
    ) -> None:
        self._users = user_repository
        self._tenants = tenant_repository
        self._catalog = catalog

    def execute(
        self,
        user_id: UUID,
        tenant_id: UUID,
        module: str,
        action: str,
        actor: Optional[User],
    ) -> Decision:
        ensure_superadmin(actor, "evaluar accesos")

        if not self._catalog.has_module(module):
            raise ValidationError(f"Módulo desconocido: {module!r}")

        subject = self._users.get(user_id)
        if subject is None:
            raise NotFoundError("Usuario", user_id)
        tenant = self._tenants.get(tenant_id)
        if tenant is None:
            raise NotFoundError("Agence", tenant_id)

        return decide(
            AuthorizationContext(
                actor=subject, tenant=tenant, module=module, action=action
            ),
            catalog=self._catalog,
        )
