"""
===============================================================================
USE CASE: Request Modules (self-service de la agencia)
===============================================================================

Business Goal:
    El dueño de una agencia pide la activación de módulos. La activación
    real la decide un superadmin (DecideModuleRequestUseCase): la agencia
    nunca se auto-activa módulos.

-------------------------------------------------------------------------------
CRC CARD (Class-Responsibility-Collaborator)
-------------------------------------------------------------------------------
Class:
    RequestModulesUseCase

Responsibilities:
    - Autorizar: actor `agence` activo, dueño de la agencia (PermissionDeniedError).
    - Validar: lista no vacía, módulos del catálogo, mensaje obligatorio.
    - Crear la ModuleRequest (pending).
    - Registrar los módulos en requested_modules de la agencia (operación
      atómica del repositorio).

Collaborators:
    - TenantRepository: get / add_requested_modules
    - ModuleRequestRepository: create
    - ModuleCatalog
===============================================================================
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional
from uuid import UUID, uuid4

from ....crosscutting.exceptions import (
    InvalidStateError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from ....domain.entities import ModuleRequest, RequestStatus, User, UserRole
from ....domain.module_catalog import ModuleCatalog
from ....domain.repositories import ModuleRequestRepository, TenantRepository
from ..actor_checks import require_text

logger = logging.getLogger(__name__)


class RequestModulesUseCase:
    """Command: solicitud de activación de módulos."""

    def __init__(
        self,
        tenant_repository: TenantRepository,
        request_repository: ModuleRequestRepository,
        catalog: ModuleCatalog,
    ) -> None:
        self._tenants = tenant_repository
        self._requests = request_repository
        self._catalog = catalog

    def execute(
        self,
        tenant_id: UUID,
        module_ids: Iterable[str],
        message: str,
        actor: Optional[User],
    ) -> ModuleRequest:
        if (
            actor is None
            or not actor.is_active
            or actor.role != UserRole.AGENCE
            or not actor.is_owner_of(tenant_id)
        ):
            raise PermissionDeniedError(
                "Solo el dueño de la agencia puede solicitar módulos."
            )

        modules = tuple(dict.fromkeys(m.strip() for m in module_ids if m and m.strip()))
        if not modules:
            raise ValidationError("Seleccioná al menos un módulo.")
        unknown = self._catalog.unknown_modules(modules)
        if unknown:
            raise ValidationError(f"Módulos desconocidos: {', '.join(unknown)}")
        text = require_text(message, "message")

        tenant = self._tenants.get(tenant_id)
        if tenant is None:
            raise NotFoundError("Agence", tenant_id)
        if not tenant.is_active:
            raise InvalidStateError(
                f"La agencia no está activa (estado: {tenant.status.value})."
            )

        request = self._requests.create(
            ModuleRequest(
                id=uuid4(),
                agence_id=tenant.id,
                modules=modules,
                message=text,
                status=RequestStatus.PENDING,
                requested_by=actor.id,
            )
        )
        self._tenants.add_requested_modules(tenant.id, modules)

        logger.info(
            "Solicitud de módulos creada",
            extra={
                "module_request_id": str(request.id),
                "agence_id": str(tenant.id),
                "modules": list(modules),
            },
        )
        return request
