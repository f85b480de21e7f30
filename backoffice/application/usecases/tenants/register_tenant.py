"""
===============================================================================
USE CASE: Register Tenant (alta de agencia)
===============================================================================

Business Goal:
    Dar de alta una agencia nueva en estado `pending`, sin módulos activos,
    a la espera de la aprobación de un superadmin.

-------------------------------------------------------------------------------
CRC CARD (Class-Responsibility-Collaborator)
-------------------------------------------------------------------------------
Class:
    RegisterTenantUseCase

Responsibilities:
    - Validar campos obligatorios (nombre, email, teléfono, dirección).
    - Garantizar unicidad del email de contacto (ValidationError).
    - Validar los módulos elegidos contra el catálogo y guardarlos como
      `requested_modules` (NUNCA en active_modules).

Collaborators:
    - TenantRepository: get_by_email / create
    - ModuleCatalog: unknown_modules

-------------------------------------------------------------------------------
BUSINESS RULES
-------------------------------------------------------------------------------
R1) status inicial = pending, active_modules = {}.
R2) Email de contacto único entre agencias (case-insensitive).
R3) Un módulo elegido debe existir en el catálogo.
===============================================================================
"""

from __future__ import annotations

import logging
from uuid import uuid4

from ....crosscutting.exceptions import ValidationError
from ....domain.entities import Tenant, TenantProfile, TenantStatus
from ....domain.module_catalog import ModuleCatalog
from ....domain.repositories import TenantRepository
from ..actor_checks import normalize_email, require_text

logger = logging.getLogger(__name__)


class RegisterTenantUseCase:
    """Command: registra una agencia en estado pending."""

    def __init__(
        self, tenant_repository: TenantRepository, catalog: ModuleCatalog
    ) -> None:
        self._tenants = tenant_repository
        self._catalog = catalog

    def execute(self, profile: TenantProfile) -> Tenant:
        name = require_text(profile.name, "name")
        email = normalize_email(profile.email)
        phone = require_text(profile.phone, "phone")
        address = require_text(profile.address, "address")

        chosen = [m.strip() for m in profile.chosen_modules if m and m.strip()]
        unknown = self._catalog.unknown_modules(chosen)
        if unknown:
            raise ValidationError(f"Módulos desconocidos: {', '.join(unknown)}")

        if self._tenants.get_by_email(email) is not None:
            raise ValidationError("El email ya pertenece a otra agencia.")

        tenant = self._tenants.create(
            Tenant(
                id=uuid4(),
                name=name,
                email=email,
                phone=phone,
                address=address,
                status=TenantStatus.PENDING,
                active_modules=frozenset(),
                requested_modules=frozenset(chosen),
                activity_type=(profile.activity_type or "agence-voyage").strip(),
                siret=(profile.siret or "").strip() or None,
            )
        )

        logger.info(
            "Agencia registrada",
            extra={
                "agence_id": str(tenant.id),
                "requested_modules": sorted(tenant.requested_modules),
            },
        )
        return tenant
