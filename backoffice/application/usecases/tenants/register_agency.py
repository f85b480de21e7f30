"""
===============================================================================
USE CASE: Register Agency (wizard de inscripción)
===============================================================================

Business Goal:
    Inscripción self-service: crea la agencia (pending) y la cuenta del dueño
    (rol `agence`, estado `en_attente`, vinculada a la nueva agencia).

Flow:
    1) Validar el perfil del dueño (email libre, nombre, password) antes de
       crear nada.
    2) RegisterTenantUseCase (agencia pending + módulos elegidos pedidos).
    3) CreateUserUseCase sin actor (alta interna) con estado en_attente.

Notas:
    - El dueño no puede autenticarse hasta que la agencia se apruebe
      (DecideTenantApprovalUseCase activa la cuenta).
    - Si (3) falla igual (carrera de email), la agencia recién creada se borra:
      el email de contacto queda libre para reintentar.
===============================================================================
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ....crosscutting.exceptions import BackofficeError
from ....domain.entities import (
    Tenant,
    TenantProfile,
    User,
    UserProfile,
    UserRole,
    UserStatus,
)
from ....domain.repositories import TenantRepository
from ..users.create_user import CreateUserUseCase
from .register_tenant import RegisterTenantUseCase

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RegisterAgencyResult:
    tenant: Tenant
    owner: User


class RegisterAgencyUseCase:
    """Command: agencia + cuenta del dueño en un paso."""

    def __init__(
        self,
        register_tenant: RegisterTenantUseCase,
        create_user: CreateUserUseCase,
        tenant_repository: TenantRepository,
    ) -> None:
        self._register_tenant = register_tenant
        self._create_user = create_user
        self._tenants = tenant_repository

    def execute(
        self, profile: TenantProfile, owner: UserProfile
    ) -> RegisterAgencyResult:
        self._create_user.check_profile(owner)

        tenant = self._register_tenant.execute(profile)

        try:
            owner_user = self._create_user.execute(
                owner,
                role=UserRole.AGENCE,
                tenant_bindings=[tenant.id],
                grants=[],
                status=UserStatus.EN_ATTENTE,
            )
        except BackofficeError:
            logger.warning(
                "Alta del dueño rechazada; se descarta la agencia",
                extra={"agence_id": str(tenant.id)},
            )
            self._tenants.delete(tenant.id)
            raise

        return RegisterAgencyResult(tenant=tenant, owner=owner_user)
