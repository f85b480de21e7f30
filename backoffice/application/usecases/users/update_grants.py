"""
===============================================================================
USE CASE: Update Grants
===============================================================================

Business Goal:
    Reemplazar la lista de grants (módulo, acciones[]) de un usuario.

Autorización (mutación):
    - superadmin, o
    - dueño `agence` de TODAS las agencias a las que el target está vinculado.

Validación:
    - Mismas reglas que el alta (grant_validation), contra el estado ACTUAL
      de las agencias vinculadas.

Concurrencia:
    - CAS sobre el agregado User (ConflictError si otro admin escribió antes).
===============================================================================
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Iterable, Optional
from uuid import UUID

from ....crosscutting.exceptions import NotFoundError, PermissionDeniedError
from ....domain.entities import Grant, User
from ....domain.module_catalog import ModuleCatalog
from ....domain.repositories import TenantRepository, UserRepository
from ..actor_checks import is_active_superadmin, owns_every_binding
from .grant_validation import validate_bindings, validate_grants

logger = logging.getLogger(__name__)


class UpdateGrantsUseCase:
    """Command: reemplaza los grants de un usuario."""

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
        new_grants: Iterable[Grant],
        actor: Optional[User],
        *,
        expected_version: int | None = None,
    ) -> User:
        target = self._users.get(user_id)
        if target is None:
            raise NotFoundError("Usuario", user_id)

        if not (is_active_superadmin(actor) or owns_every_binding(actor, target)):
            raise PermissionDeniedError("No podés modificar los permisos de este usuario.")

        bound_tenants = validate_bindings(target.role, target.agences, self._tenants)
        grants = validate_grants(target.role, new_grants, bound_tenants, self._catalog)

        stored = self._users.update(
            replace(target, grants=grants),
            expected_version=(
                expected_version if expected_version is not None else target.version
            ),
        )

        logger.info(
            "Grants actualizados",
            extra={
                "user_id": str(stored.id),
                "actor_id": str(actor.id),
                "modules": [g.module for g in stored.grants],
            },
        )
        return stored
