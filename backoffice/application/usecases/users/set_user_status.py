"""
===============================================================================
USE CASE: Set User Status (gestión de agentes)
===============================================================================

Reglas:
    - superadmin: cualquier estado sobre usuarios no superadmin.
    - dueño agence: solo agentes de su agencia, y solo actif <-> suspendu.
    - Un superadmin nunca se modifica por este camino.

Efecto:
    - Un usuario no actif queda denegado por el motor (actor_inactive) en la
      siguiente request: el actor se recarga del repositorio en cada request.
===============================================================================
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional
from uuid import UUID

from ....crosscutting.exceptions import (
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from ....domain.entities import User, UserRole, UserStatus
from ....domain.repositories import UserRepository
from ..actor_checks import is_active_superadmin, owns_every_binding

logger = logging.getLogger(__name__)

_OWNER_MANAGEABLE_STATUSES = frozenset({UserStatus.ACTIF, UserStatus.SUSPENDU})


class SetUserStatusUseCase:
    """Command: cambia el estado de un usuario."""

    def __init__(self, user_repository: UserRepository) -> None:
        self._users = user_repository

    def execute(
        self,
        user_id: UUID,
        status: UserStatus,
        actor: Optional[User],
        *,
        expected_version: int | None = None,
    ) -> User:
        status = UserStatus(status)

        target = self._users.get(user_id)
        if target is None:
            raise NotFoundError("Usuario", user_id)

        if target.role == UserRole.SUPERADMIN:
            raise PermissionDeniedError("El estado de un superadmin no se modifica.")

        if not is_active_superadmin(actor):
            if target.role != UserRole.AGENT or not owns_every_binding(actor, target):
                raise PermissionDeniedError("No podés modificar este usuario.")
            if status not in _OWNER_MANAGEABLE_STATUSES:
                raise ValidationError("Estado no permitido para un agente.")

        if target.status == status:
            return target

        stored = self._users.update(
            replace(target, status=status),
            expected_version=(
                expected_version if expected_version is not None else target.version
            ),
        )
        logger.info(
            "Estado de usuario actualizado",
            extra={
                "user_id": str(stored.id),
                "status": stored.status.value,
                "actor_id": str(actor.id),
            },
        )
        return stored
