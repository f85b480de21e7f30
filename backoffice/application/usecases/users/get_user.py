"""
===============================================================================
USE CASES: Get / List Users (read side)
===============================================================================

Visibilidad:
    - superadmin: todos (filtros opcionales por agencia/rol)
    - dueño agence: usuarios vinculados a su agencia
    - cualquier usuario: a sí mismo
===============================================================================
"""

from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from ....crosscutting.exceptions import NotFoundError, PermissionDeniedError
from ....domain.entities import User, UserRole
from ....domain.repositories import UserRepository
from ..actor_checks import is_active_superadmin


class GetUserUseCase:
    def __init__(self, user_repository: UserRepository) -> None:
        self._users = user_repository

    def execute(self, user_id: UUID, actor: Optional[User]) -> User:
        if actor is None or not actor.is_active:
            raise PermissionDeniedError("Actor no autorizado.")

        target = self._users.get(user_id)
        if target is None:
            raise NotFoundError("Usuario", user_id)

        if (
            is_active_superadmin(actor)
            or actor.id == target.id
            or (
                actor.role == UserRole.AGENCE
                and any(actor.is_owner_of(a) for a in target.agences)
            )
        ):
            return target
        raise NotFoundError("Usuario", user_id)


class ListUsersUseCase:
    def __init__(self, user_repository: UserRepository) -> None:
        self._users = user_repository

    def execute(
        self,
        actor: Optional[User],
        *,
        agence_id: UUID | None = None,
        role: UserRole | None = None,
    ) -> List[User]:
        if is_active_superadmin(actor):
            return self._users.list_users(agence_id=agence_id, role=role)

        if actor is None or not actor.is_active or actor.role != UserRole.AGENCE:
            raise PermissionDeniedError("No podés listar usuarios.")

        own_agence = actor.agences[0]
        if agence_id is not None and agence_id != own_agence:
            raise PermissionDeniedError("No podés listar usuarios de otra agencia.")
        return self._users.list_users(agence_id=own_agence, role=role)
