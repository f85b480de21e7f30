"""
===============================================================================
USE CASE: List Module Requests (read side)
===============================================================================

Visibilidad:
    - superadmin: todas (filtros opcionales por agencia/estado)
    - dueño agence: solo las de su agencia
===============================================================================
"""

from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from ....crosscutting.exceptions import PermissionDeniedError
from ....domain.entities import ModuleRequest, RequestStatus, User, UserRole
from ....domain.repositories import ModuleRequestRepository
from ..actor_checks import is_active_superadmin


class ListModuleRequestsUseCase:
    def __init__(self, request_repository: ModuleRequestRepository) -> None:
        self._requests = request_repository

    def execute(
        self,
        actor: Optional[User],
        *,
        agence_id: UUID | None = None,
        status: RequestStatus | None = None,
    ) -> List[ModuleRequest]:
        if is_active_superadmin(actor):
            return self._requests.list_requests(agence_id=agence_id, status=status)

        if actor is None or not actor.is_active or actor.role != UserRole.AGENCE:
            raise PermissionDeniedError("No podés ver solicitudes de módulos.")

        own_agence = actor.agences[0]
        if agence_id is not None and agence_id != own_agence:
            raise PermissionDeniedError("No podés ver solicitudes de otra agencia.")
        return self._requests.list_requests(agence_id=own_agence, status=status)
