"""
============================================================
TARJETA CRC — infrastructure/repositories/in_memory/module_request.py
============================================================
Class: InMemoryModuleRequestRepository

Responsibilities:
  - Almacenar solicitudes de módulos en memoria.
  - Update compare-and-set por `version`.
  - Listados por agencia/estado, más recientes primero.

Collaborators:
  - domain.entities.ModuleRequest, RequestStatus
  - crosscutting.exceptions (ConflictError, NotFoundError)
============================================================
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone
from threading import Lock
from typing import Dict, List, Optional
from uuid import UUID

from ....crosscutting.exceptions import ConflictError, NotFoundError
from ....domain.entities import ModuleRequest, RequestStatus, utcnow


class InMemoryModuleRequestRepository:
    """Repositorio in-memory, thread-safe, para ModuleRequests."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._requests: Dict[UUID, ModuleRequest] = {}

    def create(self, request: ModuleRequest) -> ModuleRequest:
        with self._lock:
            stored = replace(
                request, created_at=request.created_at or utcnow(), version=1
            )
            self._requests[stored.id] = stored
            return stored

    def get(self, request_id: UUID) -> Optional[ModuleRequest]:
        with self._lock:
            return self._requests.get(request_id)

    def list_requests(
        self,
        *,
        agence_id: UUID | None = None,
        status: RequestStatus | None = None,
    ) -> List[ModuleRequest]:
        with self._lock:
            items = [
                r
                for r in self._requests.values()
                if (agence_id is None or r.agence_id == agence_id)
                and (status is None or r.status == status)
            ]
        oldest = datetime.min.replace(tzinfo=timezone.utc)
        return sorted(items, key=lambda r: r.created_at or oldest, reverse=True)

    def update(
        self, request: ModuleRequest, *, expected_version: int
    ) -> ModuleRequest:
        with self._lock:
            current = self._requests.get(request.id)
            if current is None:
                raise NotFoundError("ModuleRequest", request.id)
            if current.version != expected_version:
                raise ConflictError(
                    "La solicitud fue modificada por otro usuario.",
                    aggregate="module_request",
                    aggregate_id=str(request.id),
                    expected_version=expected_version,
                )
            stored = replace(
                request, created_at=current.created_at, version=current.version + 1
            )
            self._requests[stored.id] = stored
            return stored

    def clear(self) -> None:
        """Clear all data (for testing)."""
        with self._lock:
            self._requests.clear()
