"""
============================================================
TARJETA CRC — infrastructure/repositories/postgres/module_request.py
============================================================
Class: PostgresModuleRequestRepository

Responsibilities:
- Persistir solicitudes de módulos en `module_requests`.
- Update compare-and-set por version (la decisión es única).

Collaborators:
- domain.entities.ModuleRequest, RequestStatus
- postgres.base.PostgresRepositoryBase
============================================================
"""

from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from ....crosscutting.exceptions import ConflictError, DatabaseError, NotFoundError
from ....domain.entities import ModuleRequest, RequestStatus
from .base import PostgresRepositoryBase

_COLUMNS = """
    id, agence_id, modules, message, status, requested_by, admin_comment,
    decided_by, decided_at, created_at, version
"""


def _row_to_request(row: tuple) -> ModuleRequest:
    try:
        status = RequestStatus(row[4])
    except ValueError as exc:
        raise DatabaseError(f"Invalid request status in database: {row[4]}") from exc

    return ModuleRequest(
        id=row[0],
        agence_id=row[1],
        modules=tuple(row[2] or ()),
        message=row[3],
        status=status,
        requested_by=row[5],
        admin_comment=row[6],
        decided_by=row[7],
        decided_at=row[8],
        created_at=row[9],
        version=row[10],
    )


class PostgresModuleRequestRepository(PostgresRepositoryBase):
    """R: Implementación PostgreSQL del repositorio de solicitudes de módulos."""

    def create(self, request: ModuleRequest) -> ModuleRequest:
        row = self._fetchone(
            query=f"""
                INSERT INTO module_requests (
                    id, agence_id, modules, message, status, requested_by,
                    created_at, version
                )
                VALUES (%s, %s, %s::text[], %s, %s, %s, now(), 1)
                RETURNING {_COLUMNS}
            """,
            params=(
                request.id,
                request.agence_id,
                list(request.modules),
                request.message,
                request.status.value,
                request.requested_by,
            ),
            context_msg="PostgresModuleRequestRepository: create failed",
            extra={"agence_id": str(request.agence_id)},
        )
        return _row_to_request(row)

    def get(self, request_id: UUID) -> Optional[ModuleRequest]:
        row = self._fetchone(
            query=f"SELECT {_COLUMNS} FROM module_requests WHERE id = %s",
            params=(request_id,),
            context_msg="PostgresModuleRequestRepository: get failed",
            extra={"request_id": str(request_id)},
        )
        return _row_to_request(row) if row else None

    def list_requests(
        self,
        *,
        agence_id: UUID | None = None,
        status: RequestStatus | None = None,
    ) -> List[ModuleRequest]:
        conditions: list[str] = []
        params: list[object] = []
        if agence_id is not None:
            conditions.append("agence_id = %s")
            params.append(agence_id)
        if status is not None:
            conditions.append("status = %s")
            params.append(status.value)

        where_sql = f"WHERE {' AND '.join(conditions)}" if conditions else ""
        rows = self._fetchall(
            query=f"""
                SELECT {_COLUMNS} FROM module_requests
                {where_sql}
                ORDER BY created_at DESC, id DESC
            """,
            params=params,
            context_msg="PostgresModuleRequestRepository: list failed",
            extra={"where_sql": where_sql},
        )
        return [_row_to_request(r) for r in rows]

    def update(
        self, request: ModuleRequest, *, expected_version: int
    ) -> ModuleRequest:
        row = self._fetchone(
            query=f"""
                UPDATE module_requests
                SET status = %s, admin_comment = %s, decided_by = %s,
                    decided_at = %s, version = version + 1
                WHERE id = %s AND version = %s
                RETURNING {_COLUMNS}
            """,
            params=(
                request.status.value,
                request.admin_comment,
                request.decided_by,
                request.decided_at,
                request.id,
                expected_version,
            ),
            context_msg="PostgresModuleRequestRepository: update failed",
            extra={"request_id": str(request.id)},
        )
        if row is None:
            if self.get(request.id) is None:
                raise NotFoundError("ModuleRequest", request.id)
            raise ConflictError(
                "La solicitud fue modificada por otro usuario.",
                aggregate="module_request",
                aggregate_id=str(request.id),
                expected_version=expected_version,
            )
        return _row_to_request(row)
