"""
============================================================
TARJETA CRC — infrastructure/repositories/postgres/tenant.py
============================================================
Class: PostgresTenantRepository

Responsibilities:
- Persistir agencias en la tabla `agences` (SQL crudo, parametrizado).
- Escritura compare-and-set: UPDATE ... WHERE id = %s AND version = %s.
- Operaciones de conjuntos atómicas (una sola sentencia UPDATE) sobre
  active_modules / requested_modules.

Collaborators:
- domain.entities.Tenant, TenantStatus
- postgres.base.PostgresRepositoryBase
- crosscutting.exceptions (ConflictError, NotFoundError, DatabaseError)

Constraints / Notes:
- Sin lógica de negocio: el repo no decide transiciones, solo escribe snapshots.
- Unicidad de email: índice único sobre lower(email).
- Ordering determinístico: created_at ASC, name ASC.
============================================================
"""

from __future__ import annotations

from typing import Iterable, List, Optional
from uuid import UUID

from ....crosscutting.exceptions import ConflictError, DatabaseError, NotFoundError
from ....domain.entities import Tenant, TenantStatus
from .base import PostgresRepositoryBase

_COLUMNS = """
    id, name, email, phone, address, status, active_modules,
    requested_modules, activity_type, siret, created_at, updated_at, version
"""

_ORDER_BY = "ORDER BY created_at ASC, name ASC"


def _row_to_tenant(row: tuple) -> Tenant:
    (
        tenant_id,
        name,
        email,
        phone,
        address,
        status,
        active_modules,
        requested_modules,
        activity_type,
        siret,
        created_at,
        updated_at,
        version,
    ) = row
    try:
        tenant_status = TenantStatus(status)
    except ValueError as exc:
        raise DatabaseError(f"Invalid agence status in database: {status}") from exc

    return Tenant(
        id=tenant_id,
        name=name,
        email=email,
        phone=phone,
        address=address,
        status=tenant_status,
        active_modules=frozenset(active_modules or ()),
        requested_modules=frozenset(requested_modules or ()),
        activity_type=activity_type,
        siret=siret,
        created_at=created_at,
        updated_at=updated_at,
        version=version,
    )


class PostgresTenantRepository(PostgresRepositoryBase):
    """R: Implementación PostgreSQL del repositorio de agencias."""

    _UNIQUE_VIOLATION_MESSAGE = "El email ya pertenece a otra agencia."

    def create(self, tenant: Tenant) -> Tenant:
        row = self._fetchone(
            query=f"""
                INSERT INTO agences (
                    id, name, email, phone, address, status, active_modules,
                    requested_modules, activity_type, siret, created_at,
                    updated_at, version
                )
                VALUES (
                    %s, %s, %s, %s, %s, %s, %s::text[], %s::text[], %s, %s,
                    now(), now(), 1
                )
                RETURNING {_COLUMNS}
            """,
            params=(
                tenant.id,
                tenant.name,
                tenant.email,
                tenant.phone,
                tenant.address,
                tenant.status.value,
                sorted(tenant.active_modules),
                sorted(tenant.requested_modules),
                tenant.activity_type,
                tenant.siret,
            ),
            context_msg="PostgresTenantRepository: create failed",
            extra={"agence_id": str(tenant.id)},
        )
        return _row_to_tenant(row)

    def get(self, tenant_id: UUID) -> Optional[Tenant]:
        row = self._fetchone(
            query=f"SELECT {_COLUMNS} FROM agences WHERE id = %s",
            params=(tenant_id,),
            context_msg="PostgresTenantRepository: get failed",
            extra={"agence_id": str(tenant_id)},
        )
        return _row_to_tenant(row) if row else None

    def delete(self, tenant_id: UUID) -> None:
        self._execute(
            query="DELETE FROM agences WHERE id = %s",
            params=(tenant_id,),
            context_msg="PostgresTenantRepository: delete failed",
            extra={"agence_id": str(tenant_id)},
        )

    def get_by_email(self, email: str) -> Optional[Tenant]:
        row = self._fetchone(
            query=f"SELECT {_COLUMNS} FROM agences WHERE lower(email) = lower(%s)",
            params=((email or "").strip(),),
            context_msg="PostgresTenantRepository: get_by_email failed",
            extra={},
        )
        return _row_to_tenant(row) if row else None

    def list_tenants(
        self,
        *,
        status: TenantStatus | None = None,
        tenant_ids: Iterable[UUID] | None = None,
    ) -> List[Tenant]:
        conditions: list[str] = []
        params: list[object] = []

        if status is not None:
            conditions.append("status = %s")
            params.append(status.value)

        if tenant_ids is not None:
            ids = list(tenant_ids)
            if not ids:
                return []
            conditions.append("id = ANY(%s::uuid[])")
            params.append(ids)

        where_sql = f"WHERE {' AND '.join(conditions)}" if conditions else ""
        rows = self._fetchall(
            query=f"SELECT {_COLUMNS} FROM agences {where_sql} {_ORDER_BY}",
            params=params,
            context_msg="PostgresTenantRepository: list failed",
            extra={"where_sql": where_sql},
        )
        return [_row_to_tenant(r) for r in rows]

    def update(self, tenant: Tenant, *, expected_version: int) -> Tenant:
        row = self._fetchone(
            query=f"""
                UPDATE agences
                SET name = %s, email = %s, phone = %s, address = %s,
                    status = %s, active_modules = %s::text[],
                    requested_modules = %s::text[], activity_type = %s,
                    siret = %s, updated_at = now(), version = version + 1
                WHERE id = %s AND version = %s
                RETURNING {_COLUMNS}
            """,
            params=(
                tenant.name,
                tenant.email,
                tenant.phone,
                tenant.address,
                tenant.status.value,
                sorted(tenant.active_modules),
                sorted(tenant.requested_modules),
                tenant.activity_type,
                tenant.siret,
                tenant.id,
                expected_version,
            ),
            context_msg="PostgresTenantRepository: update failed",
            extra={"agence_id": str(tenant.id)},
        )
        if row is None:
            self._raise_missing_or_conflict(tenant.id, expected_version)
        return _row_to_tenant(row)

    def add_requested_modules(
        self, tenant_id: UUID, module_ids: Iterable[str]
    ) -> Tenant:
        row = self._fetchone(
            query=f"""
                UPDATE agences
                SET requested_modules = ARRAY(
                        SELECT DISTINCT unnest(requested_modules || %s::text[])
                        ORDER BY 1
                    ),
                    updated_at = now(), version = version + 1
                WHERE id = %s
                RETURNING {_COLUMNS}
            """,
            params=(sorted(set(module_ids)), tenant_id),
            context_msg="PostgresTenantRepository: add_requested_modules failed",
            extra={"agence_id": str(tenant_id)},
        )
        if row is None:
            raise NotFoundError("Agence", tenant_id)
        return _row_to_tenant(row)

    def apply_module_decision(
        self,
        tenant_id: UUID,
        *,
        module_ids: Iterable[str],
        activate: bool,
    ) -> Tenant:
        modules = sorted(set(module_ids))
        row = self._fetchone(
            query=f"""
                UPDATE agences
                SET active_modules = CASE WHEN %s THEN ARRAY(
                        SELECT DISTINCT unnest(active_modules || %s::text[])
                        ORDER BY 1
                    ) ELSE active_modules END,
                    requested_modules = ARRAY(
                        SELECT m FROM unnest(requested_modules) AS m
                        WHERE NOT (m = ANY(%s::text[]))
                        ORDER BY 1
                    ),
                    updated_at = now(), version = version + 1
                WHERE id = %s
                RETURNING {_COLUMNS}
            """,
            params=(activate, modules, modules, tenant_id),
            context_msg="PostgresTenantRepository: apply_module_decision failed",
            extra={"agence_id": str(tenant_id), "activate": activate},
        )
        if row is None:
            raise NotFoundError("Agence", tenant_id)
        return _row_to_tenant(row)

    def _raise_missing_or_conflict(self, tenant_id: UUID, expected_version: int):
        # R: 0 filas => o no existe o perdió la carrera de versión.
        if self.get(tenant_id) is None:
            raise NotFoundError("Agence", tenant_id)
        raise ConflictError(
            "La agencia fue modificada por otro usuario.",
            aggregate="tenant",
            aggregate_id=str(tenant_id),
            expected_version=expected_version,
        )
