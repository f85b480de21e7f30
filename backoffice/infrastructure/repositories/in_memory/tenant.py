"""
============================================================
TARJETA CRC — infrastructure/repositories/in_memory/tenant.py
============================================================
Class: InMemoryTenantRepository

Responsibilities:
  - Almacenar agencias en memoria (tests / local dev sin DATABASE_URL).
  - Escrituras compare-and-set por `version` (concurrencia optimista).
  - Operaciones atómicas de conjuntos sobre requested/active modules.
  - Ordering determinístico alineado con Postgres:
      ORDER BY created_at ASC, name ASC

Collaborators:
  - domain.entities.Tenant, TenantStatus
  - crosscutting.exceptions (ConflictError, NotFoundError, ValidationError)

Constraints / Notes:
  - Thread-safe: cada operación lee/escribe bajo lock.
  - Los snapshots son frozen: no hace falta copia defensiva.
============================================================
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone
from threading import Lock
from typing import Dict, Iterable, List, Optional
from uuid import UUID

from ....crosscutting.exceptions import ConflictError, NotFoundError, ValidationError
from ....domain.entities import Tenant, TenantStatus, utcnow


class InMemoryTenantRepository:
    """Repositorio in-memory, thread-safe, para Tenants (agences)."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._tenants: Dict[UUID, Tenant] = {}

    @staticmethod
    def _normalize_email(email: str) -> str:
        return (email or "").strip().lower()

    @staticmethod
    def _sort_key(t: Tenant):
        created = t.created_at or datetime.min.replace(tzinfo=timezone.utc)
        return (created, t.name)

    def _find_by_email(self, email: str) -> Optional[Tenant]:
        normalized = self._normalize_email(email)
        for tenant in self._tenants.values():
            if self._normalize_email(tenant.email) == normalized:
                return tenant
        return None

    def _require(self, tenant_id: UUID) -> Tenant:
        tenant = self._tenants.get(tenant_id)
        if tenant is None:
            raise NotFoundError("Agence", tenant_id)
        return tenant

    # =========================================================
    # Lecturas
    # =========================================================
    def get(self, tenant_id: UUID) -> Optional[Tenant]:
        with self._lock:
            return self._tenants.get(tenant_id)

    def get_by_email(self, email: str) -> Optional[Tenant]:
        with self._lock:
            return self._find_by_email(email)

    def list_tenants(
        self,
        *,
        status: TenantStatus | None = None,
        tenant_ids: Iterable[UUID] | None = None,
    ) -> List[Tenant]:
        wanted = set(tenant_ids) if tenant_ids is not None else None
        with self._lock:
            items = [
                t
                for t in self._tenants.values()
                if (status is None or t.status == status)
                and (wanted is None or t.id in wanted)
            ]
        return sorted(items, key=self._sort_key)

    # =========================================================
    # Escrituras
    # =========================================================
    def create(self, tenant: Tenant) -> Tenant:
        with self._lock:
            if tenant.id in self._tenants:
                raise ValidationError(f"La agencia {tenant.id} ya existe.")
            if self._find_by_email(tenant.email) is not None:
                raise ValidationError("El email ya pertenece a otra agencia.")
            now = utcnow()
            stored = replace(
                tenant,
                created_at=tenant.created_at or now,
                updated_at=tenant.updated_at or now,
                version=1,
            )
            self._tenants[stored.id] = stored
            return stored

    def delete(self, tenant_id: UUID) -> None:
        with self._lock:
            self._tenants.pop(tenant_id, None)

    def update(self, tenant: Tenant, *, expected_version: int) -> Tenant:
        with self._lock:
            current = self._require(tenant.id)
            if current.version != expected_version:
                raise ConflictError(
                    "La agencia fue modificada por otro usuario.",
                    aggregate="tenant",
                    aggregate_id=str(tenant.id),
                    expected_version=expected_version,
                )
            stored = replace(
                tenant,
                created_at=current.created_at,
                updated_at=utcnow(),
                version=current.version + 1,
            )
            self._tenants[stored.id] = stored
            return stored

    def add_requested_modules(
        self, tenant_id: UUID, module_ids: Iterable[str]
    ) -> Tenant:
        with self._lock:
            current = self._require(tenant_id)
            stored = replace(
                current,
                requested_modules=current.requested_modules | frozenset(module_ids),
                updated_at=utcnow(),
                version=current.version + 1,
            )
            self._tenants[tenant_id] = stored
            return stored

    def apply_module_decision(
        self,
        tenant_id: UUID,
        *,
        module_ids: Iterable[str],
        activate: bool,
    ) -> Tenant:
        modules = frozenset(module_ids)
        with self._lock:
            current = self._require(tenant_id)
            active = current.active_modules
            if activate:
                # R: unión idempotente (re-aprobar un módulo activo no duplica).
                active = active | modules
            stored = replace(
                current,
                active_modules=active,
                requested_modules=current.requested_modules - modules,
                updated_at=utcnow(),
                version=current.version + 1,
            )
            self._tenants[tenant_id] = stored
            return stored

    # -------------------------------------------------------------------------
    # Testing helpers
    # -------------------------------------------------------------------------
    def clear(self) -> None:
        """Clear all data (for testing)."""
        with self._lock:
            self._tenants.clear()
