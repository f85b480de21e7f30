"""
Puertos de persistencia del dominio (typing.Protocol).

Implementados en infrastructure/repositories (postgres/*, in_memory/*); los
casos de uso sólo conocen estos contratos.

Contratos comunes:
- Cada mutación toca UN agregado, identificado por su id.
- `update(..., expected_version=...)` levanta ConflictError si la versión
  guardada difiere; si escribe, la nueva versión es expected_version + 1.
- Alta con email único repetido -> ValidationError.
- Los listados devuelven list, nunca generadores.
"""

from typing import Iterable, List, Optional, Protocol
from uuid import UUID

from .audit import AuditEvent
from .entities import (
    ModuleRequest,
    RequestStatus,
    Tenant,
    TenantStatus,
    User,
    UserRole,
)


class TenantRepository(Protocol):
    """R: Interface for Tenant (agence) persistence."""

    def create(self, tenant: Tenant) -> Tenant:
        """R: Insert a new tenant. Duplicated contact email -> ValidationError."""
        ...

    def get(self, tenant_id: UUID) -> Optional[Tenant]:
        """R: Fetch a tenant snapshot by id."""
        ...

    def delete(self, tenant_id: UUID) -> None:
        """R: Remove a tenant. Only used to undo a registration whose owner failed."""
        ...

    def get_by_email(self, email: str) -> Optional[Tenant]:
        """R: Fetch a tenant by contact email (case-insensitive)."""
        ...

    def list_tenants(
        self,
        *,
        status: TenantStatus | None = None,
        tenant_ids: Iterable[UUID] | None = None,
    ) -> List[Tenant]:
        """R: List tenants ordered by creation time (ascending)."""
        ...

    def update(self, tenant: Tenant, *, expected_version: int) -> Tenant:
        """
        R: Compare-and-set write of a whole tenant snapshot.

        Raises:
            ConflictError: stored version != expected_version
            NotFoundError: tenant does not exist
        """
        ...

    def add_requested_modules(
        self, tenant_id: UUID, module_ids: Iterable[str]
    ) -> Tenant:
        """R: Atomically union module ids into requested_modules (bumps version)."""
        ...

    def apply_module_decision(
        self,
        tenant_id: UUID,
        *,
        module_ids: Iterable[str],
        activate: bool,
    ) -> Tenant:
        """
        R: Atomically settle a module request on the tenant.

        - Always removes module_ids from requested_modules.
        - activate=True also unions them into active_modules (idempotent).
        """
        ...


class ModuleRequestRepository(Protocol):
    """R: Interface for ModuleRequest persistence (append-only after decision)."""

    def create(self, request: ModuleRequest) -> ModuleRequest:
        """R: Insert a new pending request."""
        ...

    def get(self, request_id: UUID) -> Optional[ModuleRequest]:
        """R: Fetch a request by id."""
        ...

    def list_requests(
        self,
        *,
        agence_id: UUID | None = None,
        status: RequestStatus | None = None,
    ) -> List[ModuleRequest]:
        """R: List requests ordered by creation time (descending)."""
        ...

    def update(
        self, request: ModuleRequest, *, expected_version: int
    ) -> ModuleRequest:
        """R: Compare-and-set write (ConflictError on version mismatch)."""
        ...


class UserRepository(Protocol):
    """R: Interface for User persistence."""

    def create(self, user: User) -> User:
        """R: Insert a new user. Duplicated email -> ValidationError."""
        ...

    def get(self, user_id: UUID) -> Optional[User]:
        """R: Fetch a user by id."""
        ...

    def get_by_email(self, email: str) -> Optional[User]:
        """R: Fetch a user by email (case-insensitive)."""
        ...

    def list_users(
        self,
        *,
        agence_id: UUID | None = None,
        role: UserRole | None = None,
    ) -> List[User]:
        """R: List users, optionally only those bound to agence_id."""
        ...

    def update(self, user: User, *, expected_version: int) -> User:
        """R: Compare-and-set write (ConflictError on version mismatch)."""
        ...


class AuditEventRepository(Protocol):
    """R: Bitácora append-only de eventos de auditoría."""

    def record_event(self, event: AuditEvent) -> None:
        """R: Append; los eventos nunca se modifican."""
        ...

    def list_events(
        self,
        *,
        target_id: UUID | None = None,
        agence_id: UUID | None = None,
        actor_id: str | None = None,
        action_prefix: str | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[AuditEvent]:
        """R: Fetch audit events (newest first) with optional filters."""
        ...
