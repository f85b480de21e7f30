"""Repositorios concretos: PostgreSQL (psycopg) y en memoria (tests / dev sin DB)."""

from .in_memory import (
    InMemoryAuditEventRepository,
    InMemoryModuleRequestRepository,
    InMemoryTenantRepository,
    InMemoryUserRepository,
)
from .postgres import (
    PostgresAuditEventRepository,
    PostgresModuleRequestRepository,
    PostgresTenantRepository,
    PostgresUserRepository,
)

__all__ = [
    # Postgres
    "PostgresAuditEventRepository",
    "PostgresModuleRequestRepository",
    "PostgresTenantRepository",
    "PostgresUserRepository",
    # InMemory
    "InMemoryAuditEventRepository",
    "InMemoryModuleRequestRepository",
    "InMemoryTenantRepository",
    "InMemoryUserRepository",
]
