"""
PostgreSQL Repository Implementations.

Raw parametrized SQL over psycopg 3 + psycopg_pool.
"""

from .audit_event import PostgresAuditEventRepository
from .module_request import PostgresModuleRequestRepository
from .tenant import PostgresTenantRepository
from .user import PostgresUserRepository

__all__ = [
    "PostgresAuditEventRepository",
    "PostgresModuleRequestRepository",
    "PostgresTenantRepository",
    "PostgresUserRepository",
]
