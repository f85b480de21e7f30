"""
In-Memory Repository Implementations.

For testing and local development. NOT FOR PRODUCTION.
Data is lost on process restart.
"""

from .audit_event import InMemoryAuditEventRepository
from .module_request import InMemoryModuleRequestRepository
from .tenant import InMemoryTenantRepository
from .user import InMemoryUserRepository

__all__ = [
    "InMemoryAuditEventRepository",
    "InMemoryModuleRequestRepository",
    "InMemoryTenantRepository",
    "InMemoryUserRepository",
]
