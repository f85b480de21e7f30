"""
Superficie pública del dominio.

Entidades y enums (entities), catálogo de módulos (module_catalog), motor de
autorización (authorization), evento de auditoría (audit) y los puertos de
persistencia (repositories). Nada de este paquete importa infraestructura.
"""

from .audit import AuditEvent
from .authorization import (
    Decision,
    DenyReason,
    Verdict,
    decide,
    list_accessible_modules,
)
from .entities import (
    ApprovalDecision,
    AuthorizationContext,
    Grant,
    ModuleRequest,
    RequestStatus,
    Tenant,
    TenantProfile,
    TenantStatus,
    User,
    UserProfile,
    UserRole,
    UserStatus,
)
from .module_catalog import BUILTIN_CATALOG, ModuleCatalog, ModuleDefinition
from .repositories import (
    AuditEventRepository,
    ModuleRequestRepository,
    TenantRepository,
    UserRepository,
)

__all__ = [
    # Entities
    "Tenant",
    "TenantProfile",
    "TenantStatus",
    "ModuleRequest",
    "RequestStatus",
    "User",
    "UserProfile",
    "UserRole",
    "UserStatus",
    "Grant",
    "ApprovalDecision",
    "AuthorizationContext",
    "AuditEvent",
    # Module catalog
    "ModuleCatalog",
    "ModuleDefinition",
    "BUILTIN_CATALOG",
    # Authorization engine
    "Decision",
    "DenyReason",
    "Verdict",
    "decide",
    "list_accessible_modules",
    # Repository Interfaces (Ports)
    "TenantRepository",
    "ModuleRequestRepository",
    "UserRepository",
    "AuditEventRepository",
]
