"""
Casos de uso del back office, uno por operación.

    tenants/          inscripción, aprobación, suspensión de agencias
    module_requests/  solicitud y decisión de módulos
    users/            login, alta de agentes, grants, estado
    access/           módulos accesibles y evaluación puntual del motor

Los routers importan desde aquí; los tests pueden importar del subpaquete.
"""

# Access
from .access import (
    AccessibleModules,
    EvaluateAccessUseCase,
    ListAccessibleModulesUseCase,
)

# Module requests
from .module_requests import (
    DecideModuleRequestUseCase,
    ListModuleRequestsUseCase,
    RequestModulesUseCase,
)

# Tenants
from .tenants import (
    DecideTenantApprovalUseCase,
    GetTenantUseCase,
    ListTenantsUseCase,
    RegisterAgencyResult,
    RegisterAgencyUseCase,
    RegisterTenantUseCase,
    ReinstateTenantUseCase,
    SuspendTenantUseCase,
)

# Users
from .users import (
    AuthenticateUserUseCase,
    CreateUserUseCase,
    GetUserUseCase,
    ListUsersUseCase,
    SetUserStatusUseCase,
    UpdateGrantsUseCase,
)

__all__ = [
    # Access
    "AccessibleModules",
    "EvaluateAccessUseCase",
    "ListAccessibleModulesUseCase",
    # Module requests
    "RequestModulesUseCase",
    "DecideModuleRequestUseCase",
    "ListModuleRequestsUseCase",
    # Tenants
    "RegisterTenantUseCase",
    "RegisterAgencyUseCase",
    "RegisterAgencyResult",
    "DecideTenantApprovalUseCase",
    "SuspendTenantUseCase",
    "ReinstateTenantUseCase",
    "GetTenantUseCase",
    "ListTenantsUseCase",
    # Users
    "CreateUserUseCase",
    "AuthenticateUserUseCase",
    "UpdateGrantsUseCase",
    "SetUserStatusUseCase",
    "GetUserUseCase",
    "ListUsersUseCase",
]
