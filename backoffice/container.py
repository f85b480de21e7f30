"""
===============================================================================
TARJETA CRC — backoffice/container.py (cableado de dependencias)
===============================================================================

Responsabilidades:
  - Elegir storage según Settings: repos en memoria (APP_ENV=test o sin
    DATABASE_URL) o PostgreSQL.
  - Cargar el catálogo de módulos una vez (built-in o MODULE_CATALOG_PATH).
  - Armar cada caso de uso con sus puertos; los routers los piden vía Depends.

Colaboradores:
  - crosscutting.config.get_settings
  - domain.module_catalog, domain.repositories
  - infrastructure.repositories (postgres / in_memory)
  - application.usecases

Notas:
  - Todo cacheado con lru_cache; tests llaman clear_container_caches() entre casos.
  - Sin imports de FastAPI: las factories se usan también desde scripts.
===============================================================================
"""

from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path

from .application.usecases import (
    AuthenticateUserUseCase,
    CreateUserUseCase,
    DecideModuleRequestUseCase,
    DecideTenantApprovalUseCase,
    EvaluateAccessUseCase,
    GetTenantUseCase,
    GetUserUseCase,
    ListAccessibleModulesUseCase,
    ListModuleRequestsUseCase,
    ListTenantsUseCase,
    ListUsersUseCase,
    RegisterAgencyUseCase,
    RegisterTenantUseCase,
    ReinstateTenantUseCase,
    RequestModulesUseCase,
    SetUserStatusUseCase,
    SuspendTenantUseCase,
    UpdateGrantsUseCase,
)
from .crosscutting.config import get_settings
from .crosscutting.logger import logger
from .domain.module_catalog import BUILTIN_CATALOG, ModuleCatalog
from .domain.repositories import (
    AuditEventRepository,
    ModuleRequestRepository,
    TenantRepository,
    UserRepository,
)
from .identity.passwords import dummy_password_hash, hash_password, verify_password
from .infrastructure.repositories import (
    InMemoryAuditEventRepository,
    InMemoryModuleRequestRepository,
    InMemoryTenantRepository,
    InMemoryUserRepository,
    PostgresAuditEventRepository,
    PostgresModuleRequestRepository,
    PostgresTenantRepository,
    PostgresUserRepository,
)

# =============================================================================
# Helpers internos
# =============================================================================


def _use_in_memory() -> bool:
    """
    Regla:
      - app_env ∈ {"test", "testing", "ci"} o sin DATABASE_URL => in-memory.
    """
    return get_settings().uses_in_memory_storage()


# =============================================================================
# Catálogo (singleton)
# =============================================================================


@lru_cache(maxsize=1)
def get_module_catalog() -> ModuleCatalog:
    """
    Catálogo de módulos.

    - Sin MODULE_CATALOG_PATH: catálogo built-in.
    - Con MODULE_CATALOG_PATH: JSON {"version": ..., "modules": [...]}.
    """
    path = (get_settings().module_catalog_path or "").strip()
    if not path:
        return BUILTIN_CATALOG

    data = json.loads(Path(path).read_text(encoding="utf-8"))
    catalog = ModuleCatalog.from_dict(data)
    logger.info(
        "Catálogo de módulos cargado",
        extra={"catalog_version": catalog.version, "modules_count": len(catalog)},
    )
    return catalog


# =============================================================================
# Repositorios (uno por proceso)
# =============================================================================


@lru_cache(maxsize=1)
def get_tenant_repository() -> TenantRepository:
    """Repositorio de agencias (in-memory en test; Postgres en runtime)."""
    if _use_in_memory():
        return InMemoryTenantRepository()
    return PostgresTenantRepository()


@lru_cache(maxsize=1)
def get_module_request_repository() -> ModuleRequestRepository:
    """Repositorio de solicitudes de módulos."""
    if _use_in_memory():
        return InMemoryModuleRequestRepository()
    return PostgresModuleRequestRepository()


@lru_cache(maxsize=1)
def get_user_repository() -> UserRepository:
    """Repositorio de usuarios."""
    if _use_in_memory():
        return InMemoryUserRepository()
    return PostgresUserRepository()


@lru_cache(maxsize=1)
def get_audit_repository() -> AuditEventRepository:
    """Repositorio de auditoría."""
    if _use_in_memory():
        return InMemoryAuditEventRepository()
    return PostgresAuditEventRepository()


def clear_container_caches() -> None:
    """Limpia singletons (tests / hot-reload local)."""
    get_module_catalog.cache_clear()
    get_tenant_repository.cache_clear()
    get_module_request_repository.cache_clear()
    get_user_repository.cache_clear()
    get_audit_repository.cache_clear()


# =============================================================================
# Casos de uso: agencias
# =============================================================================


def get_register_tenant_use_case() -> RegisterTenantUseCase:
    return RegisterTenantUseCase(
        tenant_repository=get_tenant_repository(),
        catalog=get_module_catalog(),
    )


def get_register_agency_use_case() -> RegisterAgencyUseCase:
    """Caso de uso: wizard de inscripción (agencia + dueño)."""
    return RegisterAgencyUseCase(
        register_tenant=get_register_tenant_use_case(),
        create_user=get_create_user_use_case(),
        tenant_repository=get_tenant_repository(),
    )


def get_decide_tenant_approval_use_case() -> DecideTenantApprovalUseCase:
    return DecideTenantApprovalUseCase(
        tenant_repository=get_tenant_repository(),
        user_repository=get_user_repository(),
        catalog=get_module_catalog(),
    )


def get_suspend_tenant_use_case() -> SuspendTenantUseCase:
    return SuspendTenantUseCase(tenant_repository=get_tenant_repository())


def get_reinstate_tenant_use_case() -> ReinstateTenantUseCase:
    return ReinstateTenantUseCase(tenant_repository=get_tenant_repository())


def get_get_tenant_use_case() -> GetTenantUseCase:
    return GetTenantUseCase(tenant_repository=get_tenant_repository())


def get_list_tenants_use_case() -> ListTenantsUseCase:
    return ListTenantsUseCase(tenant_repository=get_tenant_repository())


# =============================================================================
# Casos de uso: solicitudes de módulos
# =============================================================================


def get_request_modules_use_case() -> RequestModulesUseCase:
    return RequestModulesUseCase(
        tenant_repository=get_tenant_repository(),
        request_repository=get_module_request_repository(),
        catalog=get_module_catalog(),
    )


def get_decide_module_request_use_case() -> DecideModuleRequestUseCase:
    return DecideModuleRequestUseCase(
        request_repository=get_module_request_repository(),
        tenant_repository=get_tenant_repository(),
    )


def get_list_module_requests_use_case() -> ListModuleRequestsUseCase:
    return ListModuleRequestsUseCase(
        request_repository=get_module_request_repository()
    )


# =============================================================================
# Casos de uso: directorio de usuarios
# =============================================================================


def get_create_user_use_case() -> CreateUserUseCase:
    return CreateUserUseCase(
        user_repository=get_user_repository(),
        tenant_repository=get_tenant_repository(),
        catalog=get_module_catalog(),
        password_hasher=hash_password,
    )


def get_authenticate_user_use_case() -> AuthenticateUserUseCase:
    return AuthenticateUserUseCase(
        user_repository=get_user_repository(),
        password_verifier=verify_password,
        dummy_password_hash=dummy_password_hash(),
    )


def get_update_grants_use_case() -> UpdateGrantsUseCase:
    return UpdateGrantsUseCase(
        user_repository=get_user_repository(),
        tenant_repository=get_tenant_repository(),
        catalog=get_module_catalog(),
    )


def get_set_user_status_use_case() -> SetUserStatusUseCase:
    return SetUserStatusUseCase(user_repository=get_user_repository())


def get_get_user_use_case() -> GetUserUseCase:
    return GetUserUseCase(user_repository=get_user_repository())


def get_list_users_use_case() -> ListUsersUseCase:
    return ListUsersUseCase(user_repository=get_user_repository())


# =============================================================================
# Casos de uso: acceso
# =============================================================================


def get_list_accessible_modules_use_case() -> ListAccessibleModulesUseCase:
    return ListAccessibleModulesUseCase(
        tenant_repository=get_tenant_repository(),
        catalog=get_module_catalog(),
    )


def get_evaluate_access_use_case() -> EvaluateAccessUseCase:
    return EvaluateAccessUseCase(
        user_repository=get_user_repository(),
        tenant_repository=get_tenant_repository(),
        catalog=get_module_catalog(),
    )
