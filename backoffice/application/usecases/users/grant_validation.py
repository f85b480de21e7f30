"""
===============================================================================
USE CASE HELPER: Validación de bindings y grants
===============================================================================

Reglas (compartidas por CreateUser y UpdateGrants):
    R1) superadmin: sin agencias. agence: exactamente una. agent: una o más.
    R2) Toda agencia vinculada debe existir.
    R3) Módulo del grant debe existir y no repetirse en la lista.
    R4) Acciones no vacías y reconocidas por el módulo.
    R5) El módulo debe estar en active_modules de alguna agencia vinculada
        (un grant nunca se adelanta al entitlement).
    R6) superadmin no lleva grants (su acceso es universal).

Agentes multi-agencia:
    R5 valida contra la UNIÓN de agencias vinculadas; el motor igual vuelve a
    exigir el entitlement de la agencia activa en cada decisión (regla 4).
===============================================================================
"""

from __future__ import annotations

from typing import Iterable, Sequence
from uuid import UUID

from ....crosscutting.exceptions import ValidationError
from ....domain.entities import Grant, Tenant, UserRole, normalize_grants
from ....domain.module_catalog import ModuleCatalog
from ....domain.repositories import TenantRepository


def validate_bindings(
    role: UserRole,
    tenant_bindings: Iterable[UUID],
    tenant_repository: TenantRepository,
) -> list[Tenant]:
    """Valida cantidad y existencia de agencias; devuelve sus snapshots."""
    bindings = list(dict.fromkeys(tenant_bindings))

    if role == UserRole.SUPERADMIN:
        if bindings:
            raise ValidationError("Un superadmin no se vincula a agencias.")
        return []

    if not bindings:
        raise ValidationError(f"El rol {role.value} requiere al menos una agencia.")
    if role == UserRole.AGENCE and len(bindings) != 1:
        raise ValidationError("Un usuario agence se vincula a exactamente una agencia.")

    tenants: list[Tenant] = []
    for agence_id in bindings:
        tenant = tenant_repository.get(agence_id)
        if tenant is None:
            raise ValidationError(f"Agencia inexistente: {agence_id}")
        tenants.append(tenant)
    return tenants


def validate_grants(
    role: UserRole,
    grants: Iterable[Grant],
    bound_tenants: Sequence[Tenant],
    catalog: ModuleCatalog,
) -> tuple[Grant, ...]:
    """Valida módulo, acciones y entitlement; devuelve los grants normalizados."""
    normalized = normalize_grants(grants)
    if role == UserRole.SUPERADMIN:
        if normalized:
            raise ValidationError("Un superadmin no admite grants.")
        return ()

    entitled: set[str] = set()
    for tenant in bound_tenants:
        entitled |= tenant.active_modules

    seen: set[str] = set()
    for grant in normalized:
        if not catalog.has_module(grant.module):
            raise ValidationError(f"Módulo desconocido: {grant.module!r}")
        if grant.module in seen:
            raise ValidationError(f"Grant duplicado para el módulo {grant.module!r}")
        seen.add(grant.module)

        if not grant.actions:
            raise ValidationError(f"El grant de {grant.module!r} no tiene acciones.")
        invalid = [a for a in grant.actions if not catalog.is_valid_action(grant.module, a)]
        if invalid:
            raise ValidationError(
                f"Acciones no reconocidas por {grant.module!r}: {', '.join(invalid)}"
            )

        if grant.module not in entitled:
            raise ValidationError(
                f"El módulo {grant.module!r} no está activo en la agencia vinculada."
            )

    return normalized
