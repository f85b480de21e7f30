"""
===============================================================================
TARJETA CRC — domain/authorization.py
===============================================================================

Módulo:
    Motor de decisión de autorización (función pura)

Responsabilidades:
    - decide(context) -> Decision (Allow | Deny(reason)).
    - list_accessible_modules(actor, tenant) para la navegación del UI.
    - Centralizar TODA la lógica de roles/grants en una tabla de reglas
      ordenada (primera regla que matchea gana; default = Deny).

Colaboradores:
    - domain.entities: User, Tenant, AuthorizationContext.
    - domain.module_catalog: valida módulo y acciones reconocidas.
    - interfaces/api/http/dependencies.require_module_action (único punto
      de enforcement inbound).

Orden de reglas:
    1) actor no activo              -> Deny(actor_inactive)
    2) actor superadmin             -> Allow
    3) agencia no aprobada          -> Deny(tenant_not_active)
    4) módulo no activo en agencia  -> Deny(module_not_entitled)
    5) dueño (agence) de la agencia -> Allow (acción reconocida)
    6) agente: vinculado + grant    -> Allow; si no -> Deny(action_not_granted)
    7) cualquier otro caso          -> Deny(no_matching_rule)

Concurrencia:
    - Sin estado compartido ni locks: opera sobre snapshots inmutables.

Errores:
    - Un Deny NO es excepción. Solo input mal formado (sin actor, sin agencia,
      módulo desconocido) lanza AuthorizationInputError.
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..crosscutting.exceptions import AuthorizationInputError
from .entities import AuthorizationContext, Tenant, User, UserRole
from .module_catalog import BUILTIN_CATALOG, LIRE, ModuleCatalog


class Verdict(str, Enum):
    ALLOW = "allow"
    DENY = "deny"


class DenyReason(str, Enum):
    """Códigos de Deny (solo para logs/audit, nunca al cliente)."""

    ACTOR_INACTIVE = "actor_inactive"
    TENANT_NOT_ACTIVE = "tenant_not_active"
    MODULE_NOT_ENTITLED = "module_not_entitled"
    ACTION_NOT_GRANTED = "action_not_granted"
    NO_MATCHING_RULE = "no_matching_rule"


@dataclass(frozen=True)
class Decision:
    """Resultado tipado del motor."""

    verdict: Verdict
    reason: Optional[DenyReason] = None

    @property
    def allowed(self) -> bool:
        return self.verdict == Verdict.ALLOW

    @classmethod
    def allow(cls) -> "Decision":
        return cls(Verdict.ALLOW)

    @classmethod
    def deny(cls, reason: DenyReason) -> "Decision":
        return cls(Verdict.DENY, reason)


ALLOW = Decision.allow()


def decide(
    context: AuthorizationContext, *, catalog: ModuleCatalog = BUILTIN_CATALOG
) -> Decision:
    """
    Evalúa la tabla de reglas sobre el contexto.

    Nota:
      - Reglas 1-2 no miran agencia ni módulo: el superadmin es universal
        incluso para módulos inexistentes.
      - Desde la regla 3, agencia y módulo son obligatorios (input mal formado
        lanza AuthorizationInputError).
    """
    actor = context.actor
    if actor is None:
        raise AuthorizationInputError("AuthorizationContext sin actor")

    # 1) Cuenta no activa
    if not actor.is_active:
        return Decision.deny(DenyReason.ACTOR_INACTIVE)

    # 2) Operador global
    if actor.role == UserRole.SUPERADMIN:
        return ALLOW

    tenant = context.tenant
    if tenant is None:
        raise AuthorizationInputError("AuthorizationContext sin agencia activa")
    definition = catalog.get(context.module)
    if definition is None:
        raise AuthorizationInputError(f"Módulo desconocido: {context.module!r}")

    # 3) Agencia fuera de approved (pending/rejected/suspended) => fail-closed
    if not tenant.is_active:
        return Decision.deny(DenyReason.TENANT_NOT_ACTIVE)

    # 4) Entitlement de la agencia
    if not tenant.has_module(definition.id):
        return Decision.deny(DenyReason.MODULE_NOT_ENTITLED)

    # 5) Dueño de la agencia: acceso total a módulos activos
    if actor.is_owner_of(tenant.id) and definition.recognizes(context.action):
        return ALLOW

    # 6) Agente: grant explícito dentro de una agencia a la que está vinculado
    if actor.role == UserRole.AGENT:
        grant = actor.grant_for(definition.id) if actor.is_bound_to(tenant.id) else None
        if grant is not None and grant.allows(context.action):
            return ALLOW
        return Decision.deny(DenyReason.ACTION_NOT_GRANTED)

    # 7) Default
    return Decision.deny(DenyReason.NO_MATCHING_RULE)


def list_accessible_modules(
    actor: User,
    tenant: Optional[Tenant],
    *,
    catalog: ModuleCatalog = BUILTIN_CATALOG,
) -> list[str]:
    """
    Módulos visibles para el actor en la agencia: decide(action="lire") sobre
    todo el catálogo.

    Importante:
      - Es cosmético (navegación). El enforcement real es decide() por request.
    """
    return [
        definition.id
        for definition in catalog.list_modules()
        if decide(
            AuthorizationContext(
                actor=actor, tenant=tenant, module=definition.id, action=LIRE
            ),
            catalog=catalog,
        ).allowed
    ]
