"""
===============================================================================
TARJETA CRC — domain/entities.py
===============================================================================

Módulo:
    Entidades del Dominio (Tenant/Agence, ModuleRequest, User, Grant,
    AuthorizationContext)

Responsabilidades:
    - Definir estructuras centrales del control de acceso (sin infraestructura).
    - Modelar cada agregado como snapshot inmutable (frozen) con `version`
      para concurrencia optimista.
    - Brindar helpers mínimos de lectura (is_owner_of, grant_for, ...).

Colaboradores:
    - domain.repositories: persisten/recuperan estos agregados.
    - domain.authorization: consume snapshots para decidir Allow/Deny.
    - application/usecases: construyen nuevas versiones con dataclasses.replace.

Principios:
    - Sin dependencias a DB/FastAPI.
    - Las transiciones NO mutan: devuelven un snapshot nuevo; el repositorio
      decide si la escritura gana (expected_version) o falla con ConflictError.
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Iterable, Optional
from uuid import UUID


def utcnow() -> datetime:
    """Fecha/hora UTC (casos de uso y repositorios en memoria)."""
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# Enumeraciones
# ---------------------------------------------------------------------------


class TenantStatus(str, Enum):
    """Ciclo de vida de una agencia."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    SUSPENDED = "suspended"


class UserRole(str, Enum):
    """Rol único de cada usuario."""

    SUPERADMIN = "superadmin"
    AGENCE = "agence"
    AGENT = "agent"


class UserStatus(str, Enum):
    """Estado de la cuenta. Solo ACTIF autentica y opera."""

    ACTIF = "actif"
    SUSPENDU = "suspendu"
    EN_ATTENTE = "en_attente"
    REJETE = "rejete"


class RequestStatus(str, Enum):
    """Estado de una solicitud de módulos."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ApprovalDecision(str, Enum):
    """Decisión de superadmin sobre un workflow de aprobación."""

    APPROVE = "approve"
    REJECT = "reject"


# ---------------------------------------------------------------------------
# Tenant (Agence)
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TenantProfile:
    """Datos de alta de una agencia (wizard de inscripción)."""

    name: str
    email: str
    phone: str
    address: str
    activity_type: str = "agence-voyage"
    siret: Optional[str] = None
    # Módulos elegidos en el wizard: quedan en requested_modules hasta aprobar.
    chosen_modules: tuple[str, ...] = ()


@dataclass(frozen=True)
class Tenant:
    """
    Agencia (unidad de aislamiento de datos).

    Invariantes:
      - active_modules / requested_modules solo contienen ids del catálogo.
      - active_modules crece solo por workflows de aprobación de superadmin.
    """

    id: UUID
    name: str
    email: str
    phone: str
    address: str
    status: TenantStatus = TenantStatus.PENDING
    active_modules: frozenset[str] = frozenset()
    requested_modules: frozenset[str] = frozenset()
    activity_type: str = "agence-voyage"
    siret: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    version: int = 1

    @property
    def is_active(self) -> bool:
        """True si la agencia puede operar (status approved)."""
        return self.status == TenantStatus.APPROVED

    def has_module(self, module_id: str) -> bool:
        return module_id in self.active_modules


# ---------------------------------------------------------------------------
# ModuleRequest
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ModuleRequest:
    """
    Solicitud de activación de módulos.

    Nota:
      - Una vez decidida es historial inmutable (no hay transición de salida).
    """

    id: UUID
    agence_id: UUID
    modules: tuple[str, ...]
    message: str
    status: RequestStatus = RequestStatus.PENDING
    requested_by: Optional[UUID] = None
    admin_comment: Optional[str] = None
    decided_by: Optional[UUID] = None
    decided_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    version: int = 1

    @property
    def is_pending(self) -> bool:
        return self.status == RequestStatus.PENDING


# ---------------------------------------------------------------------------
# User / Grant
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Grant:
    """Permiso explícito por usuario: (módulo, acciones[])."""

    module: str
    actions: tuple[str, ...]

    def allows(self, action: str) -> bool:
        return action in self.actions


def normalize_grants(grants: Iterable[Grant]) -> tuple[Grant, ...]:
    """
    Normaliza la lista de grants preservando orden.

    - Acciones sin duplicados (primer aparición gana).
    - No fusiona módulos repetidos: eso lo rechaza la validación.
    """
    normalized: list[Grant] = []
    for grant in grants:
        actions = tuple(dict.fromkeys(a.strip() for a in grant.actions))
        normalized.append(Grant(module=grant.module.strip(), actions=actions))
    return tuple(normalized)


@dataclass(frozen=True)
class UserProfile:
    """Datos de identidad de un usuario al crearlo."""

    email: str
    password: str
    name: str
    first_name: str = ""


@dataclass(frozen=True)
class User:
    """
    Usuario del back office (superadmin, dueño de agencia o agente).

    Binding de agencias:
      - superadmin: ninguna (implícitamente todas)
      - agence: exactamente una (la propia)
      - agent: una o más (agentes multi-agencia)
    """

    id: UUID
    email: str
    password_hash: str
    name: str
    role: UserRole
    first_name: str = ""
    status: UserStatus = UserStatus.ACTIF
    agences: tuple[UUID, ...] = ()
    grants: tuple[Grant, ...] = ()
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    version: int = 1

    @property
    def is_active(self) -> bool:
        return self.status == UserStatus.ACTIF

    @property
    def is_superadmin(self) -> bool:
        return self.role == UserRole.SUPERADMIN

    def is_bound_to(self, agence_id: UUID) -> bool:
        return agence_id in self.agences

    def is_owner_of(self, agence_id: UUID) -> bool:
        """True si es el usuario `agence` dueño de esa agencia."""
        return self.role == UserRole.AGENCE and agence_id in self.agences

    def grant_for(self, module_id: str) -> Optional[Grant]:
        for grant in self.grants:
            if grant.module == module_id:
                return grant
        return None


# ---------------------------------------------------------------------------
# AuthorizationContext (efímero, no se persiste)
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AuthorizationContext:
    """
    Contexto de una decisión de acceso, construido por request.

    - actor: snapshot del usuario autenticado
    - tenant: snapshot de la agencia activa (la que el request declara)
    - module / action: recurso y verbo pedidos
    """

    actor: Optional[User]
    tenant: Optional[Tenant]
    module: str
    action: str
