"""
===============================================================================
TARJETA CRC — schemas/agences.py
===============================================================================

Módulo:
    Schemas HTTP para agencias (tenants) y solicitudes de módulos

Responsabilidades:
    - DTOs del wizard de inscripción, decisiones y lecturas.
    - Módulos se exponen como listas ordenadas (sets no son JSON).
===============================================================================
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from backoffice.domain.entities import (
    ModuleRequest,
    RequestStatus,
    Tenant,
    TenantProfile,
    TenantStatus,
)
from pydantic import BaseModel, Field

from .users import OwnerProfileReq, UserRes


# -----------------------------------------------------------------------------
# Requests
# -----------------------------------------------------------------------------
class RegisterAgencyReq(BaseModel):
    """Wizard de inscripción: agencia + cuenta del dueño."""

    name: str = Field(..., min_length=1, max_length=200)
    email: str = Field(..., min_length=3, max_length=320)
    phone: str = Field(..., min_length=1, max_length=50)
    address: str = Field(..., min_length=1, max_length=500)
    activity_type: str = Field(default="agence-voyage", max_length=100)
    siret: str | None = Field(default=None, max_length=32)
    modules: list[str] = Field(default_factory=list, max_length=50)
    owner: OwnerProfileReq

    def to_profile(self) -> TenantProfile:
        return TenantProfile(
            name=self.name,
            email=self.email,
            phone=self.phone,
            address=self.address,
            activity_type=self.activity_type,
            siret=self.siret,
            chosen_modules=tuple(self.modules),
        )


class VersionedActionReq(BaseModel):
    """Body opcional para transiciones con compare-and-set."""

    expected_version: int | None = Field(default=None, ge=1)


class CreateModuleRequestReq(BaseModel):
    modules: list[str] = Field(..., max_length=50)
    message: str = Field(..., max_length=2000)


class DecideModuleRequestReq(VersionedActionReq):
    comment: str | None = Field(default=None, max_length=2000)


# -----------------------------------------------------------------------------
# Responses
# -----------------------------------------------------------------------------
class AgenceRes(BaseModel):
    id: UUID
    name: str
    email: str
    phone: str
    address: str
    status: TenantStatus
    active_modules: list[str]
    requested_modules: list[str]
    activity_type: str
    siret: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    version: int

    @classmethod
    def from_domain(cls, tenant: Tenant) -> "AgenceRes":
        return cls(
            id=tenant.id,
            name=tenant.name,
            email=tenant.email,
            phone=tenant.phone,
            address=tenant.address,
            status=tenant.status,
            active_modules=sorted(tenant.active_modules),
            requested_modules=sorted(tenant.requested_modules),
            activity_type=tenant.activity_type,
            siret=tenant.siret,
            created_at=tenant.created_at,
            updated_at=tenant.updated_at,
            version=tenant.version,
        )


class AgencesListRes(BaseModel):
    agences: list[AgenceRes]


class RegisterAgencyRes(BaseModel):
    agence: AgenceRes
    owner: UserRes


class AccessibleModulesRes(BaseModel):
    agence_id: UUID
    modules: list[str]
    pending_modules: list[str]


class ModuleRequestRes(BaseModel):
    id: UUID
    agence_id: UUID
    modules: list[str]
    message: str
    status: RequestStatus
    requested_by: UUID | None = None
    admin_comment: str | None = None
    decided_by: UUID | None = None
    decided_at: datetime | None = None
    created_at: datetime | None = None
    version: int

    @classmethod
    def from_domain(cls, request: ModuleRequest) -> "ModuleRequestRes":
        return cls(
            id=request.id,
            agence_id=request.agence_id,
            modules=list(request.modules),
            message=request.message,
            status=request.status,
            requested_by=request.requested_by,
            admin_comment=request.admin_comment,
            decided_by=request.decided_by,
            decided_at=request.decided_at,
            created_at=request.created_at,
            version=request.version,
        )


class ModuleRequestsListRes(BaseModel):
    requests: list[ModuleRequestRes]
