"""
===============================================================================
TARJETA CRC — schemas/users.py
===============================================================================

Módulo:
    Schemas HTTP para el directorio de usuarios y auth

Responsabilidades:
    - DTOs de login, alta de usuario, grants y estado.
    - Mapear User (dominio) -> UserRes sin exponer password_hash.
===============================================================================
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from backoffice.domain.entities import Grant, User, UserRole, UserStatus
from pydantic import BaseModel, Field, field_validator


# -----------------------------------------------------------------------------
# Grants
# -----------------------------------------------------------------------------
class GrantSchema(BaseModel):
    module: str = Field(..., min_length=1, max_length=64)
    actions: list[str] = Field(default_factory=list, max_length=20)

    @field_validator("actions")
    @classmethod
    def normalize_actions(cls, v: list[str]) -> list[str]:
        actions: list[str] = []
        for action in v or []:
            cleaned = (action or "").strip().lower()
            if cleaned and cleaned not in actions:
                actions.append(cleaned)
        return actions

    def to_domain(self) -> Grant:
        return Grant(module=self.module.strip(), actions=tuple(self.actions))


# -----------------------------------------------------------------------------
# Requests
# -----------------------------------------------------------------------------
class LoginReq(BaseModel):
    email: str = Field(..., min_length=3, max_length=320)
    password: str = Field(..., min_length=1, max_length=256)


class OwnerProfileReq(BaseModel):
    """Cuenta del dueño en el wizard de inscripción."""

    email: str = Field(..., min_length=3, max_length=320)
    password: str = Field(..., min_length=1, max_length=256)
    name: str = Field(..., min_length=1, max_length=200)
    first_name: str = Field(default="", max_length=200)


class CreateUserReq(OwnerProfileReq):
    role: UserRole = UserRole.AGENT
    agences: list[UUID] = Field(default_factory=list, max_length=50)
    grants: list[GrantSchema] = Field(default_factory=list, max_length=100)


class UpdateGrantsReq(BaseModel):
    grants: list[GrantSchema] = Field(default_factory=list, max_length=100)
    expected_version: int | None = Field(default=None, ge=1)


class SetUserStatusReq(BaseModel):
    status: UserStatus
    expected_version: int | None = Field(default=None, ge=1)


# -----------------------------------------------------------------------------
# Responses
# -----------------------------------------------------------------------------
class UserRes(BaseModel):
    id: UUID
    email: str
    name: str
    first_name: str
    role: UserRole
    status: UserStatus
    agences: list[UUID]
    grants: list[GrantSchema]
    created_at: datetime | None = None
    updated_at: datetime | None = None
    version: int

    @classmethod
    def from_domain(cls, user: User) -> "UserRes":
        return cls(
            id=user.id,
            email=user.email,
            name=user.name,
            first_name=user.first_name,
            role=user.role,
            status=user.status,
            agences=list(user.agences),
            grants=[
                GrantSchema(module=g.module, actions=list(g.actions))
                for g in user.grants
            ],
            created_at=user.created_at,
            updated_at=user.updated_at,
            version=user.version,
        )


class UsersListRes(BaseModel):
    users: list[UserRes]


class LoginRes(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    user: UserRes
