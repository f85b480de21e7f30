"""
===============================================================================
USE CASE: Create User (superadmin, dueño de agencia o agente)
===============================================================================

Business Goal:
    Alta de usuarios del directorio con rol, agencias vinculadas y grants.

-------------------------------------------------------------------------------
CRC CARD (Class-Responsibility-Collaborator)
-------------------------------------------------------------------------------
Class:
    CreateUserUseCase

Responsibilities:
    - Validar perfil (email, nombre, password).
    - Validar bindings y grants (grant_validation).
    - Hashear el password (verificador one-way inyectado).
    - Autorizar al actor cuando el alta viene de la API:
        * superadmin: cualquier usuario
        * dueño agence: solo agentes vinculados únicamente a su agencia
      (actor=None es un alta interna: inscripción o seed).

Collaborators:
    - UserRepository: get_by_email / create
    - TenantRepository: snapshots de agencias vinculadas
    - ModuleCatalog
    - hash_password (identity.passwords)
===============================================================================
"""

from __future__ import annotations

import logging
from typing import Callable, Iterable, Optional
from uuid import UUID, uuid4

from ....crosscutting.exceptions import PermissionDeniedError, ValidationError
from ....domain.entities import Grant, User, UserProfile, UserRole, UserStatus
from ....domain.module_catalog import ModuleCatalog
from ....domain.repositories import TenantRepository, UserRepository
from ..actor_checks import is_active_superadmin, normalize_email, require_text
from .grant_validation import validate_bindings, validate_grants

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8


class CreateUserUseCase:
    """Command: alta de usuario."""

    def __init__(
        self,
        user_repository: UserRepository,
        tenant_repository: TenantRepository,
        catalog: ModuleCatalog,
        password_hasher: Callable[[str], str],
    ) -> None:
        self._users = user_repository
        self._tenants = tenant_repository
        self._catalog = catalog
        self._hash_password = password_hasher

    def execute(
        self,
        profile: UserProfile,
        *,
        role: UserRole,
        tenant_bindings: Iterable[UUID],
        grants: Iterable[Grant] = (),
        actor: Optional[User] = None,
        status: UserStatus = UserStatus.ACTIF,
    ) -> User:
        role = UserRole(role)
        bindings = list(dict.fromkeys(tenant_bindings))

        if actor is not None:
            self._authorize(actor, role, bindings)

        email, name = self.check_profile(profile)
        bound_tenants = validate_bindings(role, bindings, self._tenants)
        normalized_grants = validate_grants(role, grants, bound_tenants, self._catalog)

        user = self._users.create(
            User(
                id=uuid4(),
                email=email,
                password_hash=self._hash_password(profile.password),
                name=name,
                first_name=(profile.first_name or "").strip(),
                role=role,
                status=status,
                agences=tuple(bindings),
                grants=normalized_grants,
            )
        )

        logger.info(
            "Usuario creado",
            extra={
                "user_id": str(user.id),
                "role": user.role.value,
                "agences": [str(a) for a in user.agences],
                "grants_count": len(user.grants),
            },
        )
        return user

    def check_profile(self, profile: UserProfile) -> tuple[str, str]:
        """Valida email libre, nombre y largo de password; devuelve (email, name)."""
        email = normalize_email(profile.email)
        name = require_text(profile.name, "name")
        if len(profile.password or "") < MIN_PASSWORD_LENGTH:
            raise ValidationError(
                f"El password debe tener al menos {MIN_PASSWORD_LENGTH} caracteres."
            )
        if self._users.get_by_email(email) is not None:
            raise ValidationError("El email ya está registrado.")
        return email, name

    @staticmethod
    def _authorize(actor: User, role: UserRole, bindings: list[UUID]) -> None:
        if is_active_superadmin(actor):
            return
        if (
            actor.is_active
            and actor.role == UserRole.AGENCE
            and role == UserRole.AGENT
            and bindings
            and all(actor.is_owner_of(agence_id) for agence_id in bindings)
        ):
            return
        raise PermissionDeniedError("No podés crear este usuario.")
