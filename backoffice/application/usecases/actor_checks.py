"""
===============================================================================
USE CASE HELPERS: Actor checks + input normalization
===============================================================================

Responsabilidades:
    - Chequear el derecho del actor a ejecutar una MUTACIÓN (PermissionDeniedError).
      Esto es distinto del motor de autorización, que decide acciones de negocio
      dentro de un módulo.
    - Normalizar/validar inputs comunes (email, campos obligatorios).

Colaboradores:
    - domain.entities.User / UserRole
    - crosscutting.exceptions (PermissionDeniedError, ValidationError)
===============================================================================
"""

from __future__ import annotations

from typing import Optional

from ...crosscutting.exceptions import PermissionDeniedError, ValidationError
from ...domain.entities import User, UserRole


def ensure_superadmin(actor: Optional[User], operation: str) -> User:
    """Solo un superadmin activo puede ejecutar `operation`."""
    if actor is None or not actor.is_active or actor.role != UserRole.SUPERADMIN:
        raise PermissionDeniedError(
            f"Solo un superadmin puede ejecutar: {operation}."
        )
    return actor


def is_active_superadmin(actor: Optional[User]) -> bool:
    return actor is not None and actor.is_active and actor.is_superadmin


def owns_every_binding(actor: Optional[User], target: User) -> bool:
    """
    True si actor es dueño (agence) de TODAS las agencias del target.

    Un target sin agencias (superadmin) nunca es administrable por un dueño.
    """
    if actor is None or not actor.is_active or actor.role != UserRole.AGENCE:
        return False
    if not target.agences:
        return False
    return all(actor.is_owner_of(agence_id) for agence_id in target.agences)


def normalize_email(email: str) -> str:
    normalized = (email or "").strip().lower()
    local, _, domain = normalized.partition("@")
    if not local or not domain or " " in normalized:
        raise ValidationError("Email inválido.")
    return normalized


def require_text(value: Optional[str], field_name: str) -> str:
    text = (value or "").strip()
    if not text:
        raise ValidationError(f"El campo '{field_name}' es obligatorio.")
    return text
