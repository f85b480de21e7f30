"""
============================================================
TARJETA CRC — infrastructure/repositories/in_memory/user.py
============================================================
Class: InMemoryUserRepository

Responsibilities:
  - Almacenar usuarios en memoria (tests / local dev).
  - Unicidad de email (case-insensitive) al crear.
  - Update compare-and-set por `version`.

Collaborators:
  - domain.entities.User, UserRole
  - crosscutting.exceptions (ConflictError, NotFoundError, ValidationError)
============================================================
"""

from __future__ import annotations

from dataclasses import replace
from threading import Lock
from typing import Dict, List, Optional
from uuid import UUID

from ....crosscutting.exceptions import ConflictError, NotFoundError, ValidationError
from ....domain.entities import User, UserRole, utcnow


class InMemoryUserRepository:
    """Repositorio in-memory, thread-safe, para Users."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._users: Dict[UUID, User] = {}

    def _find_by_email(self, email: str) -> Optional[User]:
        normalized = (email or "").strip().lower()
        for user in self._users.values():
            if user.email.lower() == normalized:
                return user
        return None

    def create(self, user: User) -> User:
        with self._lock:
            if user.id in self._users or self._find_by_email(user.email):
                raise ValidationError("El email ya está registrado.")
            now = utcnow()
            stored = replace(
                user,
                created_at=user.created_at or now,
                updated_at=user.updated_at or now,
                version=1,
            )
            self._users[stored.id] = stored
            return stored

    def get(self, user_id: UUID) -> Optional[User]:
        with self._lock:
            return self._users.get(user_id)

    def get_by_email(self, email: str) -> Optional[User]:
        with self._lock:
            return self._find_by_email(email)

    def list_users(
        self,
        *,
        agence_id: UUID | None = None,
        role: UserRole | None = None,
    ) -> List[User]:
        with self._lock:
            items = [
                u
                for u in self._users.values()
                if (agence_id is None or agence_id in u.agences)
                and (role is None or u.role == role)
            ]
        return sorted(items, key=lambda u: u.email)

    def update(self, user: User, *, expected_version: int) -> User:
        with self._lock:
            current = self._users.get(user.id)
            if current is None:
                raise NotFoundError("Usuario", user.id)
            if current.version != expected_version:
                raise ConflictError(
                    "El usuario fue modificado por otro administrador.",
                    aggregate="user",
                    aggregate_id=str(user.id),
                    expected_version=expected_version,
                )
            stored = replace(
                user,
                created_at=current.created_at,
                updated_at=utcnow(),
                version=current.version + 1,
            )
            self._users[stored.id] = stored
            return stored

    def clear(self) -> None:
        """Clear all data (for testing)."""
        with self._lock:
            self._users.clear()
