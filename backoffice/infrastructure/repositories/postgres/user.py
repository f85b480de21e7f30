"""
PostgresUserRepository: tabla `users` (psycopg, SQL explícito).

- get_by_email / get_by_id devuelven None si no hay fila.
- create inserta con version=1; update hace compare-and-set sobre version
  y levanta ConflictError si otra escritura ganó.
- grants se persisten como jsonb ordenado: [{"module": ..., "actions": [...]}].
- Un role/status desconocido en la fila es drift de esquema: DatabaseError.
"""

from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from psycopg.types.json import Jsonb

from ....crosscutting.exceptions import ConflictError, DatabaseError, NotFoundError
from ....domain.entities import Grant, User, UserRole, UserStatus
from .base import PostgresRepositoryBase

# R: mismo orden que _row_to_user.
_USER_COLUMNS = """
    id, email, password_hash, name, first_name, role, status, agences,
    grants, created_at, updated_at, version
"""


def _grants_to_json(grants: tuple[Grant, ...]) -> Jsonb:
    return Jsonb([{"module": g.module, "actions": list(g.actions)} for g in grants])


def _row_to_user(row: tuple) -> User:
    """
    Fila de `users` (orden de _USER_COLUMNS) -> User.

    Política:
    - Role/status casting estricto: si el valor no matchea el enum -> DatabaseError.
    """
    try:
        role = UserRole(row[5])
        status = UserStatus(row[6])
    except ValueError as exc:
        raise DatabaseError(
            f"Invalid user role/status in database: {row[5]}/{row[6]}"
        ) from exc

    return User(
        id=row[0],
        email=row[1],
        password_hash=row[2],
        name=row[3],
        first_name=row[4] or "",
        role=role,
        status=status,
        agences=tuple(row[7] or ()),
        grants=tuple(
            Grant(module=g["module"], actions=tuple(g.get("actions") or ()))
            for g in (row[8] or [])
        ),
        created_at=row[9],
        updated_at=row[10],
        version=row[11],
    )


class PostgresUserRepository(PostgresRepositoryBase):
    """R: Implementación PostgreSQL del repositorio de usuarios."""

    _UNIQUE_VIOLATION_MESSAGE = "El email ya está registrado."

    def create(self, user: User) -> User:
        row = self._fetchone(
            query=f"""
                INSERT INTO users (
                    id, email, password_hash, name, first_name, role, status,
                    agences, grants, created_at, updated_at, version
                )
                VALUES (%s, %s, %s, %s, %s, %s, %s, %s::uuid[], %s, now(), now(), 1)
                RETURNING {_USER_COLUMNS}
            """,
            params=(
                user.id,
                user.email,
                user.password_hash,
                user.name,
                user.first_name,
                user.role.value,
                user.status.value,
                list(user.agences),
                _grants_to_json(user.grants),
            ),
            context_msg="PostgresUserRepository: create failed",
            extra={"user_id": str(user.id)},
        )
        return _row_to_user(row)

    def get(self, user_id: UUID) -> Optional[User]:
        row = self._fetchone(
            query=f"SELECT {_USER_COLUMNS} FROM users WHERE id = %s",
            params=(user_id,),
            context_msg="PostgresUserRepository: get failed",
            extra={"user_id": str(user_id)},
        )
        return _row_to_user(row) if row else None

    def get_by_email(self, email: str) -> Optional[User]:
        row = self._fetchone(
            query=f"SELECT {_USER_COLUMNS} FROM users WHERE lower(email) = lower(%s)",
            params=((email or "").strip(),),
            context_msg="PostgresUserRepository: get_by_email failed",
            extra={},
        )
        return _row_to_user(row) if row else None

    def list_users(
        self,
        *,
        agence_id: UUID | None = None,
        role: UserRole | None = None,
    ) -> List[User]:
        conditions: list[str] = []
        params: list[object] = []
        if agence_id is not None:
            conditions.append("%s = ANY(agences)")
            params.append(agence_id)
        if role is not None:
            conditions.append("role = %s")
            params.append(role.value)

        where_sql = f"WHERE {' AND '.join(conditions)}" if conditions else ""
        rows = self._fetchall(
            query=f"SELECT {_USER_COLUMNS} FROM users {where_sql} ORDER BY email ASC",
            params=params,
            context_msg="PostgresUserRepository: list failed",
            extra={"where_sql": where_sql},
        )
        return [_row_to_user(r) for r in rows]

    def update(self, user: User, *, expected_version: int) -> User:
        row = self._fetchone(
            query=f"""
                UPDATE users
                SET email = %s, password_hash = %s, name = %s, first_name = %s,
                    role = %s, status = %s, agences = %s::uuid[], grants = %s,
                    updated_at = now(), version = version + 1
                WHERE id = %s AND version = %s
                RETURNING {_USER_COLUMNS}
            """,
            params=(
                user.email,
                user.password_hash,
                user.name,
                user.first_name,
                user.role.value,
                user.status.value,
                list(user.agences),
                _grants_to_json(user.grants),
                user.id,
                expected_version,
            ),
            context_msg="PostgresUserRepository: update failed",
            extra={"user_id": str(user.id)},
        )
        if row is None:
            if self.get(user.id) is None:
                raise NotFoundError("Usuario", user.id)
            raise ConflictError(
                "El usuario fue modificado por otro administrador.",
                aggregate="user",
                aggregate_id=str(user.id),
                expected_version=expected_version,
            )
        return _row_to_user(row)
