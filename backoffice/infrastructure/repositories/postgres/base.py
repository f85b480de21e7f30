"""
============================================================
TARJETA CRC — infrastructure/repositories/postgres/base.py
============================================================
Class: PostgresRepositoryBase

Responsibilities:
  - Resolver el pool (inyectado en tests, global en runtime).
  - Ejecutar SQL parametrizado con logging + DatabaseError consistentes.
  - Traducir violaciones de unicidad a ValidationError (email duplicado).

Collaborators:
  - psycopg / psycopg_pool
  - infrastructure.db.pool.get_pool
  - crosscutting.exceptions (DatabaseError, ValidationError)
  - crosscutting.logger

Constraints:
  - Nunca interpolar input de usuario: solo fragmentos SQL armados acá.
============================================================
"""

from __future__ import annotations

from typing import Iterable, Optional

from psycopg import errors as pg_errors
from psycopg_pool import ConnectionPool

from ....crosscutting.exceptions import DatabaseError, ValidationError
from ....crosscutting.logger import logger


class PostgresRepositoryBase:
    """R: Helpers DRY compartidos por los repositorios PostgreSQL."""

    # R: mensaje para UniqueViolation (cada repo define el suyo).
    _UNIQUE_VIOLATION_MESSAGE = "Registro duplicado."

    def __init__(self, pool: Optional[ConnectionPool] = None):
        # R: Pool inyectable para tests; en producción se obtiene por factory global.
        self._pool = pool

    def _get_pool(self) -> ConnectionPool:
        if self._pool is not None:
            return self._pool

        from ...db.pool import get_pool

        return get_pool()

    def _run(
        self,
        *,
        query: str,
        params: Iterable[object],
        context_msg: str,
        extra: dict,
        fetch: str = "one",
    ):
        """
        Ejecuta una sentencia en su propia transacción.

        fetch: "one" | "all" | "none"
        """
        try:
            pool = self._get_pool()
            with pool.connection() as conn:
                cur = conn.execute(query, tuple(params))
                if fetch == "all":
                    return cur.fetchall()
                if fetch == "one":
                    return cur.fetchone()
                return None
        except pg_errors.UniqueViolation as exc:
            logger.warning(context_msg, extra={**extra, "error": "unique_violation"})
            raise ValidationError(self._UNIQUE_VIOLATION_MESSAGE) from exc
        except Exception as exc:
            logger.exception(context_msg, extra={**extra, "error": str(exc)})
            raise DatabaseError(f"{context_msg}: {exc}") from exc

    def _fetchone(
        self, *, query: str, params: Iterable[object], context_msg: str, extra: dict
    ) -> tuple | None:
        return self._run(
            query=query, params=params, context_msg=context_msg, extra=extra
        )

    def _fetchall(
        self, *, query: str, params: Iterable[object], context_msg: str, extra: dict
    ) -> list[tuple]:
        return self._run(
            query=query,
            params=params,
            context_msg=context_msg,
            extra=extra,
            fetch="all",
        )

    def _execute(
        self, *, query: str, params: Iterable[object], context_msg: str, extra: dict
    ) -> None:
        self._run(
            query=query,
            params=params,
            context_msg=context_msg,
            extra=extra,
            fetch="none",
        )
