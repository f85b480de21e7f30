"""
===============================================================================
CRC CARD — infrastructure/db/pool.py
===============================================================================

Componente:
  Pool de conexiones PostgreSQL del proceso

Responsabilidades:
  - Abrir un único psycopg_pool.ConnectionPool en el lifespan de la app.
  - Aplicar statement_timeout a cada conexión nueva.
  - Cerrarlo al apagar (idempotente).

Colaboradores:
  - api/main.py (lifespan, /healthz)
  - repositories/postgres/base.py (get_pool)
  - crosscutting.config (db_statement_timeout_ms)

Notas:
  - Solo se usa cuando DATABASE_URL está seteada y APP_ENV no es test.
===============================================================================
"""

from __future__ import annotations

import threading

import psycopg
from psycopg_pool import ConnectionPool

from ...crosscutting.config import get_settings
from ...crosscutting.logger import logger


class PoolStateError(RuntimeError):
    """Uso del pool fuera de su ciclo de vida (sin abrir o abierto dos veces)."""


_state_lock = threading.Lock()
_active: ConnectionPool | None = None


def _apply_statement_timeout(conn: psycopg.Connection) -> None:
    timeout_ms = get_settings().db_statement_timeout_ms
    if timeout_ms > 0:
        conn.execute(f"SET statement_timeout = {int(timeout_ms)}")
        conn.commit()


def init_pool(database_url: str, min_size: int, max_size: int) -> ConnectionPool:
    global _active

    with _state_lock:
        if _active is not None:
            raise PoolStateError("El pool DB ya está abierto.")
        _active = ConnectionPool(
            conninfo=database_url,
            min_size=min_size,
            max_size=max_size,
            configure=_apply_statement_timeout,
            open=True,
        )
    logger.info("Pool DB abierto", extra={"min_size": min_size, "max_size": max_size})
    return _active


def get_pool() -> ConnectionPool:
    if _active is None:
        raise PoolStateError("El pool DB no está abierto (init_pool en el lifespan).")
    return _active


def close_pool() -> None:
    global _active

    with _state_lock:
        pool, _active = _active, None
    if pool is not None:
        pool.close()
        logger.info("Pool DB cerrado")
