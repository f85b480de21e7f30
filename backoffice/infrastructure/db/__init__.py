"""Infra DB: ciclo de vida del pool PostgreSQL."""

from .pool import PoolStateError, close_pool, get_pool, init_pool

__all__ = ["PoolStateError", "close_pool", "get_pool", "init_pool"]
