"""
Name: Integration Test DB Setup

Responsibilities:
  - Ensure database schema exists before integration tests run
  - Run Alembic migrations once per test session
  - Provide a dedicated ConnectionPool and truncate tables between tests

Notes:
  - Only runs when DATABASE_URL is set
  - Uses DATABASE_URL from environment (see alembic/env.py)
"""

from __future__ import annotations

import os
from pathlib import Path

import pytest

if not os.getenv("DATABASE_URL"):
    pytest.skip(
        "Set DATABASE_URL to run integration tests", allow_module_level=True
    )

from alembic import command
from alembic.config import Config
from psycopg_pool import ConnectionPool

DATABASE_URL = os.environ["DATABASE_URL"]
REPO_ROOT = Path(__file__).resolve().parents[2]

_TABLES = ("audit_events", "module_requests", "users", "agences")


@pytest.fixture(scope="session", autouse=True)
def migrated_database() -> None:
    config = Config(str(REPO_ROOT / "alembic.ini"))
    config.set_main_option("script_location", str(REPO_ROOT / "alembic"))
    command.upgrade(config, "head")


@pytest.fixture(scope="session")
def pg_pool(migrated_database):
    pool = ConnectionPool(conninfo=DATABASE_URL, min_size=1, max_size=8, open=True)
    yield pool
    pool.close()


@pytest.fixture(autouse=True)
def clean_tables(pg_pool):
    with pg_pool.connection() as conn:
        conn.execute(f"TRUNCATE {', '.join(_TABLES)} CASCADE")
    yield
