"""
============================================================
TARJETA CRC (Class / Responsibilities / Collaborators)
============================================================
Class: 001_initial_schema (Alembic Migration)

Responsibilities:
  - Crear el esquema del back office desde cero.
  - Agencias (tenants), solicitudes de módulos, usuarios y auditoría.

Collaborators:
  - PostgreSQL 14+
  - Repositorios PostgreSQL (SQL crudo; este esquema es su contrato)

Policy:
  - Migración BASELINE. Downgrade elimina todas las tablas.
  - Concurrencia optimista: cada fila mutable lleva `version` (CAS en UPDATE).
  - Convención de nombres:
      pk_<tabla>, uq_<tabla>_<col>, ix_<tabla>_<col>, fk_<tabla>_<col>__<ref_tabla>
============================================================
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "001_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamp(name: str) -> sa.Column:
    return sa.Column(
        name,
        sa.DateTime(timezone=True),
        server_default=sa.text("now()"),
        nullable=False,
    )


def _version() -> sa.Column:
    return sa.Column(
        "version", sa.Integer, nullable=False, server_default=sa.text("1")
    )


def _text_array(name: str) -> sa.Column:
    return sa.Column(
        name,
        postgresql.ARRAY(sa.Text()),
        nullable=False,
        server_default=sa.text("'{}'::text[]"),
    )


def upgrade() -> None:
    # =========================================================
    # 1) AGENCES (tenants)
    # =========================================================
    op.create_table(
        "agences",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("phone", sa.String(64), nullable=False, server_default=""),
        sa.Column("address", sa.Text, nullable=False, server_default=""),
        sa.Column(
            "status",
            sa.String(32),
            nullable=False,
            server_default=sa.text("'pending'"),
        ),
        _text_array("active_modules"),
        _text_array("requested_modules"),
        sa.Column("activity_type", sa.String(255), nullable=True),
        sa.Column("siret", sa.String(32), nullable=True),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        _version(),
        sa.PrimaryKeyConstraint("id", name="pk_agences"),
        sa.CheckConstraint(
            "status IN ('pending','approved','rejected','suspended')",
            name="ck_agences_status",
        ),
    )
    # Unicidad de email case-insensitive (get_by_email usa lower()).
    op.execute("CREATE UNIQUE INDEX uq_agences_lower_email ON agences (lower(email))")
    op.create_index("ix_agences_status", "agences", ["status"])

    # =========================================================
    # 2) MODULE REQUESTS
    # =========================================================
    op.create_table(
        "module_requests",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("agence_id", postgresql.UUID(as_uuid=True), nullable=False),
        _text_array("modules"),
        sa.Column("message", sa.Text, nullable=False, server_default=""),
        sa.Column(
            "status",
            sa.String(32),
            nullable=False,
            server_default=sa.text("'pending'"),
        ),
        sa.Column("requested_by", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("admin_comment", sa.Text, nullable=True),
        sa.Column("decided_by", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("decided_at", sa.DateTime(timezone=True), nullable=True),
        _timestamp("created_at"),
        _version(),
        sa.PrimaryKeyConstraint("id", name="pk_module_requests"),
        sa.ForeignKeyConstraint(
            ["agence_id"],
            ["agences.id"],
            name="fk_module_requests_agence_id__agences",
            ondelete="CASCADE",
        ),
        sa.CheckConstraint(
            "status IN ('pending','approved','rejected')",
            name="ck_module_requests_status",
        ),
    )
    op.create_index(
        "ix_module_requests_agence_id", "module_requests", ["agence_id"]
    )
    op.create_index("ix_module_requests_status", "module_requests", ["status"])

    # =========================================================
    # 3) USERS
    # =========================================================
    op.create_table(
        "users",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.Text, nullable=False),
        sa.Column("name", sa.String(255), nullable=False, server_default=""),
        sa.Column("first_name", sa.String(255), nullable=False, server_default=""),
        sa.Column("role", sa.String(32), nullable=False),
        sa.Column(
            "status",
            sa.String(32),
            nullable=False,
            server_default=sa.text("'actif'"),
        ),
        # Bindings usuario -> agencias (0 para superadmin).
        sa.Column(
            "agences",
            postgresql.ARRAY(postgresql.UUID(as_uuid=True)),
            nullable=False,
            server_default=sa.text("'{}'::uuid[]"),
        ),
        # Grants [{"module": ..., "actions": [...]}]
        sa.Column(
            "grants",
            postgresql.JSONB(astext_type=sa.Text()),
            nullable=False,
            server_default=sa.text("'[]'::jsonb"),
        ),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        _version(),
        sa.PrimaryKeyConstraint("id", name="pk_users"),
        sa.CheckConstraint(
            "role IN ('superadmin','agence','agent')", name="ck_users_role"
        ),
    )
    op.execute("CREATE UNIQUE INDEX uq_users_lower_email ON users (lower(email))")
    # Filtrado de agentes por agencia (%s = ANY(agences)).
    op.execute("CREATE INDEX ix_users_agences ON users USING gin (agences)")

    # =========================================================
    # 4) AUDIT
    # =========================================================
    op.create_table(
        "audit_events",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("actor", sa.Text, nullable=False),
        sa.Column(
            "actor_role",
            sa.Text,
            nullable=False,
            server_default=sa.text("'anonymous'"),
        ),
        sa.Column("action", sa.Text, nullable=False),
        sa.Column("target_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("agence_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column(
            "metadata",
            postgresql.JSONB(astext_type=sa.Text()),
            nullable=False,
            server_default=sa.text("'{}'::jsonb"),
        ),
        _timestamp("created_at"),
        sa.PrimaryKeyConstraint("id", name="pk_audit_events"),
    )
    op.create_index("ix_audit_events_target_id", "audit_events", ["target_id"])
    op.create_index("ix_audit_events_agence_id", "audit_events", ["agence_id"])
    op.create_index("ix_audit_events_created_at", "audit_events", ["created_at"])


def downgrade() -> None:
    op.drop_table("audit_events")
    op.drop_table("users")
    op.drop_table("module_requests")
    op.drop_table("agences")
