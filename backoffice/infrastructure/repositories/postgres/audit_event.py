"""
============================================================
TARJETA CRC — infrastructure/repositories/postgres/audit_event.py
============================================================
Class: PostgresAuditEventRepository

Responsibilities:
  - INSERT append-only en audit_events (metadata como jsonb).
  - Listado newest-first con filtros (target, agencia, actor, prefijo de acción).

Collaborators:
  - domain.audit.AuditEvent
  - psycopg.types.json.Jsonb
  - postgres.base.PostgresRepositoryBase

Notes:
  - Qué se audita lo decide backoffice/audit.py, no este repo.
============================================================
"""

from __future__ import annotations

from uuid import UUID

from psycopg.types.json import Jsonb

from ....domain.audit import AuditEvent
from .base import PostgresRepositoryBase

_COLUMNS = "id, actor, actor_role, action, target_id, agence_id, metadata, created_at"


def _row_to_event(row: tuple) -> AuditEvent:
    event_id, actor, actor_role, action, target_id, agence_id, metadata, created_at = row
    return AuditEvent(
        id=event_id,
        actor=actor,
        actor_role=actor_role,
        action=action,
        target_id=target_id,
        agence_id=agence_id,
        metadata=metadata or {},
        created_at=created_at,
    )


class PostgresAuditEventRepository(PostgresRepositoryBase):
    def record_event(self, event: AuditEvent) -> None:
        # R: DatabaseError se propaga; emit_audit_event decide no cortar el flujo.
        self._execute(
            query="""
                INSERT INTO audit_events
                    (id, actor, actor_role, action, target_id, agence_id, metadata)
                VALUES (%s, %s, %s, %s, %s, %s, %s)
            """,
            params=(
                event.id,
                event.actor,
                event.actor_role,
                event.action,
                event.target_id,
                event.agence_id,
                Jsonb(event.metadata),
            ),
            context_msg="PostgresAuditEventRepository: record_event failed",
            extra={"event_id": str(event.id), "audit_action": event.action},
        )

    def list_events(
        self,
        *,
        target_id: UUID | None = None,
        agence_id: UUID | None = None,
        actor_id: str | None = None,
        action_prefix: str | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[AuditEvent]:
        if limit <= 0:
            return []

        filters: list[tuple[str, object]] = []
        if target_id is not None:
            filters.append(("target_id = %s", target_id))
        if agence_id is not None:
            filters.append(("agence_id = %s", agence_id))
        if actor_id:
            if ":" in actor_id:
                filters.append(("actor = %s", actor_id))
            else:
                filters.append(("actor LIKE %s", f"%:{actor_id}"))
        if action_prefix:
            filters.append(("action LIKE %s", f"{action_prefix}%"))

        where = " AND ".join(sql for sql, _ in filters) or "TRUE"
        rows = self._fetchall(
            query=f"""
                SELECT {_COLUMNS}
                FROM audit_events
                WHERE {where}
                ORDER BY created_at DESC, id DESC
                LIMIT %s OFFSET %s
            """,
            params=[*(value for _, value in filters), limit, max(offset, 0)],
            context_msg="PostgresAuditEventRepository: list_events failed",
            extra={"action_prefix": action_prefix, "limit": limit},
        )
        return [_row_to_event(row) for row in rows]
