# =============================================================================
# FILE: infrastructure/repositories/in_memory/audit_event.py
# =============================================================================
"""
In-Memory Audit Event Repository for testing and development.

NOT FOR PRODUCTION USE - data is lost on restart.
"""

from __future__ import annotations

from dataclasses import replace
from threading import Lock
from typing import List
from uuid import UUID

from ....domain.audit import AuditEvent
from ....domain.entities import utcnow


def _actor_matches(actor: str, actor_id: str) -> bool:
    # R: con ":" es match exacto ("user:<uuid>"); sin ":" es el id pelado.
    return actor == actor_id if ":" in actor_id else actor.endswith(f":{actor_id}")


class InMemoryAuditEventRepository:
    """Append-only list; newest first on read (same contract as Postgres)."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._events: List[AuditEvent] = []

    def record_event(self, event: AuditEvent) -> None:
        stored = replace(
            event,
            metadata=dict(event.metadata),
            created_at=event.created_at or utcnow(),
        )
        with self._lock:
            self._events.append(stored)

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
        with self._lock:
            newest_first = list(reversed(self._events))

        matches = [
            e
            for e in newest_first
            if (target_id is None or e.target_id == target_id)
            and (agence_id is None or e.agence_id == agence_id)
            and (not actor_id or _actor_matches(e.actor, actor_id))
            and (not action_prefix or e.action.startswith(action_prefix))
        ]
        return matches[max(offset, 0) : max(offset, 0) + max(limit, 0)]

    def get_all_events(self) -> List[AuditEvent]:
        """Insertion order (test helper)."""
        with self._lock:
            return list(self._events)
