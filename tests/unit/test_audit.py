"""
Name: Audit Event Tests

Responsibilities:
  - emit_audit_event builds actor id/role and JSON-friendly metadata
  - Writes are best-effort (repository failures never propagate)
  - In-memory list_events filters
"""

from unittest.mock import MagicMock
from uuid import uuid4

import pytest
from backoffice.audit import emit_audit_event
from backoffice.domain.entities import TenantStatus

pytestmark = pytest.mark.unit


def test_emit_audit_event_records_actor_and_metadata(audit_repo, user_factory):
    actor = user_factory.superadmin()
    target = uuid4()

    emit_audit_event(
        audit_repo,
        action="agence.approve",
        actor=actor,
        target_id=target,
        agence_id=target,
        metadata={"status": TenantStatus.APPROVED, "modules": {"crm", "caisse"}},
    )

    [event] = audit_repo.get_all_events()
    assert event.actor == f"user:{actor.id}"
    assert event.actor_role == "superadmin"
    assert event.action == "agence.approve"
    assert event.target_id == target
    assert event.agence_id == target
    assert event.metadata == {"status": "approved", "modules": ["caisse", "crm"]}
    assert event.created_at is not None


def test_anonymous_actor(audit_repo):
    emit_audit_event(audit_repo, action="auth.login")

    [event] = audit_repo.get_all_events()
    assert event.actor == "anonymous"
    assert event.actor_role == "anonymous"
    assert event.metadata == {}


def test_repository_failure_is_swallowed():
    repo = MagicMock()
    repo.record_event.side_effect = RuntimeError("db down")

    emit_audit_event(repo, action="access.deny")

    repo.record_event.assert_called_once()


def test_none_repository_is_noop():
    emit_audit_event(None, action="access.deny")


def test_list_events_filters(audit_repo, user_factory):
    actor = user_factory.superadmin()
    target, agence = uuid4(), uuid4()
    emit_audit_event(
        audit_repo, action="agence.approve", actor=actor, target_id=target, agence_id=agence
    )
    emit_audit_event(audit_repo, action="access.deny", actor=actor, agence_id=agence)
    emit_audit_event(audit_repo, action="agence.suspend")

    assert [e.action for e in audit_repo.list_events(action_prefix="agence.")] == [
        "agence.suspend",
        "agence.approve",
    ]
    assert len(audit_repo.list_events(actor_id=str(actor.id))) == 2
    assert len(audit_repo.list_events(actor_id=f"user:{actor.id}")) == 2
    assert [e.action for e in audit_repo.list_events(target_id=target)] == [
        "agence.approve"
    ]
    assert [e.action for e in audit_repo.list_events(agence_id=agence)] == [
        "access.deny",
        "agence.approve",
    ]
    assert [e.action for e in audit_repo.list_events(limit=1, offset=1)] == [
        "access.deny"
    ]
