"""Shared pytest fixtures for auditpager tests."""

from __future__ import annotations

import datetime as dt
import json
from pathlib import Path
from typing import Any

import pytest
from auditpager.cli_types import AuditArgs
from auditpager.events import Event
from auditpager.tree import Tree

LOGGED_AT = "2026-01-21T21:52:57+00:00"


class FixedTimeFormatter:
    """Time formatter that always returns the ISO timestamp."""

    def format(self, t: dt.datetime) -> str:
        return t.isoformat()


def _make_record(
    *,
    username: str = "dev1",
    action: str = "read",
    subject: dict[str, Any] | None = None,
    ip_address: str = "10.0.0.1",
    logged_at: str = LOGGED_AT,
) -> dict[str, Any]:
    """Build an audit event record as found in JSONL files."""
    return {
        "event_id": f"evt-{username}-{action}",
        "action": action,
        "logged_at": logged_at,
        "ip_address": ip_address,
        "actor": {"type": "user", "id": "u1", "username": username},
        "subject": subject or {"type": "secret", "id": "s1"},
    }


@pytest.fixture
def make_record():
    """Factory for audit event records as found in JSONL files."""
    return _make_record


@pytest.fixture
def logged_at() -> str:
    """Timestamp used by records from make_record."""
    return LOGGED_AT


@pytest.fixture
def time_formatter() -> FixedTimeFormatter:
    """Formatter that renders timestamps verbatim."""
    return FixedTimeFormatter()


@pytest.fixture
def tree_data() -> dict[str, Any]:
    """JSON form of a small repository tree."""
    return {
        "parent_path": "acme",
        "root": {"id": "d0", "name": "backend"},
        "dirs": [
            {"id": "d1", "name": "prod", "parent_id": "d0"},
            {"id": "d2", "name": "db", "parent_id": "d1"},
        ],
        "secrets": [
            {"id": "s1", "name": "password", "dir_id": "d2"},
            {"id": "s2", "name": "api_key", "dir_id": "d0"},
        ],
    }


@pytest.fixture
def tree(tree_data: dict[str, Any]) -> Tree:
    """Parsed repository tree."""
    return Tree.from_dict(tree_data)


@pytest.fixture
def sample_events() -> list[Event]:
    """Three events on secret s1."""
    return [
        Event.from_dict(_make_record(username="alice", action="create")),
        Event.from_dict(_make_record(username="bob", action="read")),
        Event.from_dict(_make_record(username="carol", action="update")),
    ]


@pytest.fixture
def events_file(tmp_path: Path) -> Path:
    """JSONL file with three audit events."""
    path = tmp_path / "events.jsonl"
    lines = [
        json.dumps(_make_record(username=name, action=action))
        for name, action in (("alice", "create"), ("bob", "read"), ("carol", "update"))
    ]
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


@pytest.fixture
def mock_args_audit(events_file: Path) -> AuditArgs:
    """Create Args object for audit command."""
    return AuditArgs(
        source=str(events_file),
        tree=None,
        json=False,
        timestamps=True,
        per_page=20,
    )
