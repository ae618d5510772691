"""Type definitions for CLI command arguments."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class AuditArgs:
    """Arguments for audit command."""

    source: str
    tree: str | None
    json: bool
    timestamps: bool
    per_page: int
