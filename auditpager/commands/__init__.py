"""auditpager command implementations."""

from __future__ import annotations

from .audit import cmd_audit

__all__ = [
    "cmd_audit",
]
