"""
auditpager - show audit logs in the terminal.

Design goals:
- Stream events lazily; never hold the whole log in memory.
- Fit the table to the terminal, wrapping long values instead of cutting them.
- Page through the output with the user's own pager ($PAGER, less or more).
"""

from __future__ import annotations

from .cli import main
from .exceptions import AuditPagerError, UserError

__all__ = [
    "AuditPagerError",
    "UserError",
    "main",
]
