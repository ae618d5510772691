"""auditpager exception classes."""

from __future__ import annotations


class AuditPagerError(RuntimeError):
    """Base exception for auditpager errors."""


class UserError(AuditPagerError):
    """Errors that should be shown to user without traceback."""

    def __init__(self, message: str, rc: int = 2):
        super().__init__(message)
        self.rc = rc


class SourceError(AuditPagerError):
    """The event source failed while producing the next event."""


class MappingError(AuditPagerError):
    """An event lacks data required to build its table row."""


class SubjectResolutionError(MappingError):
    """An event subject could not be found in the directory tree snapshot."""


class PagerNotFoundError(AuditPagerError):
    """No terminal pager is available.

    The fallback pager raises it as well once its line budget is spent;
    ``written`` then holds the byte count of the write that spent it.
    """

    def __init__(self, message: str | None = None, *, written: int = 0):
        super().__init__(
            message
            or "no terminal pager available. Please configure a terminal pager by "
            'setting the $PAGER environment variable or install "less" or "more"'
        )
        self.written = written


class SinkWriteError(AuditPagerError):
    """Writing rendered output to the pager failed."""


class FormatterMismatchError(AuditPagerError):
    """A row does not have one cell per configured field."""
