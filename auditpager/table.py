"""Audit tables: map audit events to rows of printable cells."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from .constants import (
    AUTHOR_MAX_WIDTH,
    DATE_MAX_WIDTH,
    EVENT_MAX_WIDTH,
    IP_ADDRESS_MAX_WIDTH,
)
from .events import Event
from .exceptions import MappingError, SubjectResolutionError
from .timefmt import TimeFormatter
from .tree import Tree


@dataclass(frozen=True)
class Column:
    """A table column; max_width None means the column may grow freely."""

    name: str
    max_width: int | None = None


LEADING_COLUMNS = (
    Column("AUTHOR", AUTHOR_MAX_WIDTH),
    Column("EVENT", EVENT_MAX_WIDTH),
)
TRAILING_COLUMNS = (
    Column("IP ADDRESS", IP_ADDRESS_MAX_WIDTH),
    Column("DATE", DATE_MAX_WIDTH),
)
SUBJECT_COLUMN = Column("EVENT SUBJECT")


class AuditTable:
    """Maps audit events to table rows.

    All tables share the AUTHOR, EVENT, IP ADDRESS and DATE columns. A table
    may add one column between EVENT and IP ADDRESS whose cell is produced by
    ``extra_cell``.
    """

    def __init__(
        self,
        time_formatter: TimeFormatter,
        *,
        extra_column: Column | None = None,
        extra_cell: Callable[[Event], str] | None = None,
    ):
        if (extra_column is None) != (extra_cell is None):
            raise ValueError("extra_column and extra_cell must be given together")
        middle = (extra_column,) if extra_column is not None else ()
        self._columns = LEADING_COLUMNS + middle + TRAILING_COLUMNS
        self._extra_cell = extra_cell
        self.time_formatter = time_formatter

    def columns(self) -> tuple[Column, ...]:
        return self._columns

    def header(self) -> list[str]:
        return [col.name for col in self._columns]

    def row(self, event: Event) -> list[str]:
        """Return the cells for an event, in column order.

        Raises:
            MappingError: If the event lacks an actor, subject or timestamp
                the row needs
        """
        actor = get_audit_actor(event)
        action = get_event_action(event)
        middle = [self._extra_cell(event)] if self._extra_cell is not None else []
        if event.logged_at is None:
            raise MappingError(f"audit event {event.event_id or '?'} has no valid timestamp")
        return [
            actor,
            action,
            *middle,
            event.ip_address,
            self.time_formatter.format(event.logged_at),
        ]


def get_audit_actor(event: Event) -> str:
    """Return the display name of the account that caused the event."""
    actor = event.actor
    if actor is None:
        raise MappingError(f"audit event {event.event_id or '?'} has no actor")
    if actor.type == "user" and actor.username:
        return actor.username
    if actor.type == "service" and actor.service_id:
        return actor.service_id
    raise MappingError(f"invalid audit actor of type {actor.type!r}")


def get_event_action(event: Event) -> str:
    """Return a label like "create.secret" for the event."""
    if event.subject is None:
        return event.action
    return f"{event.action}.{event.subject.type}"


def get_audit_subject(event: Event, tree: Tree) -> str:
    """Return a display name for the event subject.

    Raises:
        SubjectResolutionError: If a dir or secret subject is not in tree
        MappingError: If the subject is missing or of an unknown type
    """
    subject = event.subject
    if subject is None:
        raise MappingError(f"audit event {event.event_id or '?'} has no subject")

    if subject.type == "user":
        return subject.username
    if subject.type == "service":
        return subject.service_id
    if subject.type == "repo":
        return subject.name
    if subject.type == "secret_key":
        return ""
    if subject.type in ("dir", "secret", "secret_member"):
        path = tree.resolve(subject.id)
    elif subject.type == "secret_version":
        if subject.version is None:
            raise MappingError(f"secret version subject {subject.id!r} has no version number")
        path = tree.resolve(subject.secret_id)
        if path is not None:
            path = f"{path}:{subject.version}"
    else:
        raise MappingError(f"invalid audit subject of type {subject.type!r}")

    if path is None:
        raise SubjectResolutionError(
            f"{subject.type} {subject.secret_id or subject.id} not found in directory tree"
        )
    return path


def new_secret_audit_table(time_formatter: TimeFormatter) -> AuditTable:
    """Return a table for the events of a single secret."""
    return AuditTable(time_formatter)


def new_repo_audit_table(tree: Tree, time_formatter: TimeFormatter) -> AuditTable:
    """Return a table for repository events, with subjects resolved through tree."""
    return AuditTable(
        time_formatter,
        extra_column=SUBJECT_COLUMN,
        extra_cell=lambda event: get_audit_subject(event, tree),
    )
