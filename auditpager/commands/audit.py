"""auditpager audit command implementation."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import IO, TYPE_CHECKING

import click

from ..constants import FALLBACK_PAGER_LINE_COUNT
from ..events import DONE, Event, is_url, open_event_source
from ..exceptions import PagerNotFoundError, SinkWriteError, UserError
from ..formatting import ColumnFormatter, JSONFormatter, TableFormatter
from ..pager import FallbackPager, Pager, new_paginated_writer
from ..table import AuditTable, new_repo_audit_table, new_secret_audit_table
from ..timefmt import new_time_formatter
from ..tree import load_tree
from ..utils import terminal_width

if TYPE_CHECKING:
    from ..cli_types import AuditArgs

logger = logging.getLogger("auditpager")

WriterFactory = Callable[[IO[bytes]], Pager]


def new_formatter(table: AuditTable, *, json_output: bool, width: int) -> TableFormatter:
    """Return the formatter for the requested output format.

    Column widths of the tabular formatter are computed here, once per run.
    """
    if json_output:
        return JSONFormatter(table.header())
    formatter = ColumnFormatter(width, table.columns())
    formatter.column_widths()
    return formatter


@contextmanager
def open_pager(output: IO[bytes], new_writer: WriterFactory | None = None) -> Iterator[Pager]:
    """Start a terminal pager for output, closing it on exit.

    Falls back to a pager-less writer with a fixed line budget when no
    terminal pager is available. Other startup errors propagate.
    """
    new_writer = new_writer or new_paginated_writer
    try:
        pager: Pager = new_writer(output)
    except PagerNotFoundError:
        logger.debug(
            "No terminal pager found; output limited to %d lines", FALLBACK_PAGER_LINE_COUNT
        )
        pager = FallbackPager(output)
    try:
        yield pager
    finally:
        pager.close()


def write_line(pager: Pager, line: str) -> int:
    """Write line plus a newline to pager."""
    return pager.write(f"{line}\n".encode("utf-8"))


def render_audit_log(
    events: Iterator[Event],
    table: AuditTable,
    *,
    json_output: bool,
    width: int,
    output: IO[bytes],
    new_writer: WriterFactory | None = None,
) -> int:
    """Render events through a pager until the source or the pager is done.

    Args:
        events: Lazy event source
        table: Maps events to rows
        json_output: Emit JSON objects instead of aligned columns
        width: Terminal width used for aligned columns
        output: Destination the pager writes to
        new_writer: Pager factory (defaults to the terminal pager)

    Returns:
        Number of rows written in full

    Raises:
        SourceError: If the event source fails
        MappingError: If an event cannot be mapped to a row
        SinkWriteError: If writing fails while the pager is still running
    """
    formatter = new_formatter(table, json_output=json_output, width=width)
    written = 0
    with open_pager(output, new_writer) as pager:
        try:
            if formatter.print_header():
                write_line(pager, formatter.format_row(table.header()))

            while True:
                event = next(events, DONE)
                if event is DONE:
                    break
                formatted_row = formatter.format_row(table.row(event))
                if pager.is_closed():
                    logger.debug("Pager closed after %d rows", written)
                    break
                write_line(pager, formatted_row)
                written += 1
        except PagerNotFoundError:
            logger.warning(
                "Output truncated to %d lines. Set $PAGER or install less or more "
                "to see the full audit log.",
                FALLBACK_PAGER_LINE_COUNT,
            )
        except SinkWriteError:
            if not pager.is_closed():
                raise
            logger.debug("Pager closed after %d rows", written)
    return written


def cmd_audit(args: AuditArgs) -> None:
    """Show the audit log of a secret or, with a tree snapshot, a repository."""
    if args.per_page < 1:
        raise UserError(f"per-page should be positive, got {args.per_page}")
    if not is_url(args.source) and not Path(args.source).is_file():
        raise UserError(f"Audit log file not found: {args.source}")

    time_formatter = new_time_formatter(args.timestamps)
    if args.tree:
        table = new_repo_audit_table(load_tree(args.tree), time_formatter)
    else:
        table = new_secret_audit_table(time_formatter)

    events = open_event_source(args.source, per_page=args.per_page)
    output = click.get_binary_stream("stdout")
    render_audit_log(
        events,
        table,
        json_output=args.json,
        width=terminal_width(output),
        output=output,
    )
