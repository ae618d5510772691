"""Table formatters: fit rows into the terminal width or emit them as JSON."""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from typing import Protocol

from .constants import COLUMN_PADDING
from .exceptions import FormatterMismatchError
from .table import Column

logger = logging.getLogger("auditpager")


class TableFormatter(Protocol):
    """Turns table rows into printable strings."""

    def print_header(self) -> bool: ...

    def format_row(self, row: Sequence[str]) -> str: ...


def compute_column_widths(table_width: int, columns: Sequence[Column]) -> list[int]:
    """Distribute table_width over columns, honoring their maximum widths.

    The width left after the padding between columns is shared equally.
    Columns whose maximum is smaller than the equal share are pinned to
    their maximum and the rest is shared again among the other columns,
    until no more columns can be pinned. If every column gets pinned, the
    leftover width is spread equally over all of them; the remainder of
    that division is dropped.

    Args:
        table_width: Total printable width, padding included
        columns: Columns in output order

    Returns:
        One width per column
    """
    if not columns:
        return []

    widths = [0] * len(columns)
    columns_left = len(columns)
    width_left = table_width - COLUMN_PADDING * (len(columns) - 1)
    width_per_column = width_left // columns_left

    adjusted = True
    while adjusted:
        adjusted = False
        for i, col in enumerate(columns):
            if widths[i] == 0 and col.max_width and col.max_width < width_per_column:
                widths[i] = col.max_width
                width_left -= col.max_width
                columns_left -= 1
                adjusted = True
        if columns_left == 0:
            widths = [w + width_left // len(widths) for w in widths]
            break
        width_per_column = width_left // columns_left

    return [w if w else max(width_per_column, 1) for w in widths]


def wrap_cell(cell: str, width: int) -> list[str]:
    """Split a cell into slices of exactly width characters.

    The last slice is padded with spaces. An empty cell has no slices.
    """
    slices = [cell[i : i + width] for i in range(0, len(cell), width)]
    if slices:
        slices[-1] = slices[-1].ljust(width)
    return slices


class ColumnFormatter:
    """Aligns cells in columns, wrapping values that exceed their column."""

    def __init__(self, table_width: int, columns: Sequence[Column]):
        self.table_width = table_width
        self.columns = list(columns)
        self._column_widths: list[int] | None = None

    def print_header(self) -> bool:
        return True

    def column_widths(self) -> list[int]:
        """Return the column widths, computing them on first use only."""
        if self._column_widths is None:
            self._column_widths = compute_column_widths(self.table_width, self.columns)
            logger.debug(
                "Column widths for table width %d: %s", self.table_width, self._column_widths
            )
        return self._column_widths

    def format_row(self, row: Sequence[str]) -> str:
        """Format a row as one or more lines, wrapping long cells.

        Raises:
            FormatterMismatchError: If row does not have one cell per column
        """
        widths = self.column_widths()
        if len(row) != len(widths):
            raise FormatterMismatchError(
                f"row has {len(row)} cells but the table has {len(widths)} columns"
            )

        wrapped = [wrap_cell(cell, width) for cell, width in zip(row, widths)]
        line_count = max([1] + [len(slices) for slices in wrapped])
        for slices, width in zip(wrapped, widths):
            slices.extend([" " * width] * (line_count - len(slices)))

        separator = " " * COLUMN_PADDING
        lines = [separator.join(slices[j] for slices in wrapped) for j in range(line_count)]
        return "\n".join(lines)


class JSONFormatter:
    """Formats each row as a JSON object keyed by field name."""

    def __init__(self, fields: Sequence[str]):
        self.fields = list(fields)

    def print_header(self) -> bool:
        return False

    def format_row(self, row: Sequence[str]) -> str:
        """Return the JSON representation of row.

        Raises:
            FormatterMismatchError: If row does not have one cell per field
        """
        if len(row) != len(self.fields):
            raise FormatterMismatchError("unexpected number of json fields")
        return json.dumps(dict(zip(self.fields, row)), sort_keys=True, separators=(",", ":"))
