"""auditpager utility functions."""

from __future__ import annotations

import os
from typing import IO

from .constants import DEFAULT_TERMINAL_WIDTH


def terminal_width(stream: IO, default: int = DEFAULT_TERMINAL_WIDTH) -> int:
    """Return the width of the terminal behind stream, or default.

    Falls back to default when stream is not a terminal (piped output,
    captured test streams) or reports a zero width.
    """
    try:
        columns = os.get_terminal_size(stream.fileno()).columns
    except (OSError, ValueError, AttributeError):
        return default
    return columns or default
