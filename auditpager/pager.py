"""Output sinks: an interactive terminal pager and a bounded fallback."""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import threading
from typing import IO, Protocol

from .constants import (
    FALLBACK_PAGER_LINE_COUNT,
    FALLBACK_PAGERS,
    PAGER_ENV_VAR,
    PAGER_EXIT_GRACE_S,
)
from .exceptions import PagerNotFoundError, SinkWriteError

logger = logging.getLogger("auditpager")


class Pager(Protocol):
    """A write destination that the reader may close before the writer does."""

    def write(self, data: bytes) -> int: ...

    def is_closed(self) -> bool: ...

    def close(self) -> None: ...


def pager_command() -> str:
    """Return the path of the terminal pager to run.

    Tries $PAGER, then "less", then "more".

    Raises:
        PagerNotFoundError: If none of them is found on PATH
    """
    candidates = [os.environ.get(PAGER_ENV_VAR, ""), *FALLBACK_PAGERS]
    for name in candidates:
        if not name:
            continue
        path = shutil.which(name)
        if path:
            return path
    raise PagerNotFoundError()


class PaginatedWriter:
    """Writer piped to the standard input of a terminal pager process.

    A watcher thread waits for the pager to exit and sets ``_done`` once.
    ``is_closed()`` polls it without blocking so the writer can stop when
    the user quits the pager; ``close()`` ends the input and waits for the
    pager to exit.
    """

    def __init__(self, process: subprocess.Popen):
        self._process = process
        self._done = threading.Event()
        self._closed = False
        self._watcher = threading.Thread(
            target=self._wait, name=f"pager-watcher-{process.pid}", daemon=True
        )
        self._watcher.start()

    def _wait(self) -> None:
        rc = self._process.wait()
        logger.debug("Pager (pid %d) exited with status %d", self._process.pid, rc)
        self._done.set()

    def write(self, data: bytes) -> int:
        try:
            return self._process.stdin.write(data)
        except BrokenPipeError as e:
            # Pager is gone; give the watcher time to record the exit.
            self._done.wait(PAGER_EXIT_GRACE_S)
            raise SinkWriteError(f"Writing to pager failed: {e}") from e
        except OSError as e:
            raise SinkWriteError(f"Writing to pager failed: {e}") from e

    def is_closed(self) -> bool:
        """Return True if the pager process has exited."""
        if self._closed:
            return True
        if self._done.is_set():
            self._closed = True
        return self._closed

    def close(self) -> None:
        """Close the pager input and wait for the pager to exit."""
        if not self._process.stdin.closed:
            self._process.stdin.close()
        if not self._closed:
            self._done.wait()
            self._closed = True
        self._watcher.join()

    def __enter__(self) -> PaginatedWriter:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def new_paginated_writer(output: IO[bytes] | None = None) -> PaginatedWriter:
    """Start the terminal pager and return a writer piped to its input.

    Args:
        output: Where the pager writes; inherits our stdout if None

    Raises:
        PagerNotFoundError: If no pager is available
    """
    pager = pager_command()
    logger.debug("Starting pager %s", pager)
    if output is not None:
        output.flush()
    try:
        process = subprocess.Popen(
            [pager],
            stdin=subprocess.PIPE,
            stdout=output,
            stderr=None,
            bufsize=0,
        )
    except FileNotFoundError as e:
        raise PagerNotFoundError() from e
    return PaginatedWriter(process)


class FallbackPager:
    """Writes at most a fixed number of lines, without pagination.

    Used when no terminal pager is available. The write that spends the
    line budget, and every write after it, raises PagerNotFoundError.
    """

    def __init__(self, output: IO[bytes], line_budget: int = FALLBACK_PAGER_LINE_COUNT):
        self.output = output
        self.lines_left = line_budget

    def write(self, data: bytes) -> int:
        if self.lines_left == 0:
            raise PagerNotFoundError()

        if data.count(b"\n") > self.lines_left:
            data = b"\n".join(data.split(b"\n")[: self.lines_left]) + b"\n"
        self.lines_left -= data.count(b"\n")
        try:
            n = self.output.write(data)
        except OSError as e:
            raise SinkWriteError(f"Writing output failed: {e}") from e
        if self.lines_left == 0:
            raise PagerNotFoundError(written=n)
        return n

    def is_closed(self) -> bool:
        return self.lines_left == 0

    def close(self) -> None:
        self.output.flush()
