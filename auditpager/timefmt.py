"""Timestamp formatting for audit table cells."""

from __future__ import annotations

import datetime as dt
from collections.abc import Callable
from typing import Protocol


class TimeFormatter(Protocol):
    """Formats a timestamp for display."""

    def format(self, t: dt.datetime) -> str: ...


class TimestampFormatter:
    """Formats timestamps as RFC3339 in the local (or given) timezone."""

    def __init__(self, tz: dt.tzinfo | None = None):
        self.tz = tz

    def format(self, t: dt.datetime) -> str:
        return t.astimezone(self.tz).isoformat(timespec="seconds")


class HumanTimeFormatter:
    """Formats timestamps as a human readable age, e.g. "3 hours ago"."""

    def __init__(self, now: Callable[[], dt.datetime] | None = None):
        self.now = now or (lambda: dt.datetime.now(dt.UTC))

    def format(self, t: dt.datetime) -> str:
        return f"{human_duration((self.now() - t).total_seconds())} ago"


def human_duration(seconds: float) -> str:
    """Return a human readable approximation of a duration.

    Args:
        seconds: Duration in seconds (negative values count as zero)

    Returns:
        String like "Less than a second", "About an hour" or "3 weeks"
    """
    seconds = max(seconds, 0)
    whole_seconds = int(seconds)
    minutes = int(seconds / 60)
    hours = int(seconds / 3600 + 0.5)

    if whole_seconds < 1:
        return "Less than a second"
    if whole_seconds == 1:
        return "1 second"
    if whole_seconds < 60:
        return f"{whole_seconds} seconds"
    if minutes == 1:
        return "About a minute"
    if minutes < 60:
        return f"{minutes} minutes"
    if hours == 1:
        return "About an hour"
    if hours < 48:
        return f"{hours} hours"
    if hours < 24 * 7 * 2:
        return f"{hours // 24} days"
    if hours < 24 * 30 * 2:
        return f"{hours // 24 // 7} weeks"
    if hours < 24 * 365 * 2:
        return f"{hours // 24 // 30} months"
    return f"{hours // 24 // 365} years"


def new_time_formatter(use_timestamps: bool) -> TimeFormatter:
    """Return an RFC3339 formatter if use_timestamps, else a relative one."""
    if use_timestamps:
        return TimestampFormatter()
    return HumanTimeFormatter()
