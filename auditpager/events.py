"""Audit event model and event sources."""

from __future__ import annotations

import datetime as dt
import json
import logging
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import requests

from .api import get_json
from .constants import DEFAULT_PER_PAGE
from .exceptions import SourceError

logger = logging.getLogger("auditpager")

# Returned by next(events, DONE) once a source is exhausted.
DONE = object()


@dataclass(frozen=True)
class Actor:
    """The account that performed an audited action."""

    type: str
    id: str = ""
    username: str = ""
    service_id: str = ""


@dataclass(frozen=True)
class Subject:
    """The object an audited action was performed on."""

    type: str
    id: str = ""
    username: str = ""
    service_id: str = ""
    name: str = ""
    secret_id: str = ""
    version: int | None = None


@dataclass(frozen=True)
class Event:
    """A single audit log record."""

    action: str
    ip_address: str
    logged_at: dt.datetime | None
    actor: Actor | None
    subject: Subject | None = None
    event_id: str = ""

    @classmethod
    def from_dict(cls, record: dict[str, Any]) -> Event:
        """Build an event from a decoded JSON record.

        Missing or malformed fields are kept as empty values; the table
        decides which of them it cannot render.
        """
        actor = record.get("actor")
        subject = record.get("subject")
        return cls(
            event_id=str(record.get("event_id") or ""),
            action=str(record.get("action") or ""),
            ip_address=str(record.get("ip_address") or ""),
            logged_at=parse_timestamp(record.get("logged_at")),
            actor=_actor_from_dict(actor) if isinstance(actor, dict) else None,
            subject=_subject_from_dict(subject) if isinstance(subject, dict) else None,
        )


def parse_timestamp(value: Any) -> dt.datetime | None:
    """Parse an ISO 8601 timestamp; naive values are taken as UTC."""
    if not isinstance(value, str) or not value:
        return None
    try:
        parsed = dt.datetime.fromisoformat(value)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=dt.UTC)
    return parsed


def _actor_from_dict(data: dict[str, Any]) -> Actor:
    return Actor(
        type=str(data.get("type") or ""),
        id=str(data.get("id") or ""),
        username=str(data.get("username") or ""),
        service_id=str(data.get("service_id") or ""),
    )


def _subject_from_dict(data: dict[str, Any]) -> Subject:
    version = data.get("version")
    return Subject(
        type=str(data.get("type") or ""),
        id=str(data.get("id") or ""),
        username=str(data.get("username") or ""),
        service_id=str(data.get("service_id") or ""),
        name=str(data.get("name") or ""),
        secret_id=str(data.get("secret_id") or ""),
        version=version if isinstance(version, int) and not isinstance(version, bool) else None,
    )


def iter_jsonl_events(path: Path) -> Iterator[Event]:
    """Yield events from a JSONL file, one record per line.

    Blank lines are skipped. A line that is not a JSON object raises
    SourceError.
    """
    try:
        f = path.open("r", encoding="utf-8")
    except OSError as e:
        raise SourceError(f"Cannot read audit events from {path}: {e}") from e
    with f:
        try:
            for lineno, line in enumerate(f, start=1):
                line = line.strip()
                if not line:
                    continue
                try:
                    record = json.loads(line)
                except json.JSONDecodeError as e:
                    raise SourceError(f"Invalid JSON in {path} line {lineno}: {e}") from e
                if not isinstance(record, dict):
                    raise SourceError(f"Expected a JSON object in {path} line {lineno}")
                yield Event.from_dict(record)
        except UnicodeDecodeError as e:
            raise SourceError(f"Invalid UTF-8 in {path}: {e}") from e


def iter_http_events(
    url: str,
    *,
    per_page: int = DEFAULT_PER_PAGE,
    session: requests.Session | None = None,
    token: str | None = None,
) -> Iterator[Event]:
    """Yield events from a paginated HTTP endpoint.

    Pages are requested lazily as the caller consumes events, following
    ``next_cursor`` until the server stops returning one.

    Raises:
        SourceError: If a request fails or a page is malformed
    """
    cursor: str | None = None
    page = 0
    while True:
        params: dict[str, Any] = {"per_page": per_page}
        if cursor:
            params["cursor"] = cursor
        page += 1
        logger.debug("Fetching audit events page %d from %s", page, url)
        data = get_json(url, params=params, session=session, token=token, error_cls=SourceError)

        if not isinstance(data, dict) or not isinstance(data.get("events"), list):
            raise SourceError(f"Unexpected response from {url}: missing 'events' list")

        for record in data["events"]:
            if not isinstance(record, dict):
                raise SourceError(f"Unexpected event record from {url}: {record!r}")
            yield Event.from_dict(record)

        cursor = data.get("next_cursor")
        if not cursor:
            return


def is_url(location: str) -> bool:
    """Return True if location is an http(s) URL rather than a file path."""
    return location.startswith(("http://", "https://"))


def open_event_source(
    location: str, *, per_page: int = DEFAULT_PER_PAGE, token: str | None = None
) -> Iterator[Event]:
    """Return a lazy event iterator for a file path or an http(s) URL."""
    if is_url(location):
        return iter_http_events(location, per_page=per_page, token=token)
    return iter_jsonl_events(Path(location))
