"""HTTP access to the audit API."""

from __future__ import annotations

import os
from typing import Any

import requests

from .constants import HTTP_TIMEOUT_S, TOKEN_ENV_VAR, USER_AGENT
from .exceptions import AuditPagerError


def load_token() -> str | None:
    """Return the API bearer token from the environment, if set."""
    return os.environ.get(TOKEN_ENV_VAR) or None


def get_json(
    url: str,
    *,
    params: dict[str, Any] | None = None,
    session: requests.Session | None = None,
    token: str | None = None,
    error_cls: type[AuditPagerError] = AuditPagerError,
) -> Any:
    """GET url and return the decoded JSON body.

    Args:
        url: Endpoint to request
        params: Query string parameters
        session: Optional requests session (defaults to module-level requests)
        token: Bearer token; falls back to $AUDITPAGER_TOKEN
        error_cls: Exception type raised on failure

    Raises:
        error_cls: If the request fails, the status is not 200 or the body
            is not JSON
    """
    headers = {
        "Accept": "application/json",
        "User-Agent": USER_AGENT,
    }
    token = token or load_token()
    if token:
        headers["Authorization"] = f"Bearer {token}"

    http = session or requests
    try:
        response = http.get(url, params=params, headers=headers, timeout=HTTP_TIMEOUT_S)
    except requests.exceptions.RequestException as e:
        raise error_cls(f"Request to {url} failed: {e}") from e

    if response.status_code != 200:
        raise error_cls(f"{url} returned {response.status_code}: {response.text[:200]}")

    try:
        return response.json()
    except ValueError as e:
        raise error_cls(f"Invalid JSON from {url}: {e}") from e
