"""Directory tree snapshot used to resolve audit subjects to paths."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .api import get_json
from .events import is_url
from .exceptions import UserError

logger = logging.getLogger("auditpager")


@dataclass(frozen=True)
class TreeDir:
    id: str
    name: str
    parent_id: str | None = None


@dataclass(frozen=True)
class TreeSecret:
    id: str
    name: str
    dir_id: str


def _str_field(record: dict[str, Any], key: str) -> str:
    value = record[key]
    if not isinstance(value, str):
        raise UserError(f"Invalid tree snapshot: field {key!r} must be a string, got {value!r}")
    return value


@dataclass(frozen=True)
class Tree:
    """Read-only snapshot of a repository's directories and secrets.

    Paths are built by walking parent links up to the root dir and
    prefixing ``parent_path`` (the namespace holding the repository).
    """

    root_id: str
    parent_path: str = ""
    dirs: dict[str, TreeDir] = field(default_factory=dict)
    secrets: dict[str, TreeSecret] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Tree:
        """Build a tree from its JSON representation.

        Raises:
            UserError: If the snapshot is missing required fields or a field
                is not a string
        """
        try:
            root = data["root"]
            root_id = _str_field(root, "id")
            dirs = {root_id: TreeDir(id=root_id, name=_str_field(root, "name"))}
            for d in data.get("dirs", []):
                dir_id = _str_field(d, "id")
                dirs[dir_id] = TreeDir(
                    id=dir_id,
                    name=_str_field(d, "name"),
                    parent_id=_str_field(d, "parent_id"),
                )
            secrets = {}
            for s in data.get("secrets", []):
                secret_id = _str_field(s, "id")
                secrets[secret_id] = TreeSecret(
                    id=secret_id, name=_str_field(s, "name"), dir_id=_str_field(s, "dir_id")
                )
        except (KeyError, TypeError) as e:
            raise UserError(f"Invalid tree snapshot: missing field {e}")
        return cls(
            root_id=root_id,
            parent_path=str(data.get("parent_path") or ""),
            dirs=dirs,
            secrets=secrets,
        )

    def dir_path(self, dir_id: str) -> str | None:
        """Return the absolute path of a directory, or None if unknown."""
        parts: list[str] = []
        seen: set[str] = set()
        current: str | None = dir_id
        while current is not None:
            node = self.dirs.get(current)
            if node is None or current in seen:
                return None
            seen.add(current)
            parts.append(node.name)
            if current == self.root_id:
                break
            current = node.parent_id
        else:
            # Walked off a dir with no parent that is not the root.
            return None
        if self.parent_path:
            parts.append(self.parent_path)
        return "/".join(reversed(parts))

    def secret_path(self, secret_id: str) -> str | None:
        """Return the absolute path of a secret, or None if unknown."""
        secret = self.secrets.get(secret_id)
        if secret is None:
            return None
        parent = self.dir_path(secret.dir_id)
        if parent is None:
            return None
        return f"{parent}/{secret.name}"

    def resolve(self, subject_id: str) -> str | None:
        """Return the path of a dir or secret by id, or None if not found."""
        return self.dir_path(subject_id) or self.secret_path(subject_id)


def load_tree(location: str) -> Tree:
    """Load a tree snapshot from a JSON file or an http(s) URL."""
    if is_url(location):
        logger.debug("Fetching tree snapshot from %s", location)
        data = get_json(location, error_cls=UserError)
    else:
        path = Path(location)
        logger.debug("Loading tree snapshot from %s", path)
        try:
            with path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise UserError(f"Invalid JSON in {path}: {e}")
        except UnicodeDecodeError as e:
            raise UserError(f"Invalid UTF-8 in {path}: {e}")
        except OSError as e:
            raise UserError(f"Failed to read {path}: {e}")
    if not isinstance(data, dict):
        raise UserError(f"Invalid tree snapshot in {location}: expected a JSON object")
    return Tree.from_dict(data)
