"""Local project metadata, .gitignore handling and the CLI version cache."""

from __future__ import annotations

import json
import os
import re
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Union

DIR_PERM_MODE = 0o760
FILE_PERM_MODE = 0o660

PYTHON_SKIP_PATTERN = "__pycache__"
NODE_SKIP_PATTERN = "node_modules"

SPACE_DIR = ".space"
PROJECT_META_FILE = "meta"
SPACE_VERSION_PATH = os.path.join(".detaspace", "space_latest_version")
SPACE_README_NOTES = "Don't commit this folder (.space) to git as it may contain security-sensitive data."

_SPACE_LINE = re.compile(r"^(\.space)\b", re.MULTILINE)


@dataclass
class ProjectMeta:
    id: str = ""
    name: str = ""
    alias: str = ""

    def to_json(self) -> str:
        return json.dumps(
            {"id": self.id, "name": self.name, "alias": self.alias},
            separators=(",", ":"),
        )

    @classmethod
    def from_json(cls, data: Union[str, bytes]) -> "ProjectMeta":
        payload = json.loads(data)
        if not isinstance(payload, dict):
            raise ValueError("project meta must be a JSON object")
        return cls(
            id=payload.get("id") or "",
            name=payload.get("name") or "",
            alias=payload.get("alias") or "",
        )


def _write(path: str, data: bytes, mode: int = FILE_PERM_MODE) -> None:
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, mode)
    with os.fdopen(fd, "wb") as handle:
        handle.write(data)


def store_project_meta(project_dir: str, meta: ProjectMeta) -> None:
    """Write the project meta (and a warning README) into ``.space``."""
    space_dir = os.path.join(project_dir, SPACE_DIR)
    if not os.path.exists(space_dir):
        os.mkdir(space_dir, DIR_PERM_MODE)
    try:
        _write(os.path.join(space_dir, "README"), SPACE_README_NOTES.encode())
    except OSError:
        pass
    _write(os.path.join(space_dir, PROJECT_META_FILE), meta.to_json().encode())


def get_project_meta(project_dir: str) -> ProjectMeta:
    """Read the stored project meta; raises FileNotFoundError if absent."""
    with open(os.path.join(project_dir, SPACE_DIR, PROJECT_META_FILE), "rb") as handle:
        return ProjectMeta.from_json(handle.read())


def get_project_id(project_dir: str) -> str:
    return get_project_meta(project_dir).id


def is_project_initialized(project_dir: str) -> bool:
    return os.path.exists(os.path.join(project_dir, SPACE_DIR, PROJECT_META_FILE))


def add_space_to_gitignore(project_dir: str) -> None:
    """Make sure ``.space`` is listed in the project's ``.gitignore``."""
    gitignore = os.path.join(project_dir, ".gitignore")

    if os.path.exists(gitignore):
        try:
            with open(gitignore, "rb") as handle:
                contents = handle.read()
            if _SPACE_LINE.search(contents.decode("utf-8", errors="replace")):
                return
            _write(gitignore, contents + b"\n.space")
        except OSError as exc:
            raise OSError(f"failed to append .space to .gitignore: {exc}") from exc
        return

    try:
        _write(gitignore, b".space")
    except OSError as exc:
        raise OSError(f"failed to write .space to .gitignore: {exc}") from exc


def _home(home: Optional[str]) -> str:
    return home if home is not None else str(Path.home())


def cache_latest_version(version: str, home: Optional[str] = None) -> None:
    """Record the latest known CLI version with the current time."""
    base = _home(home)
    os.makedirs(os.path.join(base, SPACE_DIR), DIR_PERM_MODE, exist_ok=True)
    path = os.path.join(base, SPACE_VERSION_PATH)
    os.makedirs(os.path.dirname(path), DIR_PERM_MODE, exist_ok=True)
    content = json.dumps(
        {"version": version, "updatedAt": int(time.time())}, separators=(",", ":")
    )
    _write(path, content.encode(), 0o644)


def get_latest_cached_version(home: Optional[str] = None) -> tuple[str, datetime]:
    """Return the cached latest version and when it was recorded."""
    with open(os.path.join(_home(home), SPACE_VERSION_PATH), "rb") as handle:
        payload = json.loads(handle.read())
    if not isinstance(payload, dict):
        raise ValueError("version cache must be a JSON object")
    updated = datetime.fromtimestamp(int(payload.get("updatedAt") or 0), tz=timezone.utc)
    return payload.get("version") or "", updated