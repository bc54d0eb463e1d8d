"""Zipping a project directory for upload, honouring ``.spaceignore``."""

from __future__ import annotations

import io
import os
import zipfile
from typing import Iterable, Union

from spacecli.ignore import IgnoreMatcher, compile_ignore_lines

SPACEIGNORE_FILE = ".spaceignore"


def _collect(path: str, root: str, matcher: IgnoreMatcher, files: dict[str, bytes]) -> None:
    if matcher.matches(path):
        return
    if os.path.isdir(path) and not os.path.islink(path):
        for name in sorted(os.listdir(path)):
            _collect(os.path.join(path, name), root, matcher, files)
        return
    relative = os.path.relpath(path, root).replace(os.sep, "/")
    with open(path, "rb") as handle:
        files[relative] = handle.read()


def zip_dir(source_dir: str, default_patterns: Union[str, Iterable[str]] = ()) -> tuple[bytes, int]:
    """Zip every file of ``source_dir`` that is not ignored.

    Returns the archive bytes and the number of files in it.
    """
    abs_dir = os.path.abspath(source_dir)

    lines = default_patterns.split("\n") if isinstance(default_patterns, str) else list(default_patterns)
    spaceignore_path = os.path.join(source_dir, SPACEIGNORE_FILE)
    if os.path.exists(spaceignore_path):
        try:
            with open(spaceignore_path, encoding="utf-8", errors="replace") as handle:
                lines.extend(handle.read().split("\n"))
        except OSError as exc:
            raise OSError(f"failed to read .spaceignore: {exc}") from exc
    matcher = compile_ignore_lines(lines)

    files: dict[str, bytes] = {}
    try:
        if not os.path.lexists(abs_dir):
            raise FileNotFoundError(f"no such file or directory: {abs_dir}")
        _collect(abs_dir, abs_dir, matcher, files)
    except OSError as exc:
        raise OSError(f"cannot scan contents of dir {source_dir}, {exc}") from exc

    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        for name, content in files.items():
            archive.writestr(name, content)
    return buffer.getvalue(), len(files)