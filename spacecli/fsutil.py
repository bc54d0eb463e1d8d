"""Small filesystem helpers."""

from __future__ import annotations

import io
import os
import zipfile


def file_exists(directory: str, filename: str) -> bool:
    """Return True if ``filename`` exists in ``directory`` and is not a directory."""
    try:
        info = os.stat(os.path.join(directory, filename))
    except FileNotFoundError:
        return False
    except OSError as exc:
        raise OSError(
            f"failed to check if filename {filename} exists in {directory} dir: {exc}"
        ) from exc
    return not os.path.isdir(os.path.join(directory, filename)) and info is not None


def is_empty(directory: str) -> bool:
    """Return True if the directory is missing, empty, or holds only ``.space``."""
    if not os.path.exists(directory):
        return True
    entries = os.listdir(directory)
    return not entries or entries == [".space"]


def check_if_any_file_exists(directory: str, *filenames: str) -> bool:
    """Return True if any of ``filenames`` exists as a file in ``directory``."""
    return any(file_exists(directory, name) for name in filenames)


def unzip_templates(root_zip: bytes, dest: str, root_dir: str) -> None:
    """Extract the entries under ``root_dir`` of a zip archive into ``dest``."""
    with zipfile.ZipFile(io.BytesIO(root_zip)) as archive:
        for info in archive.infolist():
            if root_dir not in info.filename.replace("\\", "/").lstrip("/"):
                continue
            target = info.filename.replace(root_dir, dest)
            if info.is_dir():
                os.makedirs(target, exist_ok=True)
                continue
            os.makedirs(os.path.dirname(target) or ".", exist_ok=True)
            with archive.open(info) as source, open(target, "wb") as out:
                out.write(source.read())
            mode = (info.external_attr >> 16) & 0o777
            if mode:
                os.chmod(target, mode)