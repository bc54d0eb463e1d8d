"""Reading the project's Discovery file."""

from __future__ import annotations

import os

from spacecli.fsutil import file_exists

DISCOVERY_FILENAME = "Discovery.md"


class DiscoveryFileNotFoundError(FileNotFoundError):
    """Raised when the project has no Discovery file."""

    def __init__(self, message: str = "discovery file not found") -> None:
        super().__init__(message)


class DiscoveryFileWrongCaseError(ValueError):
    """Raised when the Discovery file exists under a differently cased name."""


def _existing_discovery_name(source_dir: str) -> str:
    wanted = DISCOVERY_FILENAME.lower()
    for name in sorted(os.listdir(source_dir)):
        if name.lower() == wanted:
            return name
    raise DiscoveryFileNotFoundError()


def open_discovery(source_dir: str) -> bytes:
    """Return the raw contents of ``Discovery.md`` in ``source_dir``."""
    if not file_exists(source_dir, DISCOVERY_FILENAME):
        raise DiscoveryFileNotFoundError()

    existing = _existing_discovery_name(source_dir)
    if existing != DISCOVERY_FILENAME:
        raise DiscoveryFileWrongCaseError(
            f"'{existing}' must be called exactly {DISCOVERY_FILENAME}"
        )

    try:
        with open(os.path.join(source_dir, DISCOVERY_FILENAME), "rb") as handle:
            return handle.read()
    except OSError as exc:
        raise OSError(f"failed to read contents of discovery file: {exc}") from exc