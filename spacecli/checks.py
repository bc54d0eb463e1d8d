"""Pre-run checks for commands and the new-version notice."""

from __future__ import annotations

import json
import os
import sys
import urllib.error
import urllib.request
from datetime import datetime, timedelta, timezone
from typing import Mapping, Optional

from spacecli import styles
from spacecli.project import cache_latest_version, get_latest_cached_version

RELEASES_API = "https://api.github.com"
RELEASES_REPOSITORY = "deta/space-cli"
VERSION_CHECK_INTERVAL = timedelta(minutes=69)


class CheckError(Exception):
    """Raised when a pre-run check fails."""


def check_dirs_exist(*directories: str) -> None:
    """Raise CheckError for the first directory that does not exist."""
    for directory in directories:
        if not os.path.exists(directory):
            raise CheckError(f"directory {directory} does not exist")


def check_project_initialized(directory: str) -> None:
    """Raise CheckError unless ``directory`` holds a linked project."""
    check_dirs_exist(directory)
    if not os.path.exists(os.path.join(directory, ".space", "meta")):
        raise CheckError(
            "project is not initialized. run `space new` to initialize a new project "
            "or `space link` to associate an existing project."
        )


def check_not_empty(values: Mapping[str, Optional[str]]) -> None:
    """Raise CheckError if a given value is blank; None means not given."""
    for name, value in values.items():
        if value is None:
            continue
        if value.strip(" ") == "":
            raise CheckError(f"{name} cannot be empty")


def is_prerelease(version: str) -> bool:
    return len(version.split("-")) > 1


def get_latest_cli_version() -> str:
    """Return the tag of the latest published CLI release, without a leading ``v``."""
    request = urllib.request.Request(
        f"{RELEASES_API}/repos/{RELEASES_REPOSITORY}/releases/latest",
        headers={"Accept": "application/vnd.github+json", "User-Agent": "space-cli"},
    )
    try:
        with urllib.request.urlopen(request, timeout=10) as response:
            status = response.status
            body = response.read()
    except urllib.error.HTTPError as exc:
        raise RuntimeError(f"error while fetching latest release: {exc.code} {exc.reason}") from exc
    except (urllib.error.URLError, OSError) as exc:
        raise RuntimeError(f"error while fetching latest release: {exc}") from exc

    if status != 200:
        raise RuntimeError(f"error while fetching latest release: {status}")
    try:
        payload = json.loads(body)
    except ValueError as exc:
        raise RuntimeError(f"error while fetching latest release: {exc}") from exc
    tag = payload.get("tag_name") if isinstance(payload, dict) else None
    return (tag or "").removeprefix("v")


def check_latest_version(current_version: str, home: Optional[str] = None) -> Optional[str]:
    """Tell the user on stderr when a newer CLI version is available.

    Returns the latest known version, or None when no check was made.
    """
    if is_prerelease(current_version):
        return None

    latest: Optional[str] = None
    try:
        cached, last_check = get_latest_cached_version(home)
        if datetime.now(timezone.utc) - last_check <= VERSION_CHECK_INTERVAL:
            latest = cached
    except (OSError, ValueError, TypeError):
        latest = None

    if latest is None:
        print("\nChecking for new Space CLI version...", file=sys.stderr)
        try:
            latest = get_latest_cli_version()
        except RuntimeError:
            print("Failed to check for new Space CLI version", file=sys.stderr)
            return None
        try:
            cache_latest_version(latest, home)
        except OSError:
            pass

    if current_version != latest:
        upgrade_hint = styles.bold(styles.blue("space version upgrade"))
        print(
            styles.bold(
                f"\n{styles.INFO} New Space CLI version available, upgrade with {upgrade_hint}"
            ),
            file=sys.stderr,
        )
    return latest