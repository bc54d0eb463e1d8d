"""Auto-detection of micros (runtimes and frameworks) in a project directory."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from typing import Callable, Optional

from spacecli.fsutil import check_if_any_file_exists, file_exists
from spacecli.types import (
    CUSTOM,
    NEXT,
    NODE16X,
    NUXT,
    PYTHON39,
    REACT,
    STATIC,
    SVELTE,
    SVELTE_KIT,
    VUE,
    Micro,
)

DEFAULT_NODE_ENGINE = "nodejs16"


@dataclass(frozen=True)
class Match:
    """A file that must exist and a pattern its content is searched for."""

    path: str
    match_content: str


@dataclass(frozen=True)
class Detectors:
    """A set of matches; ``strict`` requires every match to pass."""

    matches: tuple[Match, ...] = field(default_factory=tuple)
    strict: bool = False


@dataclass(frozen=True)
class NodeFramework:
    name: str
    detectors: Detectors

    def check(self, directory: str) -> bool:
        """Return True if the framework's detectors pass for ``directory``."""
        passed = False
        for match in self.detectors.matches:
            if not file_exists(directory, match.path):
                return False
            with open(os.path.join(directory, match.path), encoding="utf-8", errors="replace") as handle:
                content = handle.read()
            hit = re.search(match.match_content, content) is not None
            if not hit and self.detectors.strict:
                return False
            if hit:
                passed = True
        return passed


def _dependency(name_pattern: str) -> Match:
    return Match(
        path="package.json",
        match_content=r'"(dev)?(d|D)ependencies":\s*{[^}]*"' + name_pattern + r'":\s*".+?"[^}]*}',
    )


NODE_FRAMEWORKS: tuple[NodeFramework, ...] = (
    NodeFramework(
        REACT,
        Detectors((_dependency("react-scripts"), _dependency("react-dev-utils"))),
    ),
    NodeFramework(
        SVELTE,
        Detectors((_dependency("svelte"), _dependency("@sveltejs/vite-plugin-svelte")), strict=True),
    ),
    NodeFramework(VUE, Detectors((_dependency("@vue/cli-service"),), strict=True)),
    NodeFramework(SVELTE_KIT, Detectors((_dependency("@sveltejs/kit"),), strict=True)),
    NodeFramework(NEXT, Detectors((_dependency("next"),), strict=True)),
    NodeFramework(NUXT, Detectors((_dependency("nuxt3?(-edge)?"),), strict=True)),
)


def detect_framework(directory: str) -> str:
    """Return the first node framework detected in ``directory``, else ``nodejs16``."""
    for framework in NODE_FRAMEWORKS:
        if framework.check(directory):
            return framework.name
    return DEFAULT_NODE_ENGINE


_NON_ALPHANUMERIC = re.compile(r"[^a-zA-Z0-9]+")


def clean_micro_name(name: str) -> str:
    """Replace every run of non-alphanumeric characters with a dash."""
    return _NON_ALPHANUMERIC.sub("-", name)


def micro_name_from_path(directory: str) -> str:
    """Derive a micro name from the last component of the absolute path."""
    return clean_micro_name(os.path.basename(os.path.abspath(directory)))


def _python_scanner(directory: str) -> Optional[Micro]:
    if not check_if_any_file_exists(directory, "requirements.txt", "Pipfile", "setup.py", "main.py"):
        return None
    return Micro(name=micro_name_from_path(directory), src=directory, engine=PYTHON39)


def _node_scanner(directory: str) -> Optional[Micro]:
    if not check_if_any_file_exists(directory, "package.json"):
        return None
    micro = Micro(name=micro_name_from_path(directory), src=directory, engine=NODE16X)
    micro.engine = detect_framework(directory)
    return micro


def _go_scanner(directory: str) -> Optional[Micro]:
    if not check_if_any_file_exists(directory, "go.mod"):
        return None
    return Micro(
        name=micro_name_from_path(directory),
        src=directory,
        engine=CUSTOM,
        commands=["go build cmd/main.go"],
        include=["main"],
        run="./main",
    )


def _static_scanner(directory: str) -> Optional[Micro]:
    if not check_if_any_file_exists(directory, "index.html"):
        return None
    return Micro(name=micro_name_from_path(directory), src=directory, engine=STATIC)


_SCANNERS: tuple[Callable[[str], Optional[Micro]], ...] = (
    _python_scanner,
    _node_scanner,
    _go_scanner,
    _static_scanner,
)


def scan_dir(directory: str) -> Optional[Micro]:
    """Return the micro detected in ``directory`` itself, or None."""
    for scanner in _SCANNERS:
        micro = scanner(directory)
        if micro is not None:
            return micro
    return None


def scan(source_dir: str) -> list[Micro]:
    """Detect micros in a project: the root as a single micro, else each subfolder."""
    entries = sorted(os.listdir(source_dir))

    root = scan_dir(source_dir)
    if root is not None:
        return [root]

    micros = []
    for entry in entries:
        path = os.path.join(source_dir, entry)
        if os.path.isdir(path):
            micro = scan_dir(path)
            if micro is not None:
                micros.append(micro)
    return micros