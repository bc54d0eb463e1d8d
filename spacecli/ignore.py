"""Gitignore-style path matching used for ``.spaceignore`` files."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from typing import Iterable, Optional

_MAGIC_STAR = "#$~"
_NEEDS_ROOT = re.compile(r"([^/+])/.*\*\.")


@dataclass(frozen=True)
class _IgnorePattern:
    regex: "re.Pattern[str]"
    negate: bool


def _pattern_from_line(line: str) -> Optional[_IgnorePattern]:
    line = line.rstrip("\r")
    if line.startswith("#"):
        return None
    line = line.strip(" ")
    if not line:
        return None

    negate = False
    if line[0] == "!":
        negate = True
        line = line[1:]

    # an escaped leading "#" or "!" keeps only the character itself
    if line[:1] in ("#", "!"):
        line = line[1:]

    if _NEEDS_ROOT.search(line) and not line.startswith("/"):
        line = "/" + line

    line = line.replace(".", r"\.")

    if line.startswith("/**/"):
        line = line[1:]
    line = line.replace("/**/", "(/|/.+/)")
    line = line.replace("**/", "(|." + _MAGIC_STAR + "/)")
    line = line.replace("/**", "(|/." + _MAGIC_STAR + ")")

    line = line.replace("\\*", "\\" + _MAGIC_STAR)
    line = line.replace("*", "([^/]*)")
    line = line.replace("?", "\\?")
    line = line.replace(_MAGIC_STAR, "*")

    expr = line + ("(|.*)$" if line.endswith("/") else "(|/.*)$")
    if expr.startswith("/"):
        expr = "^(|/)" + expr[1:]
    else:
        expr = "^(|.*/)" + expr

    try:
        return _IgnorePattern(re.compile(expr), negate)
    except re.error:
        return None


class IgnoreMatcher:
    """A compiled list of ignore patterns; later patterns override earlier ones."""

    def __init__(self, patterns: Iterable[_IgnorePattern] = ()) -> None:
        self._patterns = tuple(patterns)

    def __len__(self) -> int:
        return len(self._patterns)

    def matches(self, path: str) -> bool:
        """Return True if ``path`` is ignored."""
        path = path.replace(os.sep, "/")
        matched = False
        for pattern in self._patterns:
            if pattern.regex.search(path):
                if not pattern.negate:
                    matched = True
                elif matched:
                    matched = False
        return matched


def compile_ignore_lines(lines: Iterable[str]) -> IgnoreMatcher:
    """Compile gitignore-style lines; comments and blank lines are skipped."""
    patterns = (_pattern_from_line(line) for line in lines)
    return IgnoreMatcher(pattern for pattern in patterns if pattern is not None)