"""Terminal text styling with 24-bit colours."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, replace
from typing import Optional


def _color_enabled() -> bool:
    if os.environ.get("NO_COLOR"):
        return False
    try:
        return bool(sys.stdout.isatty())
    except (AttributeError, ValueError):
        return False


def _rgb(color: str) -> str:
    value = color.lstrip("#")
    if len(value) != 6:
        raise ValueError(f"invalid colour: {color!r}")
    try:
        red, green_, blue_ = (int(value[i:i + 2], 16) for i in (0, 2, 4))
    except ValueError:
        raise ValueError(f"invalid colour: {color!r}") from None
    return f"{red};{green_};{blue_}"


@dataclass(frozen=True)
class Style:
    """A text style; ``enabled`` None means colour only when stdout is a terminal."""

    foreground: Optional[str] = None
    background: Optional[str] = None
    bold: bool = False
    enabled: Optional[bool] = None

    def with_bold(self, flag: bool = True) -> "Style":
        return replace(self, bold=flag)

    def with_background(self, color: Optional[str]) -> "Style":
        return replace(self, background=color)

    def render(self, text: str) -> str:
        enabled = _color_enabled() if self.enabled is None else self.enabled
        codes = []
        if self.bold:
            codes.append("1")
        if self.foreground:
            codes.append(f"38;2;{_rgb(self.foreground)}")
        if self.background:
            codes.append(f"48;2;{_rgb(self.background)}")
        if not enabled or not codes:
            return text
        return f"\x1b[{';'.join(codes)}m{text}\x1b[0m"


def color_style(color: str) -> Style:
    _rgb(color)
    return Style(foreground=color)


SUBTLE_STYLE = color_style("#383838")
GREEN_STYLE = color_style("#16E58A")
BLUE_STYLE = color_style("#4D73E0")
PINK_STYLE = color_style("#F26DAA")
ERROR_STYLE = color_style("#FFA7A7")
BOLD_STYLE = Style(bold=True)


def subtle(text: str) -> str:
    return SUBTLE_STYLE.render(text)


def green(text: str) -> str:
    return GREEN_STYLE.render(text)


def blue(text: str) -> str:
    return BLUE_STYLE.render(text)


def pink(text: str) -> str:
    return PINK_STYLE.render(text)


def error(text: str) -> str:
    return ERROR_STYLE.render(text)


def bold(text: str) -> str:
    return BOLD_STYLE.render(text)


def code(text: str) -> str:
    return BOLD_STYLE.render(blue(text))


def highlight(text: str) -> str:
    return BOLD_STYLE.with_background(PINK_STYLE.foreground).render(text)


QUESTION = bold(pink("?"))
SELECT_TAG = bold(pink(">"))
CHECK_MARK = bold(green("✓"))
X = bold(error("x"))
ERROR_EXCLAMATION = bold(error("!"))
INFO = bold(blue("i"))