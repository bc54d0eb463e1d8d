"""Emoji with plain fallbacks for terminals that cannot show them."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass

from spacecli import styles


def supports_emoji() -> bool:
    """Return True when stdout is a terminal on a platform that renders emoji."""
    try:
        if not sys.stdout.isatty():
            return False
    except (AttributeError, ValueError):
        return False
    if sys.platform == "win32":
        return "WT_SESSION" in os.environ
    return sys.platform == "darwin"


@dataclass(frozen=True)
class Emoji:
    emoji: str
    fallback: str

    def __str__(self) -> str:
        return self.emoji if supports_emoji() else self.fallback


COWBOY = Emoji("🤠 ", "")
LAPTOP = Emoji("💻 ", "")
GEAR = Emoji("⚙️ ", "")
POINT_DOWN = Emoji("👇 ", "")
LINK = Emoji("🔗 ", "")
ERROR_EXCLAMATION = Emoji("❗", styles.ERROR_EXCLAMATION)
THUMBS_UP = Emoji("👍 ", styles.CHECK_MARK)
CHECK = Emoji(styles.CHECK_MARK, styles.CHECK_MARK)
PARTY_POPPER = Emoji("🎉 ", styles.CHECK_MARK)
ROCKET = Emoji("🚀 ", "")
EARTH = Emoji("🌍 ", "")
PARTY_FACE = Emoji("🥳 ", "")
X = Emoji("❌ ", styles.X)
WAVING = Emoji("👋 ", "")
SWIRL = Emoji("🌀 ", "")
SPARKLES = Emoji("✨ ", styles.CHECK_MARK)
FILE = Emoji("📄 ", "")
FILES = Emoji("🗂️ ", "")
PACKAGE = Emoji("📦 ", styles.bold("~"))
EYES = Emoji("👀 ", "")
LIGHTNING = Emoji("⚡ ", "")
LIGHT_BULB = Emoji("💡 ", "")
PISTOL = Emoji("🔫 ", "")
TOOLS = Emoji("💻 ", styles.INFO)
CRYSTAL_BALL = Emoji("🔮 ", "")
LABEL = Emoji("🏷️ ", "")
KEY = Emoji("🔑 ", "")