"""A writer that prefixes every line with a scope name."""

from __future__ import annotations

import sys
from typing import Optional, TextIO, Union


class Prefixer:
    """Writes each line of what it receives as ``[scope] line``."""

    def __init__(self, scope: str, dest: Optional[TextIO] = None) -> None:
        self.scope = scope
        self.dest = dest if dest is not None else sys.stdout

    def write(self, data: Union[bytes, str]) -> int:
        text = data.decode("utf-8", errors="replace") if isinstance(data, bytes) else data
        for line in text.replace("\r\n", "\n").split("\n"):
            self.dest.write(f"[{self.scope}] {line}\n")
        self.dest.flush()
        return len(data)