"""Interactive terminal prompts: choose from a list, confirm, and text input."""

from __future__ import annotations

import codecs
import contextlib
import os
import sys
from dataclasses import dataclass, field
from typing import Callable, Iterator, Optional, Protocol

from spacecli import styles

try:
    import termios
    import tty
except ImportError:
    termios = None
    tty = None

try:
    import msvcrt
except ImportError:
    msvcrt = None


class PromptCancelled(Exception):
    """Raised when the user cancels a prompt."""

    def __init__(self, message: str = "cancelled") -> None:
        super().__init__(message)


def render_choice(choice: str, chosen: bool) -> str:
    """Render one line of a choice list, marking the highlighted choice."""
    if chosen:
        return f"{styles.SELECT_TAG} {choice}"
    return f"  {choice}"


@dataclass
class ChooseModel:
    """State of a single-choice list prompt."""

    prompt: str
    choices: list[str] = field(default_factory=list)
    cursor: int = 0
    chosen: bool = False
    cancelled: bool = False

    def update(self, key: str) -> bool:
        """Apply a key press; return True when the prompt is finished."""
        if key == "enter":
            self.chosen = True
            return True
        if key == "ctrl+c":
            self.cancelled = True
            return True
        if key in ("j", "down"):
            self.cursor += 1
            if self.cursor >= len(self.choices):
                self.cursor = 0
        elif key in ("k", "up"):
            self.cursor -= 1
            if self.cursor < 0:
                self.cursor = len(self.choices) - 1
        return False

    def selection(self) -> str:
        if not 0 <= self.cursor < len(self.choices):
            return ""
        return self.choices[self.cursor]

    def view(self) -> str:
        if self.chosen:
            return f"{styles.QUESTION} {styles.bold(self.prompt)} {self.selection()}\n"
        header = f"{styles.QUESTION} {styles.bold(self.prompt)}  \n"
        lines = "".join(
            f"\n{render_choice(choice, self.cursor == index)}"
            for index, choice in enumerate(self.choices)
        )
        return f"{header}{lines}\n"


@dataclass
class ConfirmModel:
    """State of a yes/no prompt; Enter means yes."""

    prompt: str
    confirm: bool = False
    quitting: bool = False
    cancelled: bool = False

    def update(self, key: str) -> bool:
        """Apply a key press; return True when the prompt is finished."""
        if key in ("y", "Y", "enter"):
            self.confirm = True
        elif key in ("n", "N"):
            self.confirm = False
        elif key == "ctrl+c":
            self.cancelled = True
        else:
            return False
        self.quitting = True
        return True

    def view(self) -> str:
        answer = "(Y/n)"
        if self.quitting:
            answer = "y" if self.confirm else "n"
        return f"{styles.QUESTION} {styles.bold(self.prompt)} {styles.subtle(answer)}\n"


@dataclass
class TextModel:
    """State of a single-line text prompt with an optional validator.

    The validator raises an exception whose message is shown to the user.
    """

    prompt: str
    placeholder: str = ""
    validator: Optional[Callable[[str], None]] = None
    password_mode: bool = False
    text: str = ""
    cancelled: bool = False
    validation_msg: str = ""

    def update(self, key: str) -> bool:
        """Apply a key press; return True when the prompt is finished."""
        if key == "enter":
            if self.validator is not None:
                try:
                    self.validator(self.value())
                except Exception as exc:
                    self.validation_msg = f"❗ Error: {exc}"
                    return False
                self.validation_msg = ""
            return True
        if key == "ctrl+c":
            self.cancelled = True
            return True
        if key == "backspace":
            self.text = self.text[:-1]
        elif len(key) == 1 and key.isprintable():
            self.text += key
        return False

    def value(self) -> str:
        return self.text or self.placeholder

    def _input_view(self) -> str:
        if not self.text:
            return "> " + styles.subtle(self.placeholder)
        shown = "*" * len(self.text) if self.password_mode else self.text
        return "> " + shown

    def view(self) -> str:
        if self.password_mode:
            result = (
                f"{styles.QUESTION} {styles.bold(self.prompt)} "
                f"({len(self.text)} chars) {self._input_view()}\n"
            )
        else:
            result = f"{styles.QUESTION} {styles.bold(self.prompt)} {self._input_view()}\n"
        if self.validation_msg:
            result += "\n" + self.validation_msg
        return result


class _Model(Protocol):
    def update(self, key: str) -> bool: ...

    def view(self) -> str: ...


_ARROWS = {"A": "up", "B": "down", "C": "right", "D": "left"}
_WINDOWS_ARROWS = {"H": "up", "P": "down", "M": "right", "K": "left"}


def _decode(read: Callable[[], str]) -> Iterator[str]:
    """Turn a stream of characters into key names; end of input cancels."""
    while True:
        char = read()
        if not char:
            yield "ctrl+c"
            return
        if char in ("\r", "\n"):
            yield "enter"
        elif char == "\x03":
            yield "ctrl+c"
        elif char in ("\x7f", "\x08"):
            yield "backspace"
        elif char == "\x1b":
            following = read()
            if following in ("[", "O"):
                yield _ARROWS.get(read(), "esc")
            else:
                yield "esc"
        elif char in ("\x00", "\xe0"):
            yield _WINDOWS_ARROWS.get(read(), "")
        else:
            yield char


def _is_tty(stream: object) -> bool:
    try:
        return bool(stream.isatty())  # type: ignore[attr-defined]
    except (AttributeError, ValueError):
        return False


@contextlib.contextmanager
def _key_source() -> Iterator[Iterator[str]]:
    stream = sys.stdin
    if _is_tty(stream) and msvcrt is not None:
        yield _decode(msvcrt.getwch)
        return
    if _is_tty(stream) and termios is not None:
        fd = stream.fileno()
        saved = termios.tcgetattr(fd)
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")

        def read() -> str:
            while True:
                data = os.read(fd, 1)
                if not data:
                    return ""
                char = decoder.decode(data)
                if char:
                    return char

        tty.setcbreak(fd)
        try:
            yield _decode(read)
        finally:
            termios.tcsetattr(fd, termios.TCSADRAIN, saved)
        return
    yield _decode(lambda: stream.read(1))


def _run(model: _Model) -> None:
    out = sys.stdout
    interactive = _is_tty(out)
    drawn = 0

    def draw() -> None:
        nonlocal drawn
        view = model.view()
        out.write("\x1b[1A\x1b[2K" * drawn if drawn else "")
        if drawn:
            out.write("\r")
        out.write(view)
        out.flush()
        drawn = view.count("\n")

    if interactive:
        draw()
    with _key_source() as keys:
        try:
            for key in keys:
                if model.update(key):
                    break
                if interactive:
                    draw()
        except KeyboardInterrupt:
            model.update("ctrl+c")
    if interactive:
        draw()
    else:
        out.write(model.view())
        out.flush()


def run_choose(prompt: str, *choices: str) -> str:
    """Ask the user to pick one of ``choices`` and return it."""
    model = ChooseModel(prompt=prompt, choices=list(choices))
    _run(model)
    if model.cancelled:
        raise PromptCancelled()
    return model.selection()


def run_confirm(prompt: str) -> bool:
    """Ask a yes/no question; Enter answers yes."""
    model = ConfirmModel(prompt=prompt)
    _run(model)
    if model.cancelled:
        raise PromptCancelled()
    return model.confirm


def run_text(
    prompt: str,
    placeholder: str = "",
    validator: Optional[Callable[[str], None]] = None,
    password_mode: bool = False,
) -> str:
    """Ask for a line of text; an empty answer yields the placeholder."""
    model = TextModel(
        prompt=prompt,
        placeholder=placeholder,
        validator=validator,
        password_mode=password_mode,
    )
    _run(model)
    if model.cancelled:
        raise PromptCancelled()
    return model.value()