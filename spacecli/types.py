"""Micro definitions, supported engines and dev-command construction."""

from __future__ import annotations

import json
import os
import re
import subprocess
import sys
import threading
from dataclasses import dataclass, field
from typing import IO, Callable, Optional

from spacecli.prefixer import Prefixer

STATIC = "static"
REACT = "react"
SVELTE = "svelte"
VUE = "vue"
NEXT = "next"
NUXT = "nuxt"
SVELTE_KIT = "svelte-kit"
PYTHON38 = "python3.8"
PYTHON39 = "python3.9"
NODE14X = "nodejs14.x"
NODE16X = "nodejs16.x"
CUSTOM = "custom"

SUPPORTED_ENGINES = (
    STATIC, REACT, SVELTE, VUE, NEXT, NUXT, SVELTE_KIT,
    PYTHON38, PYTHON39, NODE14X, NODE16X, CUSTOM,
)

ENGINE_ALIASES = {
    "static": STATIC,
    "react": REACT,
    "svelte": SVELTE,
    "vue": VUE,
    "next": NEXT,
    "nuxt": NUXT,
    "svelte-kit": SVELTE_KIT,
    "python3.9": PYTHON39,
    "python3.8": PYTHON38,
    "nodejs14.x": NODE14X,
    "nodejs14": NODE14X,
    "nodejs16.x": NODE16X,
    "nodejs16": NODE16X,
    "custom": CUSTOM,
}

ENGINES_TO_RUNTIMES = {
    STATIC: NODE14X,
    REACT: NODE14X,
    SVELTE: NODE14X,
    VUE: NODE14X,
    NEXT: NODE16X,
    NUXT: NODE16X,
    SVELTE_KIT: NODE16X,
    PYTHON38: PYTHON38,
    PYTHON39: PYTHON38,
    NODE14X: NODE14X,
    NODE16X: NODE16X,
    CUSTOM: CUSTOM,
}

_FRONTEND_ENGINES = frozenset({REACT, VUE, SVELTE, STATIC})
_FULLSTACK_ENGINES = frozenset({NEXT, NUXT, SVELTE_KIT})

ENGINE_TO_DEV_COMMAND = {
    REACT: "npm run start -- --port $PORT",
    VUE: "npm run dev -- --port $PORT",
    SVELTE: "npm run dev -- --port $PORT",
    NEXT: "npm run dev -- --port $PORT",
    NUXT: "npm run dev -- --port $PORT",
    SVELTE_KIT: "npm run dev -- --port $PORT",
}


class NoDevCommandError(Exception):
    """Raised when a micro has no dev command and its engine has no default."""

    def __init__(self, message: str = "no dev command found for micro") -> None:
        super().__init__(message)


@dataclass
class Environment:
    name: str
    description: str = ""
    default: str = ""


@dataclass
class Presets:
    env: list[Environment] = field(default_factory=list)
    api_keys: bool = False


@dataclass
class Action:
    id: str
    name: str = ""
    description: str = ""
    trigger: str = ""
    interval: str = ""
    path: str = ""


@dataclass
class ActionEvent:
    id: str
    trigger: str


@dataclass
class ActionRequest:
    event: ActionEvent

    def to_json(self) -> str:
        """Serialise the request as compact JSON."""
        payload = {"event": {"id": self.event.id, "trigger": self.event.trigger}}
        return json.dumps(payload, separators=(",", ":"))


def _pump(stream: IO[bytes], prefixer: Prefixer) -> None:
    with stream:
        for line in stream:
            prefixer.write(line.rstrip(b"\r\n"))


@dataclass
class CommandSpec:
    """A prepared process for a micro: arguments, environment and directory."""

    args: list[str]
    env: dict[str, str]
    cwd: str
    scope: str
    _pumps: list[threading.Thread] = field(default_factory=list, repr=False, compare=False)

    @property
    def name(self) -> str:
        return self.args[0]

    def __str__(self) -> str:
        return " ".join(self.args)

    def start(self) -> subprocess.Popen:
        """Start the process, prefixing its output lines with the micro name."""
        process = subprocess.Popen(
            self.args,
            cwd=self.cwd,
            env=self.env,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
        )
        self._pumps = [
            threading.Thread(target=_pump, args=(stream, Prefixer(self.scope, dest)), daemon=True)
            for stream, dest in ((process.stdout, sys.stdout), (process.stderr, sys.stderr))
        ]
        for pump in self._pumps:
            pump.start()
        return process

    def run(self) -> int:
        """Run the process to completion and return its exit code."""
        process = self.start()
        code = process.wait()
        for pump in self._pumps:
            pump.join()
        return code


@dataclass
class Micro:
    name: str
    src: str = ""
    engine: str = ""
    path: str = ""
    presets: Optional[Presets] = None
    public: bool = False
    public_routes: list[str] = field(default_factory=list)
    primary: bool = False
    runtime: str = ""
    commands: list[str] = field(default_factory=list)
    include: list[str] = field(default_factory=list)
    actions: list[Action] = field(default_factory=list)
    serve: str = ""
    run: str = ""
    dev: str = ""

    def micro_type(self) -> str:
        return "primary" if self.primary else "normal"

    def command(self, directory: str, project_key: str, port: int) -> CommandSpec:
        """Build the dev command for this micro listening on ``port``."""
        dev_command = self.dev or ENGINE_TO_DEV_COMMAND.get(self.engine, "")
        if not dev_command:
            raise NoDevCommandError()

        environ = {
            "PORT": str(port),
            "DETA_PROJECT_KEY": project_key,
            "DETA_SPACE_APP_HOSTNAME": f"localhost:{port}",
            "DETA_SPACE_APP_MICRO_NAME": self.name,
            "DETA_SPACE_APP_MICRO_TYPE": self.micro_type(),
        }
        if self.presets is not None:
            for env in self.presets.env:
                # a value already set by the user wins
                if os.environ.get(env.name):
                    continue
                environ[env.name] = env.default

        def lookup(key: str) -> str:
            if key in environ:
                return environ[key]
            return os.environ.get(key, "")

        fields = shell_fields(dev_command, lookup)
        if not fields:
            raise ValueError(f"no command found for micro {self.name}")

        return CommandSpec(
            args=fields,
            env={**os.environ, **environ},
            cwd=os.path.normpath(os.path.join(directory, self.src)),
            scope=self.name,
        )


_IFS = " \t\n"
_NAME = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


class _FieldBuilder:
    def __init__(self) -> None:
        self.fields: list[str] = []
        self._parts: list[str] = []
        self._open = False

    def add(self, text: str) -> None:
        self._parts.append(text)
        self._open = True

    def end(self) -> None:
        if self._open:
            self.fields.append("".join(self._parts))
        self._parts = []
        self._open = False

    def add_split(self, value: str) -> None:
        if not value:
            return
        if value[0] in _IFS:
            self.end()
        for index, piece in enumerate(value.split()):
            if index:
                self.end()
            self.add(piece)
        if value[-1] in _IFS:
            self.end()


def _read_variable(command: str, index: int, lookup: Callable[[str], str]) -> tuple[Optional[str], int]:
    if index < len(command) and command[index] == "{":
        close = command.find("}", index)
        if close < 0:
            raise ValueError("unterminated parameter expansion")
        name = command[index + 1:close]
        if not _NAME.fullmatch(name):
            raise ValueError(f"invalid parameter name: {name!r}")
        return lookup(name), close + 1
    match = _NAME.match(command, index)
    if match:
        return lookup(match.group()), match.end()
    if index < len(command) and command[index] == "(":
        raise ValueError("command substitution is not supported")
    return None, index


def _read_double_quoted(command: str, index: int, lookup: Callable[[str], str],
                        builder: _FieldBuilder) -> int:
    parts: list[str] = []
    while index < len(command):
        char = command[index]
        if char == '"':
            builder.add("".join(parts))
            return index + 1
        if char == "\\" and index + 1 < len(command) and command[index + 1] in '$`"\\\n':
            if command[index + 1] != "\n":
                parts.append(command[index + 1])
            index += 2
            continue
        if char == "$":
            value, index = _read_variable(command, index + 1, lookup)
            parts.append("$" if value is None else value)
            continue
        if char == "`":
            raise ValueError("command substitution is not supported")
        parts.append(char)
        index += 1
    raise ValueError("unterminated double quote")


def shell_fields(command: str, lookup: Callable[[str], str]) -> list[str]:
    """Split a shell command line into words, expanding variables via ``lookup``."""
    builder = _FieldBuilder()
    index = 0
    while index < len(command):
        char = command[index]
        if char in _IFS:
            builder.end()
            index += 1
        elif char == "'":
            close = command.find("'", index + 1)
            if close < 0:
                raise ValueError("unterminated single quote")
            builder.add(command[index + 1:close])
            index = close + 1
        elif char == '"':
            index = _read_double_quoted(command, index + 1, lookup, builder)
        elif char == "\\":
            if index + 1 < len(command):
                if command[index + 1] != "\n":
                    builder.add(command[index + 1])
                index += 2
            else:
                builder.add("\\")
                index += 1
        elif char == "$":
            value, index = _read_variable(command, index + 1, lookup)
            if value is None:
                builder.add("$")
            else:
                builder.add_split(value)
        elif char == "`":
            raise ValueError("command substitution is not supported")
        else:
            builder.add(char)
            index += 1
    builder.end()
    return builder.fields


def is_frontend_engine(engine: str) -> bool:
    return engine in _FRONTEND_ENGINES


def is_python_engine(engine: str) -> bool:
    return engine in (PYTHON38, PYTHON39)


def is_fullstack_engine(engine: str) -> bool:
    return engine in _FULLSTACK_ENGINES