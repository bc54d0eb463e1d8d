"""Local development helpers: ports, port files, micro commands and static serving."""

from __future__ import annotations

import functools
import os
import re
import shlex
import socket
import sys
from http.server import SimpleHTTPRequestHandler, ThreadingHTTPServer
from typing import Iterable, Optional

from spacecli.proxy import ProxyRoute, ReverseProxy
from spacecli.types import (
    ENGINE_TO_DEV_COMMAND,
    STATIC,
    CommandSpec,
    Micro,
    NoDevCommandError,
    is_python_engine,
    shell_fields,
)

DEV_DEFAULT_PORT = 4200
ACTION_ENDPOINT = "__space/v0/actions"

_INTEGER = re.compile(r"[+-]?[0-9]+")


def is_port_active(port: int) -> bool:
    """Return True if something accepts TCP connections on ``port`` locally."""
    try:
        with socket.create_connection(("localhost", port), timeout=1):
            return True
    except (OSError, OverflowError):
        return False


def get_free_port(start: int) -> int:
    """Return the first inactive port among the 100 starting at ``start``."""
    if start < 0 or start > 65535:
        raise ValueError("invalid port range")
    for port in range(start, start + 100):
        if not is_port_active(port):
            return port
    raise RuntimeError("no free port found")


def write_port_file(port_file: str, port: int) -> None:
    """Record ``port`` in ``port_file``, creating its directory if needed."""
    directory = os.path.dirname(port_file)
    if directory:
        os.makedirs(directory, 0o755, exist_ok=True)
    fd = os.open(port_file, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o644)
    with os.fdopen(fd, "w") as handle:
        handle.write(str(port))


def parse_port(port_file: str) -> int:
    """Read the port number stored in ``port_file``."""
    with open(port_file, encoding="utf-8") as handle:
        text = handle.read()
    if not _INTEGER.fullmatch(text):
        raise ValueError(f"invalid port number: {text!r}")
    return int(text)


def _port_file(route_dir: str, micro: Micro) -> str:
    return os.path.join(route_dir, f"{micro.name}.port")


def micro_port(micro: Micro, route_dir: str) -> int:
    """Return the port of a running micro; raises if it is not running."""
    port = parse_port(_port_file(route_dir, micro))
    if not is_port_active(port):
        raise OSError(f"port {port} is not active")
    return port


def proxy_from_dir(micros: Iterable[Micro], route_dir: str) -> ReverseProxy:
    """Build a reverse proxy from the port files of the given micros."""
    routes = []
    for micro in micros:
        try:
            port = parse_port(_port_file(route_dir, micro))
        except (OSError, ValueError):
            continue
        routes.append(ProxyRoute(prefix=micro.path, target=f"http://localhost:{port}"))
    return ReverseProxy(routes)


def micro_command(
    micro: Micro,
    directory: str,
    project_key: str,
    port: int,
    executable: Optional[str] = None,
) -> CommandSpec:
    """Build the command that runs ``micro`` locally on ``port``."""
    if micro.dev:
        dev_command = micro.dev
    elif micro.engine == STATIC:
        root = micro.serve or micro.src
        program = executable if executable is not None else sys.argv[0]
        dev_command = f"{shlex.quote(program)} dev serve {shlex.quote(root)} --port {port}"
    elif ENGINE_TO_DEV_COMMAND.get(micro.engine):
        dev_command = ENGINE_TO_DEV_COMMAND[micro.engine]
    else:
        raise NoDevCommandError()

    environ = {
        "PORT": str(port),
        "DETA_PROJECT_KEY": project_key,
        "DETA_SPACE_APP_HOSTNAME": f"localhost:{port}",
        "DETA_SPACE_APP_MICRO_NAME": micro.name,
        "DETA_SPACE_APP_MICRO_TYPE": micro.micro_type(),
    }
    if is_python_engine(micro.engine):
        environ["UVICORN_PORT"] = str(port)
    if micro.presets is not None:
        for env in micro.presets.env:
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
        raise ValueError(f"no command found for micro {micro.name}")

    return CommandSpec(
        args=fields,
        env={**os.environ, **environ},
        cwd=os.path.normpath(os.path.join(directory, micro.src)),
        scope=micro.name,
    )


class _QuietFileHandler(SimpleHTTPRequestHandler):
    def log_message(self, format: str, *args: object) -> None:
        pass


def serve_static(directory: str, host: str = "localhost", port: int = 8080) -> None:
    """Serve the files of ``directory`` over HTTP until interrupted."""
    handler = functools.partial(_QuietFileHandler, directory=directory)
    with ThreadingHTTPServer((host, port), handler) as server:
        print(f"Serving {directory} on {host}:{port}", file=sys.stderr)
        server.serve_forever()