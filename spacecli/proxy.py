"""A prefix-routing reverse proxy for local micros."""

from __future__ import annotations

import http.client
import logging
from dataclasses import dataclass
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Iterable, Optional
from urllib.parse import urlsplit

__all__ = ["ProxyRoute", "ReverseProxy", "extract_prefix"]

_log = logging.getLogger(__name__)

_HOP_BY_HOP = frozenset(
    name.lower()
    for name in (
        "Connection",
        "Proxy-Connection",
        "Keep-Alive",
        "Proxy-Authenticate",
        "Proxy-Authorization",
        "Te",
        "Trailer",
        "Transfer-Encoding",
        "Upgrade",
    )
)

_NOT_FOUND_BODY = b"404 page not found\n"


@dataclass(frozen=True)
class ProxyRoute:
    prefix: str
    target: str


def extract_prefix(path: str) -> str:
    """Return the first path segment as ``/segment``, or ``/``."""
    parts = path.split("/")
    if len(parts) > 1:
        return "/" + parts[1]
    return "/"


def _single_joining_slash(first: str, second: str) -> str:
    first_slash = first.endswith("/")
    second_slash = second.startswith("/")
    if first_slash and second_slash:
        return first + second[1:]
    if not first_slash and not second_slash:
        return first + "/" + second
    return first + second


class _ProxyHandler(BaseHTTPRequestHandler):
    reverse_proxy: "ReverseProxy"

    def log_message(self, format: str, *args: object) -> None:
        _log.debug("%s - %s", self.address_string(), format % args)

    def _send_empty(self, status: int, body: bytes = b"") -> None:
        self.send_response(status)
        if body:
            self.send_header("Content-Type", "text/plain; charset=utf-8")
            self.send_header("X-Content-Type-Options", "nosniff")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        if body and self.command != "HEAD":
            self.wfile.write(body)

    def _forward(self) -> None:
        raw_path, separator, query = self.path.partition("?")
        resolved = self.reverse_proxy.resolve(raw_path)
        if resolved is None:
            self._send_empty(404, _NOT_FOUND_BODY)
            return

        base, path = resolved
        target = urlsplit(base)
        url = path + ("?" + query if separator else "")

        length = int(self.headers.get("Content-Length") or 0)
        body = self.rfile.read(length) if length > 0 else None

        forwarded = self.headers.get_all("X-Forwarded-For") or []
        client_ip = ", ".join([*forwarded, self.client_address[0]])

        connection = http.client.HTTPConnection(target.hostname or "localhost", target.port or 80)
        try:
            connection.putrequest(self.command, url, skip_host=True, skip_accept_encoding=True)
            for name, value in self.headers.items():
                lowered = name.lower()
                if lowered in _HOP_BY_HOP or lowered == "x-forwarded-for":
                    continue
                connection.putheader(name, value)
            connection.putheader("X-Forwarded-For", client_ip)
            connection.endheaders(body)
            response = connection.getresponse()
        except OSError:
            connection.close()
            self._send_empty(502)
            return

        try:
            self.send_response_only(response.status, response.reason)
            for name, value in response.getheaders():
                if name.lower() not in _HOP_BY_HOP:
                    self.send_header(name, value)
            self.end_headers()
            while True:
                chunk = response.read1(65536)
                if not chunk:
                    break
                self.wfile.write(chunk)
                self.wfile.flush()
        except (BrokenPipeError, ConnectionResetError):
            pass
        finally:
            connection.close()

    do_GET = _forward
    do_POST = _forward
    do_PUT = _forward
    do_PATCH = _forward
    do_DELETE = _forward
    do_HEAD = _forward
    do_OPTIONS = _forward


class ReverseProxy:
    """Routes requests by their first path segment to a target URL."""

    def __init__(self, routes: Iterable[ProxyRoute] = ()) -> None:
        self._routes = {route.prefix: route for route in routes}

    @property
    def routes(self) -> list[ProxyRoute]:
        return list(self._routes.values())

    def resolve(self, path: str) -> Optional[tuple[str, str]]:
        """Return the target base URL and upstream path for ``path``, or None."""
        prefix = extract_prefix(path)
        route = self._routes.get(prefix)
        if route is not None:
            if prefix != "/":
                path = path.removeprefix(prefix)
        else:
            route = self._routes.get("/")
            if route is None:
                return None
        target = urlsplit(route.target)
        base = f"{target.scheme}://{target.netloc}"
        return base, _single_joining_slash(target.path, path)

    def make_server(self, host: str, port: int) -> ThreadingHTTPServer:
        """Create (but do not start) an HTTP server serving this proxy."""
        proxy = self

        class Handler(_ProxyHandler):
            reverse_proxy = proxy

        return ThreadingHTTPServer((host, port), Handler)