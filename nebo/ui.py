"""UI capability: serves the app's HTTP handlers through Nebo's proxy."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import parse_qs

from .bridge import Bridge, ConfigureCallback
from .env import AppEnv
from .errors import NeboError

_TOKEN_CHARS = frozenset("!#$%&'*+-.^_`|~0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz")


def canonical_header(name: str) -> str:
    """Return *name* in canonical form, such as ``Content-Type``."""
    return "-".join(part[:1].upper() + part[1:].lower() for part in name.split("-"))


@dataclass
class HttpRequest:
    """An HTTP request proxied from the browser."""

    method: str = "GET"
    path: str = "/"
    query: str = ""
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes = b""

    @property
    def query_params(self) -> dict[str, list[str]]:
        """The query string, parsed."""
        return parse_qs(self.query, keep_blank_values=True)

    def header(self, name: str, default: str = "") -> str:
        """Return a header value by name, case-insensitively."""
        return self.headers.get(canonical_header(name), default)


@dataclass
class HttpResponse:
    """A response returned by an HTTP handler."""

    status_code: int = 200
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes = b""


HandlerFunc = Callable[[HttpRequest], HttpResponse]


def _plain(status: int, text: str, **extra: str) -> HttpResponse:
    headers = {
        "Content-Type": "text/plain; charset=utf-8",
        "X-Content-Type-Options": "nosniff",
        **extra,
    }
    return HttpResponse(status, headers, text.encode())


class ServeMux:
    """Routes requests to handlers by path pattern.

    A pattern is a path, optionally preceded by a method and a space
    (``"GET /items"``). A path ending in ``/`` matches everything below it;
    the longest matching path wins.
    """

    def __init__(self) -> None:
        self._routes: dict[tuple[str, str], HandlerFunc] = {}

    def handle(self, pattern: str, handler: HandlerFunc) -> None:
        """Register *handler* for *pattern*; a pattern may be registered once."""
        method, _, path = pattern.strip().rpartition(" ")
        method = method.strip()
        if not path.startswith("/"):
            raise ValueError(f"invalid pattern {pattern!r}")
        key = (method, path)
        if key in self._routes:
            raise ValueError(f"pattern {pattern!r} is already registered")
        self._routes[key] = handler

    @staticmethod
    def _matches(route: str, path: str) -> bool:
        return path == route or (route.endswith("/") and path.startswith(route))

    def dispatch(self, request: HttpRequest) -> HttpResponse:
        """Serve *request* with the best matching handler."""
        candidates = [
            (method, route)
            for method, route in self._routes
            if self._matches(route, request.path)
        ]
        if not candidates:
            return _plain(404, "404 page not found\n")
        best = max(len(route) for _, route in candidates)
        methods = {method for method, route in candidates if len(route) == best}
        wanted = request.method
        for method in ("" if "" in methods else None, wanted):
            if method is not None and method in methods and (method or wanted):
                return self._routes[(method, _route_for(candidates, method, best))](request)
        if wanted == "HEAD" and "GET" in methods:
            return self._routes[("GET", _route_for(candidates, "GET", best))](request)
        allowed = sorted(methods | ({"HEAD"} if "GET" in methods else set()))
        return _plain(405, "Method Not Allowed\n", Allow=", ".join(allowed))


def _route_for(candidates: list[tuple[str, str]], method: str, length: int) -> str:
    return next(r for m, r in candidates if m == method and len(r) == length)


class UIBridge(Bridge):
    """Exposes a :class:`ServeMux` as the UI service."""

    def __init__(
        self,
        mux: ServeMux | None,
        env: AppEnv,
        on_configure: ConfigureCallback | None = None,
    ) -> None:
        super().__init__(env, on_configure)
        self.mux = mux

    def handle_request(self, request: Mapping[str, Any] | None = None) -> dict[str, Any]:
        """Dispatch a proxied request and return the response as wire fields."""
        if self.mux is None:
            raise NotImplementedError("no HTTP handlers registered")
        request = request or {}
        method = request.get("method") or "GET"
        if not set(method) <= _TOKEN_CHARS:
            raise NeboError(f"build request: invalid method {method!r}")
        http_request = HttpRequest(
            method=method,
            path=request.get("path") or "/",
            query=request.get("query", ""),
            headers={canonical_header(k): v for k, v in (request.get("headers") or {}).items()},
            body=bytes(request.get("body") or b""),
        )
        response = self.mux.dispatch(http_request)
        return {
            "status_code": response.status_code,
            "headers": {canonical_header(k): v for k, v in response.headers.items()},
            "body": bytes(response.body),
        }