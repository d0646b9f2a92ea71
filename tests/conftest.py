"""
Helpers for building ASGI scope / receive / send in tests.
"""

from collections.abc import Callable, Awaitable
from typing import Any

from waypoint.params import params_from_scope
from waypoint.response import TextResponse
from waypoint.types import ASGIApp, MiddlewareFunc


def make_scope(
    method: str = "GET",
    path: str = "/",
    headers: dict[str, str] | None = None,
    query_string: str = "",
    scope_type: str = "http",
    extras: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Build a minimal ASGI scope dict."""
    raw_headers: list[tuple[bytes, bytes]] = []
    for name, value in (headers or {}).items():
        raw_headers.append((name.lower().encode("latin-1"), value.encode("latin-1")))

    scope: dict[str, Any] = {
        "type": scope_type,
        "method": method,
        "path": path,
        "query_string": query_string.encode("utf-8"),
        "headers": raw_headers,
        "client": ("127.0.0.1", 12345),
        "scheme": "http",
    }
    if extras:
        scope.update(extras)
    return scope


def make_receive(body: bytes = b"") -> Callable[[], Awaitable[dict[str, Any]]]:
    """Create a simple ASGI receive callable that yields one body chunk."""
    called = False

    async def receive() -> dict[str, Any]:
        nonlocal called
        if not called:
            called = True
            return {"type": "http.request", "body": body, "more_body": False}
        return {"type": "http.disconnect"}

    return receive


class ResponseCapture:
    """Captures ASGI send() messages for assertions."""

    def __init__(self) -> None:
        self.messages: list[dict[str, Any]] = []
        self.status: int = 0
        self.headers: dict[str, str] = {}
        self.body: bytes = b""

    async def __call__(self, message: dict[str, Any]) -> None:
        self.messages.append(message)
        if message["type"] == "http.response.start":
            self.status = message.get("status", 0)
            for name, value in message.get("headers", []):
                self.headers[name.decode("latin-1").lower()] = value.decode("latin-1")
        elif message["type"] == "http.response.body":
            self.body += message.get("body", b"")

    @property
    def text(self) -> str:
        return self.body.decode("utf-8")


async def fetch(
    app: ASGIApp,
    method: str = "GET",
    path: str = "/",
    query_string: str = "",
) -> ResponseCapture:
    """Send one HTTP request through ``app`` and capture the response."""
    cap = ResponseCapture()
    await app(make_scope(method=method, path=path, query_string=query_string), make_receive(), cap)
    return cap


# ---------------------------------------------------------------------------
# Route handler / middleware helpers
# ---------------------------------------------------------------------------


def echo(label: str) -> ASGIApp:
    """Handler answering ``<label> <params>`` with the bound path parameters."""

    async def handler(scope, receive, send) -> None:
        params = params_from_scope(scope).as_dict()
        await TextResponse(f"{label} {params}")(send)

    return handler


def set_header(name: str, value: str) -> MiddlewareFunc:
    """Middleware adding a response header."""

    def middleware(app: ASGIApp) -> ASGIApp:
        async def wrapped(scope, receive, send) -> None:
            async def send_with_header(message: dict[str, Any]) -> None:
                if message["type"] == "http.response.start":
                    headers = list(message.get("headers", []))
                    headers.append((name.lower().encode("latin-1"), value.encode("latin-1")))
                    message["headers"] = headers
                await send(message)

            await app(scope, receive, send_with_header)

        return wrapped

    return middleware


def record(log: list[str], label: str) -> MiddlewareFunc:
    """Middleware appending ``label:in`` / ``label:out`` to ``log``."""

    def middleware(app: ASGIApp) -> ASGIApp:
        async def wrapped(scope, receive, send) -> None:
            log.append(f"{label}:in")
            await app(scope, receive, send)
            log.append(f"{label}:out")

        return wrapped

    return middleware
