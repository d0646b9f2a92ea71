"""
Path-matching engine.

Stores one ASGI app per (method, pattern) in a segment tree and resolves
each request to the most specific registered pattern. Patterns use
positional markers only:

* ``:<token>`` captures one non-empty path segment
* ``*<token>`` captures the rest of the path and must come last

Values captured for a request are exposed, left to right, through
:func:`captures_from_scope`. The engine knows nothing about parameter
names or validation; that is the router's job.
"""

import logging
from typing import Any
from urllib.parse import quote

from waypoint.exceptions import RoutingError
from waypoint.response import RedirectResponse, TextResponse
from waypoint.types import ASGIApp, PanicHandler, Receive, Scope, Send


logger = logging.getLogger("waypoint.mux")

# Scope key owned by this module
_CAPTURES_KEY = "waypoint.captures"

# Characters left as-is when percent-encoding a redirect target
_PATH_SAFE = "/:@!$&'()*+,;=-._~"


def captures_from_scope(scope: Scope) -> list[str]:
    """Values captured by the mux for the current request, in order."""
    return scope.get(_CAPTURES_KEY, [])


async def not_found(scope: Scope, receive: Receive, send: Send) -> None:
    await TextResponse("404 page not found\n", status_code=404)(send)


async def method_not_allowed(scope: Scope, receive: Receive, send: Send) -> None:
    await TextResponse("Method Not Allowed\n", status_code=405)(send)


# ---------------------------------------------------------------------------
# Segment tree
# ---------------------------------------------------------------------------


class _Node:
    """A single node in the segment tree."""

    __slots__ = ("segment", "children", "param_child", "catch_all", "handlers")

    def __init__(self, segment: str = "") -> None:
        self.segment: str = segment
        # Static children keyed by their segment text
        self.children: dict[str, "_Node"] = {}
        # At most one single-segment placeholder child
        self.param_child: "_Node | None" = None
        # At most one remainder placeholder child; always a leaf
        self.catch_all: "_Node | None" = None
        # Apps registered at this node, keyed by method
        self.handlers: dict[str, ASGIApp] = {}


class PathTree:
    """
    Segment tree with backtracking lookup.

    At every depth a static child is preferred over a placeholder child,
    which is preferred over a remainder child. When a preferred branch
    fails further down, the next one is tried.
    """

    def __init__(self) -> None:
        self._root = _Node()
        self._methods: set[str] = set()

    # ------------------------------------------------------------------
    # Insertion
    # ------------------------------------------------------------------

    def insert(self, method: str, pattern: str, app: ASGIApp) -> None:
        """Register ``app`` for ``method`` and ``pattern``."""
        segments = self._split(pattern)
        node = self._root

        for i, seg in enumerate(segments):
            if seg.startswith("*"):
                if i != len(segments) - 1:
                    raise RoutingError(
                        f"Remainder placeholder must be the last segment: {pattern}"
                    )
                if node.catch_all is None:
                    node.catch_all = _Node(seg)
                node = node.catch_all
            elif seg.startswith(":"):
                if node.param_child is None:
                    node.param_child = _Node(seg)
                node = node.param_child
            elif ":" in seg or "*" in seg:
                raise RoutingError(
                    f"Placeholder must span a whole path segment: {pattern}"
                )
            else:
                if seg not in node.children:
                    node.children[seg] = _Node(seg)
                node = node.children[seg]

        if method in node.handlers:
            raise RoutingError(f"A handler is already registered for {method} {pattern}")
        node.handlers[method] = app
        self._methods.add(method)

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def lookup(self, method: str, path: str) -> tuple[ASGIApp, list[str]] | None:
        """
        Find the app registered for ``method`` that best matches ``path``.

        Returns ``(app, captured_values)`` or ``None``.
        """
        segments = self._split(path)
        # (node, segment_index, captured_values)
        stack: list[tuple[_Node, int, list[str]]] = [(self._root, 0, [])]

        while stack:
            node, idx, captures = stack.pop()

            if idx == len(segments):
                app = node.handlers.get(method)
                if app is not None:
                    return app, captures
                continue

            seg_value = segments[idx]

            # Pushed in reverse priority order (LIFO)
            # 1. Remainder
            if node.catch_all is not None and method in node.catch_all.handlers:
                rest = "/".join(segments[idx:])
                stack.append((node.catch_all, len(segments), captures + [rest]))

            # 2. Single segment placeholder
            if node.param_child is not None and seg_value:
                stack.append((node.param_child, idx + 1, captures + [seg_value]))

            # 3. Static segment
            if seg_value in node.children:
                stack.append((node.children[seg_value], idx + 1, captures))

        return None

    def allowed_methods(self, path: str) -> list[str]:
        """Methods that have a pattern matching ``path``."""
        return sorted(m for m in self._methods if self.lookup(m, path) is not None)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _split(path: str) -> list[str]:
        """
        Split a path into segments.

        A trailing slash yields a final empty segment, so ``/a`` and ``/a/``
        are distinct paths.
        """
        if path.startswith("/"):
            path = path[1:]
        return path.split("/")


# ---------------------------------------------------------------------------
# ASGI front end
# ---------------------------------------------------------------------------


class Mux:
    """
    ASGI application dispatching requests through a :class:`PathTree`.

    Options:
        redirect_trailing_slash: Redirect to the path with the trailing
            slash added or removed when only that variant matches.
        handle_method_not_allowed: Answer with the method-not-allowed
            handler, and an ``Allow`` header, when the path matches for
            other methods only.
    """

    def __init__(
        self,
        redirect_trailing_slash: bool = True,
        handle_method_not_allowed: bool = True,
    ) -> None:
        self.redirect_trailing_slash = redirect_trailing_slash
        self.handle_method_not_allowed = handle_method_not_allowed
        self.not_found: ASGIApp = not_found
        self.method_not_allowed: ASGIApp = method_not_allowed
        self.panic_handler: PanicHandler | None = None
        self._tree = PathTree()

    def register(self, method: str, pattern: str, app: ASGIApp) -> None:
        """Install ``app`` for an exact (method, pattern) key."""
        self._tree.insert(method.upper(), pattern, app)

    def lookup(self, method: str, path: str) -> tuple[ASGIApp, list[str]] | None:
        return self._tree.lookup(method.upper(), path)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI application entry point."""
        if scope["type"] == "lifespan":
            await self._lifespan(receive, send)
            return

        method = scope.get("method", "GET").upper()
        path = scope.get("path", "/")

        found = self._tree.lookup(method, path)
        if found is not None:
            app, captures = found
            scope[_CAPTURES_KEY] = captures
            await self._serve(app, scope, receive, send)
            return

        if self.redirect_trailing_slash and path != "/":
            toggled = path[:-1] if path.endswith("/") else f"{path}/"
            if self._tree.lookup(method, toggled) is not None:
                query_string = scope.get("query_string", b"").decode("latin-1")
                # Header values are latin-1; keep non-ASCII paths percent-encoded
                location = quote(toggled, safe=_PATH_SAFE)
                if query_string:
                    location = f"{location}?{query_string}"
                status_code = 301 if method in ("GET", "HEAD") else 308
                await RedirectResponse(location, status_code=status_code)(send)
                return

        if self.handle_method_not_allowed:
            allowed = self._tree.allowed_methods(path)
            if allowed:
                allow = ", ".join(allowed).encode("latin-1")

                async def send_with_allow(message: dict[str, Any]) -> None:
                    if message["type"] == "http.response.start":
                        headers = list(message.get("headers", []))
                        headers.append((b"allow", allow))
                        message["headers"] = headers
                    await send(message)

                # pyrefly: ignore [bad-argument-type]
                await self._serve(self.method_not_allowed, scope, receive, send_with_allow)
                return

        await self._serve(self.not_found, scope, receive, send)

    async def _serve(self, app: ASGIApp, scope: Scope, receive: Receive, send: Send) -> None:
        if self.panic_handler is None:
            await app(scope, receive, send)
            return

        try:
            await app(scope, receive, send)
        except Exception as exc:
            logger.exception(
                "Unhandled exception method=%s path=%s: %s",
                scope.get("method", "-"),
                scope.get("path", "-"),
                exc,
            )
            await self.panic_handler(scope, receive, send, exc)

    async def _lifespan(self, receive: Receive, send: Send) -> None:
        """Acknowledge startup and shutdown; the mux holds no resources."""
        while True:
            message = await receive()
            if message["type"] == "lifespan.startup":
                await send({"type": "lifespan.startup.complete"})
            elif message["type"] == "lifespan.shutdown":
                await send({"type": "lifespan.shutdown.complete"})
                return
