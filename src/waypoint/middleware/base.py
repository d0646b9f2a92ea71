"""
Middleware primitives.

A middleware is any callable taking the next ASGI app and returning a new
one. Class-based middleware subclass :class:`Middleware`; plain functions
work as well.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable

from waypoint.types import ASGIApp, MiddlewareFunc, Receive, Scope, Send


class Middleware(ABC):
    """
    Abstract base middleware class.

    Non-HTTP scopes are passed through untouched; HTTP requests go to
    :meth:`process`.
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI interface - called by the server."""
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        await self.process(scope, receive, send)

    @abstractmethod
    async def process(self, scope: Scope, receive: Receive, send: Send) -> None:
        """Process the request. Must be implemented by subclasses."""
        ...


class MiddlewareChain:
    """
    Ordered list of middleware owned by one router scope.

    The first entry is the outermost layer: it sees the request first and
    the response last. Child scopes receive a copy, so their additions
    stay inside the inherited layers and never leak back to the parent.
    """

    __slots__ = ("_middleware",)

    def __init__(self, middleware: Iterable[MiddlewareFunc] = ()) -> None:
        self._middleware: list[MiddlewareFunc] = list(middleware)

    def append(self, *middleware: MiddlewareFunc) -> None:
        """Add middleware after the existing entries."""
        self._middleware.extend(middleware)

    def clone(self) -> "MiddlewareChain":
        return MiddlewareChain(self._middleware)

    def wrap(self, app: ASGIApp) -> ASGIApp:
        """Compose the chain around ``app``."""
        # Apply middleware in reverse order so first added is outermost
        for middleware in reversed(self._middleware):
            app = middleware(app)
        return app

    def __len__(self) -> int:
        return len(self._middleware)

    def __iter__(self):
        return iter(self._middleware)
