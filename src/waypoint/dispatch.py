"""
Request-time route selection.

Several routes may compile to the same (method, pattern) key, e.g.
``/{id}`` and ``/{name}``. The mux only knows the key, so each key gets a
single :class:`Dispatcher` that picks among its routes by evaluating their
conditions against the captured values.
"""

import logging
from collections.abc import Iterator, Sequence

from waypoint.middleware.base import MiddlewareChain
from waypoint.mux import Mux, captures_from_scope
from waypoint.route import Route
from waypoint.types import ASGIApp, Receive, Scope, Send


logger = logging.getLogger("waypoint.routing")


class RouteList(list[Route]):
    """Routes sharing one key, in registration order."""

    def match(self, values: Sequence[str]) -> Route | None:
        """First route with a handler whose conditions accept ``values``."""
        for route in self:
            if route.accepts(values):
                return route
        return None


class RouteMap:
    """Route lists keyed by method, then by compiled pattern."""

    def __init__(self) -> None:
        self._routes: dict[str, dict[str, RouteList]] = {}
        # Every route once, in registration order
        self.all_routes: list[Route] = []

    def get(self, method: str, pattern: str) -> RouteList:
        """Return the list for the key, creating an empty one if needed."""
        by_pattern = self._routes.setdefault(method, {})
        if pattern not in by_pattern:
            by_pattern[pattern] = RouteList()
        return by_pattern[pattern]

    def __iter__(self) -> Iterator[tuple[str, str, RouteList]]:
        for method, by_pattern in self._routes.items():
            for pattern, routes in by_pattern.items():
                yield method, pattern, routes

    def __len__(self) -> int:
        return sum(len(by_pattern) for by_pattern in self._routes.values())


class Dispatcher:
    """
    ASGI app registered with the mux for one (method, pattern) key.

    The chosen route runs inside its own middleware snapshot only, so a
    route joining the key from another scope never picks up the middleware
    of the scope that created the key. When no route accepts the request,
    the not-found handler runs inside the chain of the route that created
    the key.
    """

    def __init__(self, routes: RouteList, middleware: MiddlewareChain, mux: Mux) -> None:
        self._routes = routes
        self._middleware = middleware
        self._mux = mux
        # route -> (handler the entry was built for, composed app)
        self._handlers: dict[Route, tuple[ASGIApp, ASGIApp]] = {}
        # (not-found handler the entry was built for, composed app)
        self._not_found: tuple[ASGIApp, ASGIApp] | None = None

    @property
    def routes(self) -> RouteList:
        return self._routes

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        values = [value.strip("/") for value in captures_from_scope(scope)]

        route = self._routes.match(values)
        if route is None or route.handler is None:
            logger.debug(
                "No route accepted %s %s values=%s",
                scope.get("method", "-"),
                scope.get("path", "-"),
                values,
            )
            await self._not_found_app()(scope, receive, send)
            return

        params = route.bind(values)
        if params:
            params.to_scope(scope)

        await self._handler_for(route, route.handler)(scope, receive, send)

    def _handler_for(self, route: Route, handler: ASGIApp) -> ASGIApp:
        cached = self._handlers.get(route)
        if cached is not None and cached[0] is handler:
            return cached[1]

        app = route.middleware.wrap(handler)
        self._handlers[route] = (handler, app)
        return app

    def _not_found_app(self) -> ASGIApp:
        handler = self._mux.not_found
        if self._not_found is not None and self._not_found[0] is handler:
            return self._not_found[1]

        app = self._middleware.wrap(handler)
        self._not_found = (handler, app)
        return app
