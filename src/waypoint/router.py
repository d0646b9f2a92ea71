"""
The router: route registration, scopes and reverse routing.

A :class:`Router` is also a scope. :meth:`Router.group` and
:meth:`Router.prefix` branch off a copy that inherits the prefix, the
conditions and the middleware of its parent; whatever is added to the
copy stays there. All branches share the same route table, name registry
and mux, so a route named inside a nested scope can be looked up from the
top-level router.
"""

import copy
import logging
import re
from collections.abc import Callable, Mapping
from typing import Any

from waypoint.conditions import Conditions, regex_predicate
from waypoint.dispatch import Dispatcher, RouteMap
from waypoint.exceptions import RouteNotFound, UnknownParameter, UrlError
from waypoint.middleware.base import MiddlewareChain
from waypoint.mux import Mux
from waypoint.pattern import param_names
from waypoint.route import Route
from waypoint.types import ASGIApp, MiddlewareFunc, PanicHandler, Predicate, Receive, Scope, Send


logger = logging.getLogger("waypoint.routing")


class Router:
    """
    ASGI router with named parameters, scopes and URL generation.

    Usage:
        router = Router()

        def articles(r: Router) -> None:
            r.where("id", r"^\\d+$")
            r.get("").name("articles.get").handle(show_article)

        router.prefix("/articles/{id}", articles)

        router.url("articles.get", 111)  # "/articles/111"

        # Run with: uvicorn main:router

    Options:
        redirect_trailing_slash: Redirect when only the path with the
            trailing slash toggled matches a route.
        handle_method_not_allowed: Answer 405 when the path matches
            for other methods only.
    """

    def __init__(
        self,
        redirect_trailing_slash: bool = True,
        handle_method_not_allowed: bool = True,
    ) -> None:
        self._prefix = ""
        self._conditions = Conditions()
        self._middleware = MiddlewareChain()
        self._routes = RouteMap()
        self._route_by_name: dict[str, Route] = {}
        self._mux = Mux(
            redirect_trailing_slash=redirect_trailing_slash,
            handle_method_not_allowed=handle_method_not_allowed,
        )

    # -------------------------------------------------------------------------
    # ASGI Interface
    # -------------------------------------------------------------------------

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI application entry point."""
        await self._mux(scope, receive, send)

    # -------------------------------------------------------------------------
    # Scopes
    # -------------------------------------------------------------------------

    @property
    def path_prefix(self) -> str:
        """Prefix prepended to every route created from this scope."""
        return self._prefix

    @property
    def routes(self) -> list[Route]:
        """All registered routes, in registration order."""
        return list(self._routes.all_routes)

    def group(self, fn: Callable[["Router"], Any] | None = None) -> "Router":
        """
        Branch off a scope with the same prefix.

        ``fn`` is called with the new scope; the scope is also returned.
        """
        sub = self._branch()
        if fn is not None:
            fn(sub)
        return sub

    def prefix(self, path: str, fn: Callable[["Router"], Any] | None = None) -> "Router":
        """
        Branch off a scope whose prefix is extended with ``path``.

        The prefix may contain named parameters.
        """
        sub = self._branch()
        sub._prefix = self._prefix + path
        if fn is not None:
            fn(sub)
        return sub

    def use(self, *middleware: MiddlewareFunc) -> None:
        """Add middleware to this scope and the scopes branched from it afterwards."""
        self._middleware.append(*middleware)

    def where(self, param: str, regex: str | re.Pattern[str]) -> None:
        """Require a prefix parameter to match ``regex`` (``search`` semantics)."""
        self.where_func(param, regex_predicate(regex))

    def where_func(self, param: str, predicate: Predicate) -> None:
        """Require ``predicate`` to accept the value of a prefix parameter."""
        try:
            index = param_names(self._prefix).index(param)
        except ValueError:
            raise UnknownParameter(param) from None

        self._conditions.set(index, predicate)

    def _branch(self) -> "Router":
        """Snapshot this scope; the registries and mux stay shared."""
        clone = copy.copy(self)
        clone._conditions = self._conditions.clone()
        clone._middleware = self._middleware.clone()
        return clone

    # -------------------------------------------------------------------------
    # Routes
    # -------------------------------------------------------------------------

    def get(self, path: str) -> Route:
        """Create a route for GET requests."""
        return self.new_route(path, "GET")

    def post(self, path: str) -> Route:
        """Create a route for POST requests."""
        return self.new_route(path, "POST")

    def put(self, path: str) -> Route:
        """Create a route for PUT requests."""
        return self.new_route(path, "PUT")

    def patch(self, path: str) -> Route:
        """Create a route for PATCH requests."""
        return self.new_route(path, "PATCH")

    def delete(self, path: str) -> Route:
        """Create a route for DELETE requests."""
        return self.new_route(path, "DELETE")

    def options(self, path: str) -> Route:
        """Create a route for OPTIONS requests."""
        return self.new_route(path, "OPTIONS")

    def new_route(self, path: str, *methods: str) -> Route:
        """Create a route for requests sent with any of ``methods``."""
        route = Route(
            router=self,
            methods=methods,
            pattern=self._prefix + path,
            conditions=self._conditions.clone(),
            middleware=self._middleware.clone(),
        )
        self._add_route(route)
        return route

    def _add_route(self, route: Route) -> None:
        pattern = route.matcher_pattern

        for method in route.methods:
            routes = self._routes.get(method, pattern)

            if not routes:
                dispatcher = Dispatcher(routes, route.middleware, self._mux)
                self._mux.register(method, pattern, dispatcher)

            routes.append(route)
            logger.debug(
                "Added route %s %s as %s (candidate %d)",
                method, route.pattern, pattern, len(routes),
            )

        self._routes.all_routes.append(route)

    # -------------------------------------------------------------------------
    # Reverse routing
    # -------------------------------------------------------------------------

    def url(self, name: str, *params: Any) -> str:
        """
        Generate a URL for a named route.

        Raises:
            RouteNotFound: No route is registered under ``name``.
            NotEnoughParameters: Fewer values than the route has placeholders.
            InvalidParameter: A value fails its parameter's condition.
        """
        route = self._route_by_name.get(name)
        if route is None:
            raise RouteNotFound(name)

        try:
            return route.url(*params)
        except UrlError as exc:
            exc.route_name = name
            raise

    # -------------------------------------------------------------------------
    # Fallback handlers
    # -------------------------------------------------------------------------

    def handle_not_found(self, handler: ASGIApp) -> None:
        """Set the app called when no route serves the request."""
        self._mux.not_found = self._middleware.wrap(handler)

    def handle_method_not_allowed(self, handler: ASGIApp) -> None:
        """Set the app called when the path only matches for other methods."""
        self._mux.method_not_allowed = self._middleware.wrap(handler)

    def handle_panic(self, handler: PanicHandler) -> None:
        """
        Set the handler for exceptions escaping route handlers.

        It receives the scope, receive, send and the exception.
        """
        self._mux.panic_handler = handler

    # -------------------------------------------------------------------------
    # Declarative routes
    # -------------------------------------------------------------------------

    def parse_map(
        self,
        mapping: Mapping[str, Any],
        handler_by_name: Callable[[str], ASGIApp | None],
        middleware_by_name: Callable[[str], MiddlewareFunc | None],
    ) -> None:
        """Add routes described by a nested mapping (see :mod:`waypoint.parser`)."""
        from waypoint.parser import MapParser

        MapParser(self, handler_by_name, middleware_by_name).parse(mapping)

    # -------------------------------------------------------------------------
    # Serving
    # -------------------------------------------------------------------------

    def run(
        self,
        host: str = "localhost",
        port: int = 8000,
        reload: bool = False,
        workers: int = 1,
        log_level: str = "info",
    ) -> None:
        """
        Serve the router using uvicorn.

        Args:
            host: Host to bind to.
            port: Port to bind to.
            reload: Enable auto-reload.
            workers: Number of worker processes.
            log_level: Logging level.
        """
        import uvicorn

        uvicorn.run(
            self,
            host=host,
            port=port,
            reload=reload,
            workers=workers,
            log_level=log_level,
        )
