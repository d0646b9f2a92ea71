"""
Routes created by a :class:`~waypoint.router.Router`.
"""

import re
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from waypoint.conditions import Conditions, regex_predicate
from waypoint.exceptions import InvalidParameter, NotEnoughParameters, UnknownParameter
from waypoint.middleware.base import MiddlewareChain
from waypoint.params import Param, Params
from waypoint.pattern import PLACEHOLDER_PATTERN, matcher_string, placeholders
from waypoint.types import ASGIApp, Predicate

if TYPE_CHECKING:
    from waypoint.router import Router


class Route:
    """
    A single route: full pattern, conditions and handler.

    Routes are configured through chained builder calls::

        router.get("/articles/{id}") \\
            .where("id", r"^\\d+$") \\
            .name("articles.get") \\
            .handle(show_article)

    or used as a decorator, which sets the handler::

        @router.get("/articles/{id}")
        async def show_article(scope, receive, send): ...

    Parameter indices cover the whole pattern, so parameters declared in
    the router prefix come first.
    """

    __slots__ = (
        "_router",
        "methods",
        "pattern",
        "matcher_pattern",
        "param_names",
        "conditions",
        "middleware",
        "handler",
    )

    def __init__(
        self,
        router: "Router",
        methods: Sequence[str],
        pattern: str,
        conditions: Conditions,
        middleware: MiddlewareChain,
    ) -> None:
        self._router = router
        self.methods: tuple[str, ...] = tuple(m.upper() for m in methods)
        self.pattern = pattern
        self.matcher_pattern = matcher_string(pattern)
        self.param_names: tuple[str, ...] = tuple(p.name for p in placeholders(pattern))
        self.conditions = conditions
        self.middleware = middleware
        self.handler: ASGIApp | None = None

    def __repr__(self) -> str:
        return f"Route(methods={list(self.methods)!r}, pattern={self.pattern!r})"

    def __call__(self, handler: ASGIApp) -> ASGIApp:
        """Decorator form of :meth:`handle`."""
        self.handle(handler)
        return handler

    # ------------------------------------------------------------------
    # Builder
    # ------------------------------------------------------------------

    def name(self, name: str) -> "Route":
        """Register the route under ``name``; a later route with the same name replaces it."""
        self._router._route_by_name[name] = self
        return self

    def where(self, param: str, regex: str | re.Pattern[str]) -> "Route":
        """Require the value of ``param`` to match ``regex`` (``search`` semantics)."""
        return self.where_func(param, regex_predicate(regex))

    def where_func(self, param: str, predicate: Predicate) -> "Route":
        """Require ``predicate`` to accept the value of ``param``."""
        try:
            index = self.param_names.index(param)
        except ValueError:
            raise UnknownParameter(param) from None

        self.conditions.set(index, predicate)
        return self

    def handle(self, handler: ASGIApp) -> "Route":
        """Set the ASGI app serving this route."""
        self.handler = handler
        return self

    # ------------------------------------------------------------------
    # Matching
    # ------------------------------------------------------------------

    def accepts(self, values: Sequence[str]) -> bool:
        """True if the route can serve a request that captured ``values``."""
        return self.handler is not None and self.conditions.match(values)

    def bind(self, values: Sequence[str]) -> Params:
        """Pair captured values with the route's parameter names."""
        return Params(Param(name, value) for name, value in zip(self.param_names, values))

    # ------------------------------------------------------------------
    # Reverse routing
    # ------------------------------------------------------------------

    def url(self, *params: Any) -> str:
        """
        Build a path for this route from positional ``params``.

        Values past the last placeholder are appended as extra path
        segments.

        Raises:
            NotEnoughParameters: Fewer values than placeholders.
            InvalidParameter: A value fails the condition at its index.
        """
        required = len(self.param_names)
        if len(params) < required:
            raise NotEnoughParameters(len(params), required)

        values: list[str] = []
        for i, param in enumerate(params):
            value = str(param)
            predicate = self.conditions.get(i)
            if predicate is not None and not predicate(value):
                raise InvalidParameter(value)
            values.append(value)

        substitutes = iter(values[:required])
        url = PLACEHOLDER_PATTERN.sub(lambda _m: next(substitutes), self.pattern)

        for value in values[required:]:
            url = f"{url}/{value}"

        return url
