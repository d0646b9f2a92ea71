"""
Declarative route definitions.

Routes can be described by a nested mapping instead of builder calls::

    {
        "GET /": "pages.main",
        "(admin)": {
            "$use": "auth",
            "GET, POST /test/{id}": {"$name": "pages.test", "id": r"^\\d+$"},
        },
        "/api/articles/{id}": {
            "$where": {"id": r"^\\d+$"},
            "GET": "articles.get",
            "DELETE": "articles.delete",
        },
    }

Keys are processed in sorted order:

* ``$where`` maps prefix parameters to regular expressions
* ``$use`` names one middleware, or a list of them
* ``METHOD[, METHOD...] [path]`` creates a route; the value is the route
  name, or a mapping with ``$name`` and ``param: regex`` conditions
* ``(anything)`` opens a group
* any other key opens a prefix

Route names double as handler names: the handler of a route is looked up
with ``handler_by_name(route_name)``.
"""

import re
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any

from waypoint.types import ASGIApp, MiddlewareFunc

if TYPE_CHECKING:
    from waypoint.router import Router


ROUTE_KEY_PATTERN: re.Pattern[str] = re.compile(
    r"^(((GET|POST|PUT|PATCH|DELETE|OPTIONS)\b(,\s*)?)+)(\s+(.*))?$"
)
GROUP_KEY_PATTERN: re.Pattern[str] = re.compile(r"^\(.*\)$")


class MapParser:
    """Applies a route mapping to a router scope."""

    def __init__(
        self,
        router: "Router",
        handler_by_name: Callable[[str], ASGIApp | None],
        middleware_by_name: Callable[[str], MiddlewareFunc | None],
    ) -> None:
        self.router = router
        self._handler_by_name = handler_by_name
        self._middleware_by_name = middleware_by_name

    def parse(self, mapping: Mapping[str, Any]) -> None:
        for key in sorted(mapping):
            self._parse_item(key, mapping[key])

    def _branch(self, router: "Router") -> "MapParser":
        return MapParser(router, self._handler_by_name, self._middleware_by_name)

    def _parse_item(self, key: str, value: Any) -> None:
        if key.startswith("$"):
            self._parse_keyword(key, value)
            return

        match = ROUTE_KEY_PATTERN.match(key)
        if match:
            self._parse_route(match, value)
        elif isinstance(value, Mapping):
            if GROUP_KEY_PATTERN.match(key):
                self.router.group(lambda r: self._branch(r).parse(value))
            else:
                self.router.prefix(key, lambda r: self._branch(r).parse(value))

    def _parse_keyword(self, key: str, value: Any) -> None:
        if key == "$where":
            for param, regex in value.items():
                self.router.where(param, str(regex))
        elif key == "$use":
            names = [value] if isinstance(value, str) else list(value)
            for name in names:
                middleware = self._middleware_by_name(str(name))
                if middleware is not None:
                    self.router.use(middleware)

    def _parse_route(self, match: re.Match[str], value: Any) -> None:
        name = ""
        conditions: dict[str, str] = {}

        if isinstance(value, str):
            name = value
        elif isinstance(value, Mapping):
            for k, v in value.items():
                if k == "$name":
                    name = str(v)
                elif not k.startswith("$"):
                    conditions[k] = str(v)

        methods = [m.strip() for m in match.group(1).split(",") if m.strip()]
        path = match.group(6) or ""

        route = self.router.new_route(path, *methods)
        if name:
            route.name(name)

        handler = self._handler_by_name(name)
        if handler is not None:
            route.handle(handler)

        for param, regex in conditions.items():
            route.where(param, regex)
