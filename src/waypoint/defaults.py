"""
Process-wide default router.

The router is created on first use and lives for the rest of the
process. Every function here delegates to it, for applications that
prefer module-level registration over passing a router around.
"""

import re
from collections.abc import Callable, Mapping
from typing import Any

from waypoint.route import Route
from waypoint.router import Router
from waypoint.types import ASGIApp, MiddlewareFunc, PanicHandler, Predicate

_default_router: Router | None = None


def default_router() -> Router:
    """Return the default router, creating it if needed."""
    global _default_router
    if _default_router is None:
        _default_router = Router()
    return _default_router


def parse_map(
    mapping: Mapping[str, Any],
    handler_by_name: Callable[[str], ASGIApp | None],
    middleware_by_name: Callable[[str], MiddlewareFunc | None],
) -> None:
    default_router().parse_map(mapping, handler_by_name, middleware_by_name)


def group(fn: Callable[[Router], Any] | None = None) -> Router:
    return default_router().group(fn)


def prefix(path: str, fn: Callable[[Router], Any] | None = None) -> Router:
    return default_router().prefix(path, fn)


def use(*middleware: MiddlewareFunc) -> None:
    default_router().use(*middleware)


def where(param: str, regex: str | re.Pattern[str]) -> None:
    default_router().where(param, regex)


def where_func(param: str, predicate: Predicate) -> None:
    default_router().where_func(param, predicate)


def get(path: str) -> Route:
    return default_router().get(path)


def post(path: str) -> Route:
    return default_router().post(path)


def put(path: str) -> Route:
    return default_router().put(path)


def patch(path: str) -> Route:
    return default_router().patch(path)


def delete(path: str) -> Route:
    return default_router().delete(path)


def options(path: str) -> Route:
    return default_router().options(path)


def new_route(path: str, *methods: str) -> Route:
    return default_router().new_route(path, *methods)


def url(name: str, *params: Any) -> str:
    return default_router().url(name, *params)


def handle_not_found(handler: ASGIApp) -> None:
    default_router().handle_not_found(handler)


def handle_method_not_allowed(handler: ASGIApp) -> None:
    default_router().handle_method_not_allowed(handler)


def handle_panic(handler: PanicHandler) -> None:
    default_router().handle_panic(handler)
