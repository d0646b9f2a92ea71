"""
waypoint - named-parameter routing for ASGI applications

Adds route prefixes and groups, hierarchical middleware, per-parameter
validation and URL generation for named routes on top of a segment-tree
path matcher.
"""

from waypoint.exceptions import (
    InvalidParameter,
    NotEnoughParameters,
    RouteNotFound,
    RoutingError,
    UnknownParameter,
    UrlError,
    WaypointException,
)
from waypoint.middleware import Middleware, RequestLoggingMiddleware
from waypoint.params import Param, Params, params_from_scope
from waypoint.response import JSONResponse, RedirectResponse, Response, TextResponse
from waypoint.route import Route
from waypoint.router import Router
from waypoint.defaults import default_router

__version__ = "0.1.0"
__all__ = [
    "Router",
    "Route",
    "Param",
    "Params",
    "params_from_scope",
    "default_router",
    "Middleware",
    "RequestLoggingMiddleware",
    "Response",
    "TextResponse",
    "JSONResponse",
    "RedirectResponse",
    "WaypointException",
    "RoutingError",
    "UnknownParameter",
    "UrlError",
    "RouteNotFound",
    "NotEnoughParameters",
    "InvalidParameter",
]
