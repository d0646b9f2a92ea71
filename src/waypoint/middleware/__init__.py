"""
Middleware package for waypoint.
"""

from waypoint.middleware.base import Middleware, MiddlewareChain
from waypoint.middleware.logging import RequestLoggingMiddleware

__all__ = [
    "Middleware",
    "MiddlewareChain",
    "RequestLoggingMiddleware",
]
