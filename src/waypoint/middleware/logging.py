"""
Request logging middleware.
"""

import logging
import time
from typing import Any

from waypoint.middleware.base import Middleware
from waypoint.params import params_from_scope
from waypoint.types import ASGIApp, Receive, Scope, Send


class RequestLoggingMiddleware(Middleware):
    """
    Request logging middleware.
    Logs one line per request with the response status and the path
    parameters bound by the router, using Python's standard logging module.

    Parameters are only known once a route has been chosen, so they are
    read after the inner app returns.
    """

    def __init__(
        self,
        app: ASGIApp,
        logger: Any = None,
        log_level: int | None = None,
    ) -> None:
        super().__init__(app)
        self._logger = logger or logging.getLogger("waypoint.access")
        self._log_level = log_level or logging.INFO

    async def process(self, scope: Scope, receive: Receive, send: Send) -> None:
        start_time = time.perf_counter()
        status_code = 0

        async def capture_send(message: dict[str, Any]) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message.get("status", 0)
            await send(message)

        try:
            # pyrefly: ignore [bad-argument-type]
            await self.app(scope, receive, capture_send)
        finally:
            duration = (time.perf_counter() - start_time) * 1000
            client = scope.get("client")
            self._logger.log(
                self._log_level,
                "%s %s %d %.2fms params=%s client=%s",
                scope.get("method", "-"),
                scope.get("path", "-"),
                status_code,
                duration,
                params_from_scope(scope).as_dict(),
                client[0] if client else "-",
            )
