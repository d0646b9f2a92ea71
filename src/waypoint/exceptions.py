"""
waypoint exceptions.

Configuration mistakes (``RoutingError``) are raised while the route table
is being built and are not meant to be recovered from. URL generation
failures (``UrlError``) are ordinary errors the caller is expected to handle.
"""


class WaypointException(Exception):
    """Base exception for all waypoint errors."""

    def __init__(self, message: str = "An error occurred") -> None:
        self.message = message
        super().__init__(self.message)


class RoutingError(WaypointException):
    """Route table definition errors."""
    pass


class UnknownParameter(RoutingError):
    """A condition was attached to a parameter the pattern does not have."""

    def __init__(self, param: str) -> None:
        self.param = param
        super().__init__(f"unknown parameter: {param}")


class UrlError(WaypointException):
    """
    URL generation errors.

    ``route_name`` is filled in when the URL was requested by route name,
    and is then prefixed to the rendered message.
    """

    def __init__(self, message: str, route_name: str | None = None) -> None:
        self.route_name = route_name
        super().__init__(message)

    def __str__(self) -> str:
        if self.route_name is None:
            return self.message
        return f"{self.route_name}: {self.message}"


class RouteNotFound(UrlError):
    """No route is registered under the requested name."""

    def __init__(self, route_name: str) -> None:
        super().__init__("route not found", route_name)


class NotEnoughParameters(UrlError):
    """Fewer values were supplied than the route has placeholders."""

    def __init__(self, given: int, required: int) -> None:
        self.given = given
        self.required = required
        super().__init__(f"not enough parameters ({given} < {required})")


class InvalidParameter(UrlError):
    """A supplied value does not satisfy the parameter's condition."""

    def __init__(self, value: str) -> None:
        self.value = value
        super().__init__(f"invalid parameter: {value!r} does not match the conditions")
