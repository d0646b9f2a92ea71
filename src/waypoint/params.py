"""
Named path parameters bound to a request.

The dispatcher stores the parameters of the chosen route in the ASGI scope
of the request being served; handlers and middleware read them back with
:func:`params_from_scope`.
"""

from typing import NamedTuple

from waypoint.types import Scope

# Scope key owned by this module
_PARAMS_KEY = "waypoint.params"


class Param(NamedTuple):
    key: str
    value: str


class Params(tuple[Param, ...]):
    """Ordered name/value pairs, in placeholder order."""

    __slots__ = ()

    def by_name(self, name: str, default: str = "") -> str:
        """Return the value of the first parameter called ``name``."""
        for param in self:
            if param.key == name:
                return param.value
        return default

    def values(self) -> list[str]:
        """Values of all parameters, in order."""
        return [param.value for param in self]

    def keys(self) -> list[str]:
        """Names of all parameters, in order."""
        return [param.key for param in self]

    def as_dict(self) -> dict[str, str]:
        return {param.key: param.value for param in self}

    def to_scope(self, scope: Scope) -> None:
        """Attach these parameters to a request scope."""
        scope[_PARAMS_KEY] = self


def params_from_scope(scope: Scope) -> Params:
    """Return the parameters bound to the request, empty if there are none."""
    params = scope.get(_PARAMS_KEY)
    if isinstance(params, Params):
        return params
    return Params()
