"""
Type definitions for the waypoint router.
"""

from collections.abc import Awaitable, Callable, MutableMapping
from typing import Any, TypeAlias

# ASGI Types
Scope: TypeAlias = MutableMapping[str, Any]
Message: TypeAlias = MutableMapping[str, Any]
Receive: TypeAlias = Callable[[], Awaitable[Message]]
Send: TypeAlias = Callable[[Message], Awaitable[None]]
ASGIApp: TypeAlias = Callable[[Scope, Receive, Send], Awaitable[None]]

# Routing Types
MiddlewareFunc: TypeAlias = Callable[[ASGIApp], ASGIApp]
Predicate: TypeAlias = Callable[[str], bool]
PanicHandler: TypeAlias = Callable[[Scope, Receive, Send, BaseException], Awaitable[None]]
