"""Tests for the path-matching engine."""

import pytest

from waypoint.exceptions import RoutingError
from waypoint.mux import Mux, PathTree, captures_from_scope
from waypoint.response import TextResponse

from tests.conftest import fetch


async def _handler(scope, receive, send):
    await TextResponse("ok")(send)


def answer(body: str):
    async def handler(scope, receive, send):
        await TextResponse(f"{body} {captures_from_scope(scope)}")(send)
    return handler


class TestPathTree:
    def test_static_route(self) -> None:
        tree = PathTree()
        tree.insert("GET", "/hello", _handler)
        app, captures = tree.lookup("GET", "/hello")
        assert app is _handler
        assert captures == []

    def test_root(self) -> None:
        tree = PathTree()
        tree.insert("GET", "/", _handler)
        assert tree.lookup("GET", "/") is not None
        assert tree.lookup("GET", "/x") is None

    def test_param_route(self) -> None:
        tree = PathTree()
        tree.insert("GET", "/users/:0", _handler)
        _, captures = tree.lookup("GET", "/users/42")
        assert captures == ["42"]

    def test_param_requires_non_empty_segment(self) -> None:
        tree = PathTree()
        tree.insert("GET", "/users/:0", _handler)
        assert tree.lookup("GET", "/users/") is None

    def test_multiple_params(self) -> None:
        tree = PathTree()
        tree.insert("GET", "/org/:0/repo/:1", _handler)
        _, captures = tree.lookup("GET", "/org/acme/repo/waypoint")
        assert captures == ["acme", "waypoint"]

    def test_remainder(self) -> None:
        tree = PathTree()
        tree.insert("GET", "/files/*0", _handler)
        _, captures = tree.lookup("GET", "/files/a/b/c.txt")
        assert captures == ["a/b/c.txt"]

    def test_remainder_may_be_empty(self) -> None:
        tree = PathTree()
        tree.insert("GET", "/files/*0", _handler)
        _, captures = tree.lookup("GET", "/files/")
        assert captures == [""]

    def test_no_match(self) -> None:
        tree = PathTree()
        tree.insert("GET", "/x", _handler)
        assert tree.lookup("GET", "/y") is None

    def test_wrong_method(self) -> None:
        tree = PathTree()
        tree.insert("GET", "/data", _handler)
        assert tree.lookup("DELETE", "/data") is None
        assert tree.allowed_methods("/data") == ["GET"]

    def test_static_preferred_over_param(self) -> None:
        tree = PathTree()
        static, param = answer("static"), answer("param")
        tree.insert("GET", "/users/me", static)
        tree.insert("GET", "/users/:0", param)
        assert tree.lookup("GET", "/users/me")[0] is static
        assert tree.lookup("GET", "/users/you")[0] is param

    def test_backtracks_from_static_branch(self) -> None:
        tree = PathTree()
        static, param = answer("static"), answer("param")
        tree.insert("GET", "/users/me/profile", static)
        tree.insert("GET", "/users/:0/posts", param)
        app, captures = tree.lookup("GET", "/users/me/posts")
        assert app is param
        assert captures == ["me"]

    def test_param_preferred_over_remainder(self) -> None:
        tree = PathTree()
        param, rest = answer("param"), answer("rest")
        tree.insert("GET", "/a/:0", param)
        tree.insert("GET", "/a/*0", rest)
        assert tree.lookup("GET", "/a/b")[0] is param
        assert tree.lookup("GET", "/a/b/c")[0] is rest

    def test_method_specific_priority(self) -> None:
        tree = PathTree()
        static, param = answer("static"), answer("param")
        tree.insert("POST", "/users/me", static)
        tree.insert("GET", "/users/:0", param)
        assert tree.lookup("GET", "/users/me")[0] is param

    def test_remainder_must_be_last(self) -> None:
        with pytest.raises(RoutingError):
            PathTree().insert("GET", "/a/*0/b", _handler)

    def test_placeholder_must_span_segment(self) -> None:
        with pytest.raises(RoutingError):
            PathTree().insert("GET", "/a/x:0", _handler)

    def test_duplicate_registration(self) -> None:
        tree = PathTree()
        tree.insert("GET", "/a/:0", _handler)
        with pytest.raises(RoutingError):
            tree.insert("GET", "/a/:1", _handler)


class TestMux:
    async def test_dispatches_with_captures(self) -> None:
        mux = Mux()
        mux.register("GET", "/users/:0", answer("user"))
        cap = await fetch(mux, "GET", "/users/7")
        assert cap.status == 200
        assert cap.text == "user ['7']"

    async def test_not_found(self) -> None:
        cap = await fetch(Mux(), "GET", "/nope")
        assert cap.status == 404
        assert cap.text == "404 page not found\n"

    async def test_method_not_allowed(self) -> None:
        mux = Mux()
        mux.register("GET", "/data", _handler)
        mux.register("PUT", "/data", _handler)
        cap = await fetch(mux, "DELETE", "/data")
        assert cap.status == 405
        assert cap.headers["allow"] == "GET, PUT"

    async def test_method_not_allowed_disabled(self) -> None:
        mux = Mux(handle_method_not_allowed=False)
        mux.register("GET", "/data", _handler)
        cap = await fetch(mux, "DELETE", "/data")
        assert cap.status == 404

    async def test_trailing_slash_redirect(self) -> None:
        mux = Mux()
        mux.register("GET", "/:0", _handler)
        cap = await fetch(mux, "GET", "/aaa/", query_string="x=1")
        assert cap.status == 301
        assert cap.headers["location"] == "/aaa?x=1"

    async def test_trailing_slash_added(self) -> None:
        mux = Mux()
        mux.register("POST", "/files/*0", _handler)
        cap = await fetch(mux, "POST", "/files")
        assert cap.status == 308
        assert cap.headers["location"] == "/files/"

    async def test_trailing_slash_redirect_encodes_location(self) -> None:
        mux = Mux()
        mux.register("GET", "/:0", _handler)
        cap = await fetch(mux, "GET", "/日本/", query_string="x=1")
        assert cap.status == 301
        assert cap.headers["location"] == "/%E6%97%A5%E6%9C%AC?x=1"

    async def test_trailing_slash_redirect_disabled(self) -> None:
        mux = Mux(redirect_trailing_slash=False)
        mux.register("GET", "/a", _handler)
        cap = await fetch(mux, "GET", "/a/")
        assert cap.status == 404

    async def test_exception_propagates_without_panic_handler(self) -> None:
        async def boom(scope, receive, send):
            raise RuntimeError("boom")

        mux = Mux()
        mux.register("GET", "/", boom)
        with pytest.raises(RuntimeError):
            await fetch(mux, "GET", "/")

    async def test_panic_handler(self) -> None:
        async def boom(scope, receive, send):
            raise RuntimeError("boom")

        async def recover(scope, receive, send, exc):
            await TextResponse(f"Error: {exc}", status_code=500)(send)

        mux = Mux()
        mux.panic_handler = recover
        mux.register("GET", "/", boom)
        cap = await fetch(mux, "GET", "/")
        assert cap.status == 500
        assert cap.text == "Error: boom"

    async def test_lifespan(self) -> None:
        messages = [{"type": "lifespan.startup"}, {"type": "lifespan.shutdown"}]
        sent: list[dict] = []

        async def receive():
            return messages.pop(0)

        async def send(message):
            sent.append(message)

        await Mux()({"type": "lifespan"}, receive, send)
        assert [m["type"] for m in sent] == [
            "lifespan.startup.complete",
            "lifespan.shutdown.complete",
        ]
