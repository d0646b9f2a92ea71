"""Tests for waypoint.pattern: template compilation."""

import re

from waypoint.pattern import Placeholder, matcher_string, param_names, placeholders


class TestParamNames:
    def test_no_placeholders(self) -> None:
        assert param_names("/hello") == ()

    def test_names_in_order(self) -> None:
        assert param_names("/users/{userId}/articles/{articleId}") == ("userId", "articleId")

    def test_remainder_name(self) -> None:
        assert param_names("/files/{path...}") == ("path",)

    def test_invalid_names_are_not_placeholders(self) -> None:
        assert param_names("/x/{1abc}/{a-b}") == ()


class TestPlaceholders:
    def test_tokens(self) -> None:
        assert placeholders("/a/{id}/{rest...}") == [
            Placeholder(token="{id}", name="id", remainder=False),
            Placeholder(token="{rest...}", name="rest", remainder=True),
        ]


class TestMatcherString:
    def test_static(self) -> None:
        assert matcher_string("/hello/world") == "/hello/world"

    def test_single_segment(self) -> None:
        assert matcher_string("/articles/{id}") == "/articles/:0"

    def test_remainder(self) -> None:
        assert matcher_string("/users/{uid}/{path...}") == "/users/:0/*1"

    def test_different_names_same_pattern(self) -> None:
        assert matcher_string("/{id}") == matcher_string("/{name}") == "/:0"

    def test_reserved_characters_stripped(self) -> None:
        assert matcher_string("/a:b/c*d/{id}") == "/ab/cd/:0"

    def test_marker_count_matches_names(self) -> None:
        template = "/{a}/x/{b}/y/{c...}"
        markers = re.findall(r"[:*](\d+)", matcher_string(template))
        assert markers == ["0", "1", "2"]
        assert len(markers) == len(param_names(template))
