"""
Path template compilation.

Templates name their parameters with ``{name}`` (one path segment) or
``{name...}`` (the remainder of the path). The mux only understands
positional markers, so every template is rewritten to ``:<i>`` / ``*<i>``
where ``<i>`` is the placeholder's occurrence index::

    "/articles/{id}"           -> "/articles/:0"
    "/users/{uid}/{path...}"   -> "/users/:0/*1"

Compilation depends on the template text only, so ``/{id}`` and
``/{name}`` share the compiled form ``/:0``.
"""

import itertools
import re
from dataclasses import dataclass


# {name} or {name...}
PLACEHOLDER_PATTERN: re.Pattern[str] = re.compile(r"\{([A-Za-z_][0-9A-Za-z_]*)(\.\.\.)?\}")

# Characters with a meaning in mux patterns; stripped from literal text
MATCHER_RESERVED: tuple[str, ...] = (":", "*")


@dataclass(frozen=True, slots=True)
class Placeholder:
    """A single placeholder occurrence in a template."""

    token: str
    name: str
    remainder: bool = False


def placeholders(template: str) -> list[Placeholder]:
    """Return the placeholders of ``template`` from left to right."""
    return [
        Placeholder(token=m.group(0), name=m.group(1), remainder=m.group(2) is not None)
        for m in PLACEHOLDER_PATTERN.finditer(template)
    ]


def param_names(template: str) -> tuple[str, ...]:
    """Return the parameter names of ``template`` from left to right."""
    return tuple(m.group(1) for m in PLACEHOLDER_PATTERN.finditer(template))


def matcher_string(template: str) -> str:
    """Rewrite ``template`` into the positional syntax used by the mux."""
    for char in MATCHER_RESERVED:
        template = template.replace(char, "")

    counter = itertools.count()

    def replace(match: re.Match[str]) -> str:
        marker = "*" if match.group(2) else ":"
        return f"{marker}{next(counter)}"

    return PLACEHOLDER_PATTERN.sub(replace, template)
