"""
Per-parameter validation predicates.
"""

import functools
import re
from collections.abc import Sequence

from waypoint.types import Predicate


class Conditions:
    """
    Maps a parameter index to the predicate its value must satisfy.

    Indices without a predicate accept any value. Scopes and routes each own
    a copy, so a branch can add conditions without touching its parent.
    """

    __slots__ = ("_predicates",)

    def __init__(self, predicates: dict[int, Predicate] | None = None) -> None:
        self._predicates: dict[int, Predicate] = dict(predicates or {})

    def set(self, index: int, predicate: Predicate) -> None:
        self._predicates[index] = predicate

    def get(self, index: int) -> Predicate | None:
        return self._predicates.get(index)

    def clone(self) -> "Conditions":
        return Conditions(self._predicates)

    def match(self, values: Sequence[str]) -> bool:
        """True if every constrained value satisfies its predicate."""
        for index, predicate in self._predicates.items():
            if index >= len(values) or not predicate(values[index]):
                return False
        return True

    def __len__(self) -> int:
        return len(self._predicates)

    def __contains__(self, index: object) -> bool:
        return index in self._predicates

    def __repr__(self) -> str:
        return f"Conditions(indices={sorted(self._predicates)})"


@functools.lru_cache(maxsize=None)
def compile_regex(pattern: str) -> re.Pattern[str]:
    """Compile ``pattern`` once per distinct string."""
    return re.compile(pattern)


def regex_predicate(regex: str | re.Pattern[str]) -> Predicate:
    """Predicate accepting values in which ``regex`` finds a match."""
    compiled = compile_regex(regex) if isinstance(regex, str) else regex

    def predicate(value: str) -> bool:
        return compiled.search(value) is not None

    return predicate
