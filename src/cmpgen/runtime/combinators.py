from typing import Any, Callable

from .registry import Comparator


def cmp_by(key: Callable[[Any], Any]) -> Comparator:
    """Three-way comparison of ``key(a)`` and ``key(b)``."""

    def compare(a: Any, b: Any) -> int:
        left, right = key(a), key(b)
        return (left > right) - (left < right)

    return compare


def chain(*comparators: Comparator) -> Comparator:
    """
    Combines comparators in priority order.

    The first comparator with a non-zero result decides. With no
    comparators every pair compares equal.
    """

    def compare(a: Any, b: Any) -> int:
        for comparator in comparators:
            result = comparator(a, b)
            if result:
                return result
        return 0

    return compare
