"""Small sorting helpers that keep the order of equal elements."""

from __future__ import annotations

import operator
from functools import cmp_to_key
from typing import Any, Callable, MutableSequence, Optional, TypeVar

T = TypeVar("T")


def stable_insertion_sort(
    items: MutableSequence[T],
    less: Optional[Callable[[Any, Any], bool]] = None,
) -> None:
    """Sort ``items`` in place by a strict "less than" predicate.

    Elements that compare equal keep their original relative order.
    Without ``less`` the elements' own ``<`` operator is used.
    """
    if less is None:
        less = operator.lt

    def compare(a: T, b: T) -> int:
        if less(a, b):
            return -1
        if less(b, a):
            return 1
        return 0

    items[:] = sorted(items, key=cmp_to_key(compare))