import random

import pytest

from makeasound.algorithms import stable_insertion_sort


@pytest.mark.parametrize(
    "values",
    [[], [1], [3, 1, 2], [5, 4, 3, 2, 1], [1, 2, 3, 4], [2, 2, 1, 1, 3]],
)
def test_default_comparator_matches_sorted(values):
    items = list(values)
    stable_insertion_sort(items)
    assert items == sorted(values)


def test_random_lists_match_sorted():
    rng = random.Random(1234)
    for _ in range(50):
        values = [rng.randint(-20, 20) for _ in range(rng.randint(0, 30))]
        items = list(values)
        stable_insertion_sort(items)
        assert items == sorted(values)


def test_sort_is_stable_for_equal_keys():
    items = [(2, "a"), (1, "b"), (2, "c"), (1, "d"), (0, "e")]
    stable_insertion_sort(items, lambda x, y: x[0] < y[0])
    assert items == sorted(items, key=lambda pair: pair[0])
    assert [tag for key, tag in items if key == 2] == ["a", "c"]
    assert [tag for key, tag in items if key == 1] == ["b", "d"]


def test_custom_comparator_descending():
    items = [4, 9, 1, 7]
    stable_insertion_sort(items, lambda a, b: a > b)
    assert items == sorted([4, 9, 1, 7], reverse=True)


def test_sorts_in_place():
    items = [3, 2, 1]
    alias = items
    stable_insertion_sort(items)
    assert alias is items
    assert alias == [1, 2, 3]