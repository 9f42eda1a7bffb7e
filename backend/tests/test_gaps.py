import random

import pytest

from billing.services.numbering import find_first_available


@pytest.mark.parametrize(
    ("reserved", "expected"),
    [
        ([], 1),
        ([1, 2, 3], 4),
        ([1, 3, 4], 2),
        ([1, 3, 5], 2),
        ([2, 3, 4], 1),
        ([1], 2),
        ([5, 6, 7], 1),
        ([4, 1, 3], 2),
    ],
)
def test_returns_lowest_free_number(reserved: list[int], expected: int) -> None:
    assert find_first_available(reserved) == expected


def test_accepts_sets_and_generators() -> None:
    assert find_first_available({3, 1, 2}) == 4
    assert find_first_available(n for n in (2, 1, 4)) == 3


def test_duplicates_do_not_hide_a_gap() -> None:
    assert find_first_available([1, 1, 3, 3]) == 2


def test_does_not_mutate_input() -> None:
    reserved = [4, 1, 3]
    find_first_available(reserved)
    assert reserved == [4, 1, 3]


def test_matches_smallest_missing_positive_on_random_sets() -> None:
    rng = random.Random(20241)
    for _ in range(200):
        reserved = set(rng.sample(range(1, 40), rng.randint(0, 30)))
        smallest_missing = next(n for n in range(1, 42) if n not in reserved)
        assert find_first_available(reserved) == smallest_missing
