"""Lowest-free-number rule used by the allocator."""

from collections.abc import Iterable


def find_first_available(numbers: Iterable[int]) -> int:
    """Return the smallest positive integer not present in ``numbers``.

    Walks the sorted numbers keeping the next expected value. The first number
    jumping past it marks a gap; if none does, the expected value ends up one
    past the maximum (or 1 for an empty input).

    Examples:
        >>> find_first_available([])
        1
        >>> find_first_available([1, 3, 4])
        2
        >>> find_first_available([4, 1, 3])
        2
        >>> find_first_available([1, 2, 3])
        4
    """
    expected = 1
    for number in sorted(numbers):
        if number > expected:
            return expected
        # max() keeps duplicates and non-positive values from moving the cursor back
        expected = max(expected, number + 1)
    return expected
