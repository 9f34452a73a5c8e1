"""Statistics helpers used by the anomaly checks."""

from typing import Sequence, Union

from .errors import EmptyInput

Number = Union[int, float]


def median(values: Sequence[Number]) -> float:
    """Return the median of a sequence of numbers.

    Args:
        values: Numbers to evaluate, in any order.

    Returns:
        The central value for odd-length input, the mean of the two
        central values otherwise.

    Raises:
        EmptyInput: If values is empty.
    """
    if not values:
        raise EmptyInput("median() requires at least one value")

    ordered = sorted(values)
    middle = len(ordered) // 2
    if len(ordered) % 2:
        return ordered[middle]
    return (ordered[middle - 1] + ordered[middle]) / 2
