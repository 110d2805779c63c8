"""
Validation utilities for AssocFlow
"""

import logging
import numbers
from typing import Iterable, Sequence, Tuple

from ..errors import InvalidArgument

logger = logging.getLogger(__name__)


def validate_positive_int(value, name: str) -> int:
    """
    Validate that a value is a positive integer

    Args:
        value: Value to check
        name: Parameter name for error messages

    Returns:
        The value as a Python int
    """
    if isinstance(value, bool) or not isinstance(value, numbers.Integral):
        raise InvalidArgument(f"{name} must be an integer, got {value!r}")
    if value <= 0:
        raise InvalidArgument(f"{name} must be positive, got {value}")
    return int(value)


def validate_iterations(iterations) -> int:
    """Permutation count must allow an (n-1) standard deviation"""
    if isinstance(iterations, bool) or not isinstance(iterations, numbers.Integral):
        raise InvalidArgument(f"iterations must be an integer, got {iterations!r}")
    if iterations < 2:
        raise InvalidArgument(f"iterations must be at least 2, got {iterations}")
    return int(iterations)


def validate_fractions(fractions: Sequence[float]) -> Tuple[float, ...]:
    """
    Validate a sub-sample fraction schedule

    Args:
        fractions: Ordered fractions, each in (0, 1]

    Returns:
        The schedule as a tuple of floats, order preserved
    """
    if fractions is None:
        raise InvalidArgument("fraction schedule must not be None")

    schedule = tuple(fractions)
    if not schedule:
        raise InvalidArgument("fraction schedule must not be empty")

    for fraction in schedule:
        if isinstance(fraction, bool) or not isinstance(fraction, numbers.Real):
            raise InvalidArgument(f"fraction must be a number, got {fraction!r}")
        if not 0 < fraction <= 1:
            raise InvalidArgument(f"fraction must be in (0, 1], got {fraction}")

    return tuple(float(f) for f in schedule)


def validate_labels_in_universe(
    labels: Iterable[int], universe_size: int, name: str = "labels"
) -> None:
    """Check every label lies in [1, universe_size]"""
    out_of_range = [label for label in labels if not 1 <= label <= universe_size]
    if out_of_range:
        example = sorted(out_of_range)[:5]
        raise InvalidArgument(
            f"{len(out_of_range)} {name} outside [1, {universe_size}], e.g. {example}"
        )
