"""
Label sets and uniform subset sampling

Every draw takes an explicit ``numpy.random.Generator`` so that tests and
parallel replicates are reproducible from a single seed.
"""

import numbers
from typing import FrozenSet, Iterable, List, Optional, Union

import numpy as np

from ..errors import InvalidArgument, SamplerExhaustion
from ..utils.validation import validate_labels_in_universe, validate_positive_int

LabelSet = FrozenSet[int]
SeedLike = Optional[Union[int, np.random.SeedSequence, np.random.Generator]]


def make_label_set(
    labels: Iterable[int], universe_size: Optional[int] = None
) -> LabelSet:
    """
    Build a LabelSet from an iterable of integer labels

    Args:
        labels: Integer labels; duplicates are rejected, not collapsed
        universe_size: If given, every label must lie in [1, universe_size]

    Returns:
        Immutable set of Python ints
    """
    values = list(labels)

    for label in values:
        if isinstance(label, bool) or not isinstance(label, numbers.Integral):
            raise InvalidArgument(f"labels must be integers, got {label!r}")

    label_set = frozenset(int(label) for label in values)
    if len(label_set) != len(values):
        raise InvalidArgument(
            f"label set contains {len(values) - len(label_set)} duplicate labels"
        )

    if universe_size is not None:
        universe_size = validate_positive_int(universe_size, "universe_size")
        validate_labels_in_universe(label_set, universe_size)

    return label_set


def make_rng(seed: SeedLike = None) -> np.random.Generator:
    """Return a Generator for a seed, SeedSequence, or an existing Generator"""
    if isinstance(seed, np.random.Generator):
        return seed
    return np.random.default_rng(seed)


def spawn_generators(seed: SeedLike, n: int) -> List[np.random.Generator]:
    """
    Derive independent generators, one per worker

    The children depend only on ``seed`` and their index, so results do not
    change with the number of workers that consume them.
    """
    n = validate_positive_int(n, "n")

    if isinstance(seed, np.random.SeedSequence):
        seed_seq = seed
    elif isinstance(seed, np.random.Generator):
        seed_seq = np.random.SeedSequence(int(seed.integers(2**63)))
    else:
        seed_seq = np.random.SeedSequence(seed)

    return [np.random.default_rng(child) for child in seed_seq.spawn(n)]


def _check_sample_size(k, population: int, population_name: str) -> int:
    if isinstance(k, bool) or not isinstance(k, numbers.Integral):
        raise InvalidArgument(f"sample size must be an integer, got {k!r}")
    if k < 0:
        raise InvalidArgument(f"sample size must be non-negative, got {k}")
    if k > population:
        raise SamplerExhaustion(
            f"cannot draw {k} labels without replacement from {population_name} "
            f"of size {population}"
        )
    return int(k)


def sample_labels(
    universe_size: int, k: int, rng: np.random.Generator
) -> LabelSet:
    """
    Draw k distinct labels uniformly from [1, universe_size]

    Args:
        universe_size: Upper bound U of the label universe
        k: Number of labels, 0 <= k <= U
        rng: Generator providing the entropy

    Returns:
        LabelSet of exactly k labels
    """
    universe_size = validate_positive_int(universe_size, "universe_size")
    k = _check_sample_size(k, universe_size, "a universe")

    draws = rng.choice(universe_size, size=k, replace=False)
    return frozenset((draws + 1).tolist())


def subsample(labels: LabelSet, k: int, rng: np.random.Generator) -> LabelSet:
    """Draw k distinct labels uniformly from an existing LabelSet"""
    k = _check_sample_size(k, len(labels), "a label set")

    # Sorted so the draw depends only on the generator state
    pool = np.fromiter(sorted(labels), dtype=np.int64, count=len(labels))
    draws = rng.choice(pool, size=k, replace=False)
    return frozenset(draws.tolist())
