"""
Synthetic label sets with known association to a reference
"""

import numpy as np

from ..errors import SamplerExhaustion
from ..utils.validation import validate_positive_int
from .sampling import LabelSet, sample_labels, subsample


def random_label_set(
    universe_size: int, size: int, rng: np.random.Generator
) -> LabelSet:
    """Label set with no designed association to anything"""
    return sample_labels(universe_size, size, rng)


def designed_overlap_query(
    reference: LabelSet,
    n_shared: int,
    n_random: int,
    universe_size: int,
    rng: np.random.Generator,
) -> LabelSet:
    """
    Query made of labels taken from the reference plus random labels

    The random part is drawn from the universe minus the shared labels, so
    it may hit the reference by chance and the overlap is at least
    ``n_shared``.

    Args:
        reference: Reference set to share labels with
        n_shared: Number of labels taken from the reference
        n_random: Number of extra labels drawn from the universe
        universe_size: Upper bound of the label universe
        rng: Generator for both draws

    Returns:
        LabelSet of size n_shared + n_random
    """
    universe_size = validate_positive_int(universe_size, "universe_size")

    shared = subsample(reference, n_shared, rng)

    remaining = universe_size - len(shared)
    if n_random > remaining:
        raise SamplerExhaustion(
            f"cannot add {n_random} random labels; only {remaining} left in universe"
        )

    shared_arr = np.fromiter(sorted(shared), dtype=np.int64, count=len(shared))
    pool = np.setdiff1d(np.arange(1, universe_size + 1), shared_arr, assume_unique=True)
    extra = rng.choice(pool, size=n_random, replace=False)

    return shared | frozenset(extra.tolist())
