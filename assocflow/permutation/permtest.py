"""
Permutation test producing z-scores and normalized z-scores

The observed statistic of a query against a reference is compared with a
null distribution built by recomputing the statistic on random label sets
of the same size drawn from the universe.
"""

import math
from dataclasses import dataclass
from typing import Union

import numpy as np

from ..errors import DegenerateDistribution, InvalidArgument
from ..utils import get_logger
from ..utils.validation import (validate_iterations, validate_labels_in_universe,
                                validate_positive_int)
from .sampling import LabelSet, sample_labels
from .statistics import EvaluationFunction, get_evaluation_function, overlap_count

logger = get_logger(__name__)

DEGENERATE_POLICIES = ("raise", "flag")


@dataclass(frozen=True)
class PermutationOutcome:
    """Result of one permutation test"""

    sample_size: int
    z_score: float
    normalized_z_score: float

    # Diagnostics
    observed: float
    null_mean: float
    null_sd: float
    iterations: int
    degenerate: bool = False

    @property
    def finite(self) -> bool:
        """True when both scores are finite numbers"""
        return math.isfinite(self.z_score) and math.isfinite(self.normalized_z_score)


def validate_degenerate_policy(on_degenerate: str) -> str:
    if on_degenerate not in DEGENERATE_POLICIES:
        raise InvalidArgument(
            f"on_degenerate must be one of {DEGENERATE_POLICIES}, got {on_degenerate!r}"
        )
    return on_degenerate


def _undefined_z(numerator: float) -> float:
    if numerator == 0:
        return math.nan
    return math.copysign(math.inf, numerator)


def run_permutation_test(
    query: LabelSet,
    reference: LabelSet,
    universe_size: int,
    iterations: int,
    rng: np.random.Generator,
    evaluation_function: Union[str, EvaluationFunction] = overlap_count,
    on_degenerate: str = "raise",
) -> PermutationOutcome:
    """
    Test association of a query set with a reference set

    Args:
        query: Labels being tested
        reference: Fixed comparison target
        universe_size: Labels are drawn from [1, universe_size]
        iterations: Number of null draws, at least 2
        rng: Generator for the null draws
        evaluation_function: Scalar comparator or its configured name
        on_degenerate: "raise" to raise DegenerateDistribution when the null
            distribution has zero spread, "flag" to return a non-finite
            outcome marked ``degenerate``

    Returns:
        PermutationOutcome for the query's actual size
    """
    universe_size = validate_positive_int(universe_size, "universe_size")
    iterations = validate_iterations(iterations)
    validate_degenerate_policy(on_degenerate)
    evaluate = get_evaluation_function(evaluation_function)

    sample_size = len(query)
    if sample_size == 0:
        raise InvalidArgument("query set is empty")
    validate_labels_in_universe(query, universe_size, "query labels")
    validate_labels_in_universe(reference, universe_size, "reference labels")

    observed = float(evaluate(query, reference))

    null_stats = np.fromiter(
        (
            evaluate(sample_labels(universe_size, sample_size, rng), reference)
            for _ in range(iterations)
        ),
        dtype=float,
        count=iterations,
    )
    # Zero spread is judged on the draws, not on the float sd
    if np.ptp(null_stats) == 0:
        null_mean = float(null_stats[0])
        null_sd = 0.0
        if on_degenerate == "raise":
            raise DegenerateDistribution(
                "null distribution has zero standard deviation",
                observed=observed,
                null_mean=null_mean,
                sample_size=sample_size,
                context={"iterations": iterations},
            )
        z_score = _undefined_z(observed - null_mean)
        logger.warning(
            f"Degenerate null distribution for sample size {sample_size} "
            f"(observed={observed}, mean={null_mean}); z-score is {z_score}"
        )
        return PermutationOutcome(
            sample_size=sample_size,
            z_score=z_score,
            normalized_z_score=z_score / math.sqrt(sample_size),
            observed=observed,
            null_mean=null_mean,
            null_sd=null_sd,
            iterations=iterations,
            degenerate=True,
        )

    null_mean = float(null_stats.mean())
    null_sd = float(null_stats.std(ddof=1))
    z_score = (observed - null_mean) / null_sd
    normalized_z_score = z_score / math.sqrt(sample_size)

    logger.debug(
        f"n={sample_size}: observed={observed:.3f}, null={null_mean:.3f}"
        f"+/-{null_sd:.3f}, ZS={z_score:.3f}, nZS={normalized_z_score:.4f}"
    )

    return PermutationOutcome(
        sample_size=sample_size,
        z_score=z_score,
        normalized_z_score=normalized_z_score,
        observed=observed,
        null_mean=null_mean,
        null_sd=null_sd,
        iterations=iterations,
    )
