"""
Permutation tests across a schedule of query sub-sample fractions
"""

from dataclasses import dataclass
from typing import Iterator, Sequence, Tuple, Union

import numpy as np
import pandas as pd

from ..errors import AssocFlowError, InvalidArgument
from ..utils import get_logger
from ..utils.validation import validate_fractions
from .permtest import PermutationOutcome, run_permutation_test
from .sampling import LabelSet, subsample
from .statistics import EvaluationFunction, overlap_count

logger = get_logger(__name__)

DEFAULT_FRACTIONS: Tuple[float, ...] = tuple(round(0.1 * i, 1) for i in range(1, 11))


@dataclass(frozen=True)
class SweepRow:
    """One fraction of a sweep and the outcome of its permutation test"""

    fraction: float
    outcome: PermutationOutcome


@dataclass(frozen=True)
class SweepTable:
    """Outcomes of one sweep, in the order the fractions were given"""

    rows: Tuple[SweepRow, ...]

    def __iter__(self) -> Iterator[SweepRow]:
        return iter(self.rows)

    def __len__(self) -> int:
        return len(self.rows)

    def __getitem__(self, index: int) -> SweepRow:
        return self.rows[index]

    @property
    def outcomes(self) -> Tuple[PermutationOutcome, ...]:
        return tuple(row.outcome for row in self.rows)

    def to_dataframe(self) -> pd.DataFrame:
        """Table of fraction, sample_size, z_score, normalized_z_score, degenerate"""
        return pd.DataFrame(
            [
                {
                    "fraction": row.fraction,
                    "sample_size": row.outcome.sample_size,
                    "z_score": row.outcome.z_score,
                    "normalized_z_score": row.outcome.normalized_z_score,
                    "degenerate": row.outcome.degenerate,
                }
                for row in self.rows
            ],
            columns=[
                "fraction",
                "sample_size",
                "z_score",
                "normalized_z_score",
                "degenerate",
            ],
        )


def subsample_size(fraction: float, query_size: int) -> int:
    """Rounded sub-sample size for a fraction (round half to even)"""
    return int(round(fraction * query_size))


def run_sweep(
    query: LabelSet,
    reference: LabelSet,
    universe_size: int,
    fractions: Sequence[float] = DEFAULT_FRACTIONS,
    iterations: int = 1000,
    rng: np.random.Generator = None,
    evaluation_function: Union[str, EvaluationFunction] = overlap_count,
    on_degenerate: str = "raise",
) -> SweepTable:
    """
    Run a permutation test for each sub-sample fraction of the query

    Each fraction draws a fresh sub-sample of the full query, so sub-samples
    are not nested. The first failure aborts the sweep and is re-raised with
    the fraction and sample size that triggered it.

    Args:
        query: Full query set
        reference: Fixed comparison target
        universe_size: Labels are drawn from [1, universe_size]
        fractions: Ordered fractions in (0, 1]
        iterations: Null draws per permutation test
        rng: Generator shared by sub-sampling and null draws
        evaluation_function: Scalar comparator or its configured name
        on_degenerate: Passed to the permutation test

    Returns:
        SweepTable with one row per fraction
    """
    schedule = validate_fractions(fractions)
    if rng is None:
        raise InvalidArgument("run_sweep requires an explicit random generator")

    rows = []
    for fraction in schedule:
        size = subsample_size(fraction, len(query))
        try:
            sub_query = subsample(query, size, rng)
            outcome = run_permutation_test(
                sub_query,
                reference,
                universe_size,
                iterations,
                rng,
                evaluation_function=evaluation_function,
                on_degenerate=on_degenerate,
            )
        except AssocFlowError as e:
            logger.error(f"Sweep aborted at fraction {fraction} (n={size}): {e}")
            e.with_context(fraction=fraction, sample_size=size)
            raise

        rows.append(SweepRow(fraction=fraction, outcome=outcome))

    logger.info(
        f"Sweep finished: {len(rows)} fractions, query size {len(query)}, "
        f"{iterations} permutations each"
    )
    return SweepTable(rows=tuple(rows))
