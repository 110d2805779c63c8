"""
Replicated sweeps and their aggregation by sample size

Repeating the whole sweep with fresh sub-samples and fresh null draws shows
how stable ZS and nZS are at each sample size. Non-finite scores from
degenerate tests are kept and tagged; deciding whether to drop them from
summaries is left to the consumer.
"""

from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd
from joblib import Parallel, delayed
from tqdm import tqdm

from ..errors import AssocFlowError
from ..utils import get_logger
from ..utils.validation import (validate_fractions, validate_iterations,
                                validate_positive_int)
from .permtest import validate_degenerate_policy
from .sampling import LabelSet, SeedLike, spawn_generators
from .statistics import EvaluationFunction, overlap_count
from .sweep import DEFAULT_FRACTIONS, SweepTable, run_sweep

logger = get_logger(__name__)


@dataclass(frozen=True)
class ReplicateRecord:
    """Scores from one fraction of one replicate sweep"""

    replicate: int
    fraction: float
    sample_size: int
    z_score: float
    normalized_z_score: float
    finite: bool


class ReplicateCollection:
    """ZS and nZS values from all replicates, grouped by sample size"""

    def __init__(self):
        self._records: List[ReplicateRecord] = []
        self._replicates = set()
        self._finalized = False

    def add(self, replicate: int, table: SweepTable) -> None:
        """Add the rows of one replicate's sweep"""
        if self._finalized:
            raise RuntimeError("ReplicateCollection is finalized; cannot add results")
        if replicate in self._replicates:
            raise ValueError(f"Replicate {replicate} already added")

        self._replicates.add(replicate)
        for row in table:
            outcome = row.outcome
            self._records.append(
                ReplicateRecord(
                    replicate=replicate,
                    fraction=row.fraction,
                    sample_size=outcome.sample_size,
                    z_score=outcome.z_score,
                    normalized_z_score=outcome.normalized_z_score,
                    finite=outcome.finite,
                )
            )

    def finalize(self) -> "ReplicateCollection":
        self._finalized = True
        return self

    @property
    def finalized(self) -> bool:
        return self._finalized

    @property
    def records(self) -> Tuple[ReplicateRecord, ...]:
        return tuple(self._records)

    @property
    def replicate_count(self) -> int:
        return len(self._replicates)

    @property
    def sample_sizes(self) -> List[int]:
        return sorted({record.sample_size for record in self._records})

    def _group(self, attr: str, finite_only: bool = False) -> Dict[int, List[float]]:
        grouped = defaultdict(list)
        for record in self._records:
            if finite_only and not record.finite:
                continue
            grouped[record.sample_size].append(getattr(record, attr))
        return dict(sorted(grouped.items()))

    @property
    def z_scores(self) -> Dict[int, List[float]]:
        """All ZS values per sample size, non-finite included"""
        return self._group("z_score")

    @property
    def normalized_z_scores(self) -> Dict[int, List[float]]:
        """All nZS values per sample size, non-finite included"""
        return self._group("normalized_z_score")

    def finite_z_scores(self, sample_size: int) -> List[float]:
        return self._group("z_score", finite_only=True).get(sample_size, [])

    def finite_normalized_z_scores(self, sample_size: int) -> List[float]:
        return self._group("normalized_z_score", finite_only=True).get(
            sample_size, []
        )

    def non_finite_count(self) -> int:
        return sum(1 for r in self._records if not r.finite)

    def to_dataframe(self) -> pd.DataFrame:
        """Long table with one row per (replicate, fraction)"""
        columns = [
            "replicate",
            "fraction",
            "sample_size",
            "z_score",
            "normalized_z_score",
            "finite",
        ]
        return pd.DataFrame(
            [
                {col: getattr(record, col) for col in columns}
                for record in self._records
            ],
            columns=columns,
        )

    def __len__(self) -> int:
        return len(self._records)

    def __repr__(self) -> str:
        return (
            f"ReplicateCollection(replicates={self.replicate_count}, "
            f"records={len(self._records)}, finalized={self._finalized})"
        )


def _run_replicate(
    replicate: int,
    rng: np.random.Generator,
    query: LabelSet,
    reference: LabelSet,
    universe_size: int,
    fractions: Tuple[float, ...],
    iterations: int,
    evaluation_function: Union[str, EvaluationFunction],
    on_degenerate: str,
) -> SweepTable:
    try:
        return run_sweep(
            query,
            reference,
            universe_size,
            fractions=fractions,
            iterations=iterations,
            rng=rng,
            evaluation_function=evaluation_function,
            on_degenerate=on_degenerate,
        )
    except AssocFlowError as e:
        e.with_context(replicate=replicate)
        raise


def aggregate_replicates(
    query: LabelSet,
    reference: LabelSet,
    universe_size: int,
    fractions: Sequence[float] = DEFAULT_FRACTIONS,
    iterations: int = 1000,
    replicate_count: int = 10,
    seed: SeedLike = None,
    evaluation_function: Union[str, EvaluationFunction] = overlap_count,
    on_degenerate: str = "raise",
    n_jobs: Optional[int] = 1,
    show_progress: bool = False,
) -> ReplicateCollection:
    """
    Run independent sweeps and group their scores by sample size

    Each replicate gets its own generator spawned from ``seed``, so the
    collection is the same whatever ``n_jobs`` is. A failing replicate
    aborts the whole aggregation.

    Args:
        query: Full query set
        reference: Fixed comparison target
        universe_size: Labels are drawn from [1, universe_size]
        fractions: Ordered sub-sample fractions in (0, 1]
        iterations: Null draws per permutation test
        replicate_count: Number of independent sweeps
        seed: Seed, SeedSequence or Generator controlling all draws
        evaluation_function: Scalar comparator or its configured name
        on_degenerate: "raise" or "flag"
        n_jobs: joblib worker count (-1 for all cores)
        show_progress: Show a tqdm progress bar over replicates

    Returns:
        Finalized ReplicateCollection
    """
    schedule = validate_fractions(fractions)
    iterations = validate_iterations(iterations)
    replicate_count = validate_positive_int(replicate_count, "replicate_count")
    validate_degenerate_policy(on_degenerate)

    logger.info(
        f"Running {replicate_count} replicate sweeps "
        f"({len(schedule)} fractions, {iterations} permutations, n_jobs={n_jobs})"
    )

    generators = spawn_generators(seed, replicate_count)

    results = Parallel(n_jobs=n_jobs, return_as="generator")(
        delayed(_run_replicate)(
            replicate,
            rng,
            query,
            reference,
            universe_size,
            schedule,
            iterations,
            evaluation_function,
            on_degenerate,
        )
        for replicate, rng in enumerate(generators)
    )

    collection = ReplicateCollection()
    for replicate, table in enumerate(
        tqdm(
            results,
            total=replicate_count,
            desc="Replicates",
            disable=not show_progress,
        )
    ):
        collection.add(replicate, table)
    collection.finalize()

    non_finite = collection.non_finite_count()
    if non_finite:
        logger.warning(f"{non_finite} non-finite scores retained and tagged")

    logger.info(
        f"Aggregated {len(collection)} outcomes over "
        f"{len(collection.sample_sizes)} sample sizes"
    )
    return collection
