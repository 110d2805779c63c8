"""
Permutation engine for AssocFlow

This module provides:
- Uniform label subset sampling with explicit random generators
- Pluggable evaluation functions (overlap count, nearest distance)
- Permutation tests yielding z-scores (ZS) and normalized z-scores (nZS)
- Sweeps over query sub-sample fractions
- Replicated sweeps grouped by sample size
"""

from .caching import ResultCache, make_cache_params
from .permtest import PermutationOutcome, run_permutation_test
from .replicates import ReplicateCollection, ReplicateRecord, aggregate_replicates
from .reporting import substitute_nonsignificant, summarize_replicates
from .sampling import (LabelSet, make_label_set, make_rng, sample_labels,
                       spawn_generators, subsample)
from .statistics import (EVALUATION_FUNCTIONS, get_evaluation_function,
                         mean_nearest_distance, overlap_count)
from .sweep import DEFAULT_FRACTIONS, SweepRow, SweepTable, run_sweep
from .synthetic import designed_overlap_query, random_label_set

__all__ = [
    "LabelSet",
    "make_label_set",
    "make_rng",
    "spawn_generators",
    "sample_labels",
    "subsample",
    "overlap_count",
    "mean_nearest_distance",
    "get_evaluation_function",
    "EVALUATION_FUNCTIONS",
    "PermutationOutcome",
    "run_permutation_test",
    "DEFAULT_FRACTIONS",
    "SweepRow",
    "SweepTable",
    "run_sweep",
    "ReplicateCollection",
    "ReplicateRecord",
    "aggregate_replicates",
    "random_label_set",
    "designed_overlap_query",
    "summarize_replicates",
    "substitute_nonsignificant",
    "ResultCache",
    "make_cache_params",
]
