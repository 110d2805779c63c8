"""
Evaluation functions comparing a query LabelSet with a reference LabelSet

An evaluation function is any callable taking ``(query, reference)`` and
returning a scalar. It must be deterministic, free of side effects, and
defined for empty or disjoint inputs. The permutation test only ever calls
it through this interface, so alternatives plug in without changing the
test itself.
"""

from typing import Callable, Dict, Union

import numpy as np

from ..errors import InvalidArgument
from .sampling import LabelSet

EvaluationFunction = Callable[[LabelSet, LabelSet], float]


def overlap_count(query: LabelSet, reference: LabelSet) -> int:
    """Number of labels present in both sets"""
    # frozenset intersection iterates over the smaller operand
    return len(query & reference)


def mean_nearest_distance(query: LabelSet, reference: LabelSet) -> float:
    """
    Mean distance from each query label to its nearest reference label

    Labels are treated as positions on a line. Returns 0.0 when either set
    is empty.
    """
    if not query or not reference:
        return 0.0

    ref = np.sort(np.fromiter(reference, dtype=np.int64, count=len(reference)))
    qry = np.fromiter(query, dtype=np.int64, count=len(query))

    idx = np.searchsorted(ref, qry)
    left = ref[np.clip(idx - 1, 0, len(ref) - 1)]
    right = ref[np.clip(idx, 0, len(ref) - 1)]
    nearest = np.minimum(np.abs(qry - left), np.abs(qry - right))

    return float(nearest.mean())


EVALUATION_FUNCTIONS: Dict[str, EvaluationFunction] = {
    "overlap": overlap_count,
    "mean_distance": mean_nearest_distance,
}


def get_evaluation_function(
    evaluation: Union[str, EvaluationFunction]
) -> EvaluationFunction:
    """
    Resolve an evaluation function by configured name or pass a callable through

    Args:
        evaluation: Name in ``EVALUATION_FUNCTIONS`` or a callable

    Returns:
        The evaluation callable
    """
    if callable(evaluation):
        return evaluation

    try:
        return EVALUATION_FUNCTIONS[evaluation]
    except (KeyError, TypeError):
        raise InvalidArgument(
            f"Unknown evaluation function {evaluation!r}; "
            f"expected one of {sorted(EVALUATION_FUNCTIONS)} or a callable"
        ) from None


def evaluation_function_name(evaluation: Union[str, EvaluationFunction]) -> str:
    """Stable name for an evaluation function, used in cache keys and logs"""
    if isinstance(evaluation, str):
        return evaluation
    for name, func in EVALUATION_FUNCTIONS.items():
        if func is evaluation:
            return name
    module = getattr(evaluation, "__module__", "")
    qualname = getattr(evaluation, "__qualname__", repr(evaluation))
    return f"{module}.{qualname}" if module else qualname
