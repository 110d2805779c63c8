"""
Summary tables for replicate collections

These helpers sit on the consumer side of the engine: they turn a
ReplicateCollection into per-sample-size summaries and apply the
significance substitution that plots of nZS usually want. The engine itself
never substitutes values.
"""

import logging

import numpy as np
import pandas as pd
from scipy.stats import variation

from .replicates import ReplicateCollection

logger = logging.getLogger(__name__)


def _describe(values) -> dict:
    arr = np.asarray(values, dtype=float)
    n = arr.size
    if n == 0:
        return {"mean": np.nan, "sd": np.nan, "var": np.nan, "cv": np.nan}

    mean = float(arr.mean())
    if n < 2:
        return {"mean": mean, "sd": np.nan, "var": np.nan, "cv": np.nan}

    var = float(arr.var(ddof=1))
    with np.errstate(divide="ignore", invalid="ignore"):
        cv = float(variation(arr, ddof=1))
    return {"mean": mean, "sd": float(np.sqrt(var)), "var": var, "cv": cv}


def summarize_replicates(collection: ReplicateCollection) -> pd.DataFrame:
    """
    Per-sample-size summary of ZS and nZS over finite values

    Args:
        collection: Aggregated replicate results

    Returns:
        DataFrame with one row per sample size: n, n_finite and mean, sd,
        variance and coefficient of variation for both scores
    """
    all_z = collection.z_scores
    rows = []

    for sample_size in collection.sample_sizes:
        z_stats = _describe(collection.finite_z_scores(sample_size))
        nz_stats = _describe(collection.finite_normalized_z_scores(sample_size))

        row = {
            "sample_size": sample_size,
            "n": len(all_z[sample_size]),
            "n_finite": len(collection.finite_z_scores(sample_size)),
        }
        row.update({f"z_{k}": v for k, v in z_stats.items()})
        row.update({f"nz_{k}": v for k, v in nz_stats.items()})
        rows.append(row)

    summary = pd.DataFrame(rows)
    excluded = int((summary["n"] - summary["n_finite"]).sum()) if rows else 0
    if excluded:
        logger.info(f"Excluded {excluded} non-finite values from summary statistics")

    return summary


def substitute_nonsignificant(
    df: pd.DataFrame,
    threshold: float,
    value: float = 0.0,
    z_column: str = "z_score",
    nz_column: str = "normalized_z_score",
) -> pd.DataFrame:
    """
    Replace nZS where ZS is not significant or not finite

    Args:
        df: Table with ZS and nZS columns (SweepTable or ReplicateCollection view)
        threshold: Minimum absolute ZS considered significant
        value: Replacement for nZS
        z_column: Name of the ZS column
        nz_column: Name of the nZS column

    Returns:
        Copy of ``df`` with substituted nZS values
    """
    result = df.copy()
    z = result[z_column].astype(float)
    mask = ~np.isfinite(z) | (z.abs() < threshold)
    result.loc[mask, nz_column] = value

    logger.debug(f"Substituted {int(mask.sum())} of {len(result)} nZS values")
    return result
