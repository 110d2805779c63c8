"""
Core AssocFlow analysis orchestrator
"""

from pathlib import Path
from typing import Any, Dict, Optional, Union

import pandas as pd

from .config import Config, load_config, validate_config
from .permutation import (PermutationOutcome, ReplicateCollection, ResultCache,
                          SweepTable, aggregate_replicates, make_cache_params,
                          make_label_set, make_rng, run_permutation_test,
                          run_sweep, summarize_replicates)
from .permutation.sampling import LabelSet, SeedLike
from .permutation.statistics import evaluation_function_name
from .utils import get_logger, save_table, setup_logging, timed

logger = get_logger(__name__)


class AssocFlowAnalysis:
    """
    Orchestrator for permutation-based association analyses

    Binds a configuration to the permutation engine, runs comparisons of
    query/reference label sets, memoizes seeded results when caching is
    enabled, and writes result tables.
    """

    def __init__(
        self,
        config: Union[str, Path, Config, Dict[str, Any]],
        log_level: Optional[str] = "INFO",
        log_file: Optional[Union[str, Path]] = None,
    ):
        """
        Initialize AssocFlow analysis

        Args:
            config: Configuration file path, Config object, or config dict
            log_level: Logging level (DEBUG, INFO, WARNING, ERROR); None
                leaves logging configuration to the caller
            log_file: Log file path, overriding ``config.log_file``
        """
        if isinstance(config, (str, Path)):
            self.config = load_config(config)
        elif isinstance(config, dict):
            self.config = Config(**config)
        elif isinstance(config, Config):
            self.config = config
        else:
            raise ValueError(
                "Invalid config type. Expected str, Path, dict, or Config object"
            )

        if log_level is not None:
            setup_logging(
                level=log_level,
                log_file=log_file or self.config.log_file,
                use_colors=self.config.log_colors,
            )

        issues = validate_config(self.config)
        if issues:
            for issue in issues:
                logger.error(f"  - {issue}")
            raise ValueError(f"Invalid configuration: {'; '.join(issues)}")

        self.params = self.config.permutation
        self.cache = self._init_cache()

        self.results: Dict[str, ReplicateCollection] = {}
        self.execution_times: Dict[str, float] = {}

        logger.info(f"AssocFlow analysis '{self.config.project_name}' initialized")

    def _init_cache(self) -> Optional[ResultCache]:
        if not self.config.cache.get("enabled"):
            return None

        cache_dir = self.config.cache.get("cache_dir") or (
            Path(self.config.output_dir) / "cache"
        )
        logger.info(f"Result caching enabled in {cache_dir}")
        return ResultCache(cache_dir)

    @property
    def universe_size(self) -> int:
        return self.params["universe_size"]

    def _prepare(self, labels) -> LabelSet:
        if isinstance(labels, frozenset):
            return labels
        return make_label_set(labels, universe_size=self.universe_size)

    def run_test(
        self, query, reference, seed: SeedLike = None
    ) -> PermutationOutcome:
        """Single permutation test of the full query"""
        rng = make_rng(self.config.random_seed if seed is None else seed)
        return run_permutation_test(
            self._prepare(query),
            self._prepare(reference),
            self.universe_size,
            self.params["iterations"],
            rng,
            evaluation_function=self.params["evaluation_function"],
            on_degenerate=self.params["on_degenerate"],
        )

    def run_sweep(self, query, reference, seed: SeedLike = None) -> SweepTable:
        """One sweep over the configured fraction schedule"""
        rng = make_rng(self.config.random_seed if seed is None else seed)
        return run_sweep(
            self._prepare(query),
            self._prepare(reference),
            self.universe_size,
            fractions=self.params["fractions"],
            iterations=self.params["iterations"],
            rng=rng,
            evaluation_function=self.params["evaluation_function"],
            on_degenerate=self.params["on_degenerate"],
        )

    def run_comparison(
        self, name: str, query, reference
    ) -> ReplicateCollection:
        """
        Run replicated sweeps for one query/reference comparison

        Args:
            name: Comparison name used for result keys and file names
            query: Query labels (LabelSet or iterable of ints)
            reference: Reference labels (LabelSet or iterable of ints)

        Returns:
            Finalized ReplicateCollection
        """
        query = self._prepare(query)
        reference = self._prepare(reference)
        seed = self.config.random_seed

        logger.info(
            f"Comparison {name}: query={len(query)}, reference={len(reference)}, "
            f"universe={self.universe_size}"
        )

        cache_params = None
        if self.cache is not None and seed is not None:
            cache_params = make_cache_params(
                query,
                reference,
                self.universe_size,
                self.params["fractions"],
                self.params["iterations"],
                self.params["replicate_count"],
                evaluation_function_name(self.params["evaluation_function"]),
                seed,
                self.params["on_degenerate"],
            )
            cached = self.cache.load_result(name, cache_params)
            if cached is not None:
                logger.info(f"Using cached results for {name}")
                self.results[name] = cached
                return cached

        with timed(f"Comparison {name}", logger) as watch:
            collection = aggregate_replicates(
                query,
                reference,
                self.universe_size,
                fractions=self.params["fractions"],
                iterations=self.params["iterations"],
                replicate_count=self.params["replicate_count"],
                seed=seed,
                evaluation_function=self.params["evaluation_function"],
                on_degenerate=self.params["on_degenerate"],
                n_jobs=self.config.n_threads,
                show_progress=self.params.get("show_progress", False),
            )
        self.execution_times[name] = watch.elapsed

        if cache_params is not None:
            self.cache.save_result(name, collection, cache_params)

        self.results[name] = collection
        return collection

    def summarize(self, name: str) -> pd.DataFrame:
        """Per-sample-size summary of a finished comparison"""
        if name not in self.results:
            raise KeyError(f"No results for comparison: {name}")
        return summarize_replicates(self.results[name])

    def save_results(
        self, name: str, output_dir: Optional[Union[str, Path]] = None
    ) -> Dict[str, Path]:
        """Write replicate and summary tables for a comparison"""
        output_dir = output_dir or self.config.output_dir
        if output_dir is None:
            raise ValueError("No output directory configured")

        output_path = Path(output_dir)
        collection = self.results[name]

        return {
            "replicates": save_table(
                collection.to_dataframe(), output_path / f"{name}_replicates.csv"
            ),
            "summary": save_table(
                self.summarize(name), output_path / f"{name}_summary.csv"
            ),
        }
