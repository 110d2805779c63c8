"""Tests for replicate aggregation."""

import math

import numpy as np
import pytest

from assocflow.errors import DegenerateDistribution, InvalidArgument
from assocflow.permutation.permtest import PermutationOutcome
from assocflow.permutation.replicates import (ReplicateCollection,
                                              aggregate_replicates)
from assocflow.permutation.sweep import SweepRow, SweepTable


def _outcome(sample_size, z_score, degenerate=False):
    return PermutationOutcome(
        sample_size=sample_size,
        z_score=z_score,
        normalized_z_score=z_score / math.sqrt(sample_size),
        observed=0.0,
        null_mean=0.0,
        null_sd=0.0 if degenerate else 1.0,
        iterations=10,
        degenerate=degenerate,
    )


def _table(*rows):
    return SweepTable(rows=tuple(SweepRow(f, o) for f, o in rows))


class TestReplicateCollection:
    """Test grouping and tagging."""

    def test_groups_by_sample_size(self):
        collection = ReplicateCollection()
        collection.add(0, _table((0.5, _outcome(4, 1.0)), (1.0, _outcome(9, 3.0))))
        collection.add(1, _table((0.5, _outcome(4, 2.0)), (1.0, _outcome(9, 6.0))))
        collection.finalize()

        assert collection.replicate_count == 2
        assert collection.sample_sizes == [4, 9]
        assert collection.z_scores == {4: [1.0, 2.0], 9: [3.0, 6.0]}
        assert collection.normalized_z_scores == {4: [0.5, 1.0], 9: [1.0, 2.0]}

    def test_non_finite_retained_and_tagged(self):
        collection = ReplicateCollection()
        collection.add(0, _table((1.0, _outcome(4, 2.0))))
        collection.add(1, _table((1.0, _outcome(4, math.inf, degenerate=True))))
        collection.add(2, _table((1.0, _outcome(4, math.nan, degenerate=True))))

        assert len(collection.z_scores[4]) == 3
        assert collection.finite_z_scores(4) == [2.0]
        assert collection.finite_normalized_z_scores(4) == [1.0]
        assert collection.non_finite_count() == 2

        df = collection.to_dataframe()
        assert df["finite"].tolist() == [True, False, False]

    def test_finalized_is_read_only(self):
        collection = ReplicateCollection().finalize()
        with pytest.raises(RuntimeError):
            collection.add(0, _table((1.0, _outcome(4, 1.0))))

    def test_duplicate_replicate_rejected(self):
        collection = ReplicateCollection()
        collection.add(0, _table((1.0, _outcome(4, 1.0))))
        with pytest.raises(ValueError):
            collection.add(0, _table((1.0, _outcome(4, 1.0))))

    def test_missing_size_has_no_finite_values(self):
        assert ReplicateCollection().finite_z_scores(10) == []


class TestAggregateReplicates:
    """Test running replicated sweeps."""

    @pytest.fixture
    def inputs(self):
        reference = frozenset(range(1, 301))
        query = frozenset(range(201, 241)) | frozenset(range(1001, 1041))
        return query, reference

    def test_count_per_sample_size(self, inputs):
        query, reference = inputs
        collection = aggregate_replicates(
            query, reference, 5000, fractions=[0.25, 0.5, 1.0],
            iterations=20, replicate_count=4, seed=1,
        )
        assert collection.finalized
        assert collection.sample_sizes == [20, 40, 80]
        for size in collection.sample_sizes:
            assert len(collection.z_scores[size]) == 4
            assert len(collection.normalized_z_scores[size]) == 4

    def test_seeded_runs_match(self, inputs):
        query, reference = inputs
        kwargs = dict(fractions=[0.5, 1.0], iterations=20, replicate_count=3, seed=8)
        first = aggregate_replicates(query, reference, 5000, **kwargs)
        second = aggregate_replicates(query, reference, 5000, **kwargs)
        assert first.records == second.records

    def test_replicates_are_independent(self, inputs):
        query, reference = inputs
        collection = aggregate_replicates(
            query, reference, 5000, fractions=[0.5], iterations=30,
            replicate_count=5, seed=2,
        )
        assert len(set(collection.z_scores[40])) > 1

    def test_parallel_matches_sequential(self, inputs):
        query, reference = inputs
        kwargs = dict(fractions=[0.5, 1.0], iterations=20, replicate_count=3, seed=5)
        sequential = aggregate_replicates(query, reference, 5000, n_jobs=1, **kwargs)
        parallel = aggregate_replicates(query, reference, 5000, n_jobs=2, **kwargs)
        assert sequential.records == parallel.records

    def test_progress_counts_finished_replicates(self, inputs, capsys):
        query, reference = inputs
        collection = aggregate_replicates(
            query, reference, 5000, fractions=[1.0], iterations=20,
            replicate_count=3, seed=5, n_jobs=2, show_progress=True,
        )

        assert [r.replicate for r in collection.records] == [0, 1, 2]
        err = capsys.readouterr().err
        assert "Replicates" in err
        assert "3/3" in err

    def test_failing_replicate_aborts(self):
        universe_size = 30
        query = frozenset(range(1, universe_size + 1))

        with pytest.raises(DegenerateDistribution) as excinfo:
            aggregate_replicates(
                query, frozenset({1, 2, 3}), universe_size, fractions=[1.0],
                iterations=10, replicate_count=3, seed=0,
            )

        assert excinfo.value.context["replicate"] == 0
        assert excinfo.value.context["fraction"] == 1.0

    def test_flagged_degenerate_retained(self):
        universe_size = 30
        query = frozenset(range(1, universe_size + 1))
        collection = aggregate_replicates(
            query, frozenset({1, 2, 3}), universe_size, fractions=[0.5, 1.0],
            iterations=30, replicate_count=3, seed=0, on_degenerate="flag",
        )
        assert len(collection.z_scores[30]) == 3
        assert collection.finite_z_scores(30) == []
        assert len(collection.finite_z_scores(15)) == 3

    @pytest.mark.parametrize("replicate_count", [0, -1])
    def test_invalid_replicate_count(self, inputs, replicate_count):
        query, reference = inputs
        with pytest.raises(InvalidArgument):
            aggregate_replicates(query, reference, 5000, iterations=10,
                                 replicate_count=replicate_count)

    def test_generator_seed(self, inputs):
        query, reference = inputs
        collection = aggregate_replicates(
            query, reference, 5000, fractions=[1.0], iterations=10,
            replicate_count=2, seed=np.random.default_rng(3),
        )
        assert collection.replicate_count == 2
