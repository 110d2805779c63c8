"""Tests for the permutation test."""

import itertools
import math
import pickle

import numpy as np
import pytest

from assocflow.errors import (DegenerateDistribution, InvalidArgument,
                              SamplerExhaustion)
from assocflow.permutation.permtest import (PermutationOutcome,
                                            run_permutation_test)
from assocflow.permutation.statistics import mean_nearest_distance


class TestPermutationOutcome:
    """Test the outcome record."""

    def test_identities(self, rng, small_reference):
        query = frozenset(range(150, 260))
        outcome = run_permutation_test(query, small_reference, 2000, 200, rng)

        assert isinstance(outcome, PermutationOutcome)
        assert outcome.sample_size == len(query)
        assert outcome.iterations == 200
        assert outcome.observed == 51
        assert not outcome.degenerate
        assert outcome.finite
        assert math.isclose(
            outcome.normalized_z_score,
            outcome.z_score / math.sqrt(outcome.sample_size),
        )
        assert math.isclose(
            outcome.z_score,
            (outcome.observed - outcome.null_mean) / outcome.null_sd,
        )

    def test_outcome_is_immutable(self, rng, small_reference):
        outcome = run_permutation_test(
            frozenset(range(1, 11)), small_reference, 1000, 10, rng
        )
        with pytest.raises(AttributeError):
            outcome.z_score = 0.0

    def test_observed_equal_to_null_mean_gives_zero(self):
        calls = itertools.count()

        # observed is evaluated first; null values alternate 0, 2
        def alternating(query, reference):
            i = next(calls)
            if i == 0:
                return 1.0
            return 0.0 if i % 2 else 2.0

        outcome = run_permutation_test(
            frozenset({1, 2}),
            frozenset({3}),
            10,
            4,
            np.random.default_rng(0),
            evaluation_function=alternating,
        )
        assert outcome.null_mean == 1.0
        assert outcome.null_sd > 0
        assert outcome.z_score == 0.0
        assert outcome.normalized_z_score == 0.0

    def test_deterministic_with_seed(self, small_reference):
        query = frozenset(range(100, 180))
        first = run_permutation_test(
            query, small_reference, 5000, 300, np.random.default_rng(99)
        )
        second = run_permutation_test(
            query, small_reference, 5000, 300, np.random.default_rng(99)
        )
        assert (first.z_score, first.normalized_z_score) == (
            second.z_score,
            second.normalized_z_score,
        )

    def test_evaluation_function_by_name(self, rng, small_reference):
        outcome = run_permutation_test(
            frozenset(range(50, 90)),
            small_reference,
            5000,
            50,
            rng,
            evaluation_function="mean_distance",
        )
        assert outcome.observed == mean_nearest_distance(
            frozenset(range(50, 90)), small_reference
        )
        # query inside the reference sits closer than random labels
        assert outcome.z_score < 0


class TestPermutationValidation:
    """Test argument validation."""

    @pytest.mark.parametrize("iterations", [0, 1, -5])
    def test_too_few_iterations(self, rng, small_reference, iterations):
        with pytest.raises(InvalidArgument, match="iterations"):
            run_permutation_test(
                frozenset({1}), small_reference, 1000, iterations, rng
            )

    def test_non_positive_universe(self, rng):
        with pytest.raises(InvalidArgument):
            run_permutation_test(frozenset({1}), frozenset({1}), 0, 10, rng)

    def test_empty_query(self, rng, small_reference):
        with pytest.raises(InvalidArgument, match="empty"):
            run_permutation_test(frozenset(), small_reference, 1000, 10, rng)

    def test_query_outside_universe(self, rng, small_reference):
        with pytest.raises(InvalidArgument):
            run_permutation_test(frozenset({5000}), small_reference, 1000, 10, rng)

    def test_reference_outside_universe(self, rng):
        with pytest.raises(InvalidArgument):
            run_permutation_test(frozenset({1}), frozenset({0}), 1000, 10, rng)

    def test_unknown_degenerate_policy(self, rng, small_reference):
        with pytest.raises(InvalidArgument):
            run_permutation_test(
                frozenset({1}), small_reference, 1000, 10, rng, on_degenerate="zero"
            )


class TestDegenerateDistribution:
    """Test the zero-spread null distribution."""

    def test_full_universe_query_raises(self, rng):
        universe_size = 50
        query = frozenset(range(1, universe_size + 1))
        reference = frozenset(range(1, 11))

        with pytest.raises(DegenerateDistribution) as excinfo:
            run_permutation_test(query, reference, universe_size, 20, rng)

        error = excinfo.value
        assert error.observed == 10
        assert error.null_mean == 10
        assert error.sample_size == universe_size

    def test_flag_returns_nan_for_zero_numerator(self, rng):
        query = frozenset(range(1, 51))
        outcome = run_permutation_test(
            query, frozenset(range(1, 11)), 50, 20, rng, on_degenerate="flag"
        )
        assert outcome.degenerate
        assert not outcome.finite
        assert math.isnan(outcome.z_score)
        assert math.isnan(outcome.normalized_z_score)

    def test_flag_returns_signed_infinity(self, rng):
        query = frozenset({1, 2, 3, 4, 5})

        def only_query_scores(q, r):
            return 1.0 if q == query else 0.0

        outcome = run_permutation_test(
            query,
            frozenset({1}),
            100,
            10,
            rng,
            evaluation_function=only_query_scores,
            on_degenerate="flag",
        )
        assert outcome.degenerate
        assert outcome.z_score == math.inf
        assert outcome.normalized_z_score == math.inf

    @pytest.mark.parametrize("iterations", [3, 7, 100, 1000])
    def test_constant_float_statistic_raises(self, rng, iterations):
        with pytest.raises(DegenerateDistribution) as excinfo:
            run_permutation_test(
                frozenset({1, 2}),
                frozenset({3}),
                100,
                iterations,
                rng,
                evaluation_function=lambda q, r: 0.1,
            )
        assert excinfo.value.null_mean == 0.1

    def test_constant_float_statistic_flagged(self, rng):
        outcome = run_permutation_test(
            frozenset({1, 2}),
            frozenset({3}),
            100,
            1000,
            rng,
            evaluation_function=lambda q, r: 0.1,
            on_degenerate="flag",
        )
        assert outcome.degenerate
        assert outcome.null_sd == 0.0
        assert math.isnan(outcome.z_score)

    def test_query_larger_than_universe(self, rng):
        with pytest.raises(InvalidArgument):
            run_permutation_test(frozenset(range(1, 12)), frozenset({1}), 10, 5, rng)

    def test_error_survives_pickling(self):
        error = DegenerateDistribution(
            "zero spread", observed=3.0, null_mean=3.0, sample_size=7
        ).with_context(fraction=0.5)

        restored = pickle.loads(pickle.dumps(error))

        assert type(restored) is DegenerateDistribution
        assert restored.sample_size == 7
        assert restored.context == {"fraction": 0.5}
        assert str(restored) == str(error)

    def test_sampler_exhaustion_pickles(self):
        restored = pickle.loads(pickle.dumps(SamplerExhaustion("too many")))
        assert isinstance(restored, InvalidArgument)
        assert str(restored) == "too many"
