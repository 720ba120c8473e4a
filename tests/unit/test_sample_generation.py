"""
Tests for the labeled/unlabeled sample generator.
"""

import math

import numpy as np
import pytest

from ssvalidity.core import SimulationCondition
from ssvalidity.stats.data_generation import Sample, generate_sample
from ssvalidity.stats.descriptives import pearson_correlation
from ssvalidity.stats.random_normal import RandomNormal
from tests.config import SEED


def _replay(condition, seed):
    """Recompute the expected scores step by step from the same normal stream."""
    normal = RandomNormal(seed)
    xs, ys = [], []
    for _ in range(condition.nl + condition.nu):
        x1, x2 = normal.sample_pair()
        x3, x4 = normal.sample_pair()
        true_y = condition.pop_validity * x1 + math.sqrt(1 - condition.pop_validity**2) * x2
        raw_x = math.sqrt(condition.test_rel) * x1 + math.sqrt(1 - condition.test_rel) * x3
        obs_x = max(0, math.floor(raw_x * condition.test_sd + condition.test_mn + 0.5))
        raw_y = math.sqrt(condition.crit_rel) * true_y + math.sqrt(1 - condition.crit_rel) * x4
        xs.append(obs_x)
        ys.append(math.trunc(20 * raw_y + 50))
    return xs, ys


class TestGenerateSample:
    """Test generate_sample structure and exact scoring rules."""

    def test_sizes_and_labels(self, reference_condition):
        sample = generate_sample(reference_condition, RandomNormal(SEED))
        assert len(sample) == 300
        assert sample.n_labeled == 100
        assert sample.labeled[:100].all()
        assert not sample.labeled[100:].any()

    def test_integer_scores_and_num_items(self, reference_condition):
        sample = generate_sample(reference_condition, rng=SEED)
        assert np.issubdtype(sample.obs_x.dtype, np.integer)
        assert np.issubdtype(sample.obs_y.dtype, np.integer)
        assert sample.obs_x.min() >= 0
        assert sample.num_items == sample.obs_x.max()

    def test_matches_step_by_step_computation(self):
        condition = SimulationCondition(pop_validity=0.5, nl=40, nu=60, crit_rel=0.7, test_rel=0.8, test_mn=20.1, test_sd=3.0, nmatch=5)
        sample = generate_sample(condition, RandomNormal(11))
        xs, ys = _replay(condition, 11)
        assert sample.obs_x.tolist() == xs
        assert sample.obs_y.tolist() == ys

    def test_predictor_clamped_at_zero(self):
        # mean far below zero: nearly every raw score is negative
        condition = SimulationCondition(pop_validity=0.3, nl=20, nu=0, test_mn=-50.0, test_sd=3.0, nmatch=5)
        sample = generate_sample(condition, RandomNormal(SEED))
        assert (sample.obs_x == 0).all()
        assert sample.num_items == 0

    def test_no_attenuation_perfect_up_to_integer_error(self):
        condition = SimulationCondition(pop_validity=1.0, nl=500, nu=0, crit_rel=1.0, test_rel=1.0, test_mn=20.0, test_sd=3.0, nmatch=5)
        sample = generate_sample(condition, RandomNormal(SEED))

        z_from_x = (sample.obs_x - condition.test_mn) / condition.test_sd
        z_from_y = (sample.obs_y - 50) / 20
        unclamped = sample.obs_x > 0
        # rounding moves x by <= 0.5 points, truncation moves y by < 1 point
        bound = 0.5 / condition.test_sd + 1 / 20 + 1e-9
        assert np.all(np.abs(z_from_x - z_from_y)[unclamped] <= bound)
        assert pearson_correlation(sample.obs_x, sample.obs_y) > 0.98

    def test_invalid_validity_raises(self):
        condition = SimulationCondition(pop_validity=1.5, nl=10, nu=0, nmatch=2)
        with pytest.raises(ValueError):
            generate_sample(condition, RandomNormal(SEED))

    def test_invalid_reliability_raises(self):
        condition = SimulationCondition(pop_validity=0.3, nl=10, nu=0, test_rel=1.2, nmatch=2)
        with pytest.raises(ValueError):
            generate_sample(condition, RandomNormal(SEED))

    def test_all_labeled_when_no_unlabeled(self):
        condition = SimulationCondition(pop_validity=0.3, nl=25, nu=0, nmatch=5)
        sample = generate_sample(condition, RandomNormal(SEED))
        assert sample.labeled.all()

    def test_reproducible(self, reference_condition):
        a = generate_sample(reference_condition, rng=7)
        b = generate_sample(reference_condition, rng=7)
        np.testing.assert_array_equal(a.obs_x, b.obs_x)
        np.testing.assert_array_equal(a.obs_y, b.obs_y)


class TestSample:
    def test_ids_and_counts(self):
        sample = Sample(
            obs_x=np.array([3, 5, 4]),
            obs_y=np.array([40, 55, 61]),
            labeled=np.array([True, True, False]),
            num_items=5,
        )
        assert sample.ids.tolist() == [1, 2, 3]
        assert sample.n_labeled == 2
        assert len(sample) == 3

    def test_empty_condition(self):
        condition = SimulationCondition(pop_validity=0.3, nl=0, nu=0, nmatch=1)
        sample = generate_sample(condition, RandomNormal(SEED))
        assert len(sample) == 0
        assert sample.num_items == 0
