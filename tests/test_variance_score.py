"""Tests for the variance-aware (z-score, Huber) distance."""

import math

import numpy as np
import pytest

from biokey.errors import LengthMismatch, NonFiniteInput
from biokey.variance_score import huber_loss, variance_aware_distance


class TestHuberLoss:
    def test_quadratic_inside_delta(self):
        assert huber_loss(2.0, delta=2.5) == pytest.approx(2.0)

    def test_linear_outside_delta(self):
        # 2.5 * (4.0 - 1.25)
        assert huber_loss(4.0, delta=2.5) == pytest.approx(6.875)

    def test_continuous_at_delta(self):
        assert huber_loss(2.5, delta=2.5) == pytest.approx(0.5 * 2.5 * 2.5)

    def test_symmetric(self):
        assert huber_loss(-3.7) == huber_loss(3.7)

    def test_default_delta_from_config(self, monkeypatch):
        from biokey import config

        monkeypatch.setattr(config, "HUBER_DELTA", 1.0)
        assert huber_loss(3.0) == pytest.approx(2.5)

    def test_vectorized_matches_scalar(self):
        """Array input goes through the same formula as scalar input."""
        values = np.array([-7.0, -2.5, -0.3, 0.0, 1.2, 2.5, 2.6, 10.0])
        vectorized = huber_loss(values, delta=2.5)
        assert isinstance(vectorized, np.ndarray)
        for value, loss in zip(values, vectorized):
            assert loss == huber_loss(float(value), delta=2.5)

    def test_scalar_returns_float(self):
        assert type(huber_loss(1.0)) is float


class TestVarianceAwareDistance:
    """Scores deviations relative to each feature's enrolled spread."""

    def test_attempt_equal_to_mean_is_zero(self):
        mean = [120.0, 80.0, 95.0]
        assert variance_aware_distance(mean, mean, [20.0, 20.0, 20.0], [5, 5, 5]) == 0.0

    def test_single_feature_value(self):
        # z = 30 / 30 = 1.0 -> loss 0.5 -> sqrt(0.5)
        result = variance_aware_distance([130.0], [100.0], [30.0], [10])
        assert result == pytest.approx(math.sqrt(0.5))

    def test_std_floored(self):
        """A zero std is floored to MIN_FEATURE_STD (15 ms)."""
        # z = 15 / 15 = 1.0
        result = variance_aware_distance([115.0], [100.0], [0.0], [3])
        assert result == pytest.approx(math.sqrt(0.5))

    def test_z_clamped(self):
        """Huge deviations saturate at MAX_Z."""
        ceiling = math.sqrt(huber_loss(5.0))
        result = variance_aware_distance([10_000.0], [100.0], [20.0], [10])
        assert result == pytest.approx(ceiling)

    def test_bounded_above(self):
        rng = np.random.default_rng(7)
        attempt = rng.uniform(0.0, 5000.0, size=30)
        mean = rng.uniform(50.0, 300.0, size=30)
        std = rng.uniform(0.0, 60.0, size=30)
        counts = rng.integers(1, 50, size=30)

        result = variance_aware_distance(attempt, mean, std, counts)

        assert 0.0 <= result <= math.sqrt(huber_loss(5.0)) + 1e-12

    def test_tight_feature_weighs_more(self):
        """Same absolute deviation costs more on a low-variance feature."""
        attempt = [160.0, 100.0]
        mean = [100.0, 100.0]
        counts = [10, 10]
        on_tight = variance_aware_distance(attempt, mean, [20.0, 60.0], counts)
        on_loose = variance_aware_distance(attempt, mean, [60.0, 20.0], counts)
        assert on_tight > on_loose

    def test_grows_with_deviation(self):
        mean, std, counts = [100.0] * 4, [20.0] * 4, [8] * 4
        near = variance_aware_distance([110.0] * 4, mean, std, counts)
        far = variance_aware_distance([150.0] * 4, mean, std, counts)
        assert far > near

    def test_explicit_length(self):
        result = variance_aware_distance([130.0, 9999.0], [100.0, 0.0], [30.0, 1.0], [10, 10], length=1)
        assert result == pytest.approx(math.sqrt(0.5))

    def test_zero_length(self):
        assert variance_aware_distance([1.0], [500.0], [1.0], [1], length=0) == 0.0

    def test_short_stats_raise(self):
        with pytest.raises(LengthMismatch):
            variance_aware_distance([1.0, 2.0], [1.0, 2.0], [1.0], [3, 3])

    def test_strict_rejects_nan_std(self):
        with pytest.raises(NonFiniteInput, match=r"std\[0\]"):
            variance_aware_distance([1.0], [1.0], [float("nan")], [3], strict=True)
