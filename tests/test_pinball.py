"""
Tests for pinball loss, CRPS and skill scores.
"""

import pytest
import numpy as np

from samplecast import pinball, quantiles
from samplecast.config import DECILES, uniform_grid
from samplecast.paths import SamplePathSet
from samplecast.validation import InvalidInput, UndefinedSkillScore


class TestPinballLoss:
    """Single quantile scores."""

    @pytest.mark.parametrize("f", [-3.5, 0.0, 12.0, 480.25])
    @pytest.mark.parametrize("p", [0.01, 0.1, 0.5, 0.9, 0.99])
    def test_zero_at_equality(self, f, p):
        assert pinball.pinball_loss(f, f, p) == 0

    @pytest.mark.parametrize("f, y", [(10.0, 12.5), (12.5, 10.0), (-4.0, 3.0), (0.0, 0.0)])
    def test_median_is_absolute_error(self, f, y):
        assert pinball.pinball_loss(f, y, 0.5) == pytest.approx(abs(y - f))

    def test_branches(self):
        # observation above the forecast: 2 * p * (y - f)
        assert pinball.pinball_loss(10.0, 12.0, 0.25) == pytest.approx(1.0)
        # observation below the forecast: 2 * (1 - p) * (f - y)
        assert pinball.pinball_loss(10.0, 8.0, 0.25) == pytest.approx(3.0)

    def test_without_multiplier(self):
        with_m = pinball.pinball_loss(100.0, 80.0, 0.7)
        without_m = pinball.pinball_loss(100.0, 80.0, 0.7, include_multiplier=False)
        assert without_m == pytest.approx(with_m / 2)
        assert without_m == pytest.approx(0.3 * 20)

    @pytest.mark.parametrize("p", [0.0, 1.0, -0.2, 2.0])
    def test_rejects_bad_level(self, p):
        with pytest.raises(InvalidInput):
            pinball.pinball_loss(1.0, 2.0, p)

    def test_rejects_non_finite_values(self):
        with pytest.raises(InvalidInput):
            pinball.pinball_loss(float("nan"), 2.0, 0.5)

    def test_vectorised_matches_scalar(self):
        q = np.array([90.0, 100.0, 110.0])
        levels = np.array([0.1, 0.5, 0.9])
        losses = pinball.pinball_losses(q, 104.0, levels)
        expected = [pinball.pinball_loss(f, 104.0, p) for f, p in zip(q, levels)]
        np.testing.assert_allclose(losses, expected)

    def test_ninety_percent_quantile_scenario(self):
        """1000 paths over 12 steps; q0.9 at step 12 is 500 and the outcome is 450."""
        values = np.tile(np.linspace(50.0, 550.0, 1000)[:, None], (1, 12))
        paths = SamplePathSet(values)
        q = quantiles.estimate(paths, 12, DECILES)
        assert q[0.9] == pytest.approx(500.0)
        assert pinball.pinball_loss(q[0.9], 450.0, 0.9) == pytest.approx(10.0)


class TestCRPS:
    """Grid and exact CRPS."""

    def test_single_level_is_absolute_error(self, small_paths):
        # median at step 1 is 3
        assert pinball.crps(small_paths, 1, 7.0, [0.5]) == pytest.approx(4.0)

    def test_mean_of_pinball_losses(self, small_paths):
        q = quantiles.estimate(small_paths, 2, DECILES)
        expected = np.mean([pinball.pinball_loss(v, 26.0, p) for p, v in q.items()])
        assert pinball.crps(small_paths, 2, 26.0) == pytest.approx(expected)

    def test_level_order_does_not_matter(self, small_paths):
        a = pinball.crps(small_paths, 2, 26.0, [0.1, 0.5, 0.9])
        b = pinball.crps(small_paths, 2, 26.0, [0.9, 0.1, 0.5])
        assert a == pytest.approx(b)

    def test_repeated_levels_rejected(self, small_paths):
        with pytest.raises(InvalidInput):
            pinball.crps(small_paths, 1, 7.0, [0.5, 0.5, 0.9])

    def test_sample_crps_small_cases(self):
        assert pinball.sample_crps(SamplePathSet([[0.0]]), 1, 1.0) == pytest.approx(1.0)
        # E|X - y| = 1, 0.5 E|X - X'| = 0.5
        assert pinball.sample_crps(SamplePathSet([[0.0], [2.0]]), 1, 1.0) == pytest.approx(0.5)

    def test_dense_grid_approaches_exact_crps(self):
        paths = SamplePathSet(np.linspace(-3.0, 3.0, 2001)[:, None])
        exact = pinball.sample_crps(paths, 1, 0.5)
        dense = pinball.crps(paths, 1, 0.5, uniform_grid(199))
        assert dense == pytest.approx(exact, rel=0.02)

    def test_mean_crps_over_horizons(self, store, observed):
        paths = store["snaive"]
        per_step = [pinball.crps(paths, h, y) for h, y in observed.items()]
        assert pinball.mean_crps(paths, observed) == pytest.approx(np.mean(per_step))
        np.testing.assert_allclose(pinball.crps_by_horizon(paths, observed), per_step)

    def test_mean_crps_accepts_sequences(self, store, observed):
        paths = store["snaive"]
        assert pinball.mean_crps(paths, observed.to_numpy()) == pytest.approx(pinball.mean_crps(paths, observed))

    def test_mean_crps_needs_every_step(self, store, observed):
        with pytest.raises(InvalidInput):
            pinball.mean_crps(store["snaive"], observed.iloc[:-1])
        with pytest.raises(InvalidInput):
            pinball.mean_crps(store["snaive"], list(observed.to_numpy()[:6]))


class TestSkillScore:
    """Skill relative to a baseline."""

    @pytest.mark.parametrize("c", [0.001, 1.0, 42.0])
    def test_baseline_against_itself(self, c):
        assert pinball.skill_score(c, c) == 0

    def test_percentage(self):
        assert pinball.skill_score(5.0, 10.0) == pytest.approx(50.0)
        assert pinball.skill_score(15.0, 10.0) == pytest.approx(-50.0)

    def test_zero_baseline(self):
        with pytest.raises(UndefinedSkillScore):
            pinball.skill_score(1.0, 0.0)
        with pytest.raises(ZeroDivisionError):
            pinball.skill_score(0.0, 0.0)

    def test_rejects_non_finite(self):
        with pytest.raises(InvalidInput):
            pinball.skill_score(float("inf"), 1.0)
