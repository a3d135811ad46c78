"""
Tests for the seasonal naive simulator.
"""

import pytest
import numpy as np
import pandas as pd

from samplecast.simulate import SeasonalNaiveSimulator, future_labels, simulate_store
from samplecast.validation import InvalidInput


def test_same_seed_same_paths(history):
    a = SeasonalNaiveSimulator(history, seed=7).simulate(200)
    b = SeasonalNaiveSimulator(history, seed=7).simulate(200)
    c = SeasonalNaiveSimulator(history, seed=8).simulate(200)
    assert a == b
    assert a != c


def test_horizons_continue_history(history):
    paths = SeasonalNaiveSimulator(history, horizon=12, seed=0).simulate(10)
    assert paths.horizons[0] == history.index[-1] + 1
    assert paths.horizons == tuple(pd.period_range("2019-01", periods=12, freq="M"))


def test_perfect_seasonal_pattern_repeats():
    season = np.array([5.0, 7.0, 9.0, 4.0])
    history = np.tile(season, 3)
    for bootstrap in (True, False):
        sim = SeasonalNaiveSimulator(history, horizon=10, period=4, seed=0, bootstrap=bootstrap)
        paths = sim.simulate(3)
        assert paths.horizons == tuple(range(1, 11))
        np.testing.assert_allclose(paths.values, np.tile(np.resize(season, 10), (3, 1)))


def test_bootstrap_draws_from_residuals(history):
    sim = SeasonalNaiveSimulator(history, horizon=1, seed=3)
    paths = sim.simulate(500)
    errors = paths.values[:, 0] - history.iloc[-12]
    assert np.all(np.isin(np.round(errors, 8), np.round(sim.residuals, 8)))


def test_normal_innovations_spread(history):
    sim = SeasonalNaiveSimulator(history, horizon=1, seed=3, bootstrap=False)
    errors = sim.simulate(5000).values[:, 0] - history.iloc[-12]
    assert np.std(errors) == pytest.approx(sim.sigma, rel=0.1)


def test_short_history():
    with pytest.raises(InvalidInput):
        SeasonalNaiveSimulator(np.arange(12.0), period=12)


def _monthly_season(years=3):
    index = pd.period_range("2017-01", periods=12 * years, freq="M")
    return pd.Series(np.tile(np.arange(1.0, 13.0), years), index=index)


def test_gap_in_history_rejected():
    history = _monthly_season()
    history.iloc[-3] = np.nan
    with pytest.raises(InvalidInput, match="2019-10"):
        SeasonalNaiveSimulator(history, horizon=12, seed=0, bootstrap=False)


def test_leading_gaps_keep_seasonal_alignment():
    history = _monthly_season()
    history.iloc[:2] = np.nan
    sim = SeasonalNaiveSimulator(history, horizon=12, seed=0, bootstrap=False)
    assert np.count_nonzero(sim.residuals) == 0
    paths = sim.simulate(2)
    assert paths.horizons[0] == pd.Period("2020-01", freq="M")
    np.testing.assert_allclose(paths.values[0], np.arange(1.0, 13.0))


@pytest.mark.parametrize("n_paths", [0, -1, 2.5])
def test_bad_path_count(history, n_paths):
    with pytest.raises(InvalidInput):
        SeasonalNaiveSimulator(history, seed=0).simulate(n_paths)


def test_future_labels_fallback():
    assert future_labels(pd.RangeIndex(5), 3) == [1, 2, 3]
    dates = pd.date_range("2020-01-01", periods=6, freq="MS")
    assert future_labels(dates, 2) == [pd.Timestamp("2020-07-01"), pd.Timestamp("2020-08-01")]


def test_simulate_store(history):
    store = simulate_store({
        "boot": SeasonalNaiveSimulator(history, seed=1),
        "normal": SeasonalNaiveSimulator(history, seed=1, bootstrap=False),
    }, n_paths=50)
    assert store.models() == ["boot", "normal"]
    assert all(len(store[m]) == 50 for m in store)
