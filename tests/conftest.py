"""
Pytest fixtures for samplecast tests.
"""

import pytest
import numpy as np
import pandas as pd
from pathlib import Path
import sys

# Add package to path
sys.path.insert(0, str(Path(__file__).parent.parent))
from samplecast.paths import SamplePathSet, SamplePathStore
from samplecast.simulate import SeasonalNaiveSimulator


@pytest.fixture(scope="session")
def turnover():
    """Synthetic monthly turnover: trend + yearly seasonality + noise, 2010-01 to 2019-12."""
    rng = np.random.default_rng(42)
    index = pd.period_range("2010-01", periods=120, freq="M", name="date")
    t = np.arange(120)
    values = 300 + 1.5 * t + 40 * np.sin(2 * np.pi * t / 12) + rng.normal(0, 8, size=120)
    return pd.Series(values, index=index, name="value")


@pytest.fixture(scope="session")
def history(turnover):
    """Training window: everything but the last year."""
    return turnover.iloc[:-12]


@pytest.fixture(scope="session")
def observed(turnover):
    """Held-out last year, indexed by month."""
    return turnover.iloc[-12:]


@pytest.fixture(scope="session")
def small_paths():
    """Five paths over two steps with easy quantiles."""
    return SamplePathSet(np.array([
        [1.0, 10.0],
        [2.0, 20.0],
        [3.0, 30.0],
        [4.0, 40.0],
        [5.0, 50.0],
    ]))


@pytest.fixture(scope="session")
def store(history):
    """Two seeded seasonal naive models, 1000 paths each over 12 months."""
    return SamplePathStore({
        "snaive": SeasonalNaiveSimulator(history, horizon=12, seed=1).simulate(1000),
        "snaive_normal": SeasonalNaiveSimulator(history, horizon=12, seed=2, bootstrap=False).simulate(1000),
    })
