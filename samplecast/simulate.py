"""
Sample path simulators.

Simulators own all randomness in samplecast: each one is seeded when it is
built, and the quantile, scoring and ensemble code only consumes the
SamplePathSets they return.
"""

import abc
import logging
from typing import Hashable, List, Mapping, Optional

import numpy as np
import pandas as pd
from tqdm import tqdm

from . import validation
from .paths import SamplePathSet, SamplePathStore

logger = logging.getLogger(__name__)


class Simulator(abc.ABC):
    """Produces sample paths of future values for one model."""

    def __init__(self, horizon: int, seed: Optional[int] = None):
        if isinstance(horizon, bool) or int(horizon) != horizon or horizon < 1:
            raise validation.InvalidInput(f"horizon must be a positive integer, got {horizon!r}")
        self.horizon = int(horizon)
        self.seed = seed
        self.rng = np.random.default_rng(seed)

    @abc.abstractmethod
    def simulate(self, n_paths: int) -> SamplePathSet:
        ...

    def _check_n_paths(self, n_paths: int) -> int:
        if isinstance(n_paths, bool) or int(n_paths) != n_paths or n_paths < 1:
            raise validation.InvalidInput(f"n_paths must be a positive integer, got {n_paths!r}")
        return int(n_paths)


def future_labels(index: pd.Index, horizon: int) -> List[Hashable]:
    """
    Horizon labels following the end of a history index.

    Periods continue the period index; timestamps continue a DatetimeIndex with
    a known frequency. Anything else falls back to 1..horizon.
    """
    if isinstance(index, pd.PeriodIndex) and len(index):
        return list(pd.period_range(index[-1] + 1, periods=horizon, freq=index.freq))
    if isinstance(index, pd.DatetimeIndex) and len(index):
        freq = index.freq
        if freq is None and len(index) >= 3:
            freq = pd.infer_freq(index)
        if freq is not None:
            return list(pd.date_range(index[-1], periods=horizon + 1, freq=freq)[1:])
    return list(range(1, horizon + 1))


class SeasonalNaiveSimulator(Simulator):
    """
    Seasonal naive model with simulated innovations.

    Each path follows y[T+h] = y[T+h-period] + e[h], where the lagged value
    comes from the history for h <= period and from the path itself beyond
    that. Innovations are drawn from the in-sample residuals
    ``y[t] - y[t-period]`` (bootstrap) or from a normal distribution with the
    residual standard deviation.

    Parameters:
    - history (pd.Series or array-like): Observed series, oldest first. Leading
      missing values are skipped; missing values after the first observation
      raise InvalidInput.
    - horizon (int): Number of future steps per path. Defaults to 12.
    - period (int): Seasonal period. Defaults to 12 (monthly data).
    - seed (int, optional): Seed for the simulator's random generator
    - bootstrap (bool): Resample residuals instead of drawing normal errors. Defaults to True.

    Example:
        sim = SeasonalNaiveSimulator(turnover, horizon=12, seed=2024)
        paths = sim.simulate(1000)
    """

    def __init__(self, history, horizon: int = 12, period: int = 12, seed: Optional[int] = None,
                 bootstrap: bool = True):
        super().__init__(horizon, seed)
        if isinstance(period, bool) or int(period) != period or period < 1:
            raise validation.InvalidInput(f"period must be a positive integer, got {period!r}")
        self.period = int(period)
        self.bootstrap = bootstrap

        if not isinstance(history, pd.Series):
            history = pd.Series(np.asarray(history, dtype=float))
        history = history.astype(float)
        # leading gaps only shorten the history; later gaps would shift the seasonal lag
        observed = history.notna().to_numpy()
        history = history.iloc[observed.argmax() if observed.any() else len(history):]
        if history.isna().any():
            gaps = [str(label) for label in history.index[history.isna().to_numpy()]]
            raise validation.InvalidInput(f"History has missing values at {gaps}; fill them before simulating")
        if len(history) < self.period + 1:
            raise validation.InvalidInput(
                f"History needs at least {self.period + 1} observations for period {self.period}, "
                f"got {len(history)}"
            )
        if not np.all(np.isfinite(history.to_numpy())):
            raise validation.InvalidInput("History contains non-finite values")

        self.history = history
        y = history.to_numpy()
        self.residuals = y[self.period:] - y[:-self.period]
        self.sigma = float(np.std(self.residuals, ddof=1)) if self.residuals.size > 1 else 0.0
        self.horizons = future_labels(history.index, self.horizon)

    def _innovations(self, n_paths: int) -> np.ndarray:
        shape = (n_paths, self.horizon)
        if self.bootstrap:
            return self.rng.choice(self.residuals, size=shape, replace=True)
        return self.rng.normal(0.0, self.sigma, size=shape)

    def simulate(self, n_paths: int) -> SamplePathSet:
        n_paths = self._check_n_paths(n_paths)
        errors = self._innovations(n_paths)

        last_season = self.history.to_numpy()[-self.period:]
        paths = np.empty((n_paths, self.horizon))
        for h in range(self.horizon):
            lagged = last_season[h] if h < self.period else paths[:, h - self.period]
            paths[:, h] = lagged + errors[:, h]

        logger.debug(f"Simulated {n_paths} seasonal naive paths over {self.horizon} steps (seed={self.seed})")
        return SamplePathSet(paths, horizons=self.horizons)


def simulate_store(simulators: Mapping[str, Simulator], n_paths: int) -> SamplePathStore:
    """Run every simulator for ``n_paths`` paths and collect the results by model name."""
    sets = {}
    for model, simulator in tqdm(simulators.items(), desc="Simulating", leave=False):
        sets[model] = simulator.simulate(n_paths)
    logger.info(f"Simulated {n_paths} paths for {len(sets)} models")
    return SamplePathStore(sets)
