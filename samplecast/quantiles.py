"""
Empirical quantile forecasts from sample paths.
"""

from typing import Dict, Hashable, Iterable, Optional

import numpy as np
import pandas as pd

from . import validation
from .config import DEFAULT_CONFIG
from .paths import SamplePathSet, SamplePathStore


def estimate(
    paths: SamplePathSet,
    horizon_step: Hashable,
    probability_levels: Iterable[float],
) -> Dict[float, float]:
    """
    Empirical quantiles of the path values at one horizon step.

    Uses linear interpolation between order statistics at rank ``p * (n - 1)``,
    so quantiles are non-decreasing in ``p`` and the same inputs always give
    the same output.

    Args:
        paths: Sample paths of one model
        horizon_step: Horizon label to read
        probability_levels: Levels strictly between 0 and 1

    Returns:
        Dict[float, float]: level -> quantile, levels in ascending order

    Raises:
        InvalidInput: If the path set is empty, a level is outside (0, 1)
            or repeated, or the horizon step is unknown
    """
    if paths is None or len(paths) == 0:
        raise validation.InvalidInput("Cannot estimate quantiles from an empty sample path set")
    levels = np.unique(validation.validate_probability_levels(probability_levels))
    values = paths.at(horizon_step)

    q = np.quantile(values, levels, method="linear")
    # interpolation rounding must not break monotonicity
    q = np.maximum.accumulate(q)
    return {float(p): float(v) for p, v in zip(levels, q)}


def estimate_all(paths: SamplePathSet, probability_levels: Iterable[float]) -> pd.DataFrame:
    """Quantiles for every horizon step: rows are horizons, columns are levels."""
    levels = np.unique(validation.validate_probability_levels(probability_levels))
    q = np.quantile(paths.values, levels, method="linear", axis=0)
    q = np.maximum.accumulate(q, axis=0)
    return pd.DataFrame(
        q.T,
        index=pd.Index(paths.horizons, name="horizon"),
        columns=pd.Index(levels, name="level"),
    )


def to_long(wide: pd.DataFrame) -> pd.DataFrame:
    """Horizon x level table to long format: horizon, level, value (horizon-major)."""
    long = wide.reset_index().melt(id_vars="horizon", var_name="level", value_name="value")
    long["level"] = long["level"].astype(float)
    return long.sort_values(["horizon", "level"], kind="stable", ignore_index=True)


def quantile_forecasts(
    store: SamplePathStore,
    probability_levels: Optional[Iterable[float]] = None,
) -> pd.DataFrame:
    """
    Tidy quantile forecast table for every model in a store.

    Returns:
        DataFrame with columns: model, horizon, level, value
    """
    if probability_levels is None:
        probability_levels = DEFAULT_CONFIG.probability_levels
    models = validation.validate_models(store, None)

    tables = []
    for model in models:
        wide = estimate_all(store[model], probability_levels)
        long = to_long(wide)
        long.insert(0, "model", model)
        tables.append(long)
    return pd.concat(tables, ignore_index=True)


def interval(paths: SamplePathSet, horizon_step: Hashable, coverage: float = 0.8) -> tuple:
    """Central prediction interval ``(lower, upper)`` with the given coverage."""
    coverage = validation.validate_probability_level(coverage)
    alpha = (1 - coverage) / 2
    q = estimate(paths, horizon_step, [alpha, 1 - alpha])
    return q[min(q)], q[max(q)]
