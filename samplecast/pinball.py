"""
Quantile scores: pinball loss, CRPS and skill score.

This module provides the scoring rules used to evaluate sample-path forecasts:

- pinball_loss(): score of one quantile forecast against an observation
- crps(): CRPS approximated by averaging pinball losses over a probability grid
- sample_crps(): exact CRPS of the empirical distribution of the paths
- mean_crps(): CRPS averaged (unweighted) across all horizon steps
- skill_score(): percentage improvement in CRPS over a baseline

With the default multiplier of 2 the pinball loss at the median is the
absolute error, and the grid-averaged CRPS approaches the continuous
integral as the grid gets denser.
"""

from typing import Hashable, Iterable, Optional

import numpy as np

from . import validation
from .config import DEFAULT_CONFIG
from .paths import SamplePathSet
from .quantiles import estimate


def pinball_loss(forecast_value: float, observed: float, probability_level: float,
                 include_multiplier: bool = True) -> float:
    """
    Pinball (quantile) loss of a single quantile forecast.

    Args:
        forecast_value: Forecast quantile at ``probability_level``
        observed: Realized value
        probability_level: Level p in (0, 1)
        include_multiplier: Scale by 2 so that the loss at p=0.5 is |observed - forecast|

    Returns:
        float: Non-negative loss; 0 when ``observed == forecast_value``
    """
    p = validation.validate_probability_level(probability_level)
    forecast_value = validation.validate_finite(forecast_value, "forecast_value")
    observed = validation.validate_finite(observed, "observed")
    m = 2.0 if include_multiplier else 1.0

    if observed < forecast_value:
        return m * (1 - p) * (forecast_value - observed)
    return m * p * (observed - forecast_value)


def pinball_losses(quantiles, observed, probability_levels, include_multiplier: bool = True) -> np.ndarray:
    """
    Vectorised pinball loss.

    ``quantiles`` and ``probability_levels`` broadcast against each other and
    against ``observed``; same formula as pinball_loss().
    """
    levels = np.atleast_1d(np.asarray(probability_levels, dtype=float))
    p = validation.validate_probability_levels(levels.ravel()).reshape(levels.shape)
    q = np.asarray(quantiles, dtype=float)
    y = np.asarray(observed, dtype=float)
    m = 2.0 if include_multiplier else 1.0

    diff = y - q
    return m * np.where(diff < 0, (p - 1) * diff, p * diff)


def crps(
    paths: SamplePathSet,
    horizon_step: Hashable,
    observed: float,
    probability_levels: Optional[Iterable[float]] = None,
    include_multiplier: bool = True,
) -> float:
    """
    CRPS at one horizon step, as the mean pinball loss over a probability grid.

    Args:
        paths: Sample paths of one model
        horizon_step: Horizon label to score
        observed: Realized value at that step
        probability_levels: Probability grid (default: deciles 0.1..0.9); each level
            may appear only once
        include_multiplier: See pinball_loss()

    Returns:
        float: Arithmetic mean of the pinball losses across levels
    """
    if probability_levels is None:
        probability_levels = DEFAULT_CONFIG.probability_levels
    observed = validation.validate_finite(observed, "observed")
    q_dict = estimate(paths, horizon_step, probability_levels)

    levels = np.fromiter(q_dict.keys(), dtype=float)
    quantiles = np.fromiter(q_dict.values(), dtype=float)
    return float(np.mean(pinball_losses(quantiles, observed, levels, include_multiplier)))


def sample_crps(paths: SamplePathSet, horizon_step: Hashable, observed: float) -> float:
    """
    Exact CRPS of the empirical distribution of the paths.

    CRPS(F, y) = E|X - y| - 0.5 E|X - X'| (Gneiting & Raftery, 2007), with the
    pairwise term computed from sorted samples:
    sum_{i<j} |x_i - x_j| = sum_k (2k - n - 1) x_(k).
    """
    observed = validation.validate_finite(observed, "observed")
    x = np.sort(paths.at(horizon_step))
    n = x.size

    term1 = np.mean(np.abs(x - observed))
    k = np.arange(1, n + 1)
    term2 = np.sum((2 * k - n - 1) * x) / (n * n)
    return float(term1 - term2)


def crps_by_horizon(
    paths: SamplePathSet,
    observations,
    probability_levels: Optional[Iterable[float]] = None,
    include_multiplier: bool = True,
) -> np.ndarray:
    """Grid CRPS for every horizon step, in horizon order."""
    obs = validation.validate_observations(observations, paths.horizons)
    return np.array([
        crps(paths, h, y, probability_levels, include_multiplier)
        for h, y in zip(paths.horizons, obs)
    ])


def mean_crps(
    paths: SamplePathSet,
    observations,
    probability_levels: Optional[Iterable[float]] = None,
    include_multiplier: bool = True,
) -> float:
    """
    CRPS averaged with equal weight across all horizon steps.

    Args:
        paths: Sample paths of one model
        observations: One observation per horizon step (sequence or mapping by label)

    Raises:
        InvalidInput: If observations do not cover every horizon step
    """
    return float(np.mean(crps_by_horizon(paths, observations, probability_levels, include_multiplier)))


def skill_score(model_crps: float, baseline_crps: float) -> float:
    """
    Percentage improvement in CRPS over a baseline: 100 * (1 - model / baseline).

    Raises:
        UndefinedSkillScore: If the baseline CRPS is zero
        InvalidInput: If either score is negative or non-finite
    """
    model_crps = validation.validate_finite(model_crps, "model_crps")
    baseline_crps = validation.validate_finite(baseline_crps, "baseline_crps")
    if model_crps < 0 or baseline_crps < 0:
        raise validation.InvalidInput(
            f"CRPS values must be non-negative, got model={model_crps}, baseline={baseline_crps}"
        )
    if baseline_crps == 0:
        raise validation.UndefinedSkillScore("Skill score is undefined for a baseline CRPS of zero")
    return 100 * (1 - model_crps / baseline_crps)
