"""
Validation Module - Input checks and error kinds for scoring.

This module provides the error hierarchy raised by every samplecast component
and the validation functions that catch malformed inputs (bad probability
levels, incomplete observations, unknown models) before they turn into NaN
scores further down the pipeline.
"""

from collections import abc
from typing import Dict, Hashable, List, Mapping, Optional, Sequence, Union

import numpy as np
import pandas as pd


class ValidationError(Exception):
    """Base exception for local validation failures."""
    pass


class InvalidInput(ValidationError, ValueError):
    """Empty sample set, out-of-range probability level or malformed argument."""
    pass


class IncompatibleHorizon(ValidationError):
    """Sample path sets that do not span the same horizon sequence."""
    pass


class UndefinedSkillScore(ValidationError, ZeroDivisionError):
    """Skill score requested against a baseline with zero CRPS."""
    pass


def validate_probability_levels(levels, context: str = "probability levels") -> np.ndarray:
    """
    Validate quantile probability levels.

    Args:
        levels: Iterable of probability levels
        context: Description for error messages

    Returns:
        np.ndarray: The levels as floats, in the order given

    Raises:
        InvalidInput: If no levels are given, any level is outside (0, 1)
            or a level appears more than once
    """
    if levels is None:
        raise InvalidInput(f"{context} must not be None")

    try:
        arr = np.asarray(list(levels), dtype=float)
    except (TypeError, ValueError) as e:
        raise InvalidInput(f"{context} must be numeric: {e}")

    if arr.ndim != 1 or arr.size == 0:
        raise InvalidInput(f"{context} must be a non-empty sequence")

    bad = arr[~((arr > 0) & (arr < 1))]
    if bad.size:
        raise InvalidInput(
            f"{context} must lie strictly between 0 and 1, got {sorted(bad.tolist())}"
        )

    values, counts = np.unique(arr, return_counts=True)
    if np.any(counts > 1):
        raise InvalidInput(f"{context} must not repeat a level, got duplicates {values[counts > 1].tolist()}")
    return arr


def validate_probability_level(level: float) -> float:
    """Validate a single probability level and return it as float."""
    return float(validate_probability_levels([level], context="probability level")[0])


def validate_finite(value, name: str) -> float:
    """Return ``value`` as float, rejecting NaN and infinities."""
    try:
        value = float(value)
    except (TypeError, ValueError) as e:
        raise InvalidInput(f"{name} must be a real number: {e}")
    if not np.isfinite(value):
        raise InvalidInput(f"{name} must be finite, got {value}")
    return value


def validate_observations(
    observations: Union[Sequence[float], Mapping[Hashable, float], pd.Series],
    horizons: Sequence[Hashable],
    context: str = "observations",
) -> np.ndarray:
    """
    Align observations with a horizon sequence.

    Observations may be a mapping (or Series) keyed by horizon label, or a
    plain sequence with one value per horizon step.

    Args:
        observations: Observed values
        horizons: Horizon labels the observations must cover
        context: Description for error messages

    Returns:
        np.ndarray: One finite observation per horizon step

    Raises:
        InvalidInput: If any horizon step has no finite observation
    """
    horizons = list(horizons)

    if isinstance(observations, (pd.Series, abc.Mapping)):
        missing = [h for h in horizons if h not in observations]
        if missing:
            raise InvalidInput(f"{context} missing horizon steps: {missing[:5]}")
        values = [observations[h] for h in horizons]
    else:
        values = list(observations)
        if len(values) != len(horizons):
            raise InvalidInput(
                f"{context} has {len(values)} values for {len(horizons)} horizon steps"
            )

    arr = np.asarray(values, dtype=float)
    non_finite = [h for h, v in zip(horizons, arr) if not np.isfinite(v)]
    if non_finite:
        raise InvalidInput(f"{context} contain non-finite values at steps: {non_finite[:5]}")
    return arr


def validate_models(store, models: Optional[List[str]], context: str = "store") -> List[str]:
    """
    Validate that every requested model exists in a SamplePathStore.

    Returns:
        List[str]: The requested models, or all models of the store when None

    Raises:
        InvalidInput: If the store is empty or a model is unknown
    """
    available = store.models()
    if not available:
        raise InvalidInput(f"{context} contains no models")
    if models is None:
        return available

    unknown = [m for m in models if m not in available]
    if unknown:
        raise InvalidInput(f"{context} has no models {unknown}; available: {available}")
    return list(models)


def validate_weights(weights: Mapping[str, float], context: str = "weights") -> Dict[str, float]:
    """
    Validate non-negative weights with a positive sum.

    Raises:
        InvalidInput: If a weight is negative or non-finite, or all weights are zero
    """
    out = {name: validate_finite(w, f"{context}['{name}']") for name, w in weights.items()}
    negative = [name for name, w in out.items() if w < 0]
    if negative:
        raise InvalidInput(f"{context} must be non-negative, got negative weights for {negative}")
    if sum(out.values()) <= 0:
        raise InvalidInput(f"{context} must have a positive sum")
    return out
