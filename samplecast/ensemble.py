"""
ensemble.py - Ensemble forecasts by pooling sample paths

Combines the sample paths of several models into one SamplePathSet that
represents the ensemble forecast distribution. The pooled set goes through
quantile estimation and scoring exactly like a single model's paths.

Each member is included in one of three ways:

- **Pooled**: all of its paths (replicates=None, weight=None)
- **Replicate count**: exactly ``replicates`` of its paths
- **Weight**: a share ``weight / sum(weights)`` of the pooled set size

Replicate counts and weights cannot be mixed in one ensemble. Taking more
paths than a member has cycles through its paths again, taking fewer keeps
the first ones, so combining never draws random numbers.

Typical Usage:
--------------
# Equal pooling: sizes add up
ens = combine([(ets_paths, None), (arima_paths, None)])

# Weighted: 70% ETS, 30% ARIMA in a pooled set of 2000 paths
ens = combine([(ets_paths, 0.7), (arima_paths, 0.3)], total=2000)

# Point-forecast combination (mean of model means)
combo = combination_forecast(store, weights={"ets": 0.5, "arima": 0.5})
"""

import logging
from dataclasses import dataclass
from numbers import Integral, Real
from typing import List, Mapping, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd

from . import validation
from .paths import SamplePathSet, SamplePathStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EnsembleMember:
    """One model's contribution to an ensemble."""
    paths: SamplePathSet
    replicates: Optional[int] = None    # exact number of paths to take
    weight: Optional[float] = None      # share of the pooled set

    def __post_init__(self):
        if not isinstance(self.paths, SamplePathSet):
            raise validation.InvalidInput(
                f"Ensemble member must hold a SamplePathSet, got {type(self.paths).__name__}"
            )
        if self.replicates is not None and self.weight is not None:
            raise validation.InvalidInput("Ensemble member takes either 'replicates' or 'weight', not both")
        if self.replicates is not None:
            if isinstance(self.replicates, bool) or not isinstance(self.replicates, Integral) or self.replicates < 1:
                raise validation.InvalidInput(f"replicates must be a positive integer, got {self.replicates!r}")
        if self.weight is not None:
            w = validation.validate_finite(self.weight, "weight")
            if w < 0:
                raise validation.InvalidInput(f"weight must be non-negative, got {w}")


MemberLike = Union[EnsembleMember, SamplePathSet, Tuple[SamplePathSet, Union[int, float, None]]]


def _as_member(item: MemberLike) -> EnsembleMember:
    if isinstance(item, EnsembleMember):
        return item
    if isinstance(item, SamplePathSet):
        return EnsembleMember(item)
    try:
        paths, spec = item
    except (TypeError, ValueError):
        raise validation.InvalidInput(
            "Ensemble members must be EnsembleMember, SamplePathSet or (paths, replicates_or_weight) tuples"
        )
    if spec is None:
        return EnsembleMember(paths)
    if isinstance(spec, bool):
        raise validation.InvalidInput(f"Invalid ensemble member spec {spec!r}")
    if isinstance(spec, Integral):
        return EnsembleMember(paths, replicates=int(spec))
    if isinstance(spec, Real):
        return EnsembleMember(paths, weight=float(spec))
    raise validation.InvalidInput(f"Invalid ensemble member spec {spec!r}")


def _validate_member_consistency(members: List[EnsembleMember]) -> Tuple[bool, bool]:
    """Validate members use a single inclusion approach and return flags for it."""
    has_weights = any(m.weight is not None for m in members)
    has_replicates = any(m.replicates is not None for m in members)

    if has_weights and has_replicates:
        raise validation.InvalidInput(
            "Cannot mix replicate counts and weights in one ensemble. Choose one approach:\n"
            "  combine([(ets, 500), (arima, 1500)])           # replicate counts\n"
            "  combine([(ets, 0.25), (arima, 0.75)], total=2000)  # weights"
        )
    if has_weights and any(m.weight is None for m in members):
        raise validation.InvalidInput("Weighted ensembles need a weight for every member")
    if has_replicates and any(m.replicates is None for m in members):
        raise validation.InvalidInput("Ensembles with replicate counts need a count for every member")
    return has_weights, has_replicates


def _validate_horizons(members: List[EnsembleMember]) -> None:
    reference = members[0].paths
    for i, m in enumerate(members[1:], start=1):
        if m.paths.n_horizons != reference.n_horizons:
            raise validation.IncompatibleHorizon(
                f"Member {i} spans {m.paths.n_horizons} horizon steps, member 0 spans {reference.n_horizons}"
            )
        if not m.paths.is_aligned(reference):
            raise validation.IncompatibleHorizon(
                f"Member {i} horizon labels {m.paths.horizons[:3]}... differ from member 0 "
                f"{reference.horizons[:3]}..."
            )


def _proportional_counts(weights: Sequence[float], total: int) -> List[int]:
    """Split ``total`` in proportion to ``weights`` (largest remainder, counts sum to total)."""
    w = np.asarray(weights, dtype=float)
    exact = w / w.sum() * total
    counts = np.floor(exact).astype(int)
    shortfall = total - counts.sum()
    if shortfall > 0:
        # stable sort keeps member order on ties
        order = np.argsort(-(exact - counts), kind="stable")
        counts[order[:shortfall]] += 1
    return counts.tolist()


def _take(paths: SamplePathSet, count: int) -> np.ndarray:
    """First ``count`` paths, cycling through the set when it has fewer."""
    if count <= paths.n_paths:
        return paths.values[:count]
    return np.resize(paths.values, (count, paths.n_horizons))


def combine(members: Sequence[MemberLike], total: Optional[int] = None) -> SamplePathSet:
    """
    Pool sample paths from several models into one ensemble path set.

    Args:
        members: Ordered members, as EnsembleMember, bare SamplePathSet (pool all)
            or (paths, spec) tuples where spec is None, an int replicate count
            or a float weight
        total: Pooled set size for weighted ensembles (default: sum of member sizes)

    Returns:
        SamplePathSet: New path set; the members are not modified

    Raises:
        InvalidInput: If there are no members or the member specs are inconsistent
        IncompatibleHorizon: If the members do not span the same horizons

    Example:
        combine([(ets, None), (arima, None)])            # n_ets + n_arima paths
        combine([(ets, 0.5), (arima, 0.5)], total=1000)  # 500 + 500 paths
    """
    members = [_as_member(m) for m in members]
    if not members:
        raise validation.InvalidInput("Cannot combine an empty list of sample path sets")

    has_weights, has_replicates = _validate_member_consistency(members)
    _validate_horizons(members)

    if total is not None and not has_weights:
        raise validation.InvalidInput("'total' only applies to weighted ensembles")

    if has_weights:
        weights = [m.weight for m in members]
        if sum(weights) <= 0:
            raise validation.InvalidInput("Ensemble weights must have a positive sum")
        if total is None:
            total = sum(m.paths.n_paths for m in members)
        if isinstance(total, bool) or not isinstance(total, Integral) or total < 1:
            raise validation.InvalidInput(f"total must be a positive integer, got {total!r}")
        counts = _proportional_counts(weights, int(total))
    elif has_replicates:
        counts = [m.replicates for m in members]
    else:
        counts = [m.paths.n_paths for m in members]

    blocks = [_take(m.paths, c) for m, c in zip(members, counts) if c > 0]
    if not blocks:
        raise validation.InvalidInput(f"total={total} is too small to give any member a path")

    logger.debug(f"Pooling {len(members)} members with path counts {counts}")
    return SamplePathSet(np.vstack(blocks), horizons=members[0].paths.horizons)


def combine_store(
    store: SamplePathStore,
    models: Optional[List[str]] = None,
    weights: Optional[Mapping[str, float]] = None,
    name: str = "ensemble",
    total: Optional[int] = None,
) -> SamplePathStore:
    """
    Add an ensemble of some (default: all) models of a store as a new model.

    Args:
        store: Source store, left unchanged
        models: Models to combine; defaults to the keys of ``weights`` or all models
        weights: Optional model -> weight; equal pooling when None
        name: Name of the ensemble model in the returned store
        total: Pooled set size for weighted ensembles

    Returns:
        SamplePathStore: Copy of ``store`` with the ensemble added
    """
    if models is None and weights is not None:
        models = list(weights)
    models = validation.validate_models(store, models)

    if weights is None:
        members = [(store[m], None) for m in models]
    else:
        weights = validation.validate_weights(weights)
        missing = [m for m in models if m not in weights]
        if missing:
            raise validation.InvalidInput(f"No weight given for models {missing}")
        members = [(store[m], float(weights[m])) for m in models]

    logger.info(f"Combining {len(models)} models into '{name}'")
    return store.with_model(name, combine(members, total=total))


def combination_forecast(
    store: SamplePathStore,
    weights: Optional[Mapping[str, float]] = None,
) -> pd.Series:
    """
    Point-forecast combination: weighted average of the models' mean paths.

    With weights proportional to replicate counts this equals the mean of the
    pooled ensemble built by combine().

    Args:
        store: Sample paths per model
        weights: model -> weight (default: equal weights over all models)

    Returns:
        pd.Series: Combined point forecast indexed by horizon
    """
    if weights is None:
        models = validation.validate_models(store, None)
        weights = {m: 1.0 for m in models}
    else:
        weights = validation.validate_weights(weights)
        models = validation.validate_models(store, list(weights))

    reference = store[models[0]]
    for m in models[1:]:
        if not store[m].is_aligned(reference):
            raise validation.IncompatibleHorizon(f"Model '{m}' does not share the horizons of '{models[0]}'")

    total_weight = sum(weights[m] for m in models)
    combo = sum(weights[m] * store[m].mean() for m in models) / total_weight
    return combo.rename("combination")
