"""
Evaluation Module - Scoring sample-path forecasts against observations.

This module provides a clean interface for:
- Scoring every model of a SamplePathStore over the forecast horizon
- Per-horizon pinball losses and CRPS, per-model mean CRPS
- Skill scores relative to a baseline model
- Tidy tables for the report
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Literal, Optional, Tuple

import numpy as np
import pandas as pd
from tqdm import tqdm

from . import validation
from .config import DEFAULT_CONFIG, ScoringConfig
from .paths import SamplePathStore
from .pinball import pinball_losses, skill_score
from .quantiles import estimate_all, to_long

logger = logging.getLogger(__name__)


@dataclass
class MetricSpec:
    """Specification for a scoring metric with metadata."""
    name: str                               # Unique metric name
    type: Literal["per_forecast", "per_model"]  # Granularity level
    grain: Tuple[str, ...]                  # Native keys (e.g., ("model", "horizon"))
    orientation: Literal["min", "max"]      # Lower is better vs higher is better
    family: str                             # Metric family ("pinball", "crps", "skill")
    aggregator: str                         # Default aggregation across horizons
    is_relative: bool                       # True for metrics relative to a baseline
    depends_on: Optional[List[str]] = None  # Dependencies for relative metrics


class MetricRegistry:
    """Registry of the scoring metrics produced by score_store()."""

    PINBALL = MetricSpec(
        name="pinball",
        type="per_forecast",
        grain=("model", "horizon", "level"),
        orientation="min",
        family="pinball",
        aggregator="mean",
        is_relative=False
    )

    CRPS = MetricSpec(
        name="crps",
        type="per_forecast",
        grain=("model", "horizon"),
        orientation="min",
        family="crps",
        aggregator="mean",
        is_relative=False,
        depends_on=["pinball"]
    )

    MEAN_CRPS = MetricSpec(
        name="mean_crps",
        type="per_model",
        grain=("model",),
        orientation="min",
        family="crps",
        aggregator="mean",
        is_relative=False,
        depends_on=["crps"]
    )

    SKILL_SCORE = MetricSpec(
        name="skill_score",
        type="per_model",
        grain=("model",),
        orientation="max",
        family="skill",
        aggregator="ratio",
        is_relative=True,
        depends_on=["mean_crps"]
    )

    PER_FORECAST = [PINBALL, CRPS]
    PER_MODEL = [MEAN_CRPS, SKILL_SCORE]
    ALL = [PINBALL, CRPS, MEAN_CRPS, SKILL_SCORE]

    @classmethod
    def get(cls, name: str) -> MetricSpec:
        for spec in cls.ALL:
            if spec.name == name:
                return spec
        raise validation.InvalidInput(f"Unknown metric '{name}'; available: {[m.name for m in cls.ALL]}")


@dataclass
class ScoringResults:
    """Container for forecast evaluation results with separate granularities."""
    forecast_metrics: pd.DataFrame          # model, horizon, scoring_metric, level, value
    model_metrics: pd.DataFrame             # model, scoring_metric, value
    meta: Dict = field(default_factory=dict)  # baseline, probability_levels, include_multiplier, models

    def to_tidy(self) -> pd.DataFrame:
        """Unified view with grain column for clean filtering."""
        f = self.forecast_metrics.assign(grain="per_forecast")
        m = self.model_metrics.assign(grain="per_model")
        return pd.concat([f, m], ignore_index=True, sort=False)

    def crps_table(self) -> pd.DataFrame:
        """CRPS per horizon step: rows are horizons, columns are models."""
        fm = self.forecast_metrics
        crps = fm[fm["scoring_metric"] == MetricRegistry.CRPS.name]
        return crps.pivot(index="horizon", columns="model", values="value")

    def accuracy_table(self) -> pd.DataFrame:
        """One row per model with its mean CRPS and skill score, best model first."""
        mm = self.model_metrics
        table = mm.pivot(index="model", columns="scoring_metric", values="value")
        table = table.reindex(columns=[m.name for m in MetricRegistry.PER_MODEL if m.name in table.columns])
        table.columns.name = None
        return table.sort_values(MetricRegistry.MEAN_CRPS.name)


def score_model(paths, observations, config: ScoringConfig = DEFAULT_CONFIG) -> pd.DataFrame:
    """
    Pinball losses and CRPS of one model for every horizon step.

    Returns:
        DataFrame with columns: horizon, scoring_metric, level, value
        (level is NaN for CRPS rows)
    """
    obs = validation.validate_observations(observations, paths.horizons)
    q = estimate_all(paths, config.probability_levels)
    levels = q.columns.to_numpy(dtype=float)

    losses = pinball_losses(q.to_numpy(), obs[:, None], levels[None, :], config.include_multiplier)

    pinball = to_long(pd.DataFrame(losses, index=q.index, columns=q.columns))
    pinball["scoring_metric"] = MetricRegistry.PINBALL.name

    crps = pd.DataFrame({
        "horizon": list(paths.horizons),
        "level": np.nan,
        "value": losses.mean(axis=1),
        "scoring_metric": MetricRegistry.CRPS.name,
    })
    return pd.concat([pinball, crps], ignore_index=True)[["horizon", "scoring_metric", "level", "value"]]


def score_store(
    store: SamplePathStore,
    observations,
    baseline: Optional[str] = None,
    config: Optional[ScoringConfig] = None,
) -> ScoringResults:
    """
    Compute scoring metrics for all models of a store.

    Args:
        store: Sample paths per model
        observations: Observed values, one per horizon step (sequence or mapping by label)
        baseline: Model to compute skill scores against (default: config.baseline)
        config: Probability grid and multiplier convention

    Returns:
        ScoringResults: Container with forecast_metrics, model_metrics, and metadata
    """
    if config is None:
        config = DEFAULT_CONFIG
    if baseline is None:
        baseline = config.baseline

    models = validation.validate_models(store, None)
    if baseline is not None and baseline not in store:
        raise validation.InvalidInput(f"Baseline model '{baseline}' not found in store; available: {models}")

    logger.info(f"Scoring {len(models)} models on {len(config.probability_levels)} probability levels")

    scores: Dict[str, pd.DataFrame] = {}
    for model in tqdm(models, desc="Scoring", leave=False):
        try:
            scores[model] = score_model(store[model], observations, config)
        except validation.ValidationError as e:
            raise type(e)(f"Scoring failed for model '{model}': {e}") from e

    forecast_metrics = pd.concat(scores, names=["model", "row"]).reset_index(level="row", drop=True).reset_index()

    crps = forecast_metrics[forecast_metrics["scoring_metric"] == MetricRegistry.CRPS.name]
    mean_crps = crps.groupby("model", sort=False)["value"].mean()
    model_metrics = pd.DataFrame({
        "model": mean_crps.index,
        "scoring_metric": MetricRegistry.MEAN_CRPS.name,
        "value": mean_crps.to_numpy(),
    })

    if baseline is not None:
        model_metrics = pd.concat([model_metrics, compute_skill_scores(model_metrics, baseline)],
                                  ignore_index=True)

    meta = {
        "baseline": baseline,
        "probability_levels": config.probability_levels,
        "include_multiplier": config.include_multiplier,
        "models": models,
        "forecast_unit": ("model", "horizon"),
    }

    return ScoringResults(
        forecast_metrics=forecast_metrics,
        model_metrics=model_metrics,
        meta=meta
    )


def compute_skill_scores(model_metrics: pd.DataFrame, baseline_model: str) -> pd.DataFrame:
    """
    Skill score of every model's mean CRPS relative to a baseline model.

    Raises:
        InvalidInput: If the baseline has no mean CRPS row
        UndefinedSkillScore: If the baseline's mean CRPS is zero
    """
    mean_crps = model_metrics[model_metrics["scoring_metric"] == MetricRegistry.MEAN_CRPS.name]
    base = mean_crps.loc[mean_crps["model"] == baseline_model, "value"]
    if base.empty:
        raise validation.InvalidInput(f"Baseline model '{baseline_model}' not found in scores")
    base_value = float(base.iloc[0])

    rows = []
    for model, value in zip(mean_crps["model"], mean_crps["value"]):
        rows.append({
            "model": model,
            "scoring_metric": MetricRegistry.SKILL_SCORE.name,
            "value": skill_score(value, base_value),
        })
    return pd.DataFrame(rows, columns=["model", "scoring_metric", "value"])
