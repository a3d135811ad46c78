"""
samplecast - Quantile forecasting and scoring from simulated sample paths.

This package provides modular components for probabilistic forecast evaluation:

- samplecast.paths: SamplePathSet, SamplePathStore containers
- samplecast.simulate: Simulator interface and a seasonal naive benchmark
- samplecast.quantiles: Empirical quantile forecasts from sample paths
- samplecast.pinball: Pinball loss, CRPS and skill scores
- samplecast.evaluation: Scoring a whole store against observations
- samplecast.ensemble: Pooled ensembles and point-forecast combination
- samplecast.validation: Error kinds and input checks
- samplecast.datasets: Cached dataset file for the report

Usage:
    import samplecast as sc

    store = sc.simulate.simulate_store({"snaive": sim}, n_paths=1000)
    store = sc.ensemble.combine_store(store, name="ensemble")
    results = sc.evaluation.score_store(store, observed, baseline="snaive")
    results.accuracy_table()
"""

__version__ = "0.1.0"

from . import validation
from . import config
from . import paths
from . import quantiles
from . import pinball
from . import ensemble
from . import evaluation
from . import simulate
from . import datasets
from .logging_config import configure_logging
from .validation import ValidationError, InvalidInput, IncompatibleHorizon, UndefinedSkillScore
from .paths import SamplePathSet, SamplePathStore

__all__ = ['validation', 'config', 'paths', 'quantiles', 'pinball', 'ensemble', 'evaluation',
           'simulate', 'datasets', 'configure_logging', 'ValidationError', 'InvalidInput',
           'IncompatibleHorizon', 'UndefinedSkillScore', 'SamplePathSet', 'SamplePathStore']
