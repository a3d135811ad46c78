"""
Tests for scoring configuration and logging setup.
"""

import logging

import pytest

from samplecast.config import DECILES, ScoringConfig, uniform_grid
from samplecast.logging_config import configure_logging
from samplecast.validation import InvalidInput


def test_uniform_grid_nine_is_deciles():
    assert uniform_grid(9) == DECILES
    assert uniform_grid(1) == (0.5,)
    assert uniform_grid(3) == (0.25, 0.5, 0.75)


@pytest.mark.parametrize("n", [0, -2, 1.5])
def test_uniform_grid_rejects_bad_sizes(n):
    with pytest.raises(InvalidInput):
        uniform_grid(n)


def test_scoring_config_defaults():
    config = ScoringConfig()
    assert config.probability_levels == DECILES
    assert config.multiplier == 2.0
    assert ScoringConfig(include_multiplier=False).multiplier == 1.0


def test_scoring_config_with_grid():
    config = ScoringConfig(baseline="snaive").with_grid(19)
    assert len(config.probability_levels) == 19
    assert config.baseline == "snaive"


@pytest.mark.parametrize("levels", [(), (0.0, 0.5), (0.5, 1.0), (0.5, 0.5)])
def test_scoring_config_rejects_bad_levels(levels):
    with pytest.raises(InvalidInput):
        ScoringConfig(probability_levels=levels)


def test_configure_logging_keeps_existing_handlers():
    root = logging.getLogger()
    handler = logging.NullHandler()
    root.addHandler(handler)
    try:
        before = list(root.handlers)
        configure_logging()
        assert root.handlers == before
    finally:
        root.removeHandler(handler)
