"""
Scoring configuration for samplecast.
"""

from dataclasses import dataclass, field, replace
from typing import Optional, Tuple

import numpy as np

from .validation import InvalidInput, validate_probability_levels

# Probability grid used by the report: the nine deciles
DECILES: Tuple[float, ...] = (0.1, 0.2, 0.3, 0.4, 0.5, 0.6, 0.7, 0.8, 0.9)

# Central 80% interval
INTERVAL_80: Tuple[float, float] = (0.1, 0.9)


def uniform_grid(n: int) -> Tuple[float, ...]:
    """``n`` evenly spaced interior levels ``k / (n + 1)``; ``uniform_grid(9)`` gives the deciles."""
    if int(n) != n or n < 1:
        raise InvalidInput(f"Grid size must be a positive integer, got {n}")
    n = int(n)
    return tuple(float(round(p, 12)) for p in np.arange(1, n + 1) / (n + 1))


@dataclass(frozen=True)
class ScoringConfig:
    """Settings shared by the quantile and scoring functions."""
    probability_levels: Tuple[float, ...] = field(default=DECILES)
    include_multiplier: bool = True     # pinball loss scaled by 2 so the median loss is |y - f|
    baseline: Optional[str] = None      # model used as reference for skill scores

    def __post_init__(self):
        levels = validate_probability_levels(self.probability_levels, context="ScoringConfig.probability_levels")
        object.__setattr__(self, "probability_levels", tuple(float(p) for p in levels))

    @property
    def multiplier(self) -> float:
        return 2.0 if self.include_multiplier else 1.0

    def with_grid(self, n: int) -> "ScoringConfig":
        """Copy of this config scoring on ``uniform_grid(n)``."""
        return replace(self, probability_levels=uniform_grid(n))


DEFAULT_CONFIG = ScoringConfig()
