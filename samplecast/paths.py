"""
Sample path containers.

A SamplePathSet holds the simulated future trajectories of one model as an
``(n_paths, n_horizons)`` array together with the horizon labels the columns
refer to. A SamplePathStore maps model names to their path sets. Both are
read-only once built: simulators produce them, every other component only
reads them.
"""

import logging
from collections import abc
from typing import Dict, Hashable, Iterator, List, Mapping, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from .validation import InvalidInput

logger = logging.getLogger(__name__)


class SamplePathSet:
    """
    Simulated future trajectories of a single model.

    Parameters:
    - values (array-like): 2-D array, one row per path, one column per horizon step.
      A 1-D array is read as a single path.
    - horizons (sequence, optional): Horizon labels for the columns. Defaults to 1..H.

    Attributes:
    - values (np.ndarray): Read-only copy of the paths
    - horizons (tuple): Horizon labels, in order

    Example:
        paths = SamplePathSet(np.array([[1.0, 2.0], [3.0, 4.0]]))
        paths.at(2)          # array([2., 4.])
        paths.n_paths        # 2
    """

    def __init__(self, values, horizons: Optional[Sequence[Hashable]] = None):
        arr = np.array(values, dtype=float)
        if arr.ndim == 1:
            arr = arr.reshape(1, -1)
        if arr.ndim != 2:
            raise InvalidInput(f"Sample paths must be a 2-D array, got {arr.ndim} dimensions")
        if arr.shape[0] == 0:
            raise InvalidInput("Sample path set contains no paths")
        if arr.shape[1] == 0:
            raise InvalidInput("Sample paths span no horizon steps")
        if not np.all(np.isfinite(arr)):
            raise InvalidInput("Sample paths contain non-finite values")

        if horizons is None:
            horizons = range(1, arr.shape[1] + 1)
        horizons = tuple(horizons)
        if len(horizons) != arr.shape[1]:
            raise InvalidInput(
                f"{len(horizons)} horizon labels given for paths of length {arr.shape[1]}"
            )
        if len(set(horizons)) != len(horizons):
            raise InvalidInput("Horizon labels must be unique")

        arr.setflags(write=False)
        self._values = arr
        self._horizons = horizons
        self._positions = {h: i for i, h in enumerate(horizons)}

    @property
    def values(self) -> np.ndarray:
        return self._values

    @property
    def horizons(self) -> Tuple[Hashable, ...]:
        return self._horizons

    @property
    def n_paths(self) -> int:
        return self._values.shape[0]

    @property
    def n_horizons(self) -> int:
        return self._values.shape[1]

    def __len__(self) -> int:
        return self.n_paths

    def __repr__(self) -> str:
        return f"SamplePathSet(n_paths={self.n_paths}, horizons={self.horizons[0]!r}..{self.horizons[-1]!r})"

    def __eq__(self, other) -> bool:
        if not isinstance(other, SamplePathSet):
            return NotImplemented
        return self.horizons == other.horizons and np.array_equal(self.values, other.values)

    __hash__ = None

    def position(self, horizon_step: Hashable) -> int:
        """Column index of a horizon label."""
        try:
            return self._positions[horizon_step]
        except (KeyError, TypeError):
            raise InvalidInput(
                f"Unknown horizon step {horizon_step!r}; expected one of "
                f"{self.horizons[0]!r}..{self.horizons[-1]!r}"
            )

    def at(self, horizon_step: Hashable) -> np.ndarray:
        """Values of every path at one horizon step."""
        return self._values[:, self.position(horizon_step)]

    def mean(self) -> pd.Series:
        """Mean path (the point forecast), indexed by horizon."""
        return pd.Series(self._values.mean(axis=0), index=pd.Index(self.horizons, name="horizon"))

    def is_aligned(self, other: "SamplePathSet") -> bool:
        return self.horizons == other.horizons

    def to_frame(self) -> pd.DataFrame:
        """Long format: rep, horizon, value."""
        n, h = self._values.shape
        return pd.DataFrame({
            "rep": np.repeat(np.arange(n), h),
            "horizon": list(self.horizons) * n,
            "value": self._values.reshape(-1),
        })

    @classmethod
    def from_frame(cls, df: pd.DataFrame, replicate_col: str = "rep", horizon_col: str = "horizon",
                   value_col: str = "value") -> "SamplePathSet":
        """
        Build a path set from a long frame with one row per (replicate, horizon).

        Horizons are sorted; every replicate must cover every horizon step.
        """
        missing_cols = [c for c in (replicate_col, horizon_col, value_col) if c not in df.columns]
        if missing_cols:
            raise InvalidInput(f"Sample path frame missing required columns: {missing_cols}")
        if df.empty:
            raise InvalidInput("Sample path frame is empty")
        if df.duplicated([replicate_col, horizon_col]).any():
            raise InvalidInput("Sample path frame has duplicate (replicate, horizon) rows")

        wide = df.pivot(index=replicate_col, columns=horizon_col, values=value_col).sort_index(axis=1)
        if wide.isna().any().any():
            raise InvalidInput("Not every replicate covers the same horizon steps")
        return cls(wide.to_numpy(), horizons=list(wide.columns))


class SamplePathStore(abc.Mapping):
    """
    Read-only mapping of model name -> SamplePathSet.

    Example:
        store = SamplePathStore({"ets": ets_paths, "arima": arima_paths})
        store = store.with_model("ensemble", combine([...]))
        store.models()       # ['ets', 'arima', 'ensemble']
    """

    def __init__(self, sets: Optional[Mapping[str, SamplePathSet]] = None):
        sets = dict(sets or {})
        for name, paths in sets.items():
            if not isinstance(paths, SamplePathSet):
                raise InvalidInput(f"Model '{name}' must map to a SamplePathSet, got {type(paths).__name__}")
        self._sets: Dict[str, SamplePathSet] = sets

    def __getitem__(self, model: str) -> SamplePathSet:
        try:
            return self._sets[model]
        except KeyError:
            raise InvalidInput(f"Unknown model '{model}'; available: {self.models()}")

    def __iter__(self) -> Iterator[str]:
        return iter(self._sets)

    def __len__(self) -> int:
        return len(self._sets)

    def __contains__(self, model) -> bool:
        return model in self._sets

    def get(self, model: str, default=None) -> Optional[SamplePathSet]:
        return self._sets.get(model, default)

    def __repr__(self) -> str:
        return f"SamplePathStore({', '.join(f'{m}={len(p)}' for m, p in self._sets.items())})"

    def models(self) -> List[str]:
        return list(self._sets)

    def with_model(self, model: str, paths: SamplePathSet) -> "SamplePathStore":
        """New store with ``model`` added (or replaced); this store is unchanged."""
        sets = dict(self._sets)
        if model in sets:
            logger.debug(f"Replacing sample paths for model '{model}'")
        sets[model] = paths
        return SamplePathStore(sets)

    def to_frame(self) -> pd.DataFrame:
        """Long format: model, rep, horizon, value."""
        frames = [p.to_frame().assign(model=m) for m, p in self._sets.items()]
        if not frames:
            return pd.DataFrame(columns=["model", "rep", "horizon", "value"])
        df = pd.concat(frames, ignore_index=True)
        return df[["model", "rep", "horizon", "value"]]

    @classmethod
    def from_frame(cls, df: pd.DataFrame, model_col: str = "model", replicate_col: str = "rep",
                   horizon_col: str = "horizon", value_col: str = "value") -> "SamplePathStore":
        if model_col not in df.columns:
            raise InvalidInput(f"Sample path frame missing required columns: ['{model_col}']")
        sets = {}
        for model, sub in df.groupby(model_col, sort=False):
            sets[model] = SamplePathSet.from_frame(sub, replicate_col, horizon_col, value_col)
        logger.debug(f"Loaded sample paths for {len(sets)} models")
        return cls(sets)
