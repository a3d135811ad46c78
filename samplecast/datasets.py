"""
Cached dataset file for the report.

The turnover series is fetched once (by whatever ``fetch`` callable the
caller supplies) and kept as a two-column CSV (date, value) so later runs
read it from disk.
"""

import logging
from pathlib import Path
from typing import Callable, Union

import pandas as pd

from .validation import InvalidInput

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ["date", "value"]


def read_series(path: Union[str, Path], freq: str = "M") -> pd.Series:
    """
    Read a cached series into a pd.Series indexed by a PeriodIndex.

    Args:
        path: CSV file with columns date, value
        freq: Period frequency of the index. Defaults to monthly.

    Raises:
        InvalidInput: If a column is missing or a row has a missing or
            unparseable date or value
    """
    df = pd.read_csv(path)
    missing_cols = [col for col in REQUIRED_COLUMNS if col not in df.columns]
    if missing_cols:
        raise InvalidInput(f"Cached dataset {path} missing required columns: {missing_cols}")

    dates = pd.to_datetime(df["date"], errors="coerce")
    values = pd.to_numeric(df["value"], errors="coerce")
    bad_rows = df.index[dates.isna() | values.isna()].tolist()
    if bad_rows:
        raise InvalidInput(
            f"Cached dataset {path} has missing or unparseable date/value in rows {bad_rows}: "
            f"{df.loc[bad_rows, REQUIRED_COLUMNS].to_dict('records')}"
        )

    index = pd.DatetimeIndex(dates, name="date").to_period(freq)
    series = pd.Series(values.to_numpy(dtype=float), index=index, name="value")
    return series.sort_index()


def write_series(series: pd.Series, path: Union[str, Path]) -> Path:
    """Write a series as date, value CSV; parent directories are created."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    index = series.index
    if isinstance(index, pd.PeriodIndex):
        index = index.to_timestamp()
    df = pd.DataFrame({"date": pd.to_datetime(index).strftime("%Y-%m-%d"), "value": series.to_numpy()})
    df.to_csv(path, index=False)
    logger.info(f"Wrote {len(df)} observations to {path}")
    return path


def cached_series(path: Union[str, Path], fetch: Callable[[], pd.Series], freq: str = "M") -> pd.Series:
    """
    Return the series cached at ``path``, fetching and caching it on first use.

    Args:
        path: Cache file location
        fetch: Callable returning the series when no cache exists
        freq: Period frequency of the returned index
    """
    path = Path(path)
    if path.exists():
        logger.info(f"Reading cached dataset from {path}")
        return read_series(path, freq=freq)

    logger.info(f"No cached dataset at {path}, fetching")
    series = fetch()
    if not isinstance(series, pd.Series):
        raise InvalidInput(f"fetch() must return a pd.Series, got {type(series).__name__}")
    write_series(series, path)
    return read_series(path, freq=freq)
