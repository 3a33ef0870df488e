"""Table loading for CSV, TSV, Parquet and Parquet dataset directories."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import pandas as pd

from tableflow.data.spec import DataFormat

logger = logging.getLogger(__name__)


def load_table(
    path: Path,
    columns: Optional[List[str]] = None,
) -> pd.DataFrame:
    """
    Load a table from file (CSV, TSV, Parquet, or Parquet dataset directory).

    Parameters
    ----------
    path : Path
        Path to data file or directory
    columns : List[str], optional
        Subset of columns to load

    Returns
    -------
    pd.DataFrame
        Loaded data

    Raises
    ------
    FileNotFoundError
        If the path does not exist
    ValueError
        If the format cannot be inferred or a dataset directory is empty

    Examples
    --------
    >>> df = load_table(Path("trial.csv"))
    >>> df = load_table(Path("trial.parquet"))
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Data path not found: {path}")

    fmt = DataFormat.from_path(path)
    logger.info(f"Loading table from {path} (format: {fmt.value})")

    if fmt == DataFormat.CSV:
        df = _load_delimited(path, sep=",", columns=columns)
    elif fmt == DataFormat.TSV:
        df = _load_delimited(path, sep="\t", columns=columns)
    elif fmt == DataFormat.PARQUET:
        df = _load_parquet(path, columns=columns)
    else:
        df = _load_parquet_dataset(path, columns=columns)

    logger.info(f"Loaded {len(df)} rows, {len(df.columns)} columns")
    return df


def _load_delimited(path: Path, sep: str, columns: Optional[List[str]] = None) -> pd.DataFrame:
    kwargs = {"sep": sep}
    if columns is not None:
        kwargs["usecols"] = columns
    return pd.read_csv(path, **kwargs)


def _load_parquet(path: Path, columns: Optional[List[str]] = None) -> pd.DataFrame:
    import pyarrow.parquet as pq

    return pq.read_table(path, columns=columns).to_pandas()


def _load_parquet_dataset(path: Path, columns: Optional[List[str]] = None) -> pd.DataFrame:
    """Load a directory of parquet files (optionally hive partitioned)."""
    import pyarrow.dataset as ds

    parquet_files = [
        f for f in path.glob("**/*.parquet") if not f.name.startswith((".", "_"))
    ]
    if not parquet_files:
        raise ValueError(f"No parquet files found in {path}")

    logger.info(f"Found {len(parquet_files)} parquet files in dataset directory")

    dataset = ds.dataset(path, format="parquet", partitioning="hive")
    kwargs = {}
    if columns is not None:
        kwargs["columns"] = columns
    try:
        return dataset.to_table(**kwargs).to_pandas()
    except Exception as e:
        raise ValueError(
            f"Failed to load parquet dataset: {e}. "
            "Ensure all parquet files have the same schema."
        ) from e
