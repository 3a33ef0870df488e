"""
Data access layer for tableflow.

Supports CSV, TSV, single Parquet files and Parquet dataset directories,
and wraps loaded frames in a read-only DataSource.

Example usage:
    from tableflow.data import DataSource, load_table

    df = load_table(Path("trial.parquet"))
    source = DataSource(df)
    ages = source.where("arm", "A").column("age")
"""

from tableflow.data.spec import DataFormat
from tableflow.data.loaders import load_table
from tableflow.data.source import DataSource

__all__ = [
    "DataFormat",
    "DataSource",
    "load_table",
]
