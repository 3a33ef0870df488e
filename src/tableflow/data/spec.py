"""Input formats recognised by the table loader."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Union


class DataFormat(str, Enum):
    """On-disk layout of a subject-level input table."""

    CSV = "csv"
    TSV = "tsv"
    PARQUET = "parquet"
    PARQUET_DATASET = "parquet_dataset"

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "DataFormat":
        """Format for a data path.

        Directories are read as partitioned parquet datasets; files are
        matched on their (case-insensitive) suffix.

        Raises:
            ValueError: If the suffix is not a supported table format
        """
        path = Path(path)
        if path.is_dir():
            return cls.PARQUET_DATASET

        fmt = _SUFFIXES.get(path.suffix.lower())
        if fmt is None:
            supported = ", ".join(sorted(_SUFFIXES))
            raise ValueError(
                f"Cannot infer data format from '{path.name}': expected one of "
                f"{supported}, or a directory of parquet files"
            )
        return fmt


_SUFFIXES = {
    ".csv": DataFormat.CSV,
    ".tsv": DataFormat.TSV,
    ".tab": DataFormat.TSV,
    ".txt": DataFormat.TSV,
    ".parquet": DataFormat.PARQUET,
    ".pq": DataFormat.PARQUET,
}
