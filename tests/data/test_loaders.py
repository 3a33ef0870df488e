"""Tests for tableflow.data loaders and DataSource."""

from __future__ import annotations

import numpy as np
import pandas as pd
import pytest
from pathlib import Path

from tableflow.data import DataFormat, DataSource, load_table
from tableflow.errors import MissingVariableError


# ============================================================================
# Format inference
# ============================================================================


def test_format_from_suffix(tmp_path):
    """Formats are inferred from file suffixes and directories."""
    assert DataFormat.from_path(Path("x.csv")) == DataFormat.CSV
    assert DataFormat.from_path(Path("x.TSV")) == DataFormat.TSV
    assert DataFormat.from_path(Path("x.parquet")) == DataFormat.PARQUET
    assert DataFormat.from_path(tmp_path) == DataFormat.PARQUET_DATASET


def test_unknown_suffix():
    """Unknown suffixes raise ValueError."""
    with pytest.raises(ValueError, match="Cannot infer"):
        DataFormat.from_path(Path("x.sav"))


@pytest.mark.parametrize(
    "name,expected",
    [
        ("trial.tab", DataFormat.TSV),
        ("trial.txt", DataFormat.TSV),
        ("trial.pq", DataFormat.PARQUET),
        ("TRIAL.PARQUET", DataFormat.PARQUET),
    ],
)
def test_format_suffix_aliases(name, expected):
    """Common alternative suffixes map to the same formats."""
    assert DataFormat.from_path(name) == expected


# ============================================================================
# Loading
# ============================================================================


def test_load_csv(tmp_path, clinical_df):
    """CSV round trip keeps rows and columns."""
    path = tmp_path / "trial.csv"
    clinical_df.to_csv(path, index=False)

    df = load_table(path)
    assert df.shape == clinical_df.shape
    assert list(df.columns) == list(clinical_df.columns)


def test_load_tsv_subset(tmp_path, clinical_df):
    """TSV files load with an optional column subset."""
    path = tmp_path / "trial.tsv"
    clinical_df.to_csv(path, sep="\t", index=False)

    df = load_table(path, columns=["arm", "age"])
    assert list(df.columns) == ["arm", "age"]


def test_load_parquet(tmp_path, clinical_df):
    """Single parquet files load through pyarrow."""
    pytest.importorskip("pyarrow")
    path = tmp_path / "trial.parquet"
    clinical_df.to_parquet(path, index=False)

    df = load_table(path)
    pd.testing.assert_frame_equal(df, clinical_df, check_dtype=False)


def test_load_parquet_dataset(tmp_path, clinical_df):
    """Directories of parquet chunks load as one table."""
    pytest.importorskip("pyarrow")
    dataset_dir = tmp_path / "trial_dataset"
    dataset_dir.mkdir()
    clinical_df.iloc[:60].to_parquet(dataset_dir / "part-0.parquet", index=False)
    clinical_df.iloc[60:].to_parquet(dataset_dir / "part-1.parquet", index=False)

    df = load_table(dataset_dir)
    assert len(df) == len(clinical_df)


def test_empty_dataset_directory(tmp_path):
    """A directory without parquet files is an error."""
    empty = tmp_path / "empty"
    empty.mkdir()
    with pytest.raises(ValueError, match="No parquet files"):
        load_table(empty)


def test_missing_path(tmp_path):
    """Missing files raise FileNotFoundError."""
    with pytest.raises(FileNotFoundError):
        load_table(tmp_path / "nope.csv")


# ============================================================================
# DataSource
# ============================================================================


def test_source_column_lookup(clinical_df):
    """Named columns are returned as copies."""
    source = DataSource(clinical_df)
    ages = source.column("age")
    ages.iloc[0] = -1.0
    assert clinical_df["age"].iloc[0] != -1.0
    assert "age" in source
    assert "weight" not in source


def test_source_missing_column(clinical_df):
    """Unknown columns raise MissingVariableError listing what exists."""
    source = DataSource(clinical_df)
    with pytest.raises(MissingVariableError) as excinfo:
        source.column("weight")
    assert excinfo.value.variable == "weight"
    assert "age" in excinfo.value.available


def test_source_where_and_filter(clinical_df):
    """Row selection by value and by predicate."""
    source = DataSource(clinical_df)
    arm_a = source.where("arm", "A")
    assert len(arm_a) == int((clinical_df["arm"] == "A").sum())

    older = source.filter(lambda df: df["age"] > 60)
    assert (older.column("age") > 60).all()

    assert source.select(["arm", "sex"]).columns == ("arm", "sex")


def test_source_wrap_is_idempotent(clinical_df):
    """Wrapping a DataSource returns it unchanged."""
    source = DataSource(clinical_df)
    assert DataSource.wrap(source) is source
    with pytest.raises(TypeError):
        DataSource(np.zeros(3))
