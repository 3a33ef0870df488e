"""Pytest configuration and fixtures."""

import pytest
import numpy as np
import pandas as pd

from tableflow.config import TableOptions
from tableflow.data import DataSource


@pytest.fixture
def clinical_df():
    """Synthetic trial data: two arms, two sites, mixed variable types."""
    np.random.seed(42)
    n_samples = 120

    df = pd.DataFrame(
        {
            "arm": np.random.choice(["A", "B"], size=n_samples),
            "site": np.random.choice(["North", "South"], size=n_samples),
            "age": np.round(np.random.normal(55, 10, size=n_samples), 1),
            "sex": np.random.choice(["F", "M"], size=n_samples),
            "bmi": np.round(np.random.normal(27, 4, size=n_samples), 1),
            "stage": np.random.choice(["I", "II", "III"], size=n_samples),
        }
    )
    # A handful of missing values in bmi only
    df.loc[[3, 17, 42, 88], "bmi"] = np.nan
    return df


@pytest.fixture
def clinical_source(clinical_df):
    """DataSource over the synthetic trial data."""
    return DataSource(clinical_df)


@pytest.fixture
def small_df():
    """Tiny grouped dataset with hand-checkable counts."""
    return pd.DataFrame(
        {
            "treatment": ["A", "A", "A", "B", "B", "B"],
            "age": [30.0, 40.0, 50.0, 35.0, 45.0, 55.0],
            "sex": ["M", "F", "M", "F", "F", "M"],
        }
    )


@pytest.fixture
def grouped_options():
    """Options for a grouped table with p-values.

    The low category threshold makes the six distinct ages in ``small_df``
    continuous.
    """
    return TableOptions(show_pvalue=True, category_threshold=4)


@pytest.fixture
def temp_outdir(tmp_path):
    """Provide temporary output directory."""
    outdir = tmp_path / "derived"
    outdir.mkdir()
    return outdir
