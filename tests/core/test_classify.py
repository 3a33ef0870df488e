"""Tests for variable classification."""

import numpy as np
import pandas as pd

from tableflow.core.classify import VariableKind, category_levels, classify


def test_many_distinct_numbers_are_continuous():
    """Numeric column above the threshold is continuous."""
    column = pd.Series(np.arange(50, dtype=float))
    assert classify(column) == VariableKind.CONTINUOUS


def test_few_distinct_numbers_are_categorical():
    """Numeric column with <= threshold distinct values is categorical."""
    column = pd.Series([1, 2, 3, 1, 2, 3] * 5)
    assert classify(column) == VariableKind.CATEGORICAL
    assert classify(column, threshold=2) == VariableKind.CONTINUOUS


def test_threshold_is_inclusive():
    """Exactly ``threshold`` distinct values stays categorical."""
    column = pd.Series(np.arange(10))
    assert classify(column, threshold=10) == VariableKind.CATEGORICAL
    assert classify(column, threshold=9) == VariableKind.CONTINUOUS


def test_strings_booleans_and_categoricals_are_categorical():
    """Non-numeric dtypes are always categorical."""
    assert classify(pd.Series([f"id{i}" for i in range(100)])) == VariableKind.CATEGORICAL
    assert classify(pd.Series([True, False] * 20)) == VariableKind.CATEGORICAL
    assert classify(pd.Series(pd.Categorical(range(30)))) == VariableKind.CATEGORICAL


def test_empty_and_all_missing_are_categorical():
    """Degenerate columns never raise."""
    assert classify(pd.Series([], dtype=float)) == VariableKind.CATEGORICAL
    assert classify(pd.Series([np.nan, np.nan])) == VariableKind.CATEGORICAL


def test_missing_values_do_not_count_as_levels():
    """NaN is excluded from the distinct count."""
    column = pd.Series([1.0, 2.0, np.nan, np.nan])
    assert classify(column, threshold=2) == VariableKind.CATEGORICAL


def test_levels_sorted_for_plain_columns():
    """Plain columns list observed levels in sorted order."""
    assert category_levels(pd.Series(["b", "a", None, "c", "a"])) == ["a", "b", "c"]


def test_levels_follow_declared_category_order():
    """Categoricals keep declared order and drop unobserved levels."""
    column = pd.Series(pd.Categorical(["low", "high", "low"], categories=["high", "mid", "low"]))
    assert category_levels(column) == ["high", "low"]


def test_levels_mixed_types_do_not_raise():
    """Incomparable levels fall back to string ordering."""
    levels = category_levels(pd.Series(["x", 1, "y"], dtype=object))
    assert sorted(map(str, levels)) == ["1", "x", "y"]
