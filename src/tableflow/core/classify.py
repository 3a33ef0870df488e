"""Continuous vs categorical classification of analysis variables."""

from __future__ import annotations

from enum import Enum
from typing import List

import pandas as pd
from pandas.api import types as ptypes

DEFAULT_CATEGORY_THRESHOLD = 10


class VariableKind(str, Enum):
    """How a variable is summarized."""

    CONTINUOUS = "continuous"
    CATEGORICAL = "categorical"


def classify(column: pd.Series, threshold: int = DEFAULT_CATEGORY_THRESHOLD) -> VariableKind:
    """Classify a column as continuous or categorical.

    Non-numeric columns are always categorical. Numeric columns with at most
    ``threshold`` distinct non-missing values are categorical too. Empty and
    all-missing columns are categorical.

    Args:
        column: Column values
        threshold: Largest distinct-value count still treated as categorical

    Returns:
        VariableKind
    """
    if isinstance(column.dtype, pd.CategoricalDtype):
        return VariableKind.CATEGORICAL
    if ptypes.is_bool_dtype(column) or not ptypes.is_numeric_dtype(column):
        return VariableKind.CATEGORICAL

    values = column.dropna()
    if values.empty:
        return VariableKind.CATEGORICAL
    if values.nunique() <= threshold:
        return VariableKind.CATEGORICAL
    return VariableKind.CONTINUOUS


def category_levels(column: pd.Series) -> List:
    """Observed levels of a column in a deterministic order.

    Declared category order for pandas categoricals (unused categories are
    dropped), sorted order otherwise. Mixed-type levels that cannot be
    compared fall back to sorting by their string form.
    """
    values = column.dropna()
    if isinstance(column.dtype, pd.CategoricalDtype):
        observed = set(values.unique())
        return [level for level in column.cat.categories if level in observed]

    unique = list(values.unique())
    try:
        return sorted(unique)
    except TypeError:
        return sorted(unique, key=str)
