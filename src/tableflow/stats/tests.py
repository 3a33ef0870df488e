"""Statistical tests for group comparisons (parametric, nonparametric, exact)."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, FrozenSet, List, Optional

import numpy as np
import pandas as pd
from scipy import stats
from scipy.stats.contingency import expected_freq
from statsmodels.stats.oneway import anova_oneway

from tableflow.core.classify import VariableKind
from tableflow.errors import ConfigurationError, UnknownTestError

logger = logging.getLogger(__name__)

PVALUE_DECIMALS = 4
MIN_EXPECTED_COUNT = 5
MONTE_CARLO_TABLES = 10_000

TestFn = Callable[[np.ndarray, np.ndarray], float]

CONTINUOUS = frozenset({VariableKind.CONTINUOUS})
CATEGORICAL = frozenset({VariableKind.CATEGORICAL})
ANY_KIND = frozenset(VariableKind)


@dataclass(frozen=True)
class TestSpec:
    """A named test bound to the variable kinds it accepts.

    ``compute(values, groups)`` never raises: failures, fewer than two
    non-empty groups and non-finite results all yield NaN. Finite p-values
    are rounded to 4 decimals.
    """

    __test__ = False

    name: str
    applies_to: FrozenSet[VariableKind]
    fn: TestFn

    def compute(self, values, groups) -> float:
        values = np.asarray(values, dtype=object)
        groups = np.asarray(groups, dtype=object)
        keep = ~(pd.isna(values) | pd.isna(groups))
        try:
            p = self.fn(values[keep], groups[keep])
        except Exception as e:
            logger.debug(f"Test '{self.name}' failed: {e}")
            return np.nan
        if p is None:
            return np.nan
        try:
            p = float(p)
        except (TypeError, ValueError):
            return np.nan
        if not np.isfinite(p):
            return np.nan
        return round(p, PVALUE_DECIMALS)


def split_groups(values: np.ndarray, groups: np.ndarray) -> List[np.ndarray]:
    """Numeric values per group level, empty groups dropped."""
    frame = pd.DataFrame({"value": pd.to_numeric(pd.Series(values), errors="coerce"), "group": groups})
    frame = frame.dropna(subset=["value"])
    arrays = [g["value"].to_numpy(dtype=float) for _, g in frame.groupby("group", sort=True)]
    return [a for a in arrays if len(a) > 0]


def contingency(values: np.ndarray, groups: np.ndarray) -> np.ndarray:
    """Observed counts, rows = variable levels, columns = groups."""
    if len(values) == 0:
        return np.zeros((0, 0), dtype=int)
    table = pd.crosstab(pd.Series(values, dtype=object), pd.Series(groups, dtype=object))
    return table.to_numpy(dtype=int)


def student_t(values: np.ndarray, groups: np.ndarray) -> float:
    """Student t-test for two groups, pooled-variance one-way ANOVA for more."""
    arrays = split_groups(values, groups)
    if len(arrays) < 2:
        return np.nan
    if len(arrays) == 2:
        _, p = stats.ttest_ind(arrays[0], arrays[1], equal_var=True)
        return p
    return anova_oneway(arrays, use_var="equal").pvalue


def welch(values: np.ndarray, groups: np.ndarray) -> float:
    """Welch t-test for two groups, Welch ANOVA for more."""
    arrays = split_groups(values, groups)
    if len(arrays) < 2:
        return np.nan
    if len(arrays) == 2:
        _, p = stats.ttest_ind(arrays[0], arrays[1], equal_var=False)
        return p
    return anova_oneway(arrays, use_var="unequal", welch_correction=True).pvalue


def kruskal(values: np.ndarray, groups: np.ndarray) -> float:
    """Kruskal-Wallis rank test."""
    arrays = split_groups(values, groups)
    if len(arrays) < 2:
        return np.nan
    _, p = stats.kruskal(*arrays)
    return p


def anova(values: np.ndarray, groups: np.ndarray) -> float:
    """One-way ANOVA F-test."""
    arrays = split_groups(values, groups)
    if len(arrays) < 2:
        return np.nan
    _, p = stats.f_oneway(*arrays)
    return p


def fisher_table(table: np.ndarray, n_tables: int = MONTE_CARLO_TABLES, seed: int = 0) -> float:
    """Fisher test of independence on a contingency table.

    2x2 tables use Fisher's exact test. Larger tables get a simulated
    p-value, not the exact network-algorithm one: ``n_tables`` tables with
    the observed margins are drawn from the hypergeometric null and the
    p-value is (hits + 1) / (n_tables + 1), where hits counts draws at most
    as likely as the observed table. Its Monte Carlo error is about
    sqrt(p / n_tables).

    Args:
        table: Observed counts (r x c)
        n_tables: Number of simulated tables
        seed: Random seed (results are deterministic for a given seed)

    Returns:
        p-value, or NaN when the table has fewer than two rows or columns
    """
    table = np.asarray(table, dtype=int)
    if table.ndim != 2 or min(table.shape) < 2:
        return np.nan
    if table.shape == (2, 2):
        _, p = stats.fisher_exact(table)
        return p

    rng = np.random.default_rng(seed)
    dist = stats.random_table(table.sum(axis=1), table.sum(axis=0), seed=rng)
    observed = dist.logpmf(table)
    simulated = dist.logpmf(dist.rvs(size=n_tables, random_state=rng))
    tolerance = 1e-7 * max(1.0, abs(observed))
    hits = int(np.count_nonzero(simulated <= observed + tolerance))
    return (hits + 1) / (n_tables + 1)


def fisher(values: np.ndarray, groups: np.ndarray) -> float:
    """Fisher test on the variable-by-group table (simulated p-value beyond 2x2)."""
    return fisher_table(contingency(values, groups))


def chisq(values: np.ndarray, groups: np.ndarray) -> float:
    """Pearson chi-square, replaced by the Fisher test when any expected count is below 5."""
    table = contingency(values, groups)
    if table.ndim != 2 or min(table.shape) < 2:
        return np.nan
    if (expected_freq(table) < MIN_EXPECTED_COUNT).any():
        logger.debug("Expected counts below 5, using Fisher test instead of chi-square")
        return fisher_table(table)
    _, p, _, _ = stats.chi2_contingency(table)
    return p


BUILTIN_TESTS: Dict[str, TestSpec] = {
    "ttest": TestSpec("ttest", CONTINUOUS, student_t),
    "welch": TestSpec("welch", CONTINUOUS, welch),
    "kruskal": TestSpec("kruskal", CONTINUOUS, kruskal),
    "anova": TestSpec("anova", CONTINUOUS, anova),
    "fisher": TestSpec("fisher", CATEGORICAL, fisher),
    "chisq": TestSpec("chisq", CATEGORICAL, chisq),
}


def build(test_name: str, variable_kind: VariableKind, registry=None) -> TestSpec:
    """Look up a test by name and check it applies to the variable kind.

    Args:
        test_name: Built-in or registered test name
        variable_kind: Kind of the variable being tested
        registry: Optional TestRegistry holding custom tests

    Raises:
        UnknownTestError: If the name is not recognised
        ConfigurationError: If the test does not apply to ``variable_kind``
    """
    spec: Optional[TestSpec]
    if registry is not None:
        spec = registry.get(test_name)
        known = registry.names()
    else:
        spec = BUILTIN_TESTS.get(test_name)
        known = tuple(BUILTIN_TESTS)

    if spec is None:
        raise UnknownTestError(test_name, known)

    if variable_kind not in spec.applies_to:
        raise ConfigurationError(
            f"Test '{test_name}' does not apply to {variable_kind.value} variables"
        )
    return spec
