"""Tests for the statistical test dispatcher."""

import numpy as np
import pytest
from scipy import stats

from tableflow.core.classify import VariableKind
from tableflow.errors import ConfigurationError, UnknownTestError
from tableflow.stats.tests import BUILTIN_TESTS, build, fisher_table


def expand(table, row_labels, col_labels):
    """Turn a contingency table into parallel value/group arrays."""
    values, groups = [], []
    for i, r in enumerate(row_labels):
        for j, c in enumerate(col_labels):
            values += [r] * int(table[i][j])
            groups += [c] * int(table[i][j])
    return np.array(values, dtype=object), np.array(groups, dtype=object)


@pytest.fixture
def two_groups():
    np.random.seed(42)
    values = np.concatenate([np.random.normal(0, 1, 30), np.random.normal(1, 1, 30)])
    groups = np.array(["A"] * 30 + ["B"] * 30, dtype=object)
    return values, groups


def test_build_unknown_name():
    """Unknown names raise UnknownTestError listing the name."""
    with pytest.raises(UnknownTestError, match="bogus"):
        build("bogus", VariableKind.CONTINUOUS)


def test_build_wrong_kind():
    """Known tests reject variables of the wrong kind."""
    with pytest.raises(ConfigurationError):
        build("chisq", VariableKind.CONTINUOUS)
    with pytest.raises(ConfigurationError):
        build("ttest", VariableKind.CATEGORICAL)


def test_ttest_matches_scipy(two_groups):
    """ttest is Student's t for two groups, rounded to 4 decimals."""
    values, groups = two_groups
    p = build("ttest", VariableKind.CONTINUOUS).compute(values, groups)
    _, expected = stats.ttest_ind(values[:30], values[30:], equal_var=True)
    assert p == round(expected, 4)


def test_welch_matches_scipy(two_groups):
    """welch is Welch's t for two groups."""
    values, groups = two_groups
    p = build("welch", VariableKind.CONTINUOUS).compute(values, groups)
    _, expected = stats.ttest_ind(values[:30], values[30:], equal_var=False)
    assert p == round(expected, 4)


def test_three_group_tests():
    """anova, kruskal, ttest and welch all handle more than two groups."""
    np.random.seed(42)
    values = np.concatenate([np.random.normal(m, 1, 20) for m in (0, 0.5, 1)])
    groups = np.repeat(["A", "B", "C"], 20).astype(object)
    arrays = [values[:20], values[20:40], values[40:]]

    assert BUILTIN_TESTS["anova"].compute(values, groups) == round(stats.f_oneway(*arrays)[1], 4)
    assert BUILTIN_TESTS["kruskal"].compute(values, groups) == round(stats.kruskal(*arrays)[1], 4)
    # pooled one-way ANOVA equals the classic F-test
    assert BUILTIN_TESTS["ttest"].compute(values, groups) == pytest.approx(
        round(stats.f_oneway(*arrays)[1], 4), abs=1e-4
    )
    assert 0 <= BUILTIN_TESTS["welch"].compute(values, groups) <= 1


@pytest.mark.parametrize("name", ["ttest", "welch", "kruskal", "anova"])
def test_fewer_than_two_groups_is_na(name):
    """A single non-empty group yields NA."""
    values = np.array([1.0, 2.0, 3.0, np.nan], dtype=object)
    groups = np.array(["A", "A", "A", "B"], dtype=object)
    assert np.isnan(BUILTIN_TESTS[name].compute(values, groups))


def test_missing_values_are_dropped(two_groups):
    """NaN values and NaN groups are ignored."""
    values, groups = two_groups
    noisy_values = np.append(values, [np.nan, 5.0]).astype(object)
    noisy_groups = np.append(groups, ["A", None]).astype(object)
    spec = BUILTIN_TESTS["ttest"]
    assert spec.compute(noisy_values, noisy_groups) == spec.compute(values, groups)


def test_failures_map_to_na():
    """Exceptions inside a test function become NA."""
    from tableflow.stats.tests import TestSpec, ANY_KIND

    def explode(values, groups):
        raise ValueError("nope")

    spec = TestSpec("explode", ANY_KIND, explode)
    assert np.isnan(spec.compute([1, 2], ["a", "b"]))


def test_fisher_2x2_matches_scipy():
    """2x2 tables use Fisher's exact test."""
    table = [[3, 1], [1, 3]]
    values, groups = expand(table, ["yes", "no"], ["A", "B"])
    p = BUILTIN_TESTS["fisher"].compute(values, groups)
    assert p == round(stats.fisher_exact(table)[1], 4)


def test_chisq_falls_back_to_fisher_on_small_counts():
    """chisq equals fisher when an expected count is below 5."""
    table = [[8, 2], [1, 5]]
    values, groups = expand(table, ["yes", "no"], ["A", "B"])
    chisq = BUILTIN_TESTS["chisq"].compute(values, groups)
    fisher = BUILTIN_TESTS["fisher"].compute(values, groups)
    assert chisq == fisher


def test_chisq_on_large_counts_uses_pearson():
    """With all expected counts >= 5, chisq is the Pearson test."""
    table = np.array([[40, 20], [25, 35]])
    values, groups = expand(table, ["yes", "no"], ["A", "B"])
    p = BUILTIN_TESTS["chisq"].compute(values, groups)
    assert p == round(stats.chi2_contingency(table)[1], 4)


def test_fisher_larger_table_is_deterministic():
    """r x c simulated test is seeded and lands in (0, 1]."""
    table = np.array([[5, 1, 2], [1, 6, 2], [2, 2, 7]])
    p1 = fisher_table(table)
    p2 = fisher_table(table)
    assert p1 == p2
    assert 0 < p1 <= 1


def test_fisher_larger_table_is_simulated():
    """r x c p-values are Monte Carlo estimates on the (hits + 1) / (n + 1) grid."""
    table = np.array([[5, 1, 2], [1, 6, 2], [2, 2, 7]])
    n_tables = 999
    p = fisher_table(table, n_tables=n_tables)
    hits = p * (n_tables + 1) - 1
    assert hits == pytest.approx(round(hits))
    assert p >= 1 / (n_tables + 1)


def test_fisher_independent_table_has_large_p():
    """A table with proportional rows is not significant."""
    table = np.array([[10, 10, 10], [10, 10, 10]])
    assert fisher_table(table) > 0.5


def test_degenerate_tables_are_na():
    """One observed row or column yields NA."""
    values = np.array(["yes"] * 6, dtype=object)
    groups = np.array(["A", "A", "A", "B", "B", "B"], dtype=object)
    assert np.isnan(BUILTIN_TESTS["fisher"].compute(values, groups))
    assert np.isnan(BUILTIN_TESTS["chisq"].compute(values, groups))
    assert np.isnan(fisher_table(np.array([[1, 2, 3]])))
