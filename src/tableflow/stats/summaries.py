"""Numeric summaries for continuous variables."""

from __future__ import annotations

from typing import Callable, Dict

import numpy as np

NA = "NA"

SummaryFn = Callable[[np.ndarray, int], str]


def _fmt(value: float, digits: int) -> str:
    if value is None or not np.isfinite(value):
        return NA
    return f"{value:.{digits}f}"


def mean_sd(values: np.ndarray, digits: int = 1) -> str:
    """Mean (SD)."""
    if len(values) == 0:
        return NA
    sd = float(np.std(values, ddof=1)) if len(values) > 1 else np.nan
    return f"{_fmt(float(np.mean(values)), digits)} ({_fmt(sd, digits)})"


def median_iqr(values: np.ndarray, digits: int = 1) -> str:
    """Median [Q1-Q3]."""
    if len(values) == 0:
        return NA
    q1, med, q3 = np.percentile(values, [25, 50, 75])
    return f"{_fmt(med, digits)} [{_fmt(q1, digits)}-{_fmt(q3, digits)}]"


def mean_se(values: np.ndarray, digits: int = 1) -> str:
    """Mean +/- standard error."""
    if len(values) == 0:
        return NA
    se = float(np.std(values, ddof=1)) / np.sqrt(len(values)) if len(values) > 1 else np.nan
    return f"{_fmt(float(np.mean(values)), digits)} +/- {_fmt(se, digits)}"


def median_range(values: np.ndarray, digits: int = 1) -> str:
    """Median (min-max)."""
    if len(values) == 0:
        return NA
    return (
        f"{_fmt(float(np.median(values)), digits)} "
        f"({_fmt(float(np.min(values)), digits)}-{_fmt(float(np.max(values)), digits)})"
    )


def mean_ci(values: np.ndarray, digits: int = 1) -> str:
    """Mean (normal-approximation 95% CI)."""
    if len(values) == 0:
        return NA
    m = float(np.mean(values))
    if len(values) < 2:
        return f"{_fmt(m, digits)} ({NA}-{NA})"
    half = 1.96 * float(np.std(values, ddof=1)) / np.sqrt(len(values))
    return f"{_fmt(m, digits)} ({_fmt(m - half, digits)}-{_fmt(m + half, digits)})"


BUILTIN_SUMMARIES: Dict[str, SummaryFn] = {
    "mean_sd": mean_sd,
    "median_iqr": median_iqr,
    "mean_se": mean_se,
    "median_range": median_range,
    "mean_ci": mean_ci,
}


def count_percent(count: int, total: int) -> str:
    """``"n (pct%)"`` with a whole-number percentage; ``"0 (0%)"`` for empty totals."""
    if total <= 0:
        return "0 (0%)"
    return f"{count} ({100.0 * count / total:.0f}%)"


def format_pvalue(p: float) -> str:
    """Display a p-value with 4 decimals, ``<0.0001`` below that, ``NA`` if missing."""
    if p is None or not np.isfinite(p):
        return NA
    if round(p, 4) == 0:
        return "<0.0001"
    return f"{p:.4f}"
