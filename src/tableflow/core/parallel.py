"""Thread-parallel warm-up of a blueprint's evaluation cache."""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from joblib import Parallel, delayed

from tableflow.core.cells import ERROR_MARKER, Cell, Computation
from tableflow.core.evaluator import EvaluationCache, compute
from tableflow.data.source import DataSource

logger = logging.getLogger(__name__)


def pending_computations(cells: Iterable[Cell], cache: EvaluationCache) -> List[Computation]:
    """Distinct uncached computation cells, one per cache key, in first-seen order."""
    seen = set()
    pending = []
    for cell in cells:
        if not isinstance(cell, Computation):
            continue
        key = cell.cache_key
        if key in seen or key in cache:
            continue
        seen.add(key)
        pending.append(cell)
    return pending


def warm_cache(
    cells: Iterable[Cell],
    source: DataSource,
    cache: EvaluationCache,
    n_jobs: int,
    diagnostics: Optional[List] = None,
) -> int:
    """Evaluate distinct computation cells on ``n_jobs`` threads and fill the cache.

    Failed cells are stored as ``[error]`` and reported to ``diagnostics``
    once, as a sequential evaluation would.

    Returns:
        Number of cache entries added
    """
    pending = pending_computations(cells, cache)
    if not pending:
        return 0

    logger.debug(f"Evaluating {len(pending)} distinct cells on {n_jobs} threads")
    results = Parallel(n_jobs=n_jobs, prefer="threads")(
        delayed(compute)(cell, source, diagnostics) for cell in pending
    )

    for cell, value in zip(pending, results):
        cache.store(cell.cache_key, ERROR_MARKER if value is None else value)
    return len(pending)
