"""Cell evaluation with a per-table result cache."""

from __future__ import annotations

import logging
import threading
from typing import Dict, Hashable, List, Optional

from tableflow.core.cells import ERROR_MARKER, Cell, Computation, Literal, Separator
from tableflow.data.source import DataSource
from tableflow.errors import CellComputationFailure

logger = logging.getLogger(__name__)


class EvaluationCache:
    """Computed cell strings keyed by cache signature, with hit/miss counters.

    Owned by exactly one blueprint. Writes and counter updates are lock
    guarded so threads may evaluate cells concurrently.
    """

    def __init__(self):
        self._values: Dict[Hashable, str] = {}
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def lookup(self, key: Hashable) -> Optional[str]:
        with self._lock:
            value = self._values.get(key)
            if value is None:
                self.misses += 1
            else:
                self.hits += 1
            return value

    def store(self, key: Hashable, value: str) -> None:
        with self._lock:
            self._values.setdefault(key, value)

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __len__(self) -> int:
        return len(self._values)

    def clear(self) -> None:
        with self._lock:
            self._values.clear()
            self.hits = 0
            self.misses = 0

    def stats(self) -> Dict[str, int]:
        return {"entries": len(self._values), "hits": self.hits, "misses": self.misses}


def compute(cell: Computation, source: DataSource, diagnostics: Optional[List] = None) -> Optional[str]:
    """Run a computation cell without touching any cache.

    Returns the display string, or None when ``compute_fn`` raised. The
    failure is logged and appended to ``diagnostics``.
    """
    try:
        result = cell.compute_fn(cell.selector.resolve(source))
    except Exception as e:
        failure = CellComputationFailure(
            variable=cell.variable,
            dependencies=cell.dependencies,
            message=str(e),
            error_type=type(e).__name__,
            cache_key=cell.cache_key,
        )
        logger.warning(f"Cell computation failed: {failure}")
        if diagnostics is not None:
            diagnostics.append(failure)
        return None
    return result if isinstance(result, str) else str(result)


def evaluate(
    cell: Cell,
    source: DataSource,
    cache: EvaluationCache,
    diagnostics: Optional[List] = None,
) -> str:
    """Resolve a cell to its display string.

    Args:
        cell: Literal, Separator or Computation
        source: Data the computation selectors are resolved against
        cache: Per-table cache; a failed computation is stored as the error
            marker so it is computed and diagnosed once
        diagnostics: Optional list collecting CellComputationFailure records

    Returns:
        Display string; ``"[error]"`` if the computation raised
    """
    if isinstance(cell, Literal):
        return cell.text
    if isinstance(cell, Separator):
        return cell.marker
    if isinstance(cell, Computation):
        cached = cache.lookup(cell.cache_key)
        if cached is not None:
            return cached
        value = compute(cell, source, diagnostics)
        if value is None:
            value = ERROR_MARKER
        cache.store(cell.cache_key, value)
        return value
    raise TypeError(f"Unsupported cell type: {type(cell).__name__}")
