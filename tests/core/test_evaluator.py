"""Tests for cell evaluation, caching and parallel warm-up."""

import threading

import pandas as pd
import pytest

from tableflow.core.cells import ERROR_MARKER, Computation, Literal, Selector, Separator
from tableflow.core.evaluator import EvaluationCache, evaluate
from tableflow.core.parallel import pending_computations, warm_cache
from tableflow.data import DataSource
from tableflow.errors import CellComputationFailure


@pytest.fixture
def source():
    return DataSource(pd.DataFrame({"g": ["a", "a", "b"], "x": [1.0, 2.0, 10.0]}))


def counting_cell(calls, key=("sum", "x", "a"), group="a"):
    """Computation cell that records every invocation."""

    def compute_fn(subset):
        calls.append(key)
        return f"{subset.column('x').sum():.1f}"

    return Computation(
        selector=Selector("x", (("g", group),)),
        compute_fn=compute_fn,
        dependencies=("x", "g"),
        cache_key=key,
    )


def failing_cell(key=("boom",)):
    def compute_fn(subset):
        raise ZeroDivisionError("division by zero")

    return Computation(
        selector=Selector("x"),
        compute_fn=compute_fn,
        dependencies=("x",),
        cache_key=key,
    )


def test_literal_and_separator(source):
    """Literal returns its text; Separator returns its marker."""
    cache = EvaluationCache()
    assert evaluate(Literal("Age"), source, cache) == "Age"
    assert evaluate(Separator(), source, cache) == ""
    assert len(cache) == 0


def test_computation_uses_selector(source):
    """The selector restricts the data the function sees."""
    calls = []
    assert evaluate(counting_cell(calls), source, EvaluationCache()) == "3.0"


def test_second_evaluation_is_cache_hit(source):
    """Same cell twice: identical result, no recomputation."""
    calls = []
    cache = EvaluationCache()
    cell = counting_cell(calls)

    first = evaluate(cell, source, cache)
    second = evaluate(cell, source, cache)

    assert first == second
    assert len(calls) == 1
    assert cache.hits == 1
    assert cache.misses == 1


def test_cells_sharing_a_key_share_the_result(source):
    """Distinct cell objects with one cache key compute once."""
    calls = []
    cache = EvaluationCache()
    evaluate(counting_cell(calls), source, cache)
    evaluate(counting_cell(calls), source, cache)
    assert len(calls) == 1


def test_failure_yields_marker_and_diagnostic(source):
    """compute_fn errors become [error] plus a diagnostic record."""
    cache = EvaluationCache()
    diagnostics = []

    assert evaluate(failing_cell(), source, cache, diagnostics) == ERROR_MARKER
    assert len(diagnostics) == 1
    failure = diagnostics[0]
    assert isinstance(failure, CellComputationFailure)
    assert failure.variable == "x"
    assert failure.dependencies == ("x",)
    assert failure.error_type == "ZeroDivisionError"
    assert "division by zero" in failure.message


def test_failure_is_computed_once(source):
    """A failing cell is cached as [error] and reported a single time."""
    cache = EvaluationCache()
    diagnostics = []
    cell = failing_cell()

    evaluate(cell, source, cache, diagnostics)
    evaluate(cell, source, cache, diagnostics)

    assert evaluate(cell, source, cache, diagnostics) == ERROR_MARKER
    assert cell.cache_key in cache
    assert len(diagnostics) == 1
    assert cache.hits == 2


def test_unknown_cell_type_raises(source):
    """Only the three cell variants are accepted."""
    with pytest.raises(TypeError):
        evaluate("not a cell", source, EvaluationCache())


def test_cache_store_is_thread_safe():
    """Concurrent stores keep one value per key and consistent counters."""
    cache = EvaluationCache()

    def worker(i):
        for j in range(200):
            cache.store(("k", j), str(j))
            cache.lookup(("k", j))

    threads = [threading.Thread(target=worker, args=(i,)) for i in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(cache) == 200
    assert cache.hits + cache.misses == 800


def test_pending_computations_deduplicates(source):
    """Pending cells are unique by cache key and skip cached keys."""
    calls = []
    cache = EvaluationCache()
    a = counting_cell(calls, key=("a",))
    b = counting_cell(calls, key=("b",), group="b")
    cache.store(("b",), "cached")

    pending = pending_computations([a, Literal("x"), a, b], cache)
    assert [c.cache_key for c in pending] == [("a",)]


def test_warm_cache_matches_sequential(source):
    """Parallel warm-up stores the same strings a sequential pass computes."""
    calls = []
    cells = [counting_cell(calls, key=("a",)), counting_cell(calls, key=("b",), group="b")]
    cells.append(failing_cell())

    parallel_cache = EvaluationCache()
    diagnostics = []
    added = warm_cache(cells, source, parallel_cache, n_jobs=2, diagnostics=diagnostics)
    assert added == 3
    assert ("boom",) in parallel_cache
    assert len(diagnostics) == 1

    sequential = [evaluate(c, source, EvaluationCache()) for c in cells]
    warmed = [evaluate(c, source, parallel_cache) for c in cells]
    assert warmed == sequential == ["3.0", "10.0", ERROR_MARKER]
