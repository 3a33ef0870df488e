"""Lazy table blueprint: a sized sparse grid of deferred cell computations."""

from __future__ import annotations

import logging
from functools import partial
from typing import Any, Dict, Hashable, List, Optional, Tuple, Union

import numpy as np
import pandas as pd

from tableflow.config import EngineSettings, TableOptions
from tableflow.core.cells import Cell, Computation, Literal, Selector, Separator
from tableflow.core.classify import VariableKind
from tableflow.core.dimensions import (
    ColumnKind,
    STUB_LABEL,
    ColumnPlan,
    DimensionPlan,
    RowKind,
    RowPlan,
    VariablePlan,
)
from tableflow.core.evaluator import EvaluationCache, evaluate
from tableflow.core.grid import SparseGrid
from tableflow.core.parallel import warm_cache
from tableflow.data.source import DataSource
from tableflow.errors import CellComputationFailure, ConfigurationError
from tableflow.registry import Registries, default_registries
from tableflow.render import get_renderer
from tableflow.stats import tests as stat_tests
from tableflow.stats.summaries import SummaryFn, count_percent, format_pvalue
from tableflow.themes import Theme

logger = logging.getLogger(__name__)


# Compute functions. Each takes the selected subset and returns display text.


def _summary_cell(subset: DataSource, variable: str, summary: SummaryFn, digits: int) -> str:
    values = pd.to_numeric(subset.column(variable), errors="coerce").dropna()
    return summary(values.to_numpy(dtype=float), digits)


def _count_cell(subset: DataSource, variable: str, level: Hashable) -> str:
    column = subset.column(variable)
    return count_percent(int((column == level).sum()), len(column))


def _missing_cell(subset: DataSource, variable: str) -> str:
    return str(int(subset.column(variable).isna().sum()))


def _pvalue_cell(subset: DataSource, variable: str, group: str, test: stat_tests.TestSpec) -> str:
    p = test.compute(subset.column(variable).to_numpy(), subset.column(group).to_numpy())
    return format_pvalue(p)


def _is_dimension(value: Any) -> bool:
    return isinstance(value, (int, np.integer)) and not isinstance(value, bool)


class Blueprint:
    """Sized table skeleton whose cells are computed on demand.

    Dimensions are fixed at creation. ``populate`` writes one cell per
    structural position; ``render`` resolves cells through a cache owned by
    this blueprint, so repeated renders (in any format) reuse results.
    """

    def __init__(self, row_count: int, col_count: int, settings: Optional[EngineSettings] = None):
        self._row_count = int(row_count)
        self._col_count = int(col_count)
        self.settings = settings or EngineSettings()
        self.grid = SparseGrid(self._row_count, self._col_count)
        self.row_headers: Tuple[Literal, ...] = (Literal(""),) * self._row_count
        self.col_headers: Tuple[Literal, ...] = (Literal(""),) * self._col_count
        self.plan: Optional[DimensionPlan] = None
        self.data_source: Optional[DataSource] = None
        self.metadata: Dict[str, Any] = {
            "options": None,
            "cache": EvaluationCache(),
            "footnote_index": {},
            "theme": None,
            "registries": None,
            "diagnostics": [],
        }

    @classmethod
    def create(
        cls,
        row_count: int,
        col_count: int,
        settings: Optional[EngineSettings] = None,
    ) -> "Blueprint":
        """Validate dimensions and return an empty blueprint.

        Raises:
            ConfigurationError: If a dimension is not a positive integer or
                the size exceeds the configured ceilings
        """
        settings = settings or EngineSettings()
        for name, value in (("row_count", row_count), ("col_count", col_count)):
            if not _is_dimension(value) or value < 1:
                raise ConfigurationError(f"{name} must be a positive integer, got {value!r}")
        settings.check(int(row_count), int(col_count))
        return cls(row_count, col_count, settings)

    @classmethod
    def from_plan(cls, plan: DimensionPlan, settings: Optional[EngineSettings] = None) -> "Blueprint":
        return cls.create(plan.row_count, plan.col_count, settings)

    @property
    def row_count(self) -> int:
        return self._row_count

    @property
    def col_count(self) -> int:
        return self._col_count

    @property
    def cache(self) -> EvaluationCache:
        return self.metadata["cache"]

    @property
    def options(self) -> Optional[TableOptions]:
        return self.metadata["options"]

    @property
    def diagnostics(self) -> List[CellComputationFailure]:
        return self.metadata["diagnostics"]

    @property
    def theme(self) -> Optional[Theme]:
        return self.metadata["theme"]

    @property
    def row_labels(self) -> Tuple[str, ...]:
        return tuple(self._evaluate(cell) for cell in self.row_headers)

    @property
    def col_labels(self) -> Tuple[str, ...]:
        return tuple(self._evaluate(cell) for cell in self.col_headers)

    def __repr__(self) -> str:
        return f"Blueprint({self._row_count}x{self._col_count}, populated={len(self.grid)})"

    # Population

    def populate(
        self,
        plan: DimensionPlan,
        data_source: DataSource,
        options: TableOptions,
        registries: Optional[Registries] = None,
    ) -> "Blueprint":
        """Write one cell per structural position of ``plan``.

        The grid, cache and diagnostics are cleared first, so populating
        twice with the same inputs yields the same blueprint.

        Raises:
            ConfigurationError: If the plan does not match this blueprint's
                size, or a test or summary name cannot be used
            UnknownTestError: If a test name is not registered
        """
        if (plan.row_count, plan.col_count) != (self._row_count, self._col_count):
            raise ConfigurationError(
                f"Plan size {plan.row_count}x{plan.col_count} does not match "
                f"blueprint size {self._row_count}x{self._col_count}"
            )

        has_pvalue = any(col.kind == ColumnKind.PVALUE for col in plan.columns)
        if options.show_pvalue != has_pvalue:
            raise ConfigurationError(
                f"Options request show_pvalue={options.show_pvalue} but the plan "
                f"{'has' if has_pvalue else 'has no'} p-value column"
            )

        registries = registries or default_registries()
        theme = registries.themes.resolve(options.theme)
        summary_name, summary = registries.summaries.resolve(options.numeric_summary)
        tests = self._resolve_tests(plan, options, registries)

        self.grid.clear()
        self.cache.clear()
        self.diagnostics.clear()
        self.plan = plan
        self.data_source = data_source
        self.row_headers = tuple(Literal(label) for label in plan.row_labels)
        self.col_headers = tuple(Literal(label) for label in plan.col_labels)
        self.metadata.update(
            options=options,
            theme=theme,
            registries=registries,
            footnote_index=plan.footnote_index,
        )

        digits = theme.decimal_places
        for row in plan.rows:
            if row.kind == RowKind.STRATUM:
                for col in plan.columns:
                    self.grid.set(row.index, col.index, Separator())
                continue

            var = plan.variable(row.variable)
            for col in plan.columns:
                cell = self._build_cell(plan, row, col, var, summary_name, summary, digits, tests)
                if cell is not None:
                    self.grid.set(row.index, col.index, cell)

        logger.info(
            f"Populated blueprint {self._row_count}x{self._col_count}: "
            f"{len(self.grid)} cells (density {self.grid.density:.2f})"
        )
        return self

    def _resolve_tests(
        self,
        plan: DimensionPlan,
        options: TableOptions,
        registries: Registries,
    ) -> Dict[VariableKind, stat_tests.TestSpec]:
        if not options.show_pvalue or plan.group is None:
            return {}
        names = {
            VariableKind.CONTINUOUS: options.continuous_test,
            VariableKind.CATEGORICAL: options.categorical_test,
        }
        kinds = {v.kind for v in plan.variables}
        return {kind: stat_tests.build(names[kind], kind, registries.tests) for kind in kinds}

    def _build_cell(
        self,
        plan: DimensionPlan,
        row: RowPlan,
        col: ColumnPlan,
        var: VariablePlan,
        summary_name: str,
        summary: SummaryFn,
        digits: int,
        tests: Dict[VariableKind, stat_tests.TestSpec],
    ) -> Optional[Cell]:
        filters: Tuple[Tuple[str, Hashable], ...] = ()
        if plan.strata is not None:
            filters = ((plan.strata, row.stratum),)

        if col.kind == ColumnKind.PVALUE:
            if row.kind != RowKind.VARIABLE:
                return None
            test = tests[var.kind]
            return Computation(
                selector=Selector(var.name, filters),
                compute_fn=partial(_pvalue_cell, variable=var.name, group=plan.group, test=test),
                dependencies=self._dependencies(var.name, plan.group, plan.strata),
                cache_key=("pvalue", var.name, plan.group, row.stratum, test.name),
            )

        if col.kind == ColumnKind.GROUP:
            filters = filters + ((plan.group, col.level),)
            column_key: Tuple = ("group", col.level)
        else:
            column_key = ("total",)
        selector = Selector(var.name, filters)
        dependencies = self._dependencies(
            var.name, plan.group if col.kind == ColumnKind.GROUP else None, plan.strata
        )

        if row.kind == RowKind.VARIABLE:
            if var.kind != VariableKind.CONTINUOUS:
                return None
            return Computation(
                selector=selector,
                compute_fn=partial(_summary_cell, variable=var.name, summary=summary, digits=digits),
                dependencies=dependencies,
                cache_key=("summary", var.name, column_key, row.stratum, summary_name, digits),
            )

        if row.kind == RowKind.LEVEL:
            return Computation(
                selector=selector,
                compute_fn=partial(_count_cell, variable=var.name, level=row.level),
                dependencies=dependencies,
                cache_key=("count", var.name, row.level, column_key, row.stratum),
            )

        return Computation(
            selector=selector,
            compute_fn=partial(_missing_cell, variable=var.name),
            dependencies=dependencies,
            cache_key=("missing", var.name, column_key, row.stratum),
        )

    @staticmethod
    def _dependencies(variable: str, group: Optional[str], strata: Optional[str]) -> Tuple[str, ...]:
        return tuple(name for name in (variable, group, strata) if name is not None)

    # Evaluation

    def _require_populated(self) -> None:
        if self.plan is None or self.data_source is None:
            raise RuntimeError("Blueprint has not been populated")

    def prepare(self) -> None:
        """Fill the cache in parallel when ``options.n_jobs > 1``."""
        self._require_populated()
        n_jobs = self.options.n_jobs if self.options is not None else 1
        if n_jobs > 1:
            warm_cache(
                (cell for _, cell in self.grid),
                self.data_source,
                self.cache,
                n_jobs,
                self.diagnostics,
            )

    def row_label(self, row: int) -> str:
        """Resolved label of a 1-based row."""
        return self._evaluate(self.row_headers[row - 1])

    def col_label(self, col: int) -> str:
        """Resolved header of a 1-based column."""
        return self._evaluate(self.col_headers[col - 1])

    def _evaluate(self, cell: Cell) -> str:
        return evaluate(cell, self.data_source, self.cache, self.diagnostics)

    def cell_text(self, row: int, col: int) -> str:
        """Resolved display text at an address; empty string for empty cells."""
        cell = self.grid.get(row, col)
        if cell is None:
            return ""
        return self._evaluate(cell)

    def resolve(self) -> Dict[Tuple[int, int], str]:
        """Resolved text for every populated address."""
        self.prepare()
        resolved = {address: self._evaluate(cell) for address, cell in self.grid}
        logger.debug(f"Cache after resolve: {self.cache.stats()}")
        return resolved

    def to_frame(self) -> pd.DataFrame:
        """Resolved table as a DataFrame; the first column holds the row labels."""
        resolved = self.resolve()
        body = [
            [resolved.get((r, c), "") for c in range(1, self._col_count + 1)]
            for r in range(1, self._row_count + 1)
        ]
        frame = pd.DataFrame(body, columns=list(self.col_labels))
        frame.insert(0, STUB_LABEL, list(self.row_labels), allow_duplicates=True)
        return frame

    def render(self, fmt: str = "text", theme: Union[None, str, Theme] = None):
        """Render through the format's renderer.

        Args:
            fmt: "text", "html" or "latex"
            theme: Theme or theme name for presentation; defaults to the
                theme the blueprint was populated with

        Returns:
            List of lines for text, a string for html and latex
        """
        self._require_populated()
        if theme is None:
            resolved_theme = self.theme
        elif isinstance(theme, Theme):
            resolved_theme = theme
        else:
            resolved_theme = self.metadata["registries"].themes.resolve(theme)

        self.prepare()
        output = get_renderer(fmt, resolved_theme).render(self)
        logger.debug(f"Rendered {fmt}; cache {self.cache.stats()}")
        return output
