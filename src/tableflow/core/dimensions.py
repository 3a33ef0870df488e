"""Table dimension analysis.

Turns the declarative table request (analysis variables, optional grouping
and stratification variables, options) into an immutable DimensionPlan:
the ordered row layout, the column layout and the footnote markers. The
plan fixes the blueprint size before any cell is computed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Hashable, Optional, Sequence, Tuple

from tableflow.config import EngineSettings, FootnoteSpec, TableOptions
from tableflow.core.classify import VariableKind, category_levels, classify
from tableflow.data.source import DataSource
from tableflow.errors import ConfigurationError

logger = logging.getLogger(__name__)

TOTAL_LABEL = "Total"
PVALUE_LABEL = "p-value"
MISSING_LABEL = "Missing"
STUB_LABEL = "Variable"

MISSING_WARN_FRACTION = 0.5
LEVELS_WARN_COUNT = 20


class RowKind(str, Enum):
    STRATUM = "stratum"
    VARIABLE = "variable"
    LEVEL = "level"
    MISSING = "missing"


class ColumnKind(str, Enum):
    GROUP = "group"
    TOTAL = "total"
    PVALUE = "pvalue"


@dataclass(frozen=True)
class VariablePlan:
    """Row requirements of one analysis variable."""

    name: str
    kind: VariableKind
    levels: Tuple[Hashable, ...]
    missing_count: int
    show_missing: bool

    @property
    def has_missing_row(self) -> bool:
        return self.show_missing and self.missing_count > 0

    @property
    def row_count(self) -> int:
        rows = 1
        if self.kind == VariableKind.CATEGORICAL:
            rows += len(self.levels)
        if self.has_missing_row:
            rows += 1
        return rows


@dataclass(frozen=True)
class ColumnPlan:
    index: int
    kind: ColumnKind
    label: str
    level: Optional[Hashable] = None

    @property
    def base_label(self) -> str:
        """Label without the group size suffix; footnotes are keyed by it."""
        if self.kind == ColumnKind.GROUP:
            return str(self.level)
        if self.kind == ColumnKind.TOTAL:
            return TOTAL_LABEL
        return PVALUE_LABEL


@dataclass(frozen=True)
class RowPlan:
    index: int
    kind: RowKind
    label: str
    variable: Optional[str] = None
    level: Optional[Hashable] = None
    stratum: Optional[Hashable] = None


@dataclass(frozen=True)
class Footnote:
    """A footnote; ``marker`` is None for unmarked general notes."""

    marker: Optional[int]
    text: str
    target: Optional[str] = None


@dataclass(frozen=True)
class DimensionPlan:
    variables: Tuple[VariablePlan, ...]
    columns: Tuple[ColumnPlan, ...]
    rows: Tuple[RowPlan, ...]
    footnotes: Tuple[Footnote, ...]
    group: Optional[str]
    group_sizes: Tuple[Tuple[Hashable, int], ...]
    strata: Optional[str]
    strata_levels: Tuple[Hashable, ...]
    total_size: int

    @property
    def row_count(self) -> int:
        return len(self.rows)

    @property
    def col_count(self) -> int:
        return len(self.columns)

    @property
    def row_labels(self) -> Tuple[str, ...]:
        return tuple(row.label for row in self.rows)

    @property
    def col_labels(self) -> Tuple[str, ...]:
        return tuple(col.label for col in self.columns)

    @property
    def footnote_index(self) -> Dict[str, int]:
        """Footnote target (``var:<name>`` or ``col:<label>``) -> marker."""
        return {f.target: f.marker for f in self.footnotes if f.target is not None}

    def variable(self, name: str) -> VariablePlan:
        for plan in self.variables:
            if plan.name == name:
                return plan
        raise KeyError(name)


def variable_target(name: str) -> str:
    return f"var:{name}"


def column_target(label: str) -> str:
    return f"col:{label}"


def _check_request(
    variables: Sequence[str],
    group_spec,
    options: TableOptions,
) -> Optional[str]:
    if isinstance(group_spec, (list, tuple)):
        if len(group_spec) > 1:
            raise ConfigurationError(
                f"Only one grouping variable is supported, got {len(group_spec)}: {list(group_spec)}"
            )
        group_spec = group_spec[0] if group_spec else None

    if not variables:
        raise ConfigurationError("At least one analysis variable is required")
    if group_spec is None and not options.show_totals:
        raise ConfigurationError("An ungrouped table requires show_totals=True")
    if group_spec is None and options.show_pvalue:
        raise ConfigurationError("P-values require a grouping variable")

    reserved = {group_spec, options.stratify_by} - {None}
    for name in variables:
        if name in reserved:
            raise ConfigurationError(
                f"Variable '{name}' cannot be both an analysis and a grouping/strata variable"
            )
    if group_spec is not None and group_spec == options.stratify_by:
        raise ConfigurationError(f"'{group_spec}' cannot be both the grouping and strata variable")
    return group_spec


def _plan_variable(name: str, source: DataSource, options: TableOptions) -> VariablePlan:
    column = source.column(name)
    kind = classify(column, options.category_threshold)
    levels = tuple(category_levels(column)) if kind == VariableKind.CATEGORICAL else ()
    missing = int(column.isna().sum())

    if len(column) and missing / len(column) > MISSING_WARN_FRACTION:
        logger.warning(f"Variable '{name}' has {missing}/{len(column)} missing values")
    if len(levels) > LEVELS_WARN_COUNT:
        logger.warning(f"Categorical variable '{name}' has {len(levels)} levels")

    return VariablePlan(
        name=name,
        kind=kind,
        levels=levels,
        missing_count=missing,
        show_missing=options.show_missing,
    )


def _plan_columns(
    group_levels: Tuple[Hashable, ...],
    group_sizes: Dict[Hashable, int],
    total_size: int,
    options: TableOptions,
) -> Tuple[ColumnPlan, ...]:
    columns = []
    for level in group_levels:
        label = str(level)
        if options.show_size:
            label = f"{label} (n={group_sizes[level]})"
        columns.append(ColumnPlan(len(columns) + 1, ColumnKind.GROUP, label, level))
    if options.show_totals:
        label = f"{TOTAL_LABEL} (n={total_size})" if options.show_size else TOTAL_LABEL
        columns.append(ColumnPlan(len(columns) + 1, ColumnKind.TOTAL, label))
    if options.show_pvalue:
        columns.append(ColumnPlan(len(columns) + 1, ColumnKind.PVALUE, PVALUE_LABEL))
    return tuple(columns)


def _plan_rows(
    variables: Tuple[VariablePlan, ...],
    strata: Optional[str],
    strata_levels: Tuple[Hashable, ...],
) -> Tuple[RowPlan, ...]:
    rows = []

    def add(kind: RowKind, label: str, **kwargs) -> None:
        rows.append(RowPlan(len(rows) + 1, kind, label, **kwargs))

    def add_variables(stratum: Optional[Hashable]) -> None:
        for var in variables:
            add(RowKind.VARIABLE, var.name, variable=var.name, stratum=stratum)
            if var.kind == VariableKind.CATEGORICAL:
                for level in var.levels:
                    add(RowKind.LEVEL, str(level), variable=var.name, level=level, stratum=stratum)
            if var.has_missing_row:
                add(RowKind.MISSING, MISSING_LABEL, variable=var.name, stratum=stratum)

    if strata is None:
        add_variables(None)
    else:
        heading = strata[:1].upper() + strata[1:]
        for level in strata_levels:
            add(RowKind.STRATUM, f"{heading}: {level}", stratum=level)
            add_variables(level)
    return tuple(rows)


def _plan_footnotes(
    spec: Optional[FootnoteSpec],
    variables: Tuple[VariablePlan, ...],
    columns: Tuple[ColumnPlan, ...],
) -> Tuple[Footnote, ...]:
    if not spec:
        return ()

    notes = []
    marker = 0
    names = [v.name for v in variables]
    for name in names:
        if name in spec.variables:
            marker += 1
            notes.append(Footnote(marker, spec.variables[name], variable_target(name)))
    for name in spec.variables:
        if name not in names:
            logger.warning(f"Footnote for variable '{name}' ignored: not in table")

    labels = [c.base_label for c in columns]
    for label in labels:
        if label in spec.columns:
            marker += 1
            notes.append(Footnote(marker, spec.columns[label], column_target(label)))
    for label in spec.columns:
        if label not in labels:
            logger.warning(f"Footnote for column '{label}' ignored: not in table")

    notes.extend(Footnote(None, text) for text in spec.general)
    return tuple(notes)


def analyze(
    variables: Sequence[str],
    group_spec,
    data_source: DataSource,
    options: TableOptions,
    settings: Optional[EngineSettings] = None,
) -> DimensionPlan:
    """Derive the table layout from the request without computing any cell.

    Args:
        variables: Ordered analysis variable names
        group_spec: Grouping variable name, None, or a one-element sequence
        data_source: Data (read only)
        options: Table options
        settings: Size ceilings (defaults to EngineSettings())

    Returns:
        DimensionPlan

    Raises:
        ConfigurationError: For multi-variable grouping, an empty variable
            list, an ungrouped table without totals, p-values without a
            grouping variable, or a size above the ceilings
        MissingVariableError: If a named variable is not in the data
    """
    settings = settings or EngineSettings()
    variables = list(variables)
    group = _check_request(variables, group_spec, options)

    data_source.require(variables)
    if group is not None:
        data_source.require([group])
    if options.stratify_by is not None:
        data_source.require([options.stratify_by])

    group_levels: Tuple[Hashable, ...] = ()
    group_sizes: Dict[Hashable, int] = {}
    if group is not None:
        group_column = data_source.column(group)
        group_levels = tuple(category_levels(group_column))
        if not group_levels:
            raise ConfigurationError(f"Grouping variable '{group}' has no non-missing values")
        counts = group_column.value_counts(dropna=True)
        group_sizes = {level: int(counts.get(level, 0)) for level in group_levels}

    strata_levels: Tuple[Hashable, ...] = ()
    if options.stratify_by is not None:
        strata_levels = tuple(category_levels(data_source.column(options.stratify_by)))
        if not strata_levels:
            raise ConfigurationError(
                f"Strata variable '{options.stratify_by}' has no non-missing values"
            )

    var_plans = tuple(_plan_variable(name, data_source, options) for name in variables)
    columns = _plan_columns(group_levels, group_sizes, len(data_source), options)

    per_block = sum(v.row_count for v in var_plans)
    row_count = per_block if not strata_levels else len(strata_levels) * (per_block + 1)
    settings.check(row_count, len(columns))

    rows = _plan_rows(var_plans, options.stratify_by, strata_levels)
    footnotes = _plan_footnotes(options.footnotes, var_plans, columns)

    plan = DimensionPlan(
        variables=var_plans,
        columns=columns,
        rows=rows,
        footnotes=footnotes,
        group=group,
        group_sizes=tuple(group_sizes.items()),
        strata=options.stratify_by,
        strata_levels=strata_levels,
        total_size=len(data_source),
    )
    logger.info(
        f"Planned table: {plan.row_count} rows x {plan.col_count} columns "
        f"({len(var_plans)} variables, {len(group_levels)} groups, "
        f"{len(strata_levels)} strata, {len(footnotes)} footnotes)"
    )
    return plan
