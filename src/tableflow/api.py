"""High-level entry point: build a populated table blueprint in one call."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Union

import pandas as pd

from tableflow.config import EngineSettings, TableOptions
from tableflow.core.blueprint import Blueprint
from tableflow.core.dimensions import analyze
from tableflow.data.source import DataSource
from tableflow.formula import FormulaSpec, parse_formula
from tableflow.registry import Registries, default_registries

logger = logging.getLogger(__name__)


def _coerce_options(
    options: Union[None, TableOptions, Dict[str, Any]],
    overrides: Dict[str, Any],
) -> TableOptions:
    if options is None:
        options = TableOptions()
    elif isinstance(options, dict):
        options = TableOptions.from_dict(options)
    if overrides:
        options = options.replace(**overrides)
    return options


def table1(
    formula: Union[str, FormulaSpec],
    data: Union[pd.DataFrame, DataSource],
    options: Union[None, TableOptions, Dict[str, Any]] = None,
    registries: Optional[Registries] = None,
    settings: Optional[EngineSettings] = None,
    **overrides: Any,
) -> Blueprint:
    """
    Build a populated "Table 1" blueprint.

    Parameters
    ----------
    formula : str or FormulaSpec
        ``"arm ~ age + sex"`` for a grouped table, ``"~ age + sex"`` for an
        ungrouped one (which needs ``show_totals=True``)
    data : pd.DataFrame or DataSource
        Input data, one row per subject; never modified
    options : TableOptions or dict, optional
        Table options; keyword overrides are applied on top
    registries : Registries, optional
        Theme, summary and test registries (built-ins if omitted)
    settings : EngineSettings, optional
        Size ceilings
    **overrides
        Individual TableOptions fields, e.g. ``show_totals=True``

    Returns
    -------
    Blueprint
        Populated blueprint; call ``render("text" | "html" | "latex")``

    Raises
    ------
    ConfigurationError
        For invalid formulas, options or oversized tables
    MissingVariableError
        If a variable is not in the data
    UnknownTestError
        If a test name is not registered

    Examples
    --------
    >>> bp = table1("arm ~ age + sex", df, show_totals=True)
    >>> print("\\n".join(bp.render("text")))
    >>> html = bp.render("html", theme="nejm")
    """
    spec = parse_formula(formula) if isinstance(formula, str) else formula
    options = _coerce_options(options, overrides)
    registries = registries or default_registries()
    settings = settings or EngineSettings()
    source = DataSource.wrap(data)

    logger.info(f"Building table for '{spec}' on {len(source)} rows")

    plan = analyze(spec.variables, spec.group, source, options, settings)
    blueprint = Blueprint.from_plan(plan, settings)
    return blueprint.populate(plan, source, options, registries)
