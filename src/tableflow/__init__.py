"""
tableflow: publication-ready summary tables for clinical research.

This package provides:
- Descriptive statistics by group ("Table 1"), with optional totals,
  missing-value rows and stratification
- Group comparison tests (t-test, Welch, ANOVA, Kruskal-Wallis, Fisher, chi-square)
- A lazy blueprint engine: table layout is planned up front, cell values
  are computed on demand and cached per table
- Text, HTML, LaTeX and Excel output with journal themes
- A Typer CLI
"""

__version__ = "0.1.0"

from tableflow.api import table1
from tableflow.config import EngineSettings, FootnoteSpec, TableOptions, load_options
from tableflow.core.blueprint import Blueprint
from tableflow.errors import (
    CellComputationFailure,
    ConfigurationError,
    MissingVariableError,
    TableflowError,
    UnknownTestError,
)
from tableflow.formula import FormulaSpec, parse_formula
from tableflow.registry import Registries, default_registries

__all__ = [
    "__version__",
    "table1",
    "Blueprint",
    "TableOptions",
    "EngineSettings",
    "FootnoteSpec",
    "load_options",
    "FormulaSpec",
    "parse_formula",
    "Registries",
    "default_registries",
    "TableflowError",
    "ConfigurationError",
    "MissingVariableError",
    "UnknownTestError",
    "CellComputationFailure",
]
