"""Configuration dataclasses for table construction."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

from tableflow.errors import ConfigurationError

logger = logging.getLogger(__name__)

SummarySpec = Union[str, Callable[[Any], str]]


@dataclass(frozen=True)
class EngineSettings:
    """Safety ceilings for blueprint sizes.

    Attributes:
        max_dimension: Largest allowed row or column count (default: 100,000)
        max_cells: Largest allowed row_count * col_count (default: 10,000,000)
    """

    max_dimension: int = 100_000
    max_cells: int = 10_000_000

    def __post_init__(self):
        if self.max_dimension < 1:
            raise ConfigurationError(f"max_dimension must be >= 1, got {self.max_dimension}")
        if self.max_cells < 1:
            raise ConfigurationError(f"max_cells must be >= 1, got {self.max_cells}")

    def check(self, row_count: int, col_count: int) -> None:
        """Raise ConfigurationError if the requested size exceeds the ceilings."""
        if row_count > self.max_dimension or col_count > self.max_dimension:
            raise ConfigurationError(
                f"Table dimensions too large ({row_count}x{col_count}). "
                f"Maximum allowed: {self.max_dimension}x{self.max_dimension}"
            )
        if row_count * col_count > self.max_cells:
            raise ConfigurationError(
                f"Table size {row_count}x{col_count} = {row_count * col_count} cells "
                f"exceeds the ceiling of {self.max_cells} cells"
            )


@dataclass(frozen=True)
class FootnoteSpec:
    """Footnotes attached to variables, columns, or the table as a whole.

    Attributes:
        variables: Mapping of analysis variable name -> footnote text
        columns: Mapping of column label -> footnote text
        general: Unmarked footnotes listed after the marked ones
    """

    variables: Dict[str, str] = field(default_factory=dict)
    columns: Dict[str, str] = field(default_factory=dict)
    general: List[str] = field(default_factory=list)

    @classmethod
    def from_value(cls, value: Any) -> Optional["FootnoteSpec"]:
        """Coerce None, a FootnoteSpec, or a plain mapping into a FootnoteSpec."""
        if value is None or isinstance(value, cls):
            return value
        if not isinstance(value, dict):
            raise ConfigurationError(f"Footnotes must be a mapping, got {type(value).__name__}")

        unknown = set(value) - {"variables", "columns", "general"}
        if unknown:
            raise ConfigurationError(f"Unknown footnote sections: {sorted(unknown)}")

        general = value.get("general") or []
        if isinstance(general, str):
            general = [general]

        return cls(
            variables=dict(value.get("variables") or {}),
            columns=dict(value.get("columns") or {}),
            general=list(general),
        )

    def __bool__(self) -> bool:
        return bool(self.variables or self.columns or self.general)


@dataclass
class TableOptions:
    """Options controlling table layout, statistics and presentation.

    Attributes:
        show_missing: Add a missing-count row for variables with missing values
        show_pvalue: Add a p-value column (requires a grouping variable)
        show_totals: Add a totals column
        stratify_by: Optional stratification variable; the row plan repeats per level
        continuous_test: Test name for continuous variables (default: "ttest")
        categorical_test: Test name for categorical variables (default: "fisher")
        numeric_summary: Built-in summary name or a callable fn(values) -> str
        category_threshold: Numeric columns with at most this many distinct
            values are treated as categorical (default: 10)
        show_size: Append group sizes "(n=N)" to group column labels
        title: Optional table title
        footnotes: Optional FootnoteSpec (or mapping with the same keys)
        theme: Theme name used for decimal precision and default rendering
        n_jobs: Evaluate computation cells on this many threads (1 = sequential)
    """

    show_missing: bool = False
    show_pvalue: bool = True
    show_totals: bool = False
    stratify_by: Optional[str] = None
    continuous_test: str = "ttest"
    categorical_test: str = "fisher"
    numeric_summary: SummarySpec = "mean_sd"
    category_threshold: int = 10
    show_size: bool = False
    title: Optional[str] = None
    footnotes: Optional[FootnoteSpec] = None
    theme: str = "console"
    n_jobs: int = 1

    def __post_init__(self):
        """Validate configuration."""
        self.footnotes = FootnoteSpec.from_value(self.footnotes)

        if self.category_threshold < 0:
            raise ConfigurationError(
                f"category_threshold must be >= 0, got {self.category_threshold}"
            )

        if self.n_jobs < 1:
            raise ConfigurationError(f"n_jobs must be >= 1, got {self.n_jobs}")

        if not isinstance(self.continuous_test, str) or not self.continuous_test:
            raise ConfigurationError("continuous_test must be a non-empty test name")

        if not isinstance(self.categorical_test, str) or not self.categorical_test:
            raise ConfigurationError("categorical_test must be a non-empty test name")

        if not (isinstance(self.numeric_summary, str) or callable(self.numeric_summary)):
            raise ConfigurationError(
                "numeric_summary must be a summary name or a callable, "
                f"got {type(self.numeric_summary).__name__}"
            )

        if self.stratify_by is not None and not isinstance(self.stratify_by, str):
            raise ConfigurationError("stratify_by must be a single variable name")

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "TableOptions":
        """Build options from a plain mapping, rejecting unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = set(payload) - known
        if unknown:
            raise ConfigurationError(f"Unknown table options: {sorted(unknown)}")
        return cls(**payload)

    def replace(self, **changes: Any) -> "TableOptions":
        """Return a copy with the given fields replaced."""
        values = {f.name: getattr(self, f.name) for f in fields(self)}
        values.update(changes)
        return TableOptions(**values)


def load_options(path: Path) -> TableOptions:
    """Load TableOptions from a YAML file.

    The file holds a mapping of option names to values; a top-level
    ``options`` key is also accepted.
    """
    import yaml

    with open(path, "r", encoding="utf-8") as handle:
        payload = yaml.safe_load(handle) or {}

    if not isinstance(payload, dict):
        raise ConfigurationError(f"Options file must contain a mapping: {path}")

    if "options" in payload and isinstance(payload["options"], dict):
        payload = payload["options"]

    logger.info(f"Loaded table options from {path}")
    return TableOptions.from_dict(payload)
