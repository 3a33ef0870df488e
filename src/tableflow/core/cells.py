"""Cell variants stored in a blueprint grid."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Hashable, Tuple, Union

from tableflow.data.source import DataSource

ERROR_MARKER = "[error]"


@dataclass(frozen=True)
class Selector:
    """Identifies a data subset: rows matching every ``(column, value)`` filter.

    ``variable`` names the analysis variable the subset is taken for.
    """

    variable: str
    filters: Tuple[Tuple[str, Hashable], ...] = ()

    def resolve(self, source: DataSource) -> DataSource:
        for column, value in self.filters:
            source = source.where(column, value)
        return source

    def describe(self) -> str:
        if not self.filters:
            return self.variable
        conditions = ", ".join(f"{col}={val}" for col, val in self.filters)
        return f"{self.variable} | {conditions}"


@dataclass(frozen=True)
class Literal:
    """Fixed display text."""

    text: str


@dataclass(frozen=True)
class Separator:
    """Structural marker with no computation (stratum boundaries)."""

    marker: str = ""


@dataclass(frozen=True)
class Computation:
    """Deferred cell value.

    Attributes:
        selector: Data subset the function runs on
        compute_fn: Pure function ``fn(subset: DataSource) -> str``
        dependencies: Column names the result depends on
        cache_key: Signature identifying the result within one table
    """

    selector: Selector
    compute_fn: Callable[[DataSource], Any] = field(compare=False, repr=False)
    dependencies: Tuple[str, ...]
    cache_key: Tuple

    @property
    def variable(self) -> str:
        return self.selector.variable


Cell = Union[Literal, Computation, Separator]
