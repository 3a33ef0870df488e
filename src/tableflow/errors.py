"""Exception taxonomy for table construction and evaluation."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Tuple


class TableflowError(Exception):
    """Base class for all tableflow errors."""


class ConfigurationError(TableflowError, ValueError):
    """Raised for invalid dimensions, grouping, options or oversized requests."""


class MissingVariableError(ConfigurationError):
    """Raised when a requested column is absent from the data source."""

    def __init__(self, variable: str, available: Tuple[str, ...] = ()):
        self.variable = variable
        self.available = tuple(available)
        message = f"Variable '{variable}' not found in data"
        if self.available:
            message += f". Available variables: {', '.join(self.available)}"
        super().__init__(message)


class UnknownTestError(TableflowError, ValueError):
    """Raised when a statistical test name is not registered."""

    def __init__(self, name: str, known: Tuple[str, ...] = ()):
        self.name = name
        self.known = tuple(known)
        message = f"Unknown statistical test: '{name}'"
        if self.known:
            message += f" (known tests: {', '.join(self.known)})"
        super().__init__(message)


@dataclass(frozen=True)
class CellComputationFailure:
    """Diagnostic record for a computation cell that raised during evaluation.

    Never raised; the evaluator collects these and substitutes an error
    marker for the cell text.
    """

    variable: str
    dependencies: Tuple[str, ...]
    message: str
    error_type: str = "Exception"
    cache_key: Tuple = field(default=())

    def __str__(self) -> str:
        deps = ", ".join(self.dependencies) or "none"
        return f"{self.variable} [{deps}]: {self.error_type}: {self.message}"
