"""Read-only column access over a pandas DataFrame."""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, List, Tuple

import pandas as pd

from tableflow.errors import MissingVariableError

logger = logging.getLogger(__name__)


class DataSource:
    """Named-column access over a tabular dataset.

    The wrapped frame is never modified. Every accessor returns a new object
    (a Series or another DataSource), so callers cannot write through.

    Args:
        frame: Input data, one row per subject
    """

    def __init__(self, frame: pd.DataFrame):
        if not isinstance(frame, pd.DataFrame):
            raise TypeError(f"DataSource expects a pandas DataFrame, got {type(frame).__name__}")
        self._frame = frame

    @classmethod
    def wrap(cls, data: Any) -> "DataSource":
        """Return data unchanged if it is already a DataSource, else wrap it."""
        if isinstance(data, cls):
            return data
        return cls(data)

    @property
    def columns(self) -> Tuple[str, ...]:
        return tuple(str(c) for c in self._frame.columns)

    def __contains__(self, name: object) -> bool:
        return name in self._frame.columns

    def __len__(self) -> int:
        return len(self._frame)

    def require(self, names: Iterable[str]) -> None:
        """Raise MissingVariableError for the first name absent from the data."""
        for name in names:
            if name not in self:
                raise MissingVariableError(name, self.columns)

    def column(self, name: str) -> pd.Series:
        """Return a copy of the named column."""
        if name not in self:
            raise MissingVariableError(name, self.columns)
        return self._frame[name].copy()

    def where(self, column: str, value: Any) -> "DataSource":
        """Rows where ``column == value``."""
        series = self.column(column)
        return DataSource(self._frame.loc[series == value])

    def filter(self, predicate: Callable[[pd.DataFrame], pd.Series]) -> "DataSource":
        """Rows for which ``predicate(frame)`` yields True."""
        mask = predicate(self._frame)
        return DataSource(self._frame.loc[mask])

    def select(self, names: List[str]) -> "DataSource":
        self.require(names)
        return DataSource(self._frame.loc[:, list(names)])

    def to_frame(self) -> pd.DataFrame:
        return self._frame.copy()
