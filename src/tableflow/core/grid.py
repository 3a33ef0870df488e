"""Bounds-checked sparse storage for table cells."""

from __future__ import annotations

from typing import Dict, Iterator, Optional, Tuple

from tableflow.core.cells import Cell

Address = Tuple[int, int]


class SparseGrid:
    """Mapping of 1-based ``(row, col)`` addresses to cells.

    Only populated addresses are stored. Iteration yields ``((row, col), cell)``
    pairs in row-major order.
    """

    def __init__(self, row_count: int, col_count: int):
        self.row_count = row_count
        self.col_count = col_count
        self._cells: Dict[Address, Cell] = {}

    def _check(self, row: int, col: int) -> Address:
        if not (1 <= row <= self.row_count and 1 <= col <= self.col_count):
            raise IndexError(
                f"Cell address ({row}, {col}) outside grid of "
                f"{self.row_count} rows x {self.col_count} columns"
            )
        return (row, col)

    def get(self, row: int, col: int) -> Optional[Cell]:
        return self._cells.get(self._check(row, col))

    def set(self, row: int, col: int, cell: Optional[Cell]) -> None:
        """Store a cell; ``None`` clears the address."""
        key = self._check(row, col)
        if cell is None:
            self._cells.pop(key, None)
        else:
            self._cells[key] = cell

    def clear(self) -> None:
        self._cells.clear()

    def __len__(self) -> int:
        return len(self._cells)

    def __contains__(self, address: object) -> bool:
        return address in self._cells

    def __iter__(self) -> Iterator[Tuple[Address, Cell]]:
        for key in sorted(self._cells):
            yield key, self._cells[key]

    def row(self, row: int) -> Dict[int, Cell]:
        """Populated cells of one row keyed by column."""
        return {c: cell for (r, c), cell in self._cells.items() if r == row}

    @property
    def density(self) -> float:
        total = self.row_count * self.col_count
        return len(self._cells) / total if total else 0.0

    def __repr__(self) -> str:
        return (
            f"SparseGrid({self.row_count}x{self.col_count}, "
            f"populated={len(self._cells)}, density={self.density:.3f})"
        )
