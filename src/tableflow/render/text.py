"""Plain-text (console) rendering."""

from __future__ import annotations

from typing import List, Optional

from tableflow.core.dimensions import RowKind
from tableflow.render.base import RenderedFootnote, RenderedRow, RenderedTable, Renderer

SUPERSCRIPTS = "¹²³⁴⁵⁶⁷⁸⁹"
COLUMN_GAP = "  "


class TextRenderer(Renderer):
    """Padded fixed-width columns with rules under the header and between strata."""

    format = "text"

    def marker(self, number: int) -> str:
        if 1 <= number <= len(SUPERSCRIPTS):
            return SUPERSCRIPTS[number - 1]
        return f"({number})"

    def _stub(self, row: RenderedRow) -> str:
        return " " * self.indent(row) + row.label

    def _line(self, stub: str, cells: List[str]) -> str:
        parts = [stub.ljust(self._widths[0])]
        parts += [cell.rjust(width) for cell, width in zip(cells, self._widths[1:])]
        return COLUMN_GAP.join(parts).rstrip()

    def _rule(self) -> str:
        return "-" * (sum(self._widths) + len(COLUMN_GAP) * (len(self._widths) - 1))

    def emit_title(self, title: Optional[str]) -> List[str]:
        return [title, ""] if title else []

    def setup(self, table: RenderedTable) -> List[str]:
        stub_width = max(
            [len(table.stub_header)]
            + [len(self._stub(row)) for row in table.rows if row.kind != RowKind.STRATUM]
        )
        widths = [stub_width]
        for c, header in enumerate(table.header):
            cells = [row.cells[c] for row in table.rows]
            widths.append(max([len(header)] + [len(cell) for cell in cells]))
        self._widths = widths
        return []

    def emit_header(self, table: RenderedTable) -> List[str]:
        return [self._line(table.stub_header, table.header), self._rule()]

    def stratum_break(self, row: RenderedRow, table: RenderedTable) -> List[str]:
        lines = []
        if row.stratum_number > 1:
            if self.theme.stratum_separator == "space":
                lines.append("")
            lines.append(self._rule())
        return lines

    def emit_row(self, row: RenderedRow, table: RenderedTable) -> List[str]:
        if row.kind == RowKind.STRATUM:
            return [row.label]
        return [self._line(self._stub(row), row.cells)]

    def close_body(self, table: RenderedTable) -> List[str]:
        return [self._rule()]

    def emit_footnotes(self, footnotes: List[RenderedFootnote]) -> List[str]:
        lines = []
        for note in footnotes:
            lines.append(f"{note.marker} {note.text}" if note.marker else note.text)
        return lines

    def finish(self, lines: List[str]) -> List[str]:
        return lines
