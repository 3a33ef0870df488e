"""Shared rendering pipeline.

Every output format runs the same sequence in ``Renderer.render``:

    title -> setup -> header -> body rows -> footnotes -> cleanup

Subclasses only supply escaping, footnote marker markup, row framing and
the setup/cleanup hooks. Cell text is resolved through the blueprint's
evaluator, escaped once, and footnote markers are appended afterwards.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

from tableflow.core.dimensions import STUB_LABEL, RowKind, column_target, variable_target
from tableflow.themes import Theme

logger = logging.getLogger(__name__)


@dataclass
class RenderedRow:
    kind: RowKind
    label: str
    cells: List[str]
    stratum_number: int
    depth: int


@dataclass
class RenderedFootnote:
    marker: Optional[str]
    text: str


@dataclass
class RenderedTable:
    """Escaped, marker-annotated content of one blueprint."""

    title: Optional[str]
    stub_header: str
    header: List[str]
    rows: List[RenderedRow]
    footnotes: List[RenderedFootnote]
    stratified: bool

    @property
    def col_count(self) -> int:
        return len(self.header)


class Renderer:
    """Base renderer; subclasses set ``format`` and override the hooks."""

    format = "base"

    def __init__(self, theme: Theme):
        self.theme = theme

    # Hooks

    def escape(self, text: str) -> str:
        return text

    def marker(self, number: int) -> str:
        return f"({number})"

    def emit_title(self, title: Optional[str]) -> List[str]:
        return []

    def setup(self, table: RenderedTable) -> List[str]:
        return []

    def emit_header(self, table: RenderedTable) -> List[str]:
        raise NotImplementedError

    def open_body(self, table: RenderedTable) -> List[str]:
        return []

    def stratum_break(self, row: RenderedRow, table: RenderedTable) -> List[str]:
        return []

    def emit_row(self, row: RenderedRow, table: RenderedTable) -> List[str]:
        raise NotImplementedError

    def close_body(self, table: RenderedTable) -> List[str]:
        return []

    def emit_footnotes(self, footnotes: List[RenderedFootnote]) -> List[str]:
        return []

    def cleanup(self, table: RenderedTable) -> List[str]:
        return []

    def finish(self, lines: List[str]):
        return "\n".join(lines)

    # Pipeline

    def collect(self, blueprint) -> RenderedTable:
        """Resolve and escape every label and cell of a populated blueprint."""
        plan = blueprint.plan
        index = blueprint.metadata["footnote_index"]
        options = blueprint.options

        def annotate(text: str, target: str) -> str:
            escaped = self.escape(text)
            number = index.get(target)
            return escaped + self.marker(number) if number is not None else escaped

        header = [
            annotate(blueprint.col_label(col.index), column_target(col.base_label))
            for col in plan.columns
        ]

        stratified = plan.strata is not None
        rows = []
        stratum_number = 0
        for row in plan.rows:
            if row.kind == RowKind.STRATUM:
                stratum_number += 1
                depth = 0
                label = self.escape(blueprint.row_label(row.index))
            elif row.kind == RowKind.VARIABLE:
                depth = 1 if stratified else 0
                label = annotate(blueprint.row_label(row.index), variable_target(row.variable))
            else:
                depth = 2 if stratified else 1
                label = self.escape(blueprint.row_label(row.index))
            cells = [
                self.escape(blueprint.cell_text(row.index, col.index)) for col in plan.columns
            ]
            rows.append(RenderedRow(row.kind, label, cells, stratum_number, depth))

        footnotes = [
            RenderedFootnote(
                self.marker(note.marker) if note.marker is not None else None,
                self.escape(note.text),
            )
            for note in plan.footnotes
        ]

        title = options.title if options is not None else None
        return RenderedTable(
            title=self.escape(title) if title else None,
            stub_header=self.escape(STUB_LABEL),
            header=header,
            rows=rows,
            footnotes=footnotes,
            stratified=stratified,
        )

    def indent(self, row: RenderedRow) -> int:
        """Indentation width (in spaces) for a row label under this theme."""
        if row.kind == RowKind.STRATUM:
            return 0
        if row.kind == RowKind.VARIABLE:
            return self.theme.variable_indent if row.depth else 0
        return self.theme.level_indent

    def render(self, blueprint):
        """Render a populated blueprint; the blueprint itself is not modified."""
        table = self.collect(blueprint)

        lines: List[str] = []
        lines += self.emit_title(table.title)
        lines += self.setup(table)
        lines += self.emit_header(table)
        lines += self.open_body(table)
        for row in table.rows:
            if row.kind == RowKind.STRATUM:
                lines += self.stratum_break(row, table)
            lines += self.emit_row(row, table)
        lines += self.close_body(table)
        if table.footnotes:
            lines += self.emit_footnotes(table.footnotes)
        lines += self.cleanup(table)

        logger.debug(f"{self.format} renderer emitted {len(lines)} lines")
        return self.finish(lines)
