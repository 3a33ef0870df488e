"""HTML rendering."""

from __future__ import annotations

import html
from typing import List, Optional

from tableflow.core.dimensions import RowKind
from tableflow.render.base import RenderedFootnote, RenderedRow, RenderedTable, Renderer

_ROW_CLASSES = {
    RowKind.VARIABLE: "table1-variable",
    RowKind.LEVEL: "table1-level",
    RowKind.MISSING: "table1-missing",
}


class HTMLRenderer(Renderer):
    format = "html"

    def escape(self, text: str) -> str:
        return html.escape(text, quote=True)

    def marker(self, number: int) -> str:
        return f"<sup>{number}</sup>"

    def emit_title(self, title: Optional[str]) -> List[str]:
        return [f'<div class="table1-title">{title}</div>'] if title else []

    def setup(self, table: RenderedTable) -> List[str]:
        classes = ["table1", self.escape(self.theme.css_class)]
        if self.theme.stripe_rows:
            classes.append("table1-striped")
        return [f'<table class="{" ".join(classes)}">']

    def emit_header(self, table: RenderedTable) -> List[str]:
        cells = "".join(f"<th>{text}</th>" for text in [table.stub_header] + table.header)
        return ["<thead>", f"<tr>{cells}</tr>", "</thead>"]

    def open_body(self, table: RenderedTable) -> List[str]:
        return ["<tbody>"]

    def emit_row(self, row: RenderedRow, table: RenderedTable) -> List[str]:
        if row.kind == RowKind.STRATUM:
            css = "table1-stratum"
            if row.stratum_number > 1 and self.theme.stratum_separator == "line":
                css += " table1-stratum-rule"
            return [
                f'<tr class="{css}"><td colspan="{table.col_count + 1}">{row.label}</td></tr>'
            ]

        indent = self.indent(row)
        style = f' style="padding-left: {indent}ch"' if indent else ""
        cells = "".join(f"<td>{text}</td>" for text in row.cells)
        return [f'<tr class="{_ROW_CLASSES[row.kind]}"><td{style}>{row.label}</td>{cells}</tr>']

    def close_body(self, table: RenderedTable) -> List[str]:
        return ["</tbody>", "</table>"]

    def emit_footnotes(self, footnotes: List[RenderedFootnote]) -> List[str]:
        lines = ['<div class="table1-footnotes">']
        for note in footnotes:
            prefix = f"{note.marker} " if note.marker else ""
            lines.append(f"<p>{prefix}{note.text}</p>")
        lines.append("</div>")
        return lines
