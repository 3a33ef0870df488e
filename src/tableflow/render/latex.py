"""LaTeX rendering (tabular with booktabs or hline rules, threeparttable notes)."""

from __future__ import annotations

from typing import List, Optional

from tableflow.core.dimensions import RowKind
from tableflow.render.base import RenderedFootnote, RenderedRow, RenderedTable, Renderer

LATEX_SPECIAL = {
    "\\": r"\textbackslash{}",
    "{": r"\{",
    "}": r"\}",
    "$": r"\$",
    "&": r"\&",
    "%": r"\%",
    "#": r"\#",
    "^": r"\textasciicircum{}",
    "_": r"\_",
    "~": r"\textasciitilde{}",
    "<": r"\textless{}",
    ">": r"\textgreater{}",
    "|": r"\textbar{}",
    "±": r"$\pm$",
}

RULES = {
    "booktabs": (r"\toprule", r"\midrule", r"\bottomrule"),
    "hline": (r"\hline", r"\hline", r"\hline"),
    "double": (r"\hline\hline", r"\hline", r"\hline\hline"),
}


def escape_latex(text: str) -> str:
    return "".join(LATEX_SPECIAL.get(ch, ch) for ch in text)


class LaTeXRenderer(Renderer):
    format = "latex"

    def escape(self, text: str) -> str:
        return escape_latex(text)

    def marker(self, number: int) -> str:
        return f"$^{{{number}}}$"

    @property
    def rules(self):
        return RULES[self.theme.latex_rules]

    def emit_title(self, title: Optional[str]) -> List[str]:
        lines = [r"\begin{table}[htbp]", r"\centering"]
        if title:
            lines.append(f"\\caption{{{title}}}")
        return lines

    def setup(self, table: RenderedTable) -> List[str]:
        lines = []
        if table.footnotes:
            lines.append(r"\begin{threeparttable}")
        spec = "l" + self.theme.column_align * table.col_count
        lines.append(f"\\begin{{tabular}}{{{spec}}}")
        lines.append(self.rules[0])
        return lines

    def emit_header(self, table: RenderedTable) -> List[str]:
        cells = [table.stub_header] + table.header
        if self.theme.bold_headers:
            cells = [f"\\textbf{{{cell}}}" for cell in cells]
        return [" & ".join(cells) + r" \\", self.rules[1]]

    def stratum_break(self, row: RenderedRow, table: RenderedTable) -> List[str]:
        if row.stratum_number == 1 or self.theme.stratum_separator == "none":
            return []
        if self.theme.stratum_separator == "space":
            return [r"\addlinespace" if self.theme.latex_rules == "booktabs" else r"\noalign{\vskip 1ex}"]
        return [self.rules[1]]

    def emit_row(self, row: RenderedRow, table: RenderedTable) -> List[str]:
        if row.kind == RowKind.STRATUM:
            width = table.col_count + 1
            return [f"\\multicolumn{{{width}}}{{l}}{{\\textit{{{row.label}}}}} \\\\"]

        indent = self.indent(row)
        label = f"\\hspace{{{indent * 0.5:g}em}}{row.label}" if indent else row.label
        return [" & ".join([label] + row.cells) + r" \\"]

    def close_body(self, table: RenderedTable) -> List[str]:
        return [self.rules[2], r"\end{tabular}"]

    def emit_footnotes(self, footnotes: List[RenderedFootnote]) -> List[str]:
        lines = [r"\begin{tablenotes}", r"\small"]
        for note in footnotes:
            lines.append(f"\\item[{note.marker or ''}] {note.text}")
        lines.append(r"\end{tablenotes}")
        return lines

    def cleanup(self, table: RenderedTable) -> List[str]:
        lines = []
        if table.footnotes:
            lines.append(r"\end{threeparttable}")
        lines.append(r"\end{table}")
        return lines
