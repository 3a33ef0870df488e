"""Writing rendered tables and Excel workbooks to disk."""

from __future__ import annotations

import logging
from dataclasses import fields
from pathlib import Path
from typing import Any, Dict, Optional

import pandas as pd

from tableflow.core.dimensions import RowKind
from tableflow.errors import ConfigurationError

logger = logging.getLogger(__name__)

SUFFIX_FORMATS = {
    ".txt": "text",
    ".html": "html",
    ".htm": "html",
    ".tex": "latex",
    ".xlsx": "xlsx",
}


def infer_output_format(path: Path) -> str:
    """Output format for a file suffix (.txt, .html, .tex or .xlsx)."""
    suffix = Path(path).suffix.lower()
    if suffix not in SUFFIX_FORMATS:
        raise ConfigurationError(
            f"Cannot infer output format from path: {path}. "
            f"Expected one of: {', '.join(SUFFIX_FORMATS)}"
        )
    return SUFFIX_FORMATS[suffix]


def write_output(blueprint, path: Path, fmt: Optional[str] = None, theme=None) -> Path:
    """Render a blueprint and write it to ``path``.

    Args:
        blueprint: Populated Blueprint
        path: Output file
        fmt: "text", "html", "latex" or "xlsx"; inferred from the suffix if omitted
        theme: Optional theme (name or Theme) for presentation

    Returns:
        Path written
    """
    path = Path(path)
    fmt = fmt or infer_output_format(path)
    if fmt == "xlsx":
        return write_workbook(blueprint, path)

    rendered = blueprint.render(fmt, theme=theme)
    text = "\n".join(rendered) if isinstance(rendered, list) else rendered

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text + "\n", encoding="utf-8")
    logger.info(f"Wrote {fmt} table to {path}")
    return path


def autosize_column(ws: Any, df: pd.DataFrame, col_idx: int, min_width: int = 10, max_width: int = 60):
    """Set a worksheet column width from its header and content lengths."""
    col_name = df.columns[col_idx]
    header_len = len(str(col_name))
    content_len = df.iloc[:, col_idx].astype(str).map(len).max() if len(df) > 0 else 0
    width = max(min_width, min(max_width, max(header_len, content_len) + 2))
    ws.set_column(col_idx, col_idx, width)


def create_formats(workbook: Any) -> Dict[str, Any]:
    """xlsxwriter formats used by the table sheet."""
    return {
        "header": workbook.add_format({"bold": True, "bg_color": "#D9E1F2", "border": 1}),
        "stratum": workbook.add_format({"bold": True, "italic": True}),
        "variable": workbook.add_format({"bold": True}),
        "footnote": workbook.add_format({"italic": True, "font_size": 9}),
    }


def _options_frame(blueprint) -> pd.DataFrame:
    options = blueprint.options
    rows = [("rows", blueprint.row_count), ("columns", blueprint.col_count)]
    if options is not None:
        for f in fields(options):
            if f.name == "footnotes":
                continue
            value = getattr(options, f.name)
            rows.append((f.name, value if isinstance(value, (bool, int, float, str)) else repr(value)))
    return pd.DataFrame(rows, columns=["setting", "value"])


def write_workbook(blueprint, path: Path, sheet_name: str = "Table 1") -> Path:
    """Write the resolved table to an Excel workbook.

    The table sheet has a frozen header row, autosized columns, bold
    variable rows and the footnotes below the table. A second sheet lists
    the table options; a third lists any cell computation failures.

    Args:
        blueprint: Populated Blueprint
        path: Output .xlsx path
        sheet_name: Name of the table sheet

    Returns:
        Path to created workbook
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    table = blueprint.to_frame()
    plan = blueprint.plan

    with pd.ExcelWriter(path, engine="xlsxwriter") as writer:
        formats = create_formats(writer.book)

        table.to_excel(writer, sheet_name=sheet_name, index=False)
        ws = writer.sheets[sheet_name]
        ws.freeze_panes(1, 1)
        for col_idx, name in enumerate(table.columns):
            ws.write(0, col_idx, name, formats["header"])
            autosize_column(ws, table, col_idx)

        for row in plan.rows:
            if row.kind in (RowKind.STRATUM, RowKind.VARIABLE):
                fmt = formats["stratum"] if row.kind == RowKind.STRATUM else formats["variable"]
                ws.write(row.index, 0, blueprint.row_label(row.index), fmt)

        next_row = len(table) + 2
        for note in plan.footnotes:
            prefix = f"{note.marker}. " if note.marker is not None else ""
            ws.write(next_row, 0, prefix + note.text, formats["footnote"])
            next_row += 1

        _options_frame(blueprint).to_excel(writer, sheet_name="Options", index=False)

        if blueprint.diagnostics:
            failures = pd.DataFrame(
                [
                    {
                        "variable": d.variable,
                        "dependencies": ", ".join(d.dependencies),
                        "error_type": d.error_type,
                        "message": d.message,
                    }
                    for d in blueprint.diagnostics
                ]
            )
            failures.to_excel(writer, sheet_name="Diagnostics", index=False)

    logger.info(f"Wrote workbook to {path}")
    return path
