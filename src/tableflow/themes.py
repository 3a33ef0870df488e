"""Presentation themes for rendered tables."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Dict

DEFAULT_THEME = "console"

STRATUM_SEPARATORS = ("text", "line", "space", "none")
LATEX_RULES = ("hline", "booktabs", "double")


@dataclass(frozen=True)
class Theme:
    """Presentation settings for one journal style.

    Attributes:
        name: Registry key
        display_name: Human-readable name
        decimal_places: Precision of continuous summaries (the only field
            read when cells are built)
        variable_indent: Spaces before variable labels
        level_indent: Spaces before category and missing labels
        stratum_separator: How strata are delimited: text, line, space or none
        css_class: Class added to the HTML table element
        stripe_rows: Alternate row shading in HTML output
        latex_rules: hline, booktabs or double (double hline top and bottom)
        bold_headers: Bold column headers in LaTeX output
        column_align: LaTeX alignment for value columns
    """

    name: str
    display_name: str
    decimal_places: int = 1
    variable_indent: int = 2
    level_indent: int = 4
    stratum_separator: str = "text"
    css_class: str = "table1-console"
    stripe_rows: bool = False
    latex_rules: str = "booktabs"
    bold_headers: bool = True
    column_align: str = "c"

    def __post_init__(self):
        if self.decimal_places < 0:
            raise ValueError(f"decimal_places must be >= 0, got {self.decimal_places}")
        if self.stratum_separator not in STRATUM_SEPARATORS:
            raise ValueError(
                f"stratum_separator must be one of {STRATUM_SEPARATORS}, "
                f"got '{self.stratum_separator}'"
            )
        if self.latex_rules not in LATEX_RULES:
            raise ValueError(f"latex_rules must be one of {LATEX_RULES}, got '{self.latex_rules}'")

    def customize(self, **changes) -> "Theme":
        """Copy of this theme with some fields replaced."""
        return replace(self, **changes)


BUILTIN_THEMES: Dict[str, Theme] = {
    "console": Theme(
        name="console",
        display_name="Console",
        stratum_separator="text",
        css_class="table1-console",
        latex_rules="hline",
        bold_headers=False,
        column_align="r",
    ),
    "nejm": Theme(
        name="nejm",
        display_name="New England Journal of Medicine",
        variable_indent=0,
        level_indent=1,
        stratum_separator="line",
        css_class="table1-nejm",
        stripe_rows=True,
    ),
    "lancet": Theme(
        name="lancet",
        display_name="The Lancet",
        level_indent=3,
        stratum_separator="space",
        css_class="table1-lancet",
    ),
    "jama": Theme(
        name="jama",
        display_name="JAMA",
        stratum_separator="text",
        css_class="table1-jama",
    ),
    "bmj": Theme(
        name="bmj",
        display_name="BMJ",
        stratum_separator="line",
        css_class="table1-bmj",
        latex_rules="double",
    ),
    "simple": Theme(
        name="simple",
        display_name="Simple",
        decimal_places=2,
        stratum_separator="line",
        css_class="table1-simple",
        bold_headers=False,
    ),
}
