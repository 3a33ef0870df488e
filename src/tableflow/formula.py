"""Parsing of ``group ~ var1 + var2`` table formulas."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple, Union

from tableflow.errors import ConfigurationError

_NAME = re.compile(r"^[A-Za-z_.][A-Za-z0-9_.]*$")


@dataclass(frozen=True)
class FormulaSpec:
    """Grouping variable (or None) and ordered analysis variables."""

    group: Optional[str]
    variables: Tuple[str, ...]

    def __post_init__(self):
        if not self.variables:
            raise ConfigurationError("At least one analysis variable is required")
        if len(set(self.variables)) != len(self.variables):
            raise ConfigurationError(f"Duplicate analysis variables: {list(self.variables)}")
        if self.group is not None and self.group in self.variables:
            raise ConfigurationError(
                f"Grouping variable '{self.group}' cannot also be an analysis variable"
            )

    @classmethod
    def of(
        cls,
        variables: Sequence[str],
        group: Union[None, str, Sequence[str]] = None,
    ) -> "FormulaSpec":
        """Build from plain names; a multi-element grouping is rejected."""
        if group is not None and not isinstance(group, str):
            group = list(group)
            if len(group) > 1:
                raise ConfigurationError(
                    f"Only one grouping variable is supported, got {len(group)}: {group}"
                )
            group = group[0] if group else None
        return cls(group=group, variables=tuple(variables))

    def __str__(self) -> str:
        lhs = f"{self.group} " if self.group else ""
        return f"{lhs}~ {' + '.join(self.variables)}"


def _terms(side: str, where: str) -> Tuple[str, ...]:
    names = tuple(t.strip() for t in side.split("+"))
    for name in names:
        if not _NAME.match(name):
            raise ConfigurationError(f"Invalid term '{name}' on the {where} of the formula")
    return names


def parse_formula(text: str) -> FormulaSpec:
    """Parse ``"arm ~ age + sex"`` (grouped) or ``"~ age + sex"`` (ungrouped).

    Raises:
        ConfigurationError: If the formula is malformed or names more than
            one grouping variable.
    """
    if not isinstance(text, str) or text.count("~") != 1:
        raise ConfigurationError(
            f"Formula must contain exactly one '~' (e.g. 'group ~ var1 + var2'), got {text!r}"
        )

    lhs, rhs = (part.strip() for part in text.split("~"))
    if not rhs:
        raise ConfigurationError(f"Formula has no analysis variables: {text!r}")

    group = None
    if lhs:
        groups = _terms(lhs, "left-hand side")
        if len(groups) > 1:
            raise ConfigurationError(
                f"Only one grouping variable is supported, got {len(groups)}: {list(groups)}"
            )
        group = groups[0]

    return FormulaSpec(group=group, variables=_terms(rhs, "right-hand side"))
