"""Name-keyed registries for themes, numeric summaries and statistical tests.

Each registry starts from an immutable table of built-in entries. Custom
entries can be added and removed, but built-in names can never be
overwritten or unregistered.
"""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Callable, Dict, Generic, Iterable, Mapping, Optional, Tuple, TypeVar, Union

import numpy as np

from tableflow.core.classify import VariableKind
from tableflow.errors import ConfigurationError
from tableflow.stats.summaries import BUILTIN_SUMMARIES, SummaryFn
from tableflow.stats.tests import ANY_KIND, BUILTIN_TESTS, TestSpec
from tableflow.themes import BUILTIN_THEMES, DEFAULT_THEME, Theme

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Registry(Generic[T]):
    """Built-in entries plus user-registered ones."""

    kind = "entry"

    def __init__(self, builtins: Mapping[str, T]):
        self._builtins = MappingProxyType(dict(builtins))
        self._custom: Dict[str, T] = {}

    def _store(self, name: str, entry: T, overwrite: bool = False) -> None:
        if not isinstance(name, str) or not name:
            raise ConfigurationError(f"{self.kind.capitalize()} name must be a non-empty string")
        if name in self._builtins:
            raise ConfigurationError(f"Cannot overwrite built-in {self.kind} '{name}'")
        if name in self._custom and not overwrite:
            raise ConfigurationError(
                f"{self.kind.capitalize()} '{name}' is already registered (pass overwrite=True)"
            )
        self._custom[name] = entry
        logger.debug(f"Registered {self.kind} '{name}'")

    def unregister(self, name: str) -> None:
        if name in self._builtins:
            raise ConfigurationError(f"Cannot remove built-in {self.kind} '{name}'")
        if name not in self._custom:
            raise KeyError(name)
        del self._custom[name]

    def get(self, name: str) -> Optional[T]:
        if name in self._custom:
            return self._custom[name]
        return self._builtins.get(name)

    def names(self) -> Tuple[str, ...]:
        return tuple(self._builtins) + tuple(self._custom)

    def is_builtin(self, name: str) -> bool:
        return name in self._builtins

    def __contains__(self, name: object) -> bool:
        return name in self._builtins or name in self._custom

    def copy(self):
        clone = self.__class__.__new__(self.__class__)
        clone._builtins = self._builtins
        clone._custom = dict(self._custom)
        return clone


def _check_arity(fn: Callable, required: int, what: str, extra: int = 0) -> int:
    """Validate that ``fn`` can be called with ``required`` positional arguments.

    Up to ``extra`` further positional parameters are accepted. Returns the
    number of positional arguments it takes (capped at ``required + extra``)
    or ``required`` when the signature cannot be inspected.
    """
    if not callable(fn):
        raise ConfigurationError(f"{what} must be callable, got {type(fn).__name__}")
    try:
        params = list(inspect.signature(fn).parameters.values())
    except (TypeError, ValueError):
        return required

    if any(p.kind == p.VAR_POSITIONAL for p in params):
        return required + extra

    positional = [p for p in params if p.kind in (p.POSITIONAL_ONLY, p.POSITIONAL_OR_KEYWORD)]
    mandatory = [p for p in positional if p.default is p.empty]
    keyword_only = [p for p in params if p.kind == p.KEYWORD_ONLY and p.default is p.empty]

    if keyword_only or len(mandatory) > required + extra or len(positional) < required:
        raise ConfigurationError(
            f"{what} must accept {required} positional argument(s), "
            f"got signature {inspect.signature(fn)}"
        )
    return min(len(positional), required + extra)


class ThemeRegistry(Registry[Theme]):
    kind = "theme"

    def __init__(self, builtins: Mapping[str, Theme] = BUILTIN_THEMES):
        super().__init__(builtins)

    def register(self, theme: Theme, overwrite: bool = False) -> None:
        if not isinstance(theme, Theme):
            raise ConfigurationError(f"Expected a Theme, got {type(theme).__name__}")
        self._store(theme.name, theme, overwrite=overwrite)

    def resolve(self, theme: Union[None, str, Theme]) -> Theme:
        """Theme object for a name; unknown names fall back to the console theme."""
        if isinstance(theme, Theme):
            return theme
        if theme is None:
            return self._builtins[DEFAULT_THEME]
        found = self.get(theme)
        if found is None:
            logger.warning(f"Unknown theme '{theme}', falling back to '{DEFAULT_THEME}'")
            return self._builtins[DEFAULT_THEME]
        return found


class SummaryRegistry(Registry[SummaryFn]):
    """Numeric summaries ``fn(values, digits) -> str``.

    Custom summaries may also take just ``fn(values)``.
    """

    kind = "summary"

    def __init__(self, builtins: Mapping[str, SummaryFn] = BUILTIN_SUMMARIES):
        super().__init__(builtins)

    @staticmethod
    def adapt(fn: Callable) -> SummaryFn:
        """Validate a summary function and wrap it as ``fn(values, digits)``."""
        arity = _check_arity(fn, 1, "Summary function", extra=1)
        if arity >= 2:
            return fn

        def summary(values: np.ndarray, digits: int = 1) -> str:
            return fn(values)

        summary.__name__ = getattr(fn, "__name__", "custom")
        return summary

    def register(self, name: str, fn: Callable, overwrite: bool = False) -> None:
        self._store(name, self.adapt(fn), overwrite=overwrite)

    def resolve(self, spec: Union[str, Callable]) -> Tuple[str, SummaryFn]:
        """``(cache name, function)`` for a summary name or an ad hoc callable."""
        if callable(spec):
            name = f"custom:{getattr(spec, '__qualname__', 'fn')}:{id(spec)}"
            return name, self.adapt(spec)
        found = self.get(spec)
        if found is None:
            raise ConfigurationError(
                f"Unknown numeric summary '{spec}'. Available: {', '.join(self.names())}"
            )
        return spec, found


class TestRegistry(Registry[TestSpec]):
    """Statistical tests ``fn(values, groups) -> p``."""

    __test__ = False
    kind = "test"

    def __init__(self, builtins: Mapping[str, TestSpec] = BUILTIN_TESTS):
        super().__init__(builtins)

    def register(
        self,
        name: str,
        fn: Callable,
        applies_to: Iterable[VariableKind] = ANY_KIND,
        overwrite: bool = False,
    ) -> None:
        _check_arity(fn, 2, "Test function")
        kinds = frozenset(VariableKind(k) for k in applies_to)
        if not kinds:
            raise ConfigurationError(f"Test '{name}' must apply to at least one variable kind")
        self._store(name, TestSpec(name, kinds, fn), overwrite=overwrite)


@dataclass
class Registries:
    """The registries one table is built against."""

    themes: ThemeRegistry = field(default_factory=ThemeRegistry)
    summaries: SummaryRegistry = field(default_factory=SummaryRegistry)
    tests: TestRegistry = field(default_factory=TestRegistry)

    def copy(self) -> "Registries":
        return Registries(self.themes.copy(), self.summaries.copy(), self.tests.copy())


def default_registries() -> Registries:
    """Fresh registries holding only the built-in entries."""
    return Registries()
