"""Format-specific renderers sharing one pipeline."""

from typing import Dict, Type

from tableflow.errors import ConfigurationError
from tableflow.render.base import Renderer
from tableflow.render.html import HTMLRenderer
from tableflow.render.latex import LaTeXRenderer
from tableflow.render.text import TextRenderer
from tableflow.themes import BUILTIN_THEMES, DEFAULT_THEME, Theme

RENDERERS: Dict[str, Type[Renderer]] = {
    "text": TextRenderer,
    "html": HTMLRenderer,
    "latex": LaTeXRenderer,
}


def get_renderer(fmt: str, theme: Theme = None) -> Renderer:
    """Renderer instance for ``fmt`` ("text", "html" or "latex")."""
    try:
        cls = RENDERERS[fmt]
    except KeyError:
        raise ConfigurationError(
            f"Unknown output format '{fmt}'. Available: {', '.join(RENDERERS)}"
        ) from None
    return cls(theme or BUILTIN_THEMES[DEFAULT_THEME])


__all__ = [
    "RENDERERS",
    "Renderer",
    "TextRenderer",
    "HTMLRenderer",
    "LaTeXRenderer",
    "get_renderer",
]
