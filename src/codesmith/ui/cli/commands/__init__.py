"""CLI command implementations exposed via `codesmith.ui.cli`."""

from __future__ import annotations

from .contrast import contrast
from .render import render
from .themes import themes


__all__ = ["contrast", "render", "themes"]
