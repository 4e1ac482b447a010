"""Primary public API for codesmith."""

from __future__ import annotations

from codesmith.api import create_renderer, render_code, render_code_html, render_snippets
from codesmith.core.annotation import Annotation, AnnotationKind, InlineRange
from codesmith.core.block import CodeBlock
from codesmith.core.colors import ensure_color_contrast_on_background, get_color_contrast
from codesmith.core.config import EngineConfig, load_config
from codesmith.core.context import HookContext
from codesmith.core.engine import CodeRenderer, CodeSnippet, RenderedBlock, RenderedDocument
from codesmith.core.exceptions import (
    CodeRenderingError,
    EditRangeError,
    PhaseViolationError,
    PluginExecutionError,
)
from codesmith.core.hooks import HookPhase, Plugin, hook
from codesmith.core.line import CodeLine
from codesmith.core.meta import MetaOptions
from codesmith.core.theme import Theme
from codesmith.version import get_version


__version__ = get_version()

__all__ = [
    "Annotation",
    "AnnotationKind",
    "CodeBlock",
    "CodeLine",
    "CodeRenderer",
    "CodeRenderingError",
    "CodeSnippet",
    "EditRangeError",
    "EngineConfig",
    "HookContext",
    "HookPhase",
    "InlineRange",
    "MetaOptions",
    "PhaseViolationError",
    "Plugin",
    "PluginExecutionError",
    "RenderedBlock",
    "RenderedDocument",
    "Theme",
    "__version__",
    "create_renderer",
    "ensure_color_contrast_on_background",
    "get_color_contrast",
    "get_version",
    "hook",
    "load_config",
    "render_code",
    "render_code_html",
    "render_snippets",
]
