"""High-level helpers wiring the engine, the built-in plugins and Pygments."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from codesmith.adapters.html import render_html, render_page
from codesmith.adapters.pygments import PygmentsTokenizer, load_pygments_theme
from codesmith.core.config import EngineConfig, load_config
from codesmith.core.diagnostics import DiagnosticEmitter, LoggingEmitter
from codesmith.core.engine import CodeRenderer, CodeSnippet, RenderedBlock, RenderedDocument
from codesmith.core.hooks import Plugin
from codesmith.plugins import default_plugins


def create_renderer(
    config: EngineConfig | Path | str | None = None,
    *,
    emitter: DiagnosticEmitter | None = None,
    extra_plugins: Iterable[Plugin] = (),
) -> CodeRenderer:
    """Return a renderer using the built-in plugins and the configured Pygments style.

    ``config`` may be an :class:`EngineConfig` or the path of a YAML file.
    ``extra_plugins`` are registered after the built-in ones.
    """
    if isinstance(config, (str, Path)):
        config = load_config(config)
    config = config or EngineConfig()
    return CodeRenderer(
        [*default_plugins(config), *extra_plugins],
        config=config,
        theme=load_pygments_theme(config.theme),
        tokenizer=PygmentsTokenizer(config.theme),
        emitter=emitter or LoggingEmitter(),
    )


def render_code(
    code: str,
    language: str = "",
    meta: str = "",
    *,
    renderer: CodeRenderer | None = None,
) -> RenderedBlock:
    """Render a single block with a default renderer unless one is given."""
    renderer = renderer or create_renderer()
    return renderer.render(code, language, meta)


def render_code_html(
    code: str,
    language: str = "",
    meta: str = "",
    *,
    renderer: CodeRenderer | None = None,
) -> tuple[str, str]:
    """Return the HTML markup and the CSS of a single block."""
    rendered = render_code(code, language, meta, renderer=renderer)
    return render_html(rendered.tree), rendered.styles.to_css()


def render_snippets(
    snippets: Iterable[CodeSnippet],
    *,
    renderer: CodeRenderer | None = None,
    title: str = "Code blocks",
) -> tuple[RenderedDocument, str]:
    """Render ``snippets`` and return the document with a standalone HTML page."""
    renderer = renderer or create_renderer()
    document = renderer.render_many(snippets)
    return document, render_page(document, title=title)


__all__ = ["create_renderer", "render_code", "render_code_html", "render_snippets"]
