"""Implementation of the ``codesmith render`` command."""

from __future__ import annotations

from pathlib import Path

import markdown
import typer

from codesmith.adapters.html import render_html, render_page, render_styles, wrap_page
from codesmith.adapters.markdown import CodeBlocksExtension
from codesmith.api import create_renderer
from codesmith.core.config import EngineConfig, load_config
from codesmith.core.engine import CodeRenderer
from codesmith.core.exceptions import CodeRenderingError, exception_hint

from .._options import (
    ConfigOption,
    FragmentOption,
    InputPathArgument,
    LanguageOption,
    MetaOption,
    OutputPathOption,
    ThemeOption,
)
from ..diagnostics import CliEmitter
from ..state import emit_error, get_cli_state, render_message


MARKDOWN_SUFFIXES = {".md", ".markdown"}
_EXTENSION_LANGUAGES = {
    ".py": "python",
    ".js": "js",
    ".mjs": "js",
    ".ts": "ts",
    ".tsx": "tsx",
    ".sh": "bash",
    ".yml": "yaml",
    ".rs": "rust",
    ".rb": "ruby",
    ".h": "c",
    ".hpp": "cpp",
}


def language_for_path(path: Path) -> str:
    """Guess the language id of a source file from its extension."""
    suffix = path.suffix.lower()
    return _EXTENSION_LANGUAGES.get(suffix, suffix.lstrip("."))


def build_renderer(config_path: Path | None, theme: str | None) -> CodeRenderer:
    config = load_config(config_path) if config_path else EngineConfig()
    if theme:
        config = config.model_copy(update={"theme": theme})
    return create_renderer(config, emitter=CliEmitter())


def failure_message(exc: BaseException) -> str:
    """Append the innermost cause to an error message when it adds detail."""
    message = str(exc)
    hint = exception_hint(exc)
    if hint and hint not in message:
        return f"{message} {hint}"
    return message


def _report_summary() -> None:
    state = get_cli_state()
    blocks = state.consume_events("block_rendered")
    adjusted = state.consume_events("contrast_adjusted")
    render_message("info", f"Rendered {len(blocks)} block(s), {len(adjusted)} color fix(es).")


def _render_markdown(renderer: CodeRenderer, text: str, fragment: bool, title: str) -> str:
    extension = CodeBlocksExtension(renderer=renderer)
    body = markdown.markdown(text, extensions=[extension])
    if fragment:
        return f"{body}\n{render_styles(extension.styles)}"
    return wrap_page(body, extension.styles, title=title)


def render(
    input_path: InputPathArgument,
    language: LanguageOption = None,
    meta: MetaOption = "",
    theme: ThemeOption = None,
    config: ConfigOption = None,
    output: OutputPathOption = None,
    fragment: FragmentOption = False,
) -> None:
    """Render a source file or the code blocks of a Markdown document to HTML."""
    try:
        renderer = build_renderer(config, theme)
        text = input_path.read_text(encoding="utf-8")
        if input_path.suffix.lower() in MARKDOWN_SUFFIXES and language is None:
            result = _render_markdown(renderer, text, fragment, input_path.name)
        else:
            rendered = renderer.render(text, language or language_for_path(input_path), meta)
            if fragment:
                result = f"{render_html(rendered.tree)}\n{render_styles(rendered.styles)}"
            else:
                result = render_page(rendered, title=input_path.name)
    except (CodeRenderingError, OSError) as exc:
        emit_error(failure_message(exc), exception=exc)
        raise typer.Exit(code=1) from exc

    _report_summary()
    if output is None:
        typer.echo(result)
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(result, encoding="utf-8")
    get_cli_state().err_console.print(f"[green]Wrote[/] {output}")


__all__ = ["build_renderer", "failure_message", "language_for_path", "render"]
