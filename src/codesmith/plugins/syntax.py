"""Syntax highlighting through the configured tokenizer."""

from __future__ import annotations

from collections.abc import Iterable
import logging

from codesmith.core.annotation import Annotation, AnnotationKind, InlineRange
from codesmith.core.colors import to_hex
from codesmith.core.context import BlockSession, HookContext
from codesmith.core.hooks import HookPhase, Plugin, hook
from codesmith.core.tokens import TokenSpan, UnsupportedLanguageError


logger = logging.getLogger(__name__)

_FONT_DECLARATIONS = {
    "italic": "font-style: italic",
    "bold": "font-weight: bold",
    "underline": "text-decoration: underline",
}


def token_style(span: TokenSpan) -> str:
    """Return the inline CSS rendering a token."""
    declarations = [f"color: {span.color}"] if span.color else []
    declarations.extend(
        _FONT_DECLARATIONS[name] for name in span.font_style if name in _FONT_DECLARATIONS
    )
    return "; ".join(declarations)


class SyntaxHighlightingPlugin(Plugin):
    """Add ``syntax-token`` annotations for every colored token."""

    name = "syntax-highlighting"

    def base_styles(self, session: BlockSession) -> Iterable[str]:
        theme = session.theme
        yield (
            f".codesmith {{ background-color: {theme.bg}; color: {theme.fg}; "
            "padding: 1rem 0; overflow-x: auto; }"
        )
        yield ".codesmith .ec-line { padding-inline: 1rem; white-space: pre; }"

    @hook(HookPhase.PERFORM_SYNTAX_ANALYSIS)
    def tokenize(self, context: HookContext) -> None:
        block = context.block
        if not block.language:
            return
        try:
            spans = context.tokenizer.tokenize(block.text, block.language, context.theme)
        except UnsupportedLanguageError:
            context.event("unsupported_language", language=block.language)
            return

        default_color = context.theme.fg
        for span in spans:
            line = block.get_line(span.line)
            if line is None or span.start >= span.end:
                continue
            color = to_hex(span.color) if span.color else None
            if (color is None or color == default_color) and not span.font_style:
                continue
            styled = TokenSpan(span.line, span.start, span.end, color, span.font_style)
            line.add_annotation(
                Annotation(
                    kind=AnnotationKind.SYNTAX,
                    inline_range=InlineRange(span.start, min(span.end, len(line.text))),
                    style=token_style(styled),
                    data={"color": color or default_color, "font_style": span.font_style},
                )
            )


__all__ = ["SyntaxHighlightingPlugin", "token_style"]
