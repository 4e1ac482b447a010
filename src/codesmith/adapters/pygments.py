"""Pygments integration: tokenizer and themes derived from Pygments styles."""

from __future__ import annotations

from functools import lru_cache

from pygments.lexers import get_lexer_by_name
from pygments.style import StyleMeta
from pygments.styles import get_all_styles, get_style_by_name
from pygments.token import Token
from pygments.util import ClassNotFound

from codesmith.core.colors import get_luminance, to_hex
from codesmith.core.exceptions import ConfigurationError
from codesmith.core.theme import Theme
from codesmith.core.tokens import TokenSpan, UnsupportedLanguageError


def _style_class(name: str) -> StyleMeta:
    try:
        return get_style_by_name(name)
    except ClassNotFound as exc:
        raise ConfigurationError(f"Unknown Pygments style '{name}'.") from exc


@lru_cache(maxsize=32)
def load_pygments_theme(name: str) -> Theme:
    """Build a :class:`Theme` from the Pygments style called ``name``."""
    style = _style_class(name)
    bg = to_hex(style.background_color or "#ffffff")
    text_color = style.style_for_token(Token.Text).get("color")
    if text_color:
        fg = f"#{text_color}"
    else:
        fg = "#f8f8f2" if get_luminance(bg) < 0.5 else "#24292e"

    colors = {
        str(token_type): f"#{info['color']}" for token_type, info in style if info.get("color")
    }
    if style.highlight_color:
        colors["highlight"] = to_hex(style.highlight_color)
    return Theme.from_colors(name, bg, fg, colors)


def list_themes() -> list[str]:
    """Return the names of every installed Pygments style."""
    return sorted(get_all_styles())


class PygmentsTokenizer:
    """Tokenize code with Pygments lexers and color it with a Pygments style."""

    def __init__(self, style: str = "monokai") -> None:
        self.style_name = style
        self._style = _style_class(style)

    def tokenize(self, code: str, language: str, theme: Theme) -> list[TokenSpan]:
        try:
            lexer = get_lexer_by_name(language, stripnl=False, stripall=False, ensurenl=False)
        except ClassNotFound as exc:
            raise UnsupportedLanguageError(language) from exc

        spans: list[TokenSpan] = []
        line = 0
        column = 0
        for token_type, value in lexer.get_tokens(code):
            info = self._style.style_for_token(token_type)
            color = f"#{info['color']}" if info.get("color") else None
            font_style = tuple(
                name for name in ("bold", "italic", "underline") if info.get(name)
            )
            parts = value.split("\n")
            for offset, part in enumerate(parts):
                if offset:
                    line += 1
                    column = 0
                if part and (color or font_style):
                    spans.append(TokenSpan(line, column, column + len(part), color, font_style))
                column += len(part)
        return spans


__all__ = ["PygmentsTokenizer", "list_themes", "load_pygments_theme"]
