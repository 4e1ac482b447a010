"""Tokenizer contract used by the syntax highlighting phase."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable


if TYPE_CHECKING:  # pragma: no cover - typing only
    from .theme import Theme


@dataclass(frozen=True, slots=True)
class TokenSpan:
    """Colored column range of one line as produced by a tokenizer."""

    line: int
    start: int
    end: int
    color: str | None = None
    font_style: tuple[str, ...] = ()


class UnsupportedLanguageError(LookupError):
    """Raised by tokenizers that cannot handle the requested language."""


@runtime_checkable
class Tokenizer(Protocol):
    """Turn source code into colored spans.

    Implementations raise :class:`UnsupportedLanguageError` for languages they
    do not know; the engine treats that as plain text.
    """

    def tokenize(self, code: str, language: str, theme: Theme) -> list[TokenSpan]: ...


class PlainTextTokenizer:
    """Tokenizer that never colors anything."""

    def tokenize(self, code: str, language: str, theme: Theme) -> list[TokenSpan]:
        return []


__all__ = ["PlainTextTokenizer", "TokenSpan", "Tokenizer", "UnsupportedLanguageError"]
