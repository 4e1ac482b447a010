"""Annotation records attached to code lines.

An annotation tags either a half-open column range of a line or the whole line
(when ``inline_range`` is ``None``) with a kind and a render payload. Ranges are
expressed against the text the line holds when the annotation is created; the
renderer clamps them against the final text, so stale ranges never produce
crossing or out-of-bounds output.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class AnnotationKind(str, Enum):
    """Categories of annotations produced by the built-in plugins."""

    MARK = "marker-mark"
    """Neutral highlight added by ``mark=`` targets."""

    DEL = "marker-del"
    """Deleted line or text, from ``del=`` targets or ``-`` diff prefixes."""

    INS = "marker-ins"
    """Inserted line or text, from ``ins=`` targets or ``+`` diff prefixes."""

    SYNTAX = "syntax-token"
    """Token colors produced by the tokenizer."""

    CONTRAST = "contrast-fix"
    """Token color raised to reach the minimum contrast below a marker."""

    FRAME = "frame"
    """Frame decorations."""

    COLLAPSE = "collapse"
    """Lines folded into a collapsible section."""

    @property
    def is_marker(self) -> bool:
        return self in (AnnotationKind.MARK, AnnotationKind.DEL, AnnotationKind.INS)


@dataclass(frozen=True, slots=True)
class InlineRange:
    """Half-open column range on a single line."""

    column_start: int
    column_end: int

    def __post_init__(self) -> None:
        if self.column_start < 0 or self.column_end < self.column_start:
            msg = f"Invalid inline range [{self.column_start}, {self.column_end})"
            raise ValueError(msg)

    @property
    def is_empty(self) -> bool:
        return self.column_start == self.column_end

    def overlaps(self, other: InlineRange) -> bool:
        """Return True when both ranges share at least one column."""
        return self.column_start < other.column_end and other.column_start < self.column_end

    def intersection(self, other: InlineRange) -> InlineRange | None:
        start = max(self.column_start, other.column_start)
        end = min(self.column_end, other.column_end)
        if start >= end:
            return None
        return InlineRange(start, end)

    def clamp(self, length: int) -> InlineRange:
        """Return the range limited to ``[0, length]``."""
        start = min(self.column_start, length)
        end = min(self.column_end, length)
        return InlineRange(start, max(start, end))


@dataclass(slots=True, eq=False)
class Annotation:
    """A tagged range (or whole line) plus the payload used to render it."""

    kind: AnnotationKind
    inline_range: InlineRange | None = None
    tag: str = "span"
    classes: tuple[str, ...] = ()
    style: str | None = None
    label: str | None = None
    data: dict[str, Any] = field(default_factory=dict)

    @property
    def is_full_line(self) -> bool:
        return self.inline_range is None

    def covers(self, column_start: int, column_end: int) -> bool:
        """Return True when the annotation touches the given column range."""
        if self.inline_range is None:
            return True
        return self.inline_range.overlaps(InlineRange(column_start, column_end))


__all__ = ["Annotation", "AnnotationKind", "InlineRange"]
