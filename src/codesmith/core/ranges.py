"""Range resolution: evaluate target descriptors against the lines of a block."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
import logging
import re

from .annotation import Annotation, InlineRange
from .line import CodeLine
from .markers import (
    DiffTarget,
    LineRangeTarget,
    MarkerType,
    PatternTarget,
    TargetDescriptor,
    marker_annotation,
)


logger = logging.getLogger(__name__)

Span = tuple[int, int]
GroupSpanFunction = Callable[[re.Match[str], int], Span | None]


@dataclass(frozen=True, slots=True)
class ResolvedMarker:
    """A marker bound to a concrete line (and columns, for inline markers)."""

    line_index: int
    marker_type: MarkerType
    inline_range: InlineRange | None = None
    label: str | None = None

    @property
    def is_full_line(self) -> bool:
        return self.inline_range is None


def group_span(match: re.Match[str], group: int = 0) -> Span | None:
    """Return the span of ``group`` as reported by the regex engine."""
    start, end = match.span(group)
    if start < 0:
        return None
    return start, end


def group_span_by_search(match: re.Match[str], group: int = 0) -> Span | None:
    """Locate ``group`` by searching its text inside the full match.

    Only for engines that cannot report group positions. The first occurrence
    wins, so a group whose text also appears earlier in the match is placed on
    that earlier occurrence.
    """
    value = match.group(group)
    if not value:
        return None
    offset = match.group(0).find(value)
    if offset < 0:
        return None
    start = match.start() + offset
    return start, start + len(value)


def find_pattern_ranges(
    text: str,
    pattern: re.Pattern[str],
    group: int = 0,
    *,
    span_function: GroupSpanFunction = group_span,
) -> list[Span]:
    """Return the spans of every non-overlapping match of ``pattern`` in ``text``.

    Empty matches and matches whose selected group did not participate are
    skipped.
    """
    spans: list[Span] = []
    for match in pattern.finditer(text):
        if match.end() == match.start():
            continue
        span = span_function(match, group)
        if span is None or span[0] == span[1]:
            continue
        spans.append(span)
    return spans


def resolve_targets(
    lines: Sequence[CodeLine],
    targets: Iterable[TargetDescriptor],
    *,
    span_function: GroupSpanFunction = group_span,
) -> list[ResolvedMarker]:
    """Evaluate ``targets`` in order against the current text of ``lines``.

    Line numbers outside of the block are dropped; open ranges stop at the last
    line. Duplicates are kept.
    """
    line_count = len(lines)
    resolved: list[ResolvedMarker] = []
    for target in targets:
        if isinstance(target, LineRangeTarget):
            for span in target.spans:
                indices = span.line_indices(line_count)
                if not indices:
                    logger.debug("Line range %s is outside of a %d-line block", span, line_count)
                for index in indices:
                    resolved.append(
                        ResolvedMarker(index, target.marker_type, label=span.label)
                    )
        elif isinstance(target, PatternTarget):
            for index, line in enumerate(lines):
                for start, end in find_pattern_ranges(
                    line.text, target.pattern, target.group, span_function=span_function
                ):
                    resolved.append(
                        ResolvedMarker(index, target.marker_type, InlineRange(start, end))
                    )
        elif isinstance(target, DiffTarget):
            if 0 <= target.line_index < line_count:
                resolved.append(ResolvedMarker(target.line_index, target.marker_type))
        else:  # pragma: no cover - exhaustive over TargetDescriptor
            msg = f"Unsupported target descriptor: {target!r}"
            raise TypeError(msg)
    return resolved


def apply_resolved_markers(
    lines: Sequence[CodeLine], markers: Iterable[ResolvedMarker]
) -> list[Annotation]:
    """Attach one marker annotation per resolved marker and return them."""
    created: list[Annotation] = []
    for marker in markers:
        annotation = marker_annotation(
            marker.marker_type, marker.inline_range, label=marker.label
        )
        lines[marker.line_index].add_annotation(annotation)
        created.append(annotation)
    return created


__all__ = [
    "GroupSpanFunction",
    "ResolvedMarker",
    "apply_resolved_markers",
    "find_pattern_ranges",
    "group_span",
    "group_span_by_search",
    "resolve_targets",
]
