"""Marker types and the parser turning meta options into target descriptors.

Target descriptors are immutable and know nothing about the lines of a block;
:mod:`codesmith.core.ranges` evaluates them against the current line text once
every code edit has happened.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
import re

from .annotation import Annotation, AnnotationKind, InlineRange
from .meta import MetaOption, MetaOptions


class MarkerType(str, Enum):
    """Marker flavours; when markers overlap, later members win."""

    MARK = "mark"
    DEL = "del"
    INS = "ins"

    @classmethod
    def from_string(cls, value: str | None) -> MarkerType | None:
        """Return the marker type named by ``value`` (``add``/``rem`` are aliases)."""
        if value is None:
            return None
        name = _ALIASES.get(value.lower(), value.lower())
        try:
            return cls(name)
        except ValueError:
            return None

    @property
    def priority(self) -> int:
        return _ORDER.index(self)

    @property
    def annotation_kind(self) -> AnnotationKind:
        return _KINDS[self]


_ALIASES = {"add": "ins", "rem": "del"}
_ORDER = (MarkerType.MARK, MarkerType.DEL, MarkerType.INS)
_KINDS = {
    MarkerType.MARK: AnnotationKind.MARK,
    MarkerType.DEL: AnnotationKind.DEL,
    MarkerType.INS: AnnotationKind.INS,
}
MARKER_KINDS = frozenset(_KINDS.values())


def marker_type_for(annotation: Annotation) -> MarkerType | None:
    """Return the marker type represented by an annotation, if any."""
    for marker_type, kind in _KINDS.items():
        if annotation.kind is kind:
            return marker_type
    return None


@dataclass(frozen=True, slots=True)
class LineSpan:
    """1-based inclusive line span; ``end`` is None for open ranges like ``5-``."""

    start: int
    end: int | None
    label: str | None = None

    def line_indices(self, line_count: int) -> range:
        """Return the 0-based indices covered inside a block of ``line_count`` lines."""
        first = max(self.start, 1)
        last = line_count if self.end is None else min(self.end, line_count)
        return range(first - 1, max(first - 1, last))


@dataclass(frozen=True, slots=True)
class LineRangeTarget:
    """Full-line markers for explicit line numbers (``mark={1,3-5}``)."""

    marker_type: MarkerType
    spans: tuple[LineSpan, ...]


@dataclass(frozen=True, slots=True)
class PatternTarget:
    """Inline markers for every match of a pattern on each line."""

    marker_type: MarkerType
    pattern: re.Pattern[str]
    group: int = 0
    literal: str | None = None

    def __post_init__(self) -> None:
        if self.group < 0 or self.group > self.pattern.groups:
            msg = f"Pattern {self.pattern.pattern!r} has no capture group {self.group}"
            raise ValueError(msg)


@dataclass(frozen=True, slots=True)
class DiffTarget:
    """Full-line marker recorded for a ``+``/``-`` prefixed line."""

    marker_type: MarkerType
    line_index: int


TargetDescriptor = LineRangeTarget | PatternTarget | DiffTarget


@dataclass(slots=True)
class MarkerParseResult:
    """Targets parsed from a meta string plus the options they came from."""

    targets: list[TargetDescriptor] = field(default_factory=list)
    consumed: list[MetaOption] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)


_SPAN = re.compile(
    r"""^\s*(?:(?P<quote>["'])(?P<label>(?:[^\\]|\\.)*?)(?P=quote)\s*:\s*)?"""
    r"""(?P<start>\d+)\s*(?:(?P<dash>-)\s*(?P<end>\d+)?)?\s*$"""
)


def parse_line_ranges(value: str) -> tuple[list[LineSpan], list[str]]:
    """Parse ``1, 3-5, 8-`` (optionally ``"label":2-3``) into line spans.

    Invalid parts are skipped and reported in the returned error list.
    """
    spans: list[LineSpan] = []
    errors: list[str] = []
    for part in value.split(","):
        if not part.strip():
            continue
        match = _SPAN.match(part)
        if match is None:
            errors.append(f"Invalid line range `{part.strip()}`")
            continue
        start = int(match.group("start"))
        if match.group("dash") is None:
            end: int | None = start
        elif match.group("end") is None:
            end = None
        else:
            end = int(match.group("end"))
        if end is not None and end < start:
            start, end = end, start
        label = match.group("label")
        if label is not None:
            label = re.sub(r"\\(.)", r"\1", label)
        spans.append(LineSpan(start=start, end=end, label=label))
    return spans, errors


def parse_marker_targets(options: MetaOptions) -> MarkerParseResult:
    """Collect the marker targets declared in ``options`` in order of appearance.

    Only delimited values are considered. Options whose key is not a marker
    type are left alone for other plugins; malformed values are skipped.
    """
    result = MarkerParseResult()
    for option in options:
        if option.kind == "boolean" or not option.value_start_delimiter:
            continue
        marker_type = MarkerType.from_string(option.key or MarkerType.MARK.value)
        if marker_type is None:
            continue

        if option.kind == "range":
            spans, errors = parse_line_ranges(str(option.value))
            result.errors.extend(errors)
            result.consumed.append(option)
            if spans:
                result.targets.append(LineRangeTarget(marker_type, tuple(spans)))
            continue

        if option.kind == "regexp" and isinstance(option.value, re.Pattern):
            result.consumed.append(option)
            result.targets.append(
                PatternTarget(marker_type, option.value, group=option.group or 0)
            )
            continue

        literal = str(option.value)
        result.consumed.append(option)
        if not literal:
            result.errors.append(f"Ignoring empty search term `{option.raw.strip()}`")
            continue
        result.targets.append(
            PatternTarget(marker_type, re.compile(re.escape(literal)), literal=literal)
        )

    result.errors.extend(options.errors)
    return result


def marker_annotation(
    marker_type: MarkerType,
    inline_range: InlineRange | None = None,
    *,
    label: str | None = None,
) -> Annotation:
    """Create the annotation rendered for a marker.

    Inline markers become ``<mark>``/``<ins>``/``<del>`` elements, full-line
    markers add ``highlight <type>`` classes to the line.
    """
    if inline_range is None:
        return Annotation(
            kind=marker_type.annotation_kind,
            classes=("highlight", marker_type.value),
            label=label,
        )
    return Annotation(
        kind=marker_type.annotation_kind,
        inline_range=inline_range,
        tag=marker_type.value,
        label=label,
    )


__all__ = [
    "MARKER_KINDS",
    "DiffTarget",
    "LineRangeTarget",
    "LineSpan",
    "MarkerParseResult",
    "MarkerType",
    "PatternTarget",
    "TargetDescriptor",
    "marker_annotation",
    "marker_type_for",
    "parse_line_ranges",
    "parse_marker_targets",
]
