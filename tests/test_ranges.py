from __future__ import annotations

import re

import pytest

from codesmith.core.annotation import AnnotationKind, InlineRange
from codesmith.core.block import CodeBlock
from codesmith.core.markers import (
    DiffTarget,
    LineRangeTarget,
    LineSpan,
    MarkerType,
    PatternTarget,
    parse_marker_targets,
)
from codesmith.core.meta import MetaOptions
from codesmith.core.ranges import (
    ResolvedMarker,
    apply_resolved_markers,
    find_pattern_ranges,
    group_span_by_search,
    resolve_targets,
)


LAYOUT_CODE = """\
import BaseLayout from '../../layouts/BaseLayout.astro';

<BaseLayout title={frontmatter.title} fancyJsHelper={fancyJsHelper}>
  Welcome to my new Astro blog, using MDX!
</BaseLayout>
<BaseLayout>nested</BaseLayout>"""

LAYOUT_META = (
    "/</?BaseLayout>/ "
    "/</?BaseLayout title={frontmatter.title} fancyJsHelper={fancyJsHelper}>/"
)


def test_find_pattern_ranges_returns_every_match() -> None:
    assert find_pattern_ranges("a-b-c", re.compile("-")) == [(1, 2), (3, 4)]
    assert find_pattern_ranges("foo foo foo", re.compile("foo")) == [(0, 3), (4, 7), (8, 11)]


def test_find_pattern_ranges_skips_empty_matches() -> None:
    assert find_pattern_ranges("axb", re.compile("x*")) == [(1, 2)]
    assert find_pattern_ranges("abc", re.compile("^")) == []


def test_find_pattern_ranges_uses_capture_group() -> None:
    pattern = re.compile("foo(bar)")
    assert find_pattern_ranges("foobar foobar", pattern, 1) == [(3, 6), (10, 13)]


def test_find_pattern_ranges_skips_missing_groups() -> None:
    pattern = re.compile("a(b)?")
    assert find_pattern_ranges("a ab", pattern, 1) == [(3, 4)]


def test_group_span_by_search_uses_first_occurrence() -> None:
    pattern = re.compile("ab(a)")

    assert find_pattern_ranges("xaba", pattern, 1) == [(3, 4)]
    assert find_pattern_ranges("xaba", pattern, 1, span_function=group_span_by_search) == [
        (1, 2)
    ]


def test_resolve_line_ranges_drops_lines_outside_of_block() -> None:
    block = CodeBlock("\n".join(f"line {index}" for index in range(1, 11)))
    targets = parse_marker_targets(MetaOptions("mark={2,4-6} del={9-14, 40}")).targets

    resolved = resolve_targets(block.get_lines(), targets)

    marked = [marker.line_index for marker in resolved if marker.marker_type is MarkerType.MARK]
    deleted = [marker.line_index for marker in resolved if marker.marker_type is MarkerType.DEL]
    assert marked == [1, 3, 4, 5]
    assert deleted == [8, 9]
    assert all(marker.is_full_line for marker in resolved)


def test_mark_ranges_annotate_exactly_the_listed_lines() -> None:
    block = CodeBlock("\n".join(f"line {index}" for index in range(1, 11)))
    targets = parse_marker_targets(MetaOptions("mark={2,4-6}")).targets

    apply_resolved_markers(block.get_lines(), resolve_targets(block.get_lines(), targets))

    annotated = [
        index
        for index, line in enumerate(block.get_lines())
        if line.get_annotations(kind=AnnotationKind.MARK)
    ]
    assert annotated == [1, 3, 4, 5]


def test_open_range_stops_at_last_line() -> None:
    block = CodeBlock("a\nb\nc\nd")
    target = LineRangeTarget(MarkerType.INS, (LineSpan(3, None),))

    resolved = resolve_targets(block.get_lines(), [target])

    assert [marker.line_index for marker in resolved] == [2, 3]


def test_regex_targets_cover_exactly_the_matched_text() -> None:
    block = CodeBlock(LAYOUT_CODE, "mdx")
    options = MetaOptions(LAYOUT_META)
    targets = parse_marker_targets(options).targets
    lines = block.get_lines()

    apply_resolved_markers(lines, resolve_targets(lines, targets))

    matched: list[tuple[int, str]] = []
    for index, line in enumerate(lines):
        for annotation in line.get_annotations(kind=AnnotationKind.MARK):
            assert annotation.inline_range is not None
            span = annotation.inline_range
            matched.append((index, line.text[span.column_start : span.column_end]))

    assert matched == [
        (2, "<BaseLayout title={frontmatter.title} fancyJsHelper={fancyJsHelper}>"),
        (4, "</BaseLayout>"),
        (5, "<BaseLayout>"),
        (5, "</BaseLayout>"),
    ]
    for index, text in matched:
        pattern = next(
            target.pattern for target in targets if target.pattern.fullmatch(text)
        )
        assert pattern.search(lines[index].text) is not None


def test_regex_target_marks_every_occurrence_on_a_line() -> None:
    block = CodeBlock("foo foo foo\nbar", "text")
    targets = parse_marker_targets(MetaOptions("/foo/")).targets

    resolved = resolve_targets(block.get_lines(), targets)

    assert [marker.line_index for marker in resolved] == [0, 0, 0]
    assert [marker.inline_range for marker in resolved] == [
        InlineRange(0, 3),
        InlineRange(4, 7),
        InlineRange(8, 11),
    ]


def test_identical_ranges_from_several_targets_are_kept() -> None:
    block = CodeBlock("let value = 1")
    targets = [
        PatternTarget(MarkerType.MARK, re.compile("value")),
        PatternTarget(MarkerType.INS, re.compile("val(ue)"), group=0),
        LineRangeTarget(MarkerType.MARK, (LineSpan(1, 1),)),
        LineRangeTarget(MarkerType.MARK, (LineSpan(1, 1),)),
    ]

    resolved = resolve_targets(block.get_lines(), targets)

    assert resolved == [
        ResolvedMarker(0, MarkerType.MARK, InlineRange(4, 9)),
        ResolvedMarker(0, MarkerType.INS, InlineRange(4, 9)),
        ResolvedMarker(0, MarkerType.MARK),
        ResolvedMarker(0, MarkerType.MARK),
    ]
    created = apply_resolved_markers(block.get_lines(), resolved)
    assert len(created) == 4
    assert len(block.get_line(0).annotations) == 4


def test_diff_targets_outside_of_block_are_dropped() -> None:
    block = CodeBlock("a\nb")
    targets = [DiffTarget(MarkerType.INS, 1), DiffTarget(MarkerType.DEL, 5)]

    resolved = resolve_targets(block.get_lines(), targets)

    assert resolved == [ResolvedMarker(1, MarkerType.INS)]


def test_resolve_rejects_unknown_targets() -> None:
    block = CodeBlock("a")
    with pytest.raises(TypeError):
        resolve_targets(block.get_lines(), [object()])  # type: ignore[list-item]
