from __future__ import annotations

import re

import pytest

from codesmith.core.annotation import AnnotationKind, InlineRange
from codesmith.core.markers import (
    LineRangeTarget,
    LineSpan,
    MarkerType,
    PatternTarget,
    marker_annotation,
    marker_type_for,
    parse_line_ranges,
    parse_marker_targets,
)
from codesmith.core.meta import MetaOptions


COMPLEX_META = (
    'title="src/pages/posts/first-post.mdx" collapse={9-11} ins={"A":6} '
    "mark={'B':9-11} del={2} /</?BaseLayout>/ "
    "/</?BaseLayout title={frontmatter.title} fancyJsHelper={fancyJsHelper}>/"
)


def test_marker_type_aliases_and_priority() -> None:
    assert MarkerType.from_string("add") is MarkerType.INS
    assert MarkerType.from_string("REM") is MarkerType.DEL
    assert MarkerType.from_string("mark") is MarkerType.MARK
    assert MarkerType.from_string("title") is None
    assert MarkerType.from_string(None) is None
    assert MarkerType.MARK.priority < MarkerType.DEL.priority < MarkerType.INS.priority


def test_parse_line_ranges() -> None:
    spans, errors = parse_line_ranges("1, 3-5, 8-, 12-10")

    assert spans == [
        LineSpan(1, 1),
        LineSpan(3, 5),
        LineSpan(8, None),
        LineSpan(10, 12),
    ]
    assert errors == []


def test_parse_line_ranges_with_labels() -> None:
    spans, errors = parse_line_ranges("\"A\":6, 'B' : 9-11")

    assert spans == [LineSpan(6, 6, "A"), LineSpan(9, 11, "B")]
    assert errors == []


def test_parse_line_ranges_reports_invalid_parts() -> None:
    spans, errors = parse_line_ranges("2, x, 4-y")

    assert spans == [LineSpan(2, 2)]
    assert errors == ["Invalid line range `x`", "Invalid line range `4-y`"]


def test_line_span_indices_are_clamped() -> None:
    assert list(LineSpan(2, 4).line_indices(10)) == [1, 2, 3]
    assert list(LineSpan(8, None).line_indices(10)) == [7, 8, 9]
    assert list(LineSpan(9, 15).line_indices(10)) == [8, 9]
    assert list(LineSpan(11, 12).line_indices(10)) == []
    assert list(LineSpan(0, 1).line_indices(10)) == [0]


def test_parse_marker_targets_for_mark_ranges() -> None:
    result = parse_marker_targets(MetaOptions("mark={2,4-6}"))

    assert result.targets == [
        LineRangeTarget(MarkerType.MARK, (LineSpan(2, 2), LineSpan(4, 6)))
    ]
    assert result.errors == []


def test_parse_marker_targets_complex_meta() -> None:
    options = MetaOptions(COMPLEX_META)
    result = parse_marker_targets(options)

    line_targets = [target for target in result.targets if isinstance(target, LineRangeTarget)]
    assert line_targets == [
        LineRangeTarget(MarkerType.INS, (LineSpan(6, 6, "A"),)),
        LineRangeTarget(MarkerType.MARK, (LineSpan(9, 11, "B"),)),
        LineRangeTarget(MarkerType.DEL, (LineSpan(2, 2),)),
    ]
    patterns = [target for target in result.targets if isinstance(target, PatternTarget)]
    assert [target.pattern.pattern for target in patterns] == [
        "</?BaseLayout>",
        "</?BaseLayout title={frontmatter.title} fancyJsHelper={fancyJsHelper}>",
    ]
    assert all(target.marker_type is MarkerType.MARK for target in patterns)
    assert {option.key for option in result.consumed} == {"ins", "mark", "del", None}
    assert options.without(result.consumed) == (
        'title="src/pages/posts/first-post.mdx" collapse={9-11}'
    )


def test_search_terms_are_escaped_literals() -> None:
    result = parse_marker_targets(MetaOptions('"a.b" ins="x+1" rem={3}'))

    first, second, third = result.targets
    assert isinstance(first, PatternTarget)
    assert first.literal == "a.b"
    assert first.pattern.search("axb") is None
    assert first.pattern.search("a.b") is not None
    assert second.marker_type is MarkerType.INS
    assert second.pattern.search("y = x+1") is not None
    assert third == LineRangeTarget(MarkerType.DEL, (LineSpan(3, 3),))


def test_regex_group_is_kept() -> None:
    result = parse_marker_targets(MetaOptions("del=/return (\\w+)/1"))

    (target,) = result.targets
    assert isinstance(target, PatternTarget)
    assert target.marker_type is MarkerType.DEL
    assert target.group == 1


def test_unknown_keys_and_bare_values_are_left_alone() -> None:
    result = parse_marker_targets(MetaOptions('title="x" frame={1} mark=plain showLineNumbers'))

    assert result.targets == []
    assert result.consumed == []
    assert result.errors == []


def test_empty_search_term_and_option_errors_are_collected() -> None:
    result = parse_marker_targets(MetaOptions('mark="" ins={1,z} /(broken/'))

    assert result.targets == [LineRangeTarget(MarkerType.INS, (LineSpan(1, 1),))]
    assert len(result.errors) == 3
    assert result.errors[0].startswith("Ignoring empty search term")
    assert result.errors[1] == "Invalid line range `z`"
    assert "(broken" in result.errors[2]


def test_pattern_target_validates_group() -> None:
    with pytest.raises(ValueError):
        PatternTarget(MarkerType.MARK, re.compile("no groups"), group=1)


def test_marker_annotation_shapes() -> None:
    full = marker_annotation(MarkerType.DEL, label="old")
    inline = marker_annotation(MarkerType.INS, InlineRange(1, 3))

    assert full.kind is AnnotationKind.DEL
    assert full.is_full_line
    assert full.classes == ("highlight", "del")
    assert full.label == "old"
    assert inline.tag == "ins"
    assert inline.inline_range == InlineRange(1, 3)
    assert marker_type_for(inline) is MarkerType.INS
