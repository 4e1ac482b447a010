from __future__ import annotations

from codesmith.core.annotation import AnnotationKind
from codesmith.core.block import CodeBlock
from codesmith.core.diff import (
    DiffEdit,
    looks_like_real_diff,
    plan_diff_edits,
    strip_diff_markers,
)
from codesmith.core.markers import DiffTarget, MarkerType


def _marker_kinds(block: CodeBlock) -> list[list[AnnotationKind]]:
    return [[annotation.kind for annotation in line.annotations] for line in block.get_lines()]


def test_prefixed_lines_become_line_markers() -> None:
    block = CodeBlock("- mv\n- comm\n  cp", "diff")

    targets = strip_diff_markers(block)

    assert block.text == "mv\ncomm\ncp"
    assert targets == [DiffTarget(MarkerType.DEL, 0), DiffTarget(MarkerType.DEL, 1)]
    assert _marker_kinds(block) == [[AnnotationKind.DEL], [AnnotationKind.DEL], []]
    assert block.get_line(0).annotations[0].classes == ("highlight", "del")


def test_stripping_is_idempotent() -> None:
    block = CodeBlock("+ added\n  kept", "diff")

    strip_diff_markers(block)
    assert strip_diff_markers(block) == []

    assert block.text == "added\nkept"
    assert _marker_kinds(block) == [[AnnotationKind.INS], []]
    assert plan_diff_edits(block.text.split("\n")) == []

    restripped = CodeBlock(block.text, "diff")
    assert strip_diff_markers(restripped) == []
    assert restripped.text == block.text
    assert _marker_kinds(restripped) == [[], []]


def test_relative_indentation_is_preserved() -> None:
    code = "  def total():\n-     return 1\n+     return 2"
    block = CodeBlock(code, "diff")

    strip_diff_markers(block)

    assert block.text == "def total():\n    return 1\n    return 2"
    assert _marker_kinds(block) == [[], [AnnotationKind.DEL], [AnnotationKind.INS]]


def test_unindented_prefixes_only_drop_the_marker_character() -> None:
    block = CodeBlock("---\n+publishDate: today\ntitle: x\n---", "diff")

    strip_diff_markers(block)

    assert block.text == "---\npublishDate: today\ntitle: x\n---"
    assert _marker_kinds(block) == [[], [AnnotationKind.INS], [], []]


def test_blank_lines_do_not_affect_indentation() -> None:
    edits = plan_diff_edits(["+  a", "", "-  b"])

    assert edits == [
        DiffEdit(0, 3, MarkerType.INS),
        DiffEdit(2, 3, MarkerType.DEL),
    ]


def test_real_diffs_are_left_untouched() -> None:
    unified = "--- a/app.py\n+++ b/app.py\n@@ -1 +1 @@\n-old\n+new"
    block = CodeBlock(unified, "diff")

    assert looks_like_real_diff(unified.splitlines())
    assert strip_diff_markers(block) == []
    assert block.text == unified
    assert all(not line.annotations for line in block.get_lines())


def test_normal_diff_headers_are_detected() -> None:
    assert looks_like_real_diff(["1,2c1,2", "< old", "---", "> new"])
    assert not looks_like_real_diff(["- removed", "+ added"])
