"""Turn annotated lines into well-formed render trees.

Full-line annotations contribute classes to the line element. Inline
annotations become nested elements inside the line's ``div.code`` container:

- annotations covering the identical range are merged into one element;
- elements are nested by ascending start column, then descending end column,
  then insertion order, so an enclosing range always wraps the ranges inside it;
- partially overlapping ranges are split at their boundaries. A piece that does
  not begin at the start of its range gets the ``open-start`` class, one that
  stops before the end of its range gets ``open-end``.

The output never contains crossing elements.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from itertools import pairwise

from .annotation import Annotation
from .block import CodeBlock
from .line import CodeLine
from .markers import marker_type_for
from .nodes import RenderNode


BLOCK_CLASS = "codesmith"
LINE_CLASS = "ec-line"
CODE_CLASS = "code"
OPEN_START_CLASS = "open-start"
OPEN_END_CLASS = "open-end"


@dataclass(slots=True)
class _RangeGroup:
    start: int
    end: int
    order: int
    annotations: list[Annotation] = field(default_factory=list)

    def make_node(self) -> RenderNode:
        tagged = [annotation for annotation in self.annotations if annotation.tag != "span"]
        winner = max(tagged, key=_tag_weight, default=None)
        node = RenderNode(winner.tag if winner is not None else "span")
        for annotation in self.annotations:
            if annotation.tag not in ("span", node.tag):
                node.add_class(annotation.tag)
            node.add_class(*annotation.classes)
            if annotation.style:
                node.add_style(annotation.style)
            if annotation.label and "data-label" not in node.attributes:
                node.attributes["data-label"] = annotation.label
        return node


def _tag_weight(annotation: Annotation) -> int:
    marker_type = marker_type_for(annotation)
    return marker_type.priority if marker_type is not None else -1


def _group_ranges(text: str, annotations: Iterable[Annotation]) -> list[_RangeGroup]:
    groups: dict[tuple[int, int], _RangeGroup] = {}
    for order, annotation in enumerate(annotations):
        if annotation.inline_range is None:
            continue
        clamped = annotation.inline_range.clamp(len(text))
        if clamped.is_empty:
            continue
        key = (clamped.column_start, clamped.column_end)
        group = groups.get(key)
        if group is None:
            group = groups[key] = _RangeGroup(key[0], key[1], order)
        group.annotations.append(annotation)
    return sorted(groups.values(), key=lambda group: (group.start, -group.end, group.order))


def render_inline(text: str, annotations: Sequence[Annotation]) -> list[RenderNode | str]:
    """Render ``text`` with its inline annotations as a list of children."""
    groups = _group_ranges(text, annotations)
    if not groups:
        return [text] if text else []

    boundaries = sorted(
        {0, len(text)} | {group.start for group in groups} | {group.end for group in groups}
    )
    root: list[RenderNode | str] = []
    stack: list[tuple[_RangeGroup, RenderNode]] = []

    def _append(child: RenderNode | str) -> None:
        if stack:
            stack[-1][1].append(child)
        else:
            root.append(child)

    for segment_start, segment_end in pairwise(boundaries):
        active = [
            group for group in groups if group.start <= segment_start and segment_end <= group.end
        ]

        depth = 0
        while depth < len(stack) and depth < len(active) and stack[depth][0] is active[depth]:
            depth += 1

        while len(stack) > depth:
            group, node = stack.pop()
            if segment_start < group.end:
                node.add_class(OPEN_END_CLASS)

        for group in active[depth:]:
            node = group.make_node()
            if segment_start > group.start:
                node.add_class(OPEN_START_CLASS)
            _append(node)
            stack.append((group, node))

        _append(text[segment_start:segment_end])

    return root


def render_line(line: CodeLine) -> RenderNode:
    """Render a line to ``div.ec-line > div.code``."""
    line_node = RenderNode("div", classes=(LINE_CLASS,))
    inline: list[Annotation] = []
    for annotation in line.annotations:
        if annotation.inline_range is not None:
            inline.append(annotation)
            continue
        line_node.add_class(*annotation.classes)
        if annotation.style:
            line_node.add_style(annotation.style)
        if annotation.label and "data-label" not in line_node.attributes:
            line_node.attributes["data-label"] = annotation.label

    code_node = RenderNode("div", classes=(CODE_CLASS,))
    code_node.extend(render_inline(line.text, inline))
    line_node.append(code_node)
    return line_node


def render_block_tree(line_nodes: Iterable[RenderNode], language: str = "") -> RenderNode:
    """Wrap rendered lines in ``pre.codesmith > code``."""
    attributes = {"data-language": language} if language else None
    code = RenderNode("code", children=line_nodes)
    return RenderNode("pre", classes=(BLOCK_CLASS,), attributes=attributes, children=[code])


def render_block(block: CodeBlock) -> RenderNode:
    """Render every line of ``block`` without running rendering hooks."""
    return render_block_tree(
        (render_line(line) for line in block.get_lines()), block.language
    )


__all__ = [
    "BLOCK_CLASS",
    "CODE_CLASS",
    "LINE_CLASS",
    "OPEN_END_CLASS",
    "OPEN_START_CLASS",
    "render_block",
    "render_block_tree",
    "render_inline",
    "render_line",
]
