"""Collapsible sections: ``collapse={3-8, 12-}`` folds line ranges.

Collapsed lines are tagged while the meta string is parsed, so the ranges
refer to the lines as written. Each run of consecutive collapsed lines is
wrapped in a ``<details>`` element once the block is rendered.
"""

from __future__ import annotations

from collections.abc import Iterable

from codesmith.core.annotation import Annotation, AnnotationKind
from codesmith.core.config import CollapsibleConfig
from codesmith.core.context import BlockSession, HookContext
from codesmith.core.hooks import HookPhase, Plugin, hook
from codesmith.core.markers import parse_line_ranges
from codesmith.core.nodes import RenderNode


COLLAPSE_OPTION = "collapse"
SECTION_CLASS = "collapsible-section"


class CollapsibleSectionsPlugin(Plugin):
    """Fold line ranges into expandable sections."""

    name = "collapsible-sections"

    def __init__(self, config: CollapsibleConfig | None = None) -> None:
        self.config = config or CollapsibleConfig()

    def base_styles(self, session: BlockSession) -> Iterable[str]:
        yield f".codesmith details.{SECTION_CLASS} > summary {{ cursor: pointer; opacity: 0.7; }}"
        yield f".codesmith details.{SECTION_CLASS}[open] > summary {{ display: none; }}"

    @hook(HookPhase.PREPROCESS_METADATA)
    def parse_metadata(self, context: HookContext) -> None:
        options = context.options
        collapse = options.select(COLLAPSE_OPTION, "range")
        if not collapse:
            return

        lines = context.lines
        collapsed: set[int] = set()
        for option in collapse:
            spans, errors = parse_line_ranges(str(option.value))
            for error in errors:
                context.event("meta_option_error", option=option.raw.strip(), reason=error)
            for span in spans:
                collapsed.update(span.line_indices(len(lines)))

        section = -1
        previous: int | None = None
        for index in sorted(collapsed):
            if previous is None or index != previous + 1:
                section += 1
            previous = index
            lines[index].add_annotation(
                Annotation(kind=AnnotationKind.COLLAPSE, data={"section": section})
            )
        context.block.meta = options.without(collapse)

    @hook(HookPhase.POSTPROCESS_RENDERED_LINE)
    def remember_line(self, context: HookContext) -> None:
        line = context.line
        line_ast = context.render_data.line_ast
        if line is None or line_ast is None:
            return
        sections = line.get_annotations(kind=AnnotationKind.COLLAPSE)
        if sections:
            context.data.setdefault("rendered", []).append(
                (line_ast, sections[0].data["section"])
            )

    @hook(HookPhase.POSTPROCESS_RENDERED_BLOCK)
    def fold_sections(self, context: HookContext) -> None:
        rendered: list[tuple[RenderNode, int]] = context.data.get("rendered") or []
        block_ast = context.render_data.block_ast
        if not rendered or block_ast is None:
            return
        code = block_ast.find("code")
        if code is None:
            return

        sections = {id(node): section for node, section in rendered}
        children: list[RenderNode | str] = []
        current: RenderNode | None = None
        current_section: int | None = None
        for child in code.children:
            section = sections.get(id(child)) if isinstance(child, RenderNode) else None
            if section is None:
                current = current_section = None
                children.append(child)
                continue
            if current is None or section != current_section:
                current = RenderNode("details", classes=(SECTION_CLASS,))
                current_section = section
                children.append(current)
            current.append(child)

        for child in children:
            if isinstance(child, RenderNode) and child.has_class(SECTION_CLASS):
                count = len(child.children)
                summary = RenderNode(
                    "summary", children=[self.config.summary.format(count=count)]
                )
                child.prepend(summary)
        code.children = children


__all__ = ["CollapsibleSectionsPlugin"]
