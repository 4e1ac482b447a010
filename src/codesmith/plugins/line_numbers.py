"""Line number gutter.

Enabled per block with ``showLineNumbers`` (or globally via the
``line_numbers.enabled`` setting and disabled again with
``showLineNumbers=false``). ``startLineNumber=N`` changes the first number.
"""

from __future__ import annotations

from collections.abc import Iterable

from codesmith.core.config import LineNumbersConfig
from codesmith.core.context import BlockSession, HookContext
from codesmith.core.hooks import HookPhase, Plugin, hook
from codesmith.core.nodes import RenderNode


SHOW_OPTION = "showLineNumbers"
START_OPTION = "startLineNumber"
GUTTER_CLASS = "gutter"
NUMBER_CLASS = "ln"


class LineNumbersPlugin(Plugin):
    """Prepend a gutter with the line number to every rendered line."""

    name = "line-numbers"

    def __init__(self, config: LineNumbersConfig | None = None) -> None:
        self.config = config or LineNumbersConfig()

    def base_styles(self, session: BlockSession) -> Iterable[str]:
        yield ".codesmith .ec-line { display: flex; }"
        yield (
            f".codesmith .{GUTTER_CLASS} {{ flex-shrink: 0; user-select: none; "
            "padding-inline-end: 1rem; text-align: right; opacity: 0.6; }"
        )
        yield f".codesmith .{GUTTER_CLASS} .{NUMBER_CLASS} {{ min-width: 2ch; }}"

    @hook(HookPhase.PREPROCESS_METADATA)
    def parse_metadata(self, context: HookContext) -> None:
        options = context.options
        enabled = self.config.enabled
        start = self.config.start
        consumed = options.select(SHOW_OPTION, "boolean")
        if consumed:
            enabled = bool(consumed[-1].value)

        start_options = options.select(START_OPTION, "string")
        if start_options:
            value = options.get_integer(START_OPTION)
            if value is None or value < 0:
                reason = (
                    options.errors[-1]
                    if value is None
                    else f"Option `{START_OPTION}` must not be negative, got `{value}`"
                )
                context.event(
                    "meta_option_error",
                    option=start_options[-1].raw.strip(),
                    reason=reason,
                )
            else:
                start = value
            consumed = [*consumed, *start_options]

        context.data["enabled"] = enabled
        context.data["start"] = start
        if consumed:
            context.block.meta = options.without(consumed)

    @hook(HookPhase.POSTPROCESS_RENDERED_LINE)
    def add_gutter(self, context: HookContext) -> None:
        line_ast = context.render_data.line_ast
        if not context.data.get("enabled") or line_ast is None or context.line_index is None:
            return
        number = context.data.get("start", self.config.start) + context.line_index
        gutter = RenderNode(
            "div",
            classes=(GUTTER_CLASS,),
            attributes={"aria-hidden": "true"},
            children=[RenderNode("div", classes=(NUMBER_CLASS,), children=[str(number)])],
        )
        line_ast.prepend(gutter)


__all__ = ["LineNumbersPlugin"]
