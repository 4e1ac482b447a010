from __future__ import annotations

from codesmith.core.config import CollapsibleConfig, EngineConfig
from codesmith.core.diagnostics import RecordingEmitter
from codesmith.core.engine import CodeRenderer, RenderedBlock
from codesmith.core.nodes import RenderNode
from codesmith.plugins import CollapsibleSectionsPlugin, FramesPlugin, TextMarkersPlugin


CODE = "\n".join(f"line {index}" for index in range(1, 11))


def _render(
    code: str,
    meta: str,
    *,
    config: CollapsibleConfig | None = None,
    emitter: RecordingEmitter | None = None,
) -> RenderedBlock:
    renderer = CodeRenderer([CollapsibleSectionsPlugin(config)], emitter=emitter)
    return renderer.render(code, "text", meta)


def _layout(rendered: RenderedBlock) -> list[str | list[str]]:
    code = rendered.tree.find("code")
    assert code is not None
    layout: list[str | list[str]] = []
    for child in code.children:
        assert isinstance(child, RenderNode)
        if child.tag == "details":
            layout.append(
                [node.text_content() for node in child.children if node.tag == "div"]
            )
        else:
            layout.append(child.text_content())
    return layout


def test_ranges_are_folded_into_sections() -> None:
    rendered = _render(CODE, "collapse={2-3, 6-}")

    assert _layout(rendered) == [
        "line 1",
        ["line 2", "line 3"],
        "line 4",
        "line 5",
        ["line 6", "line 7", "line 8", "line 9", "line 10"],
    ]
    assert rendered.block.meta == ""


def test_summary_reports_line_count() -> None:
    rendered = _render(CODE, "collapse={2-3}", config=CollapsibleConfig(summary="{count} hidden"))

    details = rendered.tree.find("details", "collapsible-section")
    assert details is not None
    summary = details.children[0]
    assert summary.tag == "summary"
    assert summary.text_content() == "2 hidden"


def test_adjacent_ranges_merge_into_one_section() -> None:
    rendered = _render(CODE, "collapse={1-2} collapse={3}")
    assert _layout(rendered)[0] == ["line 1", "line 2", "line 3"]


def test_invalid_ranges_are_reported() -> None:
    emitter = RecordingEmitter()

    rendered = _render("a\nb", "collapse={1,z}", emitter=emitter)

    (event,) = emitter.events_named("meta_option_error")
    assert event["reason"] == "Invalid line range `z`"
    assert _layout(rendered) == [["a"], "b"]


def test_collapsed_lines_follow_code_edits() -> None:
    renderer = CodeRenderer(
        [FramesPlugin(), TextMarkersPlugin(), CollapsibleSectionsPlugin()],
        config=EngineConfig(plugins=["frames", "text-markers", "collapsible-sections"]),
    )

    rendered = renderer.render("# app.py\nimport os\nimport sys\nmain()", "python", "collapse={2-3}")

    code = rendered.tree.find("code")
    assert code is not None
    details = code.children[0]
    assert details.tag == "details"
    assert [node.text_content() for node in details.children[1:]] == ["import os", "import sys"]
    assert code.children[1].text_content() == "main()"
