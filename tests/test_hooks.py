from __future__ import annotations

import pytest

from codesmith.core.annotation import Annotation, AnnotationKind
from codesmith.core.block import CodeBlock
from codesmith.core.context import BlockSession, HookContext
from codesmith.core.diagnostics import RecordingEmitter
from codesmith.core.engine import CodeRenderer
from codesmith.core.exceptions import (
    PhaseViolationError,
    PipelineReentryError,
    PluginExecutionError,
)
from codesmith.core.hooks import (
    BEFORE_RENDERING_PHASES,
    PHASE_CAPABILITIES,
    HookPhase,
    HookPipeline,
    HookRegistry,
    Plugin,
    hook,
)


class RecorderPlugin(Plugin):
    def __init__(self, name: str, calls: list[str]) -> None:
        self.name = name
        self.calls = calls

    @hook(HookPhase.PREPROCESS_CODE)
    def preprocess(self, context: HookContext) -> None:
        self.calls.append(f"{self.name}:code")

    @hook(HookPhase.ANNOTATE_CODE)
    def annotate(self, context: HookContext) -> None:
        self.calls.append(f"{self.name}:annotate")


class ConstrainedPlugin(Plugin):
    def __init__(self, name: str, calls: list[str]) -> None:
        self.name = name
        self.calls = calls

    @hook(HookPhase.ANNOTATE_CODE, after=("first",))
    def annotate(self, context: HookContext) -> None:
        self.calls.append(f"{self.name}:annotate")


class EarlyPlugin(Plugin):
    name = "early"

    def __init__(self, calls: list[str]) -> None:
        self.calls = calls

    @hook(HookPhase.ANNOTATE_CODE, before=("first",))
    def annotate(self, context: HookContext) -> None:
        self.calls.append("early:annotate")


class FailingPlugin(Plugin):
    name = "failing"

    @hook(HookPhase.ANNOTATE_CODE)
    def annotate(self, context: HookContext) -> None:
        raise KeyError("missing")


def _session(code: str = "a\nb") -> BlockSession:
    return BlockSession(CodeBlock(code, "python"), emitter=RecordingEmitter())


def test_phases_run_in_declared_order() -> None:
    assert list(HookPhase)[: len(BEFORE_RENDERING_PHASES)] == list(BEFORE_RENDERING_PHASES)
    assert list(HookPhase)[-2:] == [
        HookPhase.POSTPROCESS_RENDERED_LINE,
        HookPhase.POSTPROCESS_RENDERED_BLOCK,
    ]


def test_hooks_follow_registration_order_within_a_phase() -> None:
    calls: list[str] = []
    registry = HookRegistry()
    registry.register_plugin(RecorderPlugin("first", calls))
    registry.register_plugin(RecorderPlugin("second", calls))

    HookPipeline(registry).run_before_rendering(_session())

    assert calls == ["first:code", "second:code", "first:annotate", "second:annotate"]


def test_before_and_after_constraints_reorder_hooks() -> None:
    calls: list[str] = []
    registry = HookRegistry()
    registry.register_plugin(ConstrainedPlugin("late", calls))
    registry.register_plugin(RecorderPlugin("first", calls))
    registry.register_plugin(EarlyPlugin(calls))

    HookPipeline(registry).run_phase(HookPhase.ANNOTATE_CODE, _session())

    assert calls == ["early:annotate", "first:annotate", "late:annotate"]


def test_describe_reports_registered_hooks() -> None:
    registry = HookRegistry()
    registry.register_plugin(RecorderPlugin("first", []))

    entries = registry.describe()

    assert [(entry["phase"], entry["plugin"], entry["name"]) for entry in entries] == [
        ("PREPROCESS_CODE", "first", "preprocess"),
        ("ANNOTATE_CODE", "first", "annotate"),
    ]


def test_duplicate_plugin_names_are_rejected() -> None:
    registry = HookRegistry()
    registry.register_plugin(RecorderPlugin("same", []))
    with pytest.raises(ValueError):
        registry.register_plugin(RecorderPlugin("same", []))


def test_cyclic_constraints_are_detected() -> None:
    class Left(Plugin):
        name = "left"

        @hook(HookPhase.ANNOTATE_CODE, before=("right",))
        def annotate(self, context: HookContext) -> None:
            return

    class Right(Plugin):
        name = "right"

        @hook(HookPhase.ANNOTATE_CODE, before=("left",))
        def annotate(self, context: HookContext) -> None:
            return

    registry = HookRegistry()
    registry.register_plugin(Left())
    with pytest.raises(RuntimeError, match="Cyclic"):
        registry.register_plugin(Right())


def test_failing_hook_aborts_with_plugin_and_phase() -> None:
    calls: list[str] = []
    registry = HookRegistry()
    registry.register_plugin(FailingPlugin())
    registry.register_plugin(RecorderPlugin("after", calls))
    session = _session()

    with pytest.raises(PluginExecutionError) as excinfo:
        HookPipeline(registry).run_before_rendering(session)

    error = excinfo.value
    assert error.plugin_name == "failing"
    assert error.phase == "annotate_code"
    assert isinstance(error.__cause__, KeyError)
    assert calls == ["after:code"]
    assert session.emitter.errors == [str(error)]


def test_renderer_returns_no_partial_result_on_failure() -> None:
    renderer = CodeRenderer([FailingPlugin()])

    with pytest.raises(PluginExecutionError):
        renderer.render("x = 1", "python")
    assert not renderer.pipeline.running


def test_nested_sessions_are_rejected() -> None:
    pipeline = HookPipeline()

    with pipeline.session():
        assert pipeline.running
        with pytest.raises(PipelineReentryError):
            with pipeline.session():
                pass
    assert not pipeline.running


def test_rendering_from_inside_a_hook_is_rejected() -> None:
    class Reentrant(Plugin):
        name = "reentrant"

        def __init__(self) -> None:
            self.renderer: CodeRenderer | None = None

        @hook(HookPhase.ANNOTATE_CODE)
        def annotate(self, context: HookContext) -> None:
            assert self.renderer is not None
            self.renderer.render("nested")

    plugin = Reentrant()
    renderer = CodeRenderer([plugin])
    plugin.renderer = renderer

    with pytest.raises(PluginExecutionError) as excinfo:
        renderer.render("outer")
    assert isinstance(excinfo.value.__cause__, PipelineReentryError)


@pytest.mark.parametrize("phase", list(HookPhase))
def test_code_edits_are_limited_to_the_code_phase(phase: HookPhase) -> None:
    session = _session("value")
    session.enter_phase(phase)
    line = session.block.get_line(0)

    if phase is HookPhase.PREPROCESS_CODE:
        line.edit_text(0, 1, "V")
        session.block.insert_line(1, "added")
        assert session.block.text == "Value\nadded"
    else:
        with pytest.raises(PhaseViolationError):
            line.edit_text(0, 1, "V")
        with pytest.raises(PhaseViolationError):
            session.block.delete_line(0)


@pytest.mark.parametrize("phase", list(HookPhase))
def test_language_edits_are_limited_to_the_metadata_phase(phase: HookPhase) -> None:
    session = _session()
    session.enter_phase(phase)

    if phase is HookPhase.PREPROCESS_METADATA:
        session.block.language = "ts"
        assert session.block.language == "ts"
    else:
        with pytest.raises(PhaseViolationError):
            session.block.language = "ts"


def test_annotations_are_frozen_once_rendering_starts() -> None:
    session = _session()
    session.enter_phase(HookPhase.POSTPROCESS_ANNOTATIONS)
    session.block.get_line(0).add_annotation(Annotation(AnnotationKind.MARK))

    session.enter_phase(HookPhase.POSTPROCESS_RENDERED_LINE)
    with pytest.raises(PhaseViolationError):
        session.block.get_line(0).add_annotation(Annotation(AnnotationKind.MARK))
    with pytest.raises(PhaseViolationError):
        session.block.meta = "mark={1}"


def test_add_styles_depends_on_phase() -> None:
    session = _session()
    context = session.context_for("styles")

    for phase, capabilities in PHASE_CAPABILITIES.items():
        session.enter_phase(phase)
        if capabilities.add_styles:
            context.add_styles(f".{phase.label} {{ color: red; }}")
        else:
            with pytest.raises(PhaseViolationError):
                context.add_styles(".never { color: red; }")

    assert ".never { color: red; }" not in session.block.styles
    assert ".annotate_code { color: red; }" in session.block.styles
    assert ".postprocess_rendered_block { color: red; }" in session.block.styles


def test_finished_session_freezes_the_block() -> None:
    session = _session()
    session.finish()

    assert session.phase is None
    with pytest.raises(PhaseViolationError):
        session.block.get_line(0).edit_text(0, 1, "x")
    with pytest.raises(PhaseViolationError):
        session.block.get_line(0).add_annotation(Annotation(AnnotationKind.MARK))


def test_context_exposes_block_state_and_plugin_data() -> None:
    session = _session()
    session.enter_phase(HookPhase.ANNOTATE_CODE)
    context = session.context_for("demo", line_index=1)

    context.data["seen"] = True
    context.event("custom", value=1)

    assert context.line is session.block.get_line(1)
    assert [line.text for line in context.lines] == ["a", "b"]
    assert context.phase is HookPhase.ANNOTATE_CODE
    assert session.block.data_for("demo") == {"seen": True}
    assert session.emitter.events == [("custom", {"value": 1})]
